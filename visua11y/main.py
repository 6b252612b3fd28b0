"""
Visua11y - Main Entry Point

Command-line access to the accessibility engine:
- summarize selected text in plain language
- generate a TLDR for a page
- describe a screenshot for screen reader users
- manage the OpenAI / Gemini API keys
- serve the message channel over HTTP

Usage:
    visua11y summarize "Some dense paragraph..."
    visua11y summarize --file article.txt
    visua11y digest --title "Docs" --url https://example.com --body-file page.txt
    visua11y screenshot page.png
    visua11y keys status
    visua11y keys set openai sk-...
    visua11y keys clear gemini
    visua11y serve --port 8765
"""

import argparse
import asyncio
import base64
import mimetypes
import signal
import sys
from pathlib import Path
from typing import List, Optional

from visua11y.config import config
from visua11y.credentials import (
    STORE_KEYS,
    JsonFileCredentialStore,
    clear_credential,
    is_valid_credential,
    mask_credential,
    save_credential,
)
from visua11y.errors import CredentialStoreError, InvalidCredentialError, ProvidersExhaustedError
from visua11y.page_content import PageContent
from visua11y.providers.base import ProviderKind
from visua11y.service import AccessibilityService
from visua11y.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

KEY_PROVIDERS = {
    "openai": ProviderKind.OPENAI,
    "gemini": ProviderKind.GEMINI,
}


def image_to_data_url(path: Path) -> str:
    """Encode an image file as a data URL."""
    mime_type = mimetypes.guess_type(str(path))[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _read_text(text: Optional[str], file: Optional[str]) -> str:
    if file:
        return Path(file).read_text(encoding="utf-8")
    if text:
        return text
    return sys.stdin.read()


async def run_summarize(service: AccessibilityService, args: argparse.Namespace) -> int:
    text = _read_text(args.text, args.file)
    if not text.strip():
        print("No text provided", file=sys.stderr)
        return 2
    print(await service.summarize_text(text))
    return 0


async def run_digest(service: AccessibilityService, args: argparse.Namespace) -> int:
    page = PageContent(
        title=args.title,
        url=args.url,
        description=args.description,
        body=_read_text(None, args.body_file) if args.body_file else (args.body or ""),
    )
    try:
        print(await service.generate_page_digest(page))
    except ProvidersExhaustedError as e:
        print(f"TLDR generation failed: {e}", file=sys.stderr)
        return 1
    return 0


async def run_screenshot(service: AccessibilityService, args: argparse.Namespace) -> int:
    path = Path(args.image)
    if not path.is_file():
        print(f"Screenshot not found: {path}", file=sys.stderr)
        return 2
    try:
        print(await service.analyze_screenshot(image_to_data_url(path)))
    except ProvidersExhaustedError as e:
        print(f"Screenshot analysis failed: {e}", file=sys.stderr)
        return 1
    return 0


def run_keys(store: JsonFileCredentialStore, args: argparse.Namespace) -> int:
    try:
        if args.keys_command == "set":
            save_credential(store, KEY_PROVIDERS[args.provider], args.value)
            print(f"{args.provider} API key saved")
            return 0

        if args.keys_command == "clear":
            clear_credential(store, KEY_PROVIDERS[args.provider])
            print(f"{args.provider} API key cleared")
            return 0

        for name, provider in KEY_PROVIDERS.items():
            raw_value = store.get(STORE_KEYS[provider])
            if not raw_value:
                print(f"{name}: not set")
            elif is_valid_credential(provider, raw_value):
                print(f"{name}: configured ({mask_credential(raw_value)})")
            else:
                print(f"{name}: invalid format ({mask_credential(raw_value)})")
        return 0

    except (InvalidCredentialError, CredentialStoreError) as e:
        print(str(e), file=sys.stderr)
        return 1


async def run_serve(service: AccessibilityService, args: argparse.Namespace) -> int:
    from visua11y.api.server import start_server, stop_server

    await start_server(service, host=args.host, port=args.port)
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except NotImplementedError:
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down...")
        await stop_server()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="visua11y",
        description="Plain-language summaries, page TLDRs and screenshot descriptions",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    summarize = sub.add_parser("summarize", help="Summarize text (argument, --file, or stdin)")
    summarize.add_argument("text", nargs="?", help="Text to summarize")
    summarize.add_argument("--file", help="Read text from a file")

    digest = sub.add_parser("digest", help="Generate a TLDR for a page")
    digest.add_argument("--title", default="", help="Page title")
    digest.add_argument("--url", default="", help="Page URL")
    digest.add_argument("--description", default="", help="Page meta description")
    digest.add_argument("--body", help="Page body text")
    digest.add_argument("--body-file", help="Read page body text from a file")

    screenshot = sub.add_parser("screenshot", help="Describe a screenshot image")
    screenshot.add_argument("image", help="Path to a PNG/JPEG screenshot")

    keys = sub.add_parser("keys", help="Manage API keys")
    keys_sub = keys.add_subparsers(dest="keys_command", required=True)
    keys_sub.add_parser("status", help="Show configured keys (masked)")
    key_set = keys_sub.add_parser("set", help="Validate and save a key")
    key_set.add_argument("provider", choices=sorted(KEY_PROVIDERS))
    key_set.add_argument("value", help="API key")
    key_clear = keys_sub.add_parser("clear", help="Remove a key")
    key_clear.add_argument("provider", choices=sorted(KEY_PROVIDERS))

    serve = sub.add_parser("serve", help="Serve the message channel over HTTP")
    serve.add_argument("--host", default=config.API_HOST)
    serve.add_argument("--port", type=int, default=config.API_PORT)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the requested command."""
    args = build_parser().parse_args(argv)
    setup_logging(config.LOG_LEVEL, config.ENVIRONMENT)

    store = JsonFileCredentialStore(config.credential_store_path)
    if args.command == "keys":
        return run_keys(store, args)

    service = AccessibilityService(store=store)
    commands = {
        "summarize": run_summarize,
        "digest": run_digest,
        "screenshot": run_screenshot,
        "serve": run_serve,
    }
    return asyncio.run(commands[args.command](service, args))


if __name__ == "__main__":
    sys.exit(main())
