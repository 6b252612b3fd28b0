"""
Gemini generate-content provider.

Builds generateContent requests (credential in the query string, the
instruction folded into the single user turn) and reads the answer from
candidates[0].content.parts. Screenshots travel as inline_data, so the
data URL handed in by the caller is split into MIME type and base64 payload.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from visua11y.config import config
from visua11y.errors import ResponseParseError
from visua11y.prompts import get_profile
from visua11y.providers.base import CloudProvider, Operation, ProviderKind, ProviderRequest

DEFAULT_IMAGE_MIME = "image/png"

_DATA_URL_RE = re.compile(r'^data:([^;,]*);base64,(.*)$', re.DOTALL)


@dataclass(frozen=True)
class InlineImage:
    """Image bytes split out of a data URL, still base64-encoded."""

    mime_type: str
    data: str


def parse_data_url(data_url: Any) -> InlineImage:
    """
    Split a ``data:<mime>;base64,<payload>`` URL.

    Malformed input never raises: it yields the default MIME type and an
    empty payload.

    Args:
        data_url: Screenshot encoded as a data URL

    Returns:
        InlineImage with MIME type and base64 payload
    """
    if not isinstance(data_url, str) or not data_url.startswith("data:"):
        return InlineImage(mime_type=DEFAULT_IMAGE_MIME, data="")
    match = _DATA_URL_RE.match(data_url)
    if not match:
        return InlineImage(mime_type=DEFAULT_IMAGE_MIME, data="")
    return InlineImage(
        mime_type=match.group(1) or DEFAULT_IMAGE_MIME,
        data=match.group(2) or "",
    )


class GeminiProvider(CloudProvider):
    """Cloud text/vision provider B."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        text_model: Optional[str] = None,
        vision_model: Optional[str] = None,
    ) -> None:
        self.api_base = (api_base or config.GEMINI_API_BASE).rstrip("/")
        self.text_model = text_model or config.GEMINI_TEXT_MODEL
        self.vision_model = vision_model or config.GEMINI_VISION_MODEL

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.GEMINI

    @property
    def label(self) -> str:
        return "Gemini"

    def model_for(self, operation: Operation) -> str:
        if operation is Operation.ANALYZE_SCREENSHOT:
            return self.vision_model
        return self.text_model

    def build_request(self, operation: Operation, payload: str, api_key: str) -> ProviderRequest:
        profile = get_profile(operation)

        if operation is Operation.ANALYZE_SCREENSHOT:
            image = parse_data_url(payload)
            parts: List[Dict[str, Any]] = [
                {"text": f"{profile.system_instruction}\n\n{profile.user_prompt}"},
                {"inline_data": {"mime_type": image.mime_type, "data": image.data}},
            ]
        else:
            parts = [
                {"text": f"{profile.system_instruction}\n\n{profile.user_message(payload)}"},
            ]

        body = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": profile.temperature,
                "maxOutputTokens": profile.max_tokens,
            },
        }
        url = (
            f"{self.api_base}/{self.model_for(operation)}:generateContent"
            f"?key={quote(api_key, safe='')}"
        )
        return ProviderRequest(
            url=url,
            body=body,
            headers={"Content-Type": "application/json"},
        )

    def parse_response(self, operation: Operation, data: Any) -> str:
        text = _first_candidate_text(data)
        if text:
            return text

        message = self.error_message(data)
        if message:
            raise ResponseParseError(f"Gemini API error: {message}", provider=self.kind.value)
        raise ResponseParseError(
            f"Unexpected response format from Gemini API ({operation.value})",
            provider=self.kind.value,
        )


def _first_candidate_text(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, dict):
        return None
    content = first.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    for part in parts:
        if isinstance(part, dict) and isinstance(part.get("text"), str):
            text = part["text"].strip()
            if text:
                return text
    return None
