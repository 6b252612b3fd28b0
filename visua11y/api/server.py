"""
HTTP surface for the message channel.

POST /message takes an action payload (see visua11y.api.channel) and
GET /health reports uptime and which providers are configured.
"""

import time
from typing import Optional

from aiohttp import web

from visua11y.api.channel import handle_message
from visua11y.config import config
from visua11y.credentials import CredentialAccessor
from visua11y.providers.base import ProviderKind
from visua11y.service import AccessibilityService
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_KEY = web.AppKey("service", AccessibilityService)
START_TIME_KEY = web.AppKey("start_time", float)

# Server state
_runner: Optional[web.AppRunner] = None
_site: Optional[web.TCPSite] = None


async def message_handler(request: web.Request) -> web.Response:
    """Handle one message channel request."""
    try:
        payload = await request.json()
    except ValueError:
        return web.json_response(
            {"success": False, "error": "Request body must be JSON"}, status=400
        )

    response = await handle_message(request.app[SERVICE_KEY], payload)
    return web.json_response(response)


async def health_handler(request: web.Request) -> web.Response:
    """Handle health check requests."""
    service = request.app[SERVICE_KEY]
    accessor = CredentialAccessor(service.store)
    status = {
        "status": "ok",
        "uptime_seconds": int(time.time() - request.app[START_TIME_KEY]),
        "environment": service.settings.ENVIRONMENT,
        "on_device_enabled": service.settings.ON_DEVICE_ENABLED,
        "openai_configured": accessor.get_credential(ProviderKind.OPENAI) is not None,
        "gemini_configured": accessor.get_credential(ProviderKind.GEMINI) is not None,
    }
    return web.json_response(status)


def create_app(service: Optional[AccessibilityService] = None) -> web.Application:
    """Build the aiohttp application."""
    app = web.Application()
    app[SERVICE_KEY] = service or AccessibilityService()
    app[START_TIME_KEY] = time.time()
    app.router.add_post("/message", message_handler)
    app.router.add_get("/health", health_handler)
    return app


async def start_server(
    service: Optional[AccessibilityService] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    """Start the message channel HTTP server."""
    global _runner, _site

    host = host or config.API_HOST
    port = port or config.API_PORT

    _runner = web.AppRunner(create_app(service))
    await _runner.setup()

    _site = web.TCPSite(_runner, host, port)
    await _site.start()

    logger.info("Message server started", host=host, port=port)


async def stop_server() -> None:
    """Stop the message channel HTTP server."""
    global _runner, _site

    if _runner:
        await _runner.cleanup()
        _runner = None
        _site = None
        logger.info("Message server stopped")
