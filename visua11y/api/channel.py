"""
Message channel dispatch.

Maps action payloads from the host (popup, content script, context menu) to
service calls and wraps the outcome in a response payload:

    {"action": "summarize", "text": "..."}          -> {"success": true, "summary": "..."}
    {"action": "generateTLDR", "pageContent": "..."} -> {"success": true, "tldr": "..."}
    {"action": "analyzeScreenshot", "screenshot": "data:..."}
                                                    -> {"success": true, "analysis": "..."}

Failures come back as {"success": false, "error": "..."}.
"""

from typing import Any, Dict

from visua11y.errors import ProvidersExhaustedError
from visua11y.service import AccessibilityService
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)


class PayloadError(ValueError):
    """Raised when a message lacks the data its action needs."""


def _require(request: Dict[str, Any], field: str, message: str) -> str:
    value = request.get(field)
    if not isinstance(value, str) or not value.strip():
        raise PayloadError(message)
    return value


async def handle_message(service: AccessibilityService, request: Any) -> Dict[str, Any]:
    """
    Dispatch one message to the service.

    Args:
        service: Service performing the operation
        request: Decoded message payload

    Returns:
        Response payload with a success flag
    """
    if not isinstance(request, dict):
        return {"success": False, "error": "Message must be a JSON object"}

    action = request.get("action")
    logger.info("Message received", action=action)

    try:
        if action == "summarize":
            text = _require(request, "text", "No text provided")
            summary = await service.summarize_text(text)
            return {"success": True, "summary": summary}

        if action == "generateTLDR":
            page_content = _require(request, "pageContent", "No page content provided")
            tldr = await service.generate_digest(page_content)
            logger.info("TLDR generated, sending response")
            return {"success": True, "tldr": tldr}

        if action == "analyzeScreenshot":
            screenshot = _require(request, "screenshot", "No screenshot data provided")
            analysis = await service.analyze_screenshot(screenshot)
            logger.info("Analysis completed, sending response")
            return {"success": True, "analysis": analysis}

    except (PayloadError, ProvidersExhaustedError) as e:
        logger.error("Message handling failed", action=action, error=str(e))
        return {"success": False, "error": str(e)}

    logger.warning("Unknown action received", action=action)
    return {"success": False, "error": f"Unknown action: {action}"}
