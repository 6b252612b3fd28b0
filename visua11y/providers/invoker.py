"""
Provider invoker: one attempt, one provider, one operation.

Every outcome is returned as an attempt result. Transport errors, HTTP
errors, malformed bodies and on-device faults are classified here and
never raised to the orchestrator.
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional

import aiohttp

from visua11y.config import Config, config
from visua11y.credentials import CredentialAccessor
from visua11y.errors import ResponseParseError
from visua11y.prompts import ON_DEVICE_SHARED_CONTEXT
from visua11y.providers.base import (
    AttemptResult,
    CloudProvider,
    ErrorKind,
    Failure,
    Operation,
    ProviderKind,
    Success,
    Unavailable,
)
from visua11y.providers.gemini import GeminiProvider
from visua11y.providers.on_device import Availability, OnDeviceProbe
from visua11y.providers.openai import OpenAIProvider
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)

# Marks summaries produced by the local model
ON_DEVICE_PREFIX = "🤖 AI Summary (on-device): "

# Extra context for common HTTP failures; does not change control flow
HTTP_STATUS_HINTS: Dict[int, str] = {
    401: "API key might be invalid or expired",
    403: "API key might not have permission",
    429: "Rate limit exceeded, try again later",
}


def default_cloud_providers(settings: Optional[Config] = None) -> Dict[ProviderKind, CloudProvider]:
    """Cloud providers built from configuration (default: the environment)."""
    settings = settings or config
    providers = [
        OpenAIProvider(api_url=settings.OPENAI_API_URL, model=settings.OPENAI_MODEL),
        GeminiProvider(
            api_base=settings.GEMINI_API_BASE,
            text_model=settings.GEMINI_TEXT_MODEL,
            vision_model=settings.GEMINI_VISION_MODEL,
        ),
    ]
    return {provider.kind: provider for provider in providers}


class ProviderInvoker:
    """
    Performs single provider attempts.

    The invoker holds no per-attempt state: each call to attempt() reads the
    credential, builds the request and classifies the outcome independently.
    """

    def __init__(
        self,
        http: aiohttp.ClientSession,
        credentials: CredentialAccessor,
        probe: OnDeviceProbe,
        cloud_providers: Optional[Dict[ProviderKind, CloudProvider]] = None,
        await_download: bool = False,
    ) -> None:
        self._http = http
        self._credentials = credentials
        self._probe = probe
        self._cloud = cloud_providers if cloud_providers is not None else default_cloud_providers()
        self._await_download = await_download

    async def attempt(
        self,
        provider: ProviderKind,
        operation: Operation,
        payload: str,
    ) -> AttemptResult:
        """
        Try one provider for one operation.

        Args:
            provider: Provider to try
            operation: Requested operation
            payload: Text, page content or screenshot data URL

        Returns:
            Success, Unavailable or Failure
        """
        if provider is ProviderKind.ON_DEVICE:
            return await self._attempt_on_device(operation, payload)

        cloud = self._cloud.get(provider)
        if cloud is None:
            return Unavailable(provider, f"Provider '{provider.value}' is not configured")
        return await self._attempt_cloud(cloud, operation, payload)

    async def _attempt_on_device(self, operation: Operation, payload: str) -> AttemptResult:
        kind = ProviderKind.ON_DEVICE

        if operation is not Operation.SUMMARIZE:
            return Unavailable(kind, "On-device summarizer only supports summarize")

        availability = await self._probe.availability()
        if availability is Availability.NO:
            return Unavailable(kind, "On-device summarizer not available")
        if availability is Availability.AFTER_DOWNLOAD and not self._await_download:
            return Unavailable(kind, "On-device model must be downloaded first")

        start_time = time.perf_counter()
        try:
            async with self._probe.session(ON_DEVICE_SHARED_CONTEXT) as summarizer:
                logger.debug("Summarizer created, starting summarization", input_length=len(payload))
                text = await summarizer.summarize(payload)
        except Exception as e:
            logger.warning(
                "On-device summarization failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            reason = str(e) or type(e).__name__
            return Failure(kind, ErrorKind.GENERATION, f"On-device summarization failed: {reason}")

        text = (text or "").strip()
        if not text:
            return Failure(kind, ErrorKind.GENERATION, "On-device summarizer returned empty text")

        logger.info(
            "On-device summary generated",
            summary_length=len(text),
            latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return Success(kind, f"{ON_DEVICE_PREFIX}{text}")

    async def _attempt_cloud(
        self,
        cloud: CloudProvider,
        operation: Operation,
        payload: str,
    ) -> AttemptResult:
        kind = cloud.kind

        credential = self._credentials.get_credential(kind)
        if credential is None:
            return Unavailable(kind, f"No valid {cloud.label} API key configured")

        request = cloud.build_request(operation, payload, credential.raw_value)

        logger.info(
            "Making provider request",
            provider=kind.value,
            operation=operation.value,
            input_length=len(payload),
        )
        start_time = time.perf_counter()
        try:
            async with self._http.post(request.url, json=request.body, headers=request.headers) as response:
                status = response.status
                reason = response.reason or ""
                raw_body = await response.text(errors="replace")
        except asyncio.TimeoutError:
            logger.warning("Provider request timed out", provider=kind.value, operation=operation.value)
            return Failure(kind, ErrorKind.NETWORK, f"Network error: {cloud.label} API request timed out.")
        except aiohttp.ClientError as e:
            logger.warning(
                "Network error calling provider",
                provider=kind.value,
                operation=operation.value,
                error_type=type(e).__name__,
            )
            return Failure(
                kind,
                ErrorKind.NETWORK,
                f"Network error: Unable to reach {cloud.label} API. Check your internet connection.",
            )

        latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
        data = _decode_json(raw_body)

        if not 200 <= status < 300:
            detail = cloud.error_message(data) or reason or raw_body[:200]
            message = f"{cloud.label} API error ({status}): {detail}"
            hint = HTTP_STATUS_HINTS.get(status)
            if hint:
                message = f"{message} - {hint}"
            logger.warning(
                "Provider HTTP error",
                provider=kind.value,
                operation=operation.value,
                status=status,
                error=message,
                latency_ms=latency_ms,
            )
            return Failure(kind, ErrorKind.HTTP, message)

        if data is None:
            logger.warning("Provider returned invalid JSON", provider=kind.value, operation=operation.value)
            return Failure(kind, ErrorKind.PARSE, f"{cloud.label} API returned invalid JSON")

        try:
            text = cloud.parse_response(operation, data)
        except ResponseParseError as e:
            logger.warning(
                "Unexpected provider response format",
                provider=kind.value,
                operation=operation.value,
                error=str(e),
            )
            return Failure(kind, ErrorKind.PARSE, str(e))

        logger.info(
            "Provider request succeeded",
            provider=kind.value,
            operation=operation.value,
            result_length=len(text),
            latency_ms=latency_ms,
        )
        return Success(kind, text)


def _decode_json(raw_body: str) -> Optional[Any]:
    try:
        return json.loads(raw_body)
    except ValueError:
        return None
