"""
Accessibility operations: summarize selection, page digest, screenshot analysis.

Each call builds its own HTTP session, credential accessor, on-device probe,
invoker and fallback chain, runs the chain once and throws everything away.
The only state shared between calls is the credential store.

Exhaustion is handled per operation:
- summarize_text() returns a fixed message telling the user what to configure
- generate_digest() and analyze_screenshot() raise ProvidersExhaustedError
"""

from typing import Callable, Dict, Optional

import aiohttp

from visua11y.config import Config, config
from visua11y.credentials import CredentialAccessor, CredentialStore, JsonFileCredentialStore
from visua11y.errors import ProvidersExhaustedError
from visua11y.fallback import FallbackChain
from visua11y.page_content import PageContent, format_page_content
from visua11y.providers.base import (
    CloudProvider,
    Exhausted,
    Operation,
    OrchestrationResult,
    ProviderKind,
    Succeeded,
)
from visua11y.providers.invoker import ProviderInvoker, default_cloud_providers
from visua11y.providers.on_device import OllamaSummarizer, OnDeviceProbe, OnDeviceSummarizer
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_UNAVAILABLE_MESSAGE = (
    "🚫 AI Summary: Unable to generate summary. Configure an OpenAI or Gemini "
    "API key, or enable the on-device summarizer."
)

NO_CREDENTIAL_MESSAGE = (
    "No valid API key found. Configure an OpenAI or Gemini API key."
)

CapabilityFactory = Callable[[aiohttp.ClientSession], Optional[OnDeviceSummarizer]]


def ollama_capability_factory(settings: Config) -> CapabilityFactory:
    """On-device capability factory driven by configuration."""

    def factory(http: aiohttp.ClientSession) -> Optional[OnDeviceSummarizer]:
        if not settings.ON_DEVICE_ENABLED:
            return None
        return OllamaSummarizer(
            http=http,
            base_url=settings.OLLAMA_BASE_URL,
            model=settings.ON_DEVICE_MODEL,
            await_download=settings.ON_DEVICE_AWAIT_DOWNLOAD,
            max_tokens=settings.ON_DEVICE_MAX_TOKENS,
            download_timeout=settings.ON_DEVICE_DOWNLOAD_TIMEOUT_SEC,
        )

    return factory


def exhausted_message(result: Exhausted) -> str:
    """
    Human-readable reason for an exhausted chain.

    Returns the "no valid API key" message when no provider was ever
    callable, otherwise the last provider failure.
    """
    last_failure = result.last_failure
    if last_failure is None:
        return NO_CREDENTIAL_MESSAGE
    return last_failure.message


class AccessibilityService:
    """Entry point for the three accessibility operations."""

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        settings: Optional[Config] = None,
        cloud_providers: Optional[Dict[ProviderKind, CloudProvider]] = None,
        capability_factory: Optional[CapabilityFactory] = None,
    ) -> None:
        self._settings = settings or config
        self._store = store or JsonFileCredentialStore(self._settings.credential_store_path)
        self._cloud_providers = cloud_providers
        self._capability_factory = capability_factory or ollama_capability_factory(self._settings)

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def settings(self) -> Config:
        return self._settings

    async def run(self, operation: Operation, payload: str) -> OrchestrationResult:
        """
        Run the fallback chain once for an operation.

        Returns:
            Succeeded or Exhausted; never raises for provider faults
        """
        timeout = aiohttp.ClientTimeout(total=self._settings.PROVIDER_TIMEOUT_SEC)
        async with aiohttp.ClientSession(timeout=timeout) as http:
            invoker = ProviderInvoker(
                http=http,
                credentials=CredentialAccessor(self._store),
                probe=OnDeviceProbe(self._capability_factory(http)),
                cloud_providers=self._cloud_providers or default_cloud_providers(self._settings),
                await_download=self._settings.ON_DEVICE_AWAIT_DOWNLOAD,
            )
            return await FallbackChain(invoker).run(operation, payload)

    async def summarize_text(self, text: str) -> str:
        """
        Summarize selected text in plain language.

        Always returns a string; on total failure this is
        SUMMARY_UNAVAILABLE_MESSAGE.
        """
        result = await self.run(Operation.SUMMARIZE, text)
        if isinstance(result, Succeeded):
            return result.text
        logger.error("All AI methods failed - no summarization available")
        return SUMMARY_UNAVAILABLE_MESSAGE

    async def generate_digest(self, page_content: str) -> str:
        """
        Generate a TLDR for formatted page content.

        Raises:
            ProvidersExhaustedError: If no provider produced a digest
        """
        return await self._run_or_raise(Operation.GENERATE_DIGEST, page_content)

    async def generate_page_digest(self, page: PageContent) -> str:
        """Format extracted page text and generate its TLDR."""
        return await self.generate_digest(
            format_page_content(page, self._settings.PAGE_CONTENT_MAX_CHARS)
        )

    async def analyze_screenshot(self, screenshot_data_url: str) -> str:
        """
        Describe a screenshot's structure and interactive elements.

        Raises:
            ProvidersExhaustedError: If no provider produced an analysis
        """
        return await self._run_or_raise(Operation.ANALYZE_SCREENSHOT, screenshot_data_url)

    async def _run_or_raise(self, operation: Operation, payload: str) -> str:
        result = await self.run(operation, payload)
        if isinstance(result, Succeeded):
            return result.text
        raise ProvidersExhaustedError(exhausted_message(result), attempts=result.attempts)
