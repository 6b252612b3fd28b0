"""
FallbackChain - Orchestrates fallback between summarization providers.
"""
from typing import List, Protocol, Tuple

from visua11y.providers.base import (
    PROVIDER_PRIORITY,
    AttemptResult,
    Exhausted,
    Failure,
    Operation,
    OrchestrationResult,
    ProviderEntry,
    ProviderKind,
    Succeeded,
    Success,
    providers_for,
)
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)


class Invoker(Protocol):
    async def attempt(
        self,
        provider: ProviderKind,
        operation: Operation,
        payload: str,
    ) -> AttemptResult:
        ...


class FallbackChain:
    """Tries providers in priority order until one succeeds."""

    def __init__(
        self,
        invoker: Invoker,
        priority: Tuple[ProviderEntry, ...] = PROVIDER_PRIORITY,
    ):
        """
        Initialize FallbackChain.

        Args:
            invoker: Performs a single attempt against a single provider
            priority: Ordered provider table with per-operation applicability
        """
        self._invoker = invoker
        self._priority = priority

    def providers_for(self, operation: Operation) -> List[ProviderKind]:
        """Return the providers that will be tried for an operation, in order."""
        return providers_for(operation, self._priority)

    async def run(self, operation: Operation, payload: str) -> OrchestrationResult:
        """
        Try providers in order until one succeeds.

        Attempts run strictly one after another; the next provider is only
        tried once the previous attempt has resolved. Neither Unavailable
        nor Failure stops the chain.

        Args:
            operation: Requested operation
            payload: Operation input

        Returns:
            Succeeded from the first successful provider, or Exhausted with
            every attempt in order
        """
        providers = self.providers_for(operation)
        attempts: List[AttemptResult] = []

        logger.info(
            "Starting provider fallback",
            operation=operation.value,
            providers=[p.value for p in providers],
            input_length=len(payload),
        )

        for provider in providers:
            logger.debug("Trying provider", provider=provider.value, operation=operation.value)

            result = await self._invoker.attempt(provider, operation, payload)
            attempts.append(result)

            if isinstance(result, Success):
                logger.info(
                    "Provider succeeded",
                    provider=provider.value,
                    operation=operation.value,
                    attempts=len(attempts),
                )
                return Succeeded(text=result.text, provider=provider)

            if isinstance(result, Failure):
                logger.warning(
                    "Provider failed, falling back",
                    provider=provider.value,
                    operation=operation.value,
                    error_kind=result.error_kind.value,
                    error=result.message,
                )
            else:
                logger.info(
                    "Provider unavailable, skipping",
                    provider=provider.value,
                    operation=operation.value,
                    reason=result.reason,
                )

        exhausted = Exhausted(attempts=tuple(attempts))
        last_failure = exhausted.last_failure
        logger.error(
            "All providers failed",
            operation=operation.value,
            providers=[p.value for p in providers],
            failures=len(exhausted.failures),
            last_error=last_failure.message if last_failure else None,
        )
        return exhausted
