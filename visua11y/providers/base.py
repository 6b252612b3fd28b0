"""
Base abstractions for the provider-fallback engine.

This module holds the vocabulary shared by every provider:
operations, provider kinds, the tagged attempt/orchestration results,
the declarative priority table, and the CloudProvider base class that
each cloud backend implements with one request builder and one response
parser per operation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union


# ============================================================================
# Enumerations
# ============================================================================


class Operation(str, Enum):
    """Caller-requested task type."""

    SUMMARIZE = "summarize"
    GENERATE_DIGEST = "generate_digest"
    ANALYZE_SCREENSHOT = "analyze_screenshot"


class ProviderKind(str, Enum):
    """Backends able to produce a result, in no particular order."""

    ON_DEVICE = "on_device"
    OPENAI = "openai"
    GEMINI = "gemini"


class ErrorKind(str, Enum):
    """Classification of a failed provider attempt."""

    NETWORK = "network"
    HTTP = "http"
    PARSE = "parse"
    GENERATION = "generation"


# ============================================================================
# Attempt results
# ============================================================================


@dataclass(frozen=True)
class Success:
    """A provider produced non-empty text."""

    provider: ProviderKind
    text: str


@dataclass(frozen=True)
class Unavailable:
    """The provider could not be used (missing key, capability absent)."""

    provider: ProviderKind
    reason: str


@dataclass(frozen=True)
class Failure:
    """The provider was tried and failed."""

    provider: ProviderKind
    error_kind: ErrorKind
    message: str


AttemptResult = Union[Success, Unavailable, Failure]


# ============================================================================
# Orchestration results
# ============================================================================


@dataclass(frozen=True)
class Succeeded:
    """Terminal state: one provider produced the result."""

    text: str
    provider: ProviderKind


@dataclass(frozen=True)
class Exhausted:
    """
    Terminal state: every applicable provider was tried without success.

    Attributes:
        attempts: Attempt results in the order the providers were tried
    """

    attempts: Tuple[AttemptResult, ...] = ()

    @property
    def failures(self) -> List[Failure]:
        """Attempts that reached a provider and failed."""
        return [a for a in self.attempts if isinstance(a, Failure)]

    @property
    def credential_seen(self) -> bool:
        """True if at least one provider was usable enough to be called."""
        return bool(self.failures)

    @property
    def last_failure(self) -> Optional[Failure]:
        """The most recent failure, if any provider was actually called."""
        failures = self.failures
        return failures[-1] if failures else None


OrchestrationResult = Union[Succeeded, Exhausted]


# ============================================================================
# Priority table
# ============================================================================


@dataclass(frozen=True)
class ProviderEntry:
    """One row of the priority table: a provider and the operations it serves."""

    kind: ProviderKind
    operations: FrozenSet[Operation]

    def supports(self, operation: Operation) -> bool:
        return operation in self.operations


# Fixed priority order. The on-device summarizer only knows how to summarize.
PROVIDER_PRIORITY: Tuple[ProviderEntry, ...] = (
    ProviderEntry(ProviderKind.ON_DEVICE, frozenset({Operation.SUMMARIZE})),
    ProviderEntry(ProviderKind.OPENAI, frozenset(Operation)),
    ProviderEntry(ProviderKind.GEMINI, frozenset(Operation)),
)


def providers_for(
    operation: Operation,
    priority: Tuple[ProviderEntry, ...] = PROVIDER_PRIORITY,
) -> List[ProviderKind]:
    """
    Return the providers applicable to an operation, in priority order.

    Args:
        operation: Requested operation
        priority: Priority table (defaults to PROVIDER_PRIORITY)

    Returns:
        List of provider kinds to try, first to last
    """
    return [entry.kind for entry in priority if entry.supports(operation)]


# ============================================================================
# Cloud provider contract
# ============================================================================


@dataclass(frozen=True)
class ProviderRequest:
    """A fully built HTTP request for one provider attempt."""

    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)


class CloudProvider(ABC):
    """
    Abstract base class for cloud text/vision providers.

    Implementations are stateless: they only translate between an
    operation's input and the provider's wire format.
    """

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        """Provider kind served by this implementation."""
        pass

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable provider name used in error messages."""
        pass

    @abstractmethod
    def build_request(
        self,
        operation: Operation,
        payload: str,
        api_key: str,
    ) -> ProviderRequest:
        """
        Build the request for one operation.

        Args:
            operation: Requested operation
            payload: Selected text, page content, or screenshot data URL
            api_key: Validated credential for this provider

        Returns:
            ProviderRequest ready to be POSTed
        """
        pass

    @abstractmethod
    def parse_response(self, operation: Operation, data: Any) -> str:
        """
        Extract trimmed, non-empty text from a decoded response body.

        Raises:
            ResponseParseError: If no non-empty text is present
        """
        pass

    def error_message(self, data: Any) -> Optional[str]:
        """Pull a provider error message out of an error body, if present."""
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
        return None
