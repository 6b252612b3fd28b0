"""
Exception hierarchy for the Visua11y engine.

Per-provider faults never surface as exceptions: the invoker turns them into
attempt results. The classes here cover the few places where an error does
cross a boundary:

- CredentialStoreError: the key-value store could not be read or written
- InvalidCredentialError: a key rejected by the settings write path
- ResponseParseError: a provider response without usable text (parser-internal)
- ProvidersExhaustedError: every provider was tried and none produced a result
"""

from typing import Optional, Sequence


class Visua11yError(Exception):
    """
    Base exception for all Visua11y errors.

    Carries the name of the provider involved, when there is one.
    """

    def __init__(self, message: str, provider: Optional[str] = None) -> None:
        self.provider = provider
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with provider name if available."""
        if self.provider:
            return f"[{self.provider}] {super().__str__()}"
        return super().__str__()


class CredentialStoreError(Visua11yError):
    """Raised when the credential store cannot be read or written."""


class InvalidCredentialError(Visua11yError):
    """Raised when a key does not match its provider's format."""


class ResponseParseError(Visua11yError):
    """Raised by response parsers when no non-empty text can be located."""


class ProvidersExhaustedError(Visua11yError):
    """
    Raised when every applicable provider returned Unavailable or Failure.

    Attributes:
        attempts: Ordered attempt results, one per provider tried
    """

    def __init__(self, message: str, attempts: Sequence = ()) -> None:
        self.attempts = tuple(attempts)
        super().__init__(message)
