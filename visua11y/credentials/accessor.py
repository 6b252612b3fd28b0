"""
Credential validation and read access.

Validity is a pure function of the raw string. An absent, unreadable or
malformed key means "provider unavailable", never an error.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Pattern

from visua11y.credentials.store import CredentialStore
from visua11y.errors import CredentialStoreError, InvalidCredentialError
from visua11y.providers.base import ProviderKind
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)

# Store key names, shared with the settings surface
STORE_KEYS: Dict[ProviderKind, str] = {
    ProviderKind.OPENAI: "openaiApiKey",
    ProviderKind.GEMINI: "geminiApiKey",
}

KEY_PATTERNS: Dict[ProviderKind, Pattern[str]] = {
    ProviderKind.OPENAI: re.compile(r'sk-[A-Za-z0-9_-]{48,}'),
    # Google API keys start with AIza and are ~39 chars total
    ProviderKind.GEMINI: re.compile(r'AIza[0-9A-Za-z_-]{20,}'),
}

KEY_PREFIXES: Dict[ProviderKind, str] = {
    ProviderKind.OPENAI: "sk-",
    ProviderKind.GEMINI: "AIza",
}


@dataclass(frozen=True)
class Credential:
    """A validated provider secret."""

    provider: ProviderKind
    raw_value: str = field(repr=False)

    def __repr__(self) -> str:
        return f"Credential(provider={self.provider.value!r}, raw_value={mask_credential(self.raw_value)!r})"


def is_valid_credential(provider: ProviderKind, raw_value: object) -> bool:
    """Check a raw value against the provider's key format."""
    pattern = KEY_PATTERNS.get(provider)
    if pattern is None or not isinstance(raw_value, str):
        return False
    return pattern.fullmatch(raw_value) is not None


def is_valid_openai_key(raw_value: object) -> bool:
    return is_valid_credential(ProviderKind.OPENAI, raw_value)


def is_valid_gemini_key(raw_value: object) -> bool:
    return is_valid_credential(ProviderKind.GEMINI, raw_value)


def mask_credential(raw_value: str) -> str:
    """Show only enough of a key to recognize it."""
    if not raw_value:
        return ""
    if len(raw_value) <= 8:
        return "****"
    return f"{raw_value[:4]}...{raw_value[-4:]}"


class CredentialAccessor:
    """Read-only, validating view over a CredentialStore."""

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    def get_credential(self, provider: ProviderKind) -> Optional[Credential]:
        """
        Return the provider's credential if it is present and well-formed.

        Never raises: store failures and invalid values both yield None.
        """
        key = STORE_KEYS.get(provider)
        if key is None:
            return None

        try:
            raw_value = self._store.get(key)
        except CredentialStoreError as e:
            logger.warning("Credential store read failed", provider=provider.value, error=str(e))
            return None
        except Exception as e:
            logger.error(
                "Unexpected credential store error",
                provider=provider.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if not raw_value:
            logger.debug("No credential configured", provider=provider.value)
            return None

        if not is_valid_credential(provider, raw_value):
            logger.warning(
                "Invalid credential format",
                provider=provider.value,
                expected_prefix=KEY_PREFIXES[provider],
            )
            return None

        return Credential(provider=provider, raw_value=raw_value)


def save_credential(store: CredentialStore, provider: ProviderKind, raw_value: str) -> Credential:
    """
    Validate and persist a key.

    Raises:
        InvalidCredentialError: If the key does not match the provider's format
        CredentialStoreError: If the store cannot be written
    """
    raw_value = (raw_value or "").strip()
    if provider not in STORE_KEYS:
        raise InvalidCredentialError(
            "Provider does not take an API key", provider=provider.value
        )
    if not is_valid_credential(provider, raw_value):
        raise InvalidCredentialError(
            f"Invalid API key format (should start with '{KEY_PREFIXES[provider]}')",
            provider=provider.value,
        )
    store.set(STORE_KEYS[provider], raw_value)
    return Credential(provider=provider, raw_value=raw_value)


def clear_credential(store: CredentialStore, provider: ProviderKind) -> None:
    """Delete a provider's key from the store."""
    if provider in STORE_KEYS:
        store.remove(STORE_KEYS[provider])
