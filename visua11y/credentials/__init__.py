"""
Credential storage and validation.

Public API:
    - CredentialAccessor: validating, never-raising read access
    - Credential: a validated provider key
    - CredentialStore / JsonFileCredentialStore / InMemoryCredentialStore
    - save_credential / clear_credential: the settings write path
"""

from visua11y.credentials.accessor import (
    KEY_PREFIXES,
    STORE_KEYS,
    Credential,
    CredentialAccessor,
    clear_credential,
    is_valid_credential,
    is_valid_gemini_key,
    is_valid_openai_key,
    mask_credential,
    save_credential,
)
from visua11y.credentials.store import (
    CredentialStore,
    InMemoryCredentialStore,
    JsonFileCredentialStore,
)

__all__ = [
    "KEY_PREFIXES",
    "STORE_KEYS",
    "Credential",
    "CredentialAccessor",
    "CredentialStore",
    "InMemoryCredentialStore",
    "JsonFileCredentialStore",
    "clear_credential",
    "is_valid_credential",
    "is_valid_gemini_key",
    "is_valid_openai_key",
    "mask_credential",
    "save_credential",
]
