"""
Persistent key-value stores for provider credentials.

The engine only ever reads from a store. Writes and deletes come from the
settings path (see visua11y.credentials.accessor.save_credential).
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from visua11y.errors import CredentialStoreError
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)


class CredentialStore(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored value, or None if the key is absent

        Raises:
            CredentialStoreError: If the store cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is a no-op."""
        pass


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed store for tests and embedding."""

    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileCredentialStore(CredentialStore):
    """
    Store backed by a single JSON object on disk.

    The file is re-read on every access so that keys saved by another
    process (the CLI, a settings UI) are picked up without restarting.
    Writes go through a temporary file and an atomic rename, and the file
    is created readable by its owner only.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CredentialStoreError(
                f"Failed to read credential store {self.path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise CredentialStoreError(
                f"Credential store {self.path} does not contain a JSON object"
            )
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".credentials-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise CredentialStoreError(
                f"Failed to write credential store {self.path}: {e}"
            ) from e

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)
        logger.info("Credential saved", key=key, path=str(self.path))

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)
            logger.info("Credential removed", key=key, path=str(self.path))
