"""
API key persistence

A key store keeps exactly one string value, the CMAP API key, so it survives
between sessions. Stores are injected into the client; the in-memory
configuration never depends on them after construction.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from dotenv import get_key, set_key

from .logging import config_logger as logger

API_KEY_ENV_VAR = "CMAP_API_KEY"
DEFAULT_KEY_FILE = Path.home() / ".cmap" / "credentials.env"


class KeyStore(ABC):
    """Persistence for a single opaque API key."""

    @abstractmethod
    def get(self) -> Optional[str]:
        """Return the stored key, or None when nothing has been stored."""

    @abstractmethod
    def set(self, value: str) -> None:
        """Replace the stored key."""


class MemoryKeyStore(KeyStore):
    """Key store that lives only as long as the process."""

    def __init__(self, value: Optional[str] = None):
        self._value = value

    def get(self) -> Optional[str]:
        return self._value

    def set(self, value: str) -> None:
        self._value = value


class DotenvKeyStore(KeyStore):
    """
    Key store backed by a dotenv-formatted file.

    The file holds one ``CMAP_API_KEY=...`` line, which also makes it usable
    as a regular ``.env`` file by other tooling.

    Args:
        path: Location of the credentials file (default ``~/.cmap/credentials.env``)
        key: Variable name the value is stored under
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, key: str = API_KEY_ENV_VAR):
        self.path = Path(path) if path is not None else DEFAULT_KEY_FILE
        self.key = key

    def get(self) -> Optional[str]:
        if not self.path.is_file():
            return None
        value = get_key(str(self.path), self.key)
        return value or None

    def set(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        set_key(str(self.path), self.key, value)
        logger.info(f"api key stored | path:{self.path}")

    def __repr__(self) -> str:
        return f"DotenvKeyStore(path={str(self.path)!r}, key={self.key!r})"
