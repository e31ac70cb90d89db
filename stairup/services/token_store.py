"""
Process-wide authentication token storage.

The store is injected into every service that talks to the remote data
service. Services read the token lazily on each operation and call
``invalidate`` with the token that was rejected, so concurrent failures
clear the store once rather than once per call.
"""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from stairup.core.logger import get_logger

logger = get_logger("token_store")


class TokenStore(ABC):

    def __init__(self):
        self._lock = threading.Lock()

    @abstractmethod
    def _read(self) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, token: Optional[str]) -> None:
        ...

    def get(self) -> Optional[str]:
        with self._lock:
            return self._read()

    def set(self, token: str) -> None:
        with self._lock:
            self._write(token)

    def clear(self) -> None:
        with self._lock:
            self._write(None)

    def is_authenticated(self) -> bool:
        return bool(self.get())

    def invalidate(self, token: Optional[str]) -> bool:
        """
        Clear the stored token only if it is still the one that was rejected.

        Returns True when this call performed the clear.
        """
        with self._lock:
            current = self._read()
            if current is None or current != token:
                return False
            self._write(None)
        logger.warning("Authentication rejected by remote service, token cleared")
        return True


class InMemoryTokenStore(TokenStore):

    def __init__(self, token: Optional[str] = None):
        super().__init__()
        self._token = token

    def _read(self) -> Optional[str]:
        return self._token

    def _write(self, token: Optional[str]) -> None:
        self._token = token


class FileTokenStore(TokenStore):
    """Keeps the token in a small JSON file so it survives restarts."""

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)

    def _read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        with open(self.path, "r") as f:
            data = json.load(f)
        return data.get("auth_token")

    def _write(self, token: Optional[str]) -> None:
        if token is None:
            if self.path.exists():
                self.path.unlink()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump({"auth_token": token}, f, indent=2)


def build_token_store(token_file: Optional[str] = None) -> TokenStore:
    if token_file:
        return FileTokenStore(token_file)
    return InMemoryTokenStore()
