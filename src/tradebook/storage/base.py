"""Abstract base class for key-value blob stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class StorageError(RuntimeError):
    """A storage backend failed to read or write."""


class KeyValueStore(ABC):
    """Interface that every persistence backend must implement.

    Values are opaque strings (JSON documents in practice). Writes are
    full overwrites of the key.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this backend, e.g. 'file'."""
        ...

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key has never been set.

        Raises:
            StorageError: If the backend cannot be read.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageError: If the backend cannot be written.
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""
        ...

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    def __enter__(self) -> KeyValueStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
