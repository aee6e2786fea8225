"""Abstract KV store interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class KVStore(ABC):
    """Key-value store operating on bytes only.

    Every piece of repository state (blobs, commits, branch heads, the
    staging index) lives in one of these under a namespaced key.
    Serialization is handled at higher layers.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def get_many(self, *args: str) -> Mapping[str, bytes]:
        """Get multiple keys, returning only keys that exist."""

    @abstractmethod
    def set_many(self, **kwargs: bytes) -> None:
        """Set multiple key-value pairs in one batch."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all keys."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def remove_many(self, *keys: str) -> None:
        """Remove multiple keys in one batch."""

    def close(self) -> None:
        """Release any resources held by the backend."""

    def scan(self, pattern: str) -> list[str]:
        """Return the suffixes of all keys matching a ``"prefix%s"`` pattern.

        Results are sorted so callers get a stable order.
        """
        prefix = pattern.replace("%s", "")
        return sorted(
            key[len(prefix):]
            for key in self.keys()
            if isinstance(key, str) and key.startswith(prefix)
        )
