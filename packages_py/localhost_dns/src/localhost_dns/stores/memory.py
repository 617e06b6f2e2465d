"""
In-memory connection cache store implementation
"""
from ..types import ConnectionCacheStore


class MemoryConnectionStore(ConnectionCacheStore):
    """
    In-memory store of reachable host:port keys

    Grows monotonically for its lifetime; there is no eviction.

    Example:
        store = MemoryConnectionStore()
        store.set("::1:8080")
        assert store.get("::1:8080")
    """

    def __init__(self) -> None:
        self._reachable: set[str] = set()

    def get(self, key: str) -> bool:
        """Return True if the key is cached as reachable"""
        return key in self._reachable

    def set(self, key: str) -> None:
        """Record the key as reachable"""
        self._reachable.add(key)

    def keys(self) -> list[str]:
        """Get all cached keys"""
        return list(self._reachable)

    def size(self) -> int:
        """Get the number of cached keys"""
        return len(self._reachable)

    def clear(self) -> None:
        """Clear all cached keys"""
        self._reachable.clear()


def create_memory_store() -> MemoryConnectionStore:
    """Create a memory store instance"""
    return MemoryConnectionStore()
