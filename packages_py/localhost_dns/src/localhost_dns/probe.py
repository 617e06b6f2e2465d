"""
TCP connectivity probes with success caching
"""
import asyncio
import logging
import socket
from typing import Callable, Optional

from .config import get_connection_key, validate_port
from .stores.memory import MemoryConnectionStore
from .types import ConnectionCacheStore, LocalhostDnsEvent


logger = logging.getLogger("localhost_dns.probe")

DEFAULT_PROBE_TIMEOUT_SECONDS = 3.0


class _BaseProbe:
    """Shared cache bookkeeping for sync and async probes"""

    def __init__(
        self,
        store: Optional[ConnectionCacheStore] = None,
        *,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        emit: Optional[Callable[[LocalhostDnsEvent], None]] = None,
    ) -> None:
        self._store = store if store is not None else MemoryConnectionStore()
        self._timeout_seconds = timeout_seconds
        self._emit = emit or (lambda event: None)

        self.attempts = 0
        self.cache_hits = 0

    @property
    def store(self) -> ConnectionCacheStore:
        """The connection cache store backing this probe"""
        return self._store

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def _check_cache(self, host: str, port: int) -> Optional[str]:
        """Return None on a cache hit, else the key to probe"""
        validate_port(port)
        key = get_connection_key(host, port)
        if self._store.get(key):
            self.cache_hits += 1
            logger.debug(f"probe: cache hit for {key}")
            self._emit(LocalhostDnsEvent(type="probe:hit", data={"key": key}))
            return None
        self.attempts += 1
        return key

    def _record_success(self, key: str) -> None:
        self._store.set(key)
        logger.debug(f"probe: {key} is reachable")
        self._emit(LocalhostDnsEvent(type="probe:success", data={"key": key}))

    def _record_failure(self, key: str, error: BaseException) -> None:
        # Failures are never cached; the next call probes again.
        logger.debug(f"probe: {key} is not reachable ({type(error).__name__}: {error})")
        self._emit(LocalhostDnsEvent(
            type="probe:failure",
            data={"key": key, "error": str(error) or type(error).__name__},
        ))


class ConnectionProbe(_BaseProbe):
    """
    Async TCP connectivity probe.

    Opens a connection to host:port, closes it immediately and reports
    whether it succeeded. Successes are remembered in the store, so a
    later check for the same key returns True without connecting.
    Failures are not remembered.

    Example:
        probe = ConnectionProbe(timeout_seconds=1.0)
        if await probe.check("::1", 8080):
            ...
    """

    async def check(self, host: str, port: int) -> bool:
        """
        Check TCP connectivity to host:port. Never raises for a valid port.

        Args:
            host: Literal IP address
            port: Port number (1-65535)

        Returns:
            True if a connection could be opened

        Raises:
            ValueError: If port is outside 1-65535
        """
        key = self._check_cache(host, port)
        if key is None:
            return True

        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self._timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError) as e:
            self._record_failure(key, e)
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            # Peer reset during close; the connection was still established.
            pass

        self._record_success(key)
        return True


class SyncConnectionProbe(_BaseProbe):
    """
    Blocking TCP connectivity probe with the same caching rules as ConnectionProbe.
    """

    def check(self, host: str, port: int) -> bool:
        """Check TCP connectivity to host:port. Never raises for a valid port."""
        key = self._check_cache(host, port)
        if key is None:
            return True

        try:
            with socket.create_connection((host, port), timeout=self._timeout_seconds):
                pass
        except OSError as e:
            self._record_failure(key, e)
            return False

        self._record_success(key)
        return True
