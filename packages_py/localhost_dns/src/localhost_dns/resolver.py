"""
Localhost Resolver - Main implementation
"""
import asyncio
import logging
import socket
from typing import Callable, Optional
from urllib.parse import urlsplit

from .config import (
    family_from_socket,
    get_default_port,
    is_localhost_host,
    merge_config,
    validate_port,
)
from .probe import ConnectionProbe, SyncConnectionProbe
from .stores.memory import MemoryConnectionStore
from .types import (
    ConnectionCacheStore,
    LocalhostDnsConfig,
    LocalhostDnsEvent,
    LocalhostDnsEventListener,
    LocalhostDnsStats,
    LookupFunction,
    ResolvedAddress,
    SyncLookupFunction,
)


logger = logging.getLogger("localhost_dns.resolver")


def _first_address(addresses: list) -> ResolvedAddress:
    """Pick the first getaddrinfo entry, like a single-address system lookup"""
    if not addresses:
        raise socket.gaierror(socket.EAI_NONAME, "No addresses returned")
    family, _, _, _, sockaddr = addresses[0]
    return ResolvedAddress(address=sockaddr[0], family=family_from_socket(family))


def system_lookup_sync(hostname: str) -> ResolvedAddress:
    """Blocking system name lookup returning the first address"""
    return _first_address(
        socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    )


async def system_lookup(hostname: str) -> ResolvedAddress:
    """System name lookup run in the default executor"""
    loop = asyncio.get_event_loop()
    addresses = await loop.run_in_executor(
        None,
        lambda: socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM),
    )
    return _first_address(addresses)


class _ResolverBase:
    """Event, stats and hook-selection plumbing shared by both resolvers"""

    def __init__(
        self,
        config: Optional[LocalhostDnsConfig],
        store: Optional[ConnectionCacheStore],
    ) -> None:
        self._config = merge_config(config)
        self._store = store if store is not None else MemoryConnectionStore()
        self._listeners: set[LocalhostDnsEventListener] = set()

        # Statistics
        self._resolutions = 0
        self._lookup_failures = 0
        self._ipv6_fallbacks = 0
        self._ipv4_fallbacks = 0

    @property
    def config(self) -> LocalhostDnsConfig:
        return self._config

    @property
    def store(self) -> ConnectionCacheStore:
        """The connection cache shared by this resolver's probe"""
        return self._store

    def should_resolve(self, hostname: Optional[str]) -> bool:
        """Check whether the localhost fallback applies to a hostname"""
        return self._config.enabled and is_localhost_host(hostname)

    def _lookup_succeeded(self, hostname: str, result: ResolvedAddress) -> None:
        logger.debug(
            f"resolve: lookup for {hostname} returned {result.address} (IPv{result.family}), "
            f"checking connection"
        )
        self._emit(LocalhostDnsEvent(
            type="lookup:success",
            data={"hostname": hostname, "address": result.address, "family": result.family},
        ))

    def _lookup_failed(self, hostname: str, error: BaseException) -> None:
        self._lookup_failures += 1
        logger.debug(f"resolve: lookup for {hostname} failed: {error}")
        self._emit(LocalhostDnsEvent(
            type="lookup:error",
            data={"hostname": hostname, "error": str(error)},
        ))

    def _resolved(self, hostname: str, port: int, result: ResolvedAddress) -> ResolvedAddress:
        if result.source == "lookup":
            self._emit(LocalhostDnsEvent(
                type="resolve:success",
                data={"hostname": hostname, "port": port, "address": result.address},
            ))
            return result

        if result.source == "ipv6-fallback":
            self._ipv6_fallbacks += 1
        else:
            self._ipv4_fallbacks += 1
        logger.info(
            f"resolve: falling back to {result.address} for {hostname}:{port}"
        )
        self._emit(LocalhostDnsEvent(
            type="resolve:fallback",
            data={
                "hostname": hostname,
                "port": port,
                "address": result.address,
                "family": result.family,
            },
        ))
        return result

    def _ipv6_fallback(self) -> ResolvedAddress:
        return ResolvedAddress(self._config.ipv6_loopback, 6, "ipv6-fallback")

    def _ipv4_fallback(self) -> ResolvedAddress:
        return ResolvedAddress(self._config.ipv4_loopback, 4, "ipv4-fallback")

    def _stats(self, probe_attempts: int, probe_cache_hits: int) -> LocalhostDnsStats:
        return LocalhostDnsStats(
            resolutions=self._resolutions,
            lookup_failures=self._lookup_failures,
            probe_attempts=probe_attempts,
            probe_cache_hits=probe_cache_hits,
            ipv6_fallbacks=self._ipv6_fallbacks,
            ipv4_fallbacks=self._ipv4_fallbacks,
            cached_connections=self._store.size(),
        )

    def on(self, listener: LocalhostDnsEventListener) -> Callable[[], None]:
        """Subscribe to events"""
        self._listeners.add(listener)
        return lambda: self._listeners.discard(listener)

    def off(self, listener: LocalhostDnsEventListener) -> None:
        """Unsubscribe from events"""
        self._listeners.discard(listener)

    def _emit(self, event: LocalhostDnsEvent) -> None:
        """Emit an event"""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.debug(f"_emit: listener failed for {event.type}", exc_info=True)


class LocalhostResolver(_ResolverBase):
    """
    Localhost Resolver

    Resolves `localhost`, `*.localhost`, `127.0.0.1` and `::1` to a literal
    address that actually accepts connections:

    1. Look the name up with the system resolver and probe the result.
       A hosts file may map localhost to 127.0.0.1 while the server only
       listens on ::1, so a successful lookup alone is not enough.
    2. If the lookup fails or the address is unreachable, probe ::1.
    3. If ::1 is unreachable too, return 127.0.0.1 without probing.

    Resolution never fails. A dead target surfaces later as a connect
    error from the HTTP client.

    Example:
        resolver = LocalhostResolver()
        result = await resolver.resolve("app.localhost", 8080)
        # ResolvedAddress(address='::1', family=6, source='ipv6-fallback')
    """

    def __init__(
        self,
        config: Optional[LocalhostDnsConfig] = None,
        store: Optional[ConnectionCacheStore] = None,
        *,
        lookup: Optional[LookupFunction] = None,
    ) -> None:
        super().__init__(config, store)
        self._lookup = lookup or system_lookup
        self._probe = ConnectionProbe(
            self._store,
            timeout_seconds=self._config.probe_timeout_seconds,
            emit=self._emit,
        )

    @property
    def probe(self) -> ConnectionProbe:
        return self._probe

    async def resolve(self, hostname: str, port: int) -> ResolvedAddress:
        """
        Resolve a localhost-family hostname for a connection to `port`

        Args:
            hostname: The hostname from the request URL
            port: Target port (1-65535)

        Returns:
            The address and family to connect to
        """
        validate_port(port)
        self._resolutions += 1

        try:
            found = await self._lookup(hostname)
        except (OSError, UnicodeError) as e:
            self._lookup_failed(hostname, e)
        else:
            self._lookup_succeeded(hostname, found)
            if await self._probe.check(found.address, port):
                return self._resolved(hostname, port, found)

        logger.debug(f"resolve: falling back to custom lookup for {hostname}:{port}")
        if await self._probe.check(self._config.ipv6_loopback, port):
            return self._resolved(hostname, port, self._ipv6_fallback())
        return self._resolved(hostname, port, self._ipv4_fallback())

    def lookup_for(
        self,
        hostname: Optional[str],
        scheme: str,
        port: Optional[int] = None,
    ) -> Optional[LookupFunction]:
        """
        Build the lookup hook for one request, or None to use default resolution

        Args:
            hostname: Request hostname
            scheme: Request URL scheme
            port: Explicit request port, if any

        Returns:
            An async hostname -> ResolvedAddress function bound to the
            request's port, or None when the hostname is not localhost
        """
        if not self.should_resolve(hostname):
            return None

        target_port = get_default_port(scheme, port)

        async def lookup(name: str) -> ResolvedAddress:
            return await self.resolve(name, target_port)

        return lookup

    def lookup_for_url(self, url: str) -> Optional[LookupFunction]:
        """Build the lookup hook for a URL string"""
        parts = urlsplit(url)
        return self.lookup_for(parts.hostname, parts.scheme, parts.port)

    def get_stats(self) -> LocalhostDnsStats:
        """Get resolver statistics"""
        return self._stats(self._probe.attempts, self._probe.cache_hits)

    def clear(self) -> None:
        """Forget all cached reachable addresses"""
        self._store.clear()

    def destroy(self) -> None:
        """Drop listeners. The store may be shared, so its entries stay; use clear() to reset it"""
        self._listeners.clear()


class SyncLocalhostResolver(_ResolverBase):
    """
    Blocking counterpart of LocalhostResolver for httpx.Client.

    Uses the same fallback order and cache rules with blocking sockets.
    """

    def __init__(
        self,
        config: Optional[LocalhostDnsConfig] = None,
        store: Optional[ConnectionCacheStore] = None,
        *,
        lookup: Optional[SyncLookupFunction] = None,
    ) -> None:
        super().__init__(config, store)
        self._lookup = lookup or system_lookup_sync
        self._probe = SyncConnectionProbe(
            self._store,
            timeout_seconds=self._config.probe_timeout_seconds,
            emit=self._emit,
        )

    @property
    def probe(self) -> SyncConnectionProbe:
        return self._probe

    def resolve(self, hostname: str, port: int) -> ResolvedAddress:
        """Resolve a localhost-family hostname for a connection to `port`"""
        validate_port(port)
        self._resolutions += 1

        try:
            found = self._lookup(hostname)
        except (OSError, UnicodeError) as e:
            self._lookup_failed(hostname, e)
        else:
            self._lookup_succeeded(hostname, found)
            if self._probe.check(found.address, port):
                return self._resolved(hostname, port, found)

        if self._probe.check(self._config.ipv6_loopback, port):
            return self._resolved(hostname, port, self._ipv6_fallback())
        return self._resolved(hostname, port, self._ipv4_fallback())

    def lookup_for(
        self,
        hostname: Optional[str],
        scheme: str,
        port: Optional[int] = None,
    ) -> Optional[SyncLookupFunction]:
        """Build the blocking lookup hook for one request, or None"""
        if not self.should_resolve(hostname):
            return None

        target_port = get_default_port(scheme, port)
        return lambda name: self.resolve(name, target_port)

    def lookup_for_url(self, url: str) -> Optional[SyncLookupFunction]:
        """Build the blocking lookup hook for a URL string"""
        parts = urlsplit(url)
        return self.lookup_for(parts.hostname, parts.scheme, parts.port)

    def get_stats(self) -> LocalhostDnsStats:
        """Get resolver statistics"""
        return self._stats(self._probe.attempts, self._probe.cache_hits)

    def clear(self) -> None:
        """Forget all cached reachable addresses"""
        self._store.clear()

    def destroy(self) -> None:
        """Drop listeners. The store may be shared, so its entries stay; use clear() to reset it"""
        self._listeners.clear()


def create_localhost_resolver(
    config: Optional[LocalhostDnsConfig] = None,
    store: Optional[ConnectionCacheStore] = None,
) -> LocalhostResolver:
    """Factory function to create a localhost resolver"""
    return LocalhostResolver(config, store)


def create_sync_localhost_resolver(
    config: Optional[LocalhostDnsConfig] = None,
    store: Optional[ConnectionCacheStore] = None,
) -> SyncLocalhostResolver:
    """Factory function to create a blocking localhost resolver"""
    return SyncLocalhostResolver(config, store)
