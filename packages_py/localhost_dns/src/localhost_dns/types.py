"""
Type definitions for localhost_dns
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal
from abc import ABC, abstractmethod


# Address family tag (IPv4 or IPv6)
AddressFamily = Literal[4, 6]

# How a resolution was reached
ResolutionSource = Literal["lookup", "ipv6-fallback", "ipv4-fallback"]


@dataclass(frozen=True)
class ResolvedAddress:
    """A literal address to connect to for a localhost-family hostname"""

    address: str
    """Literal IP address (no brackets for IPv6)"""

    family: AddressFamily
    """Address family: 4 or 6"""

    source: ResolutionSource = "lookup"
    """Which step of the fallback chain produced this address"""


@dataclass
class LocalhostDnsConfig:
    """Configuration for the localhost resolver"""

    probe_timeout_seconds: float = 3.0
    """Timeout for each TCP connectivity probe (seconds). Default: 3.0"""

    ipv6_loopback: str = "::1"
    """IPv6 loopback literal probed on fallback. Default: '::1'"""

    ipv4_loopback: str = "127.0.0.1"
    """IPv4 loopback literal returned as the final fallback. Default: '127.0.0.1'"""

    enabled: bool = True
    """Whether transports should apply localhost resolution. Default: True"""


@dataclass
class LocalhostDnsStats:
    """Statistics from a localhost resolver"""

    resolutions: int
    """Total resolve() calls"""

    lookup_failures: int
    """System lookups that raised"""

    probe_attempts: int
    """Probes that opened a real connection"""

    probe_cache_hits: int
    """Probes answered from the connection cache"""

    ipv6_fallbacks: int
    """Resolutions that ended on the IPv6 loopback"""

    ipv4_fallbacks: int
    """Resolutions that ended on the unprobed IPv4 loopback"""

    cached_connections: int
    """Number of host:port keys currently cached as reachable"""


# Event types
EventType = Literal[
    "lookup:success",
    "lookup:error",
    "probe:hit",
    "probe:success",
    "probe:failure",
    "resolve:success",
    "resolve:fallback",
]


@dataclass
class LocalhostDnsEvent:
    """Event emitted by the localhost resolver"""

    type: EventType
    """Event type"""

    data: dict[str, Any] = field(default_factory=dict)
    """Event-specific data"""


# Event listener type
LocalhostDnsEventListener = Callable[[LocalhostDnsEvent], None]

# Per-request lookup hook: hostname -> resolved address
LookupFunction = Callable[[str], Awaitable[ResolvedAddress]]

# Sync per-request lookup hook
SyncLookupFunction = Callable[[str], ResolvedAddress]


class ConnectionCacheStore(ABC):
    """
    Store of host:port keys known to accept TCP connections.

    Only successes are stored. Entries are never evicted or expired.
    """

    @abstractmethod
    def get(self, key: str) -> bool:
        """Return True if the key is cached as reachable"""
        pass

    @abstractmethod
    def set(self, key: str) -> None:
        """Record the key as reachable"""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """Get all cached keys"""
        pass

    @abstractmethod
    def size(self) -> int:
        """Get the number of cached keys"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all cached keys"""
        pass
