"""
Localhost-aware resolution and request timing transports for httpx's compose pattern.
"""
from localhost_dns import (
    ConnectionCacheStore,
    LocalhostDnsConfig,
    LocalhostDnsEvent,
    LocalhostDnsStats,
    MemoryConnectionStore,
    ResolvedAddress,
)
from .transport import LocalhostDnsTransport, SyncLocalhostDnsTransport, rewrite_request
from .timing import (
    RequestTimingTransport,
    SyncRequestTimingTransport,
    REQUEST_DURATION_HEADER,
    REQUEST_START_TIME_EXTENSION,
    get_request_duration,
    get_request_start_time,
)
from .factory import (
    compose_transport,
    compose_sync_transport,
    create_localhost_dns,
    create_localhost_aware_client,
    create_localhost_aware_sync_client,
)


__all__ = [
    # Re-exported types from base package
    "ConnectionCacheStore",
    "LocalhostDnsConfig",
    "LocalhostDnsEvent",
    "LocalhostDnsStats",
    "MemoryConnectionStore",
    "ResolvedAddress",
    # Transport wrappers
    "LocalhostDnsTransport",
    "SyncLocalhostDnsTransport",
    "rewrite_request",
    "RequestTimingTransport",
    "SyncRequestTimingTransport",
    # Timing helpers
    "REQUEST_DURATION_HEADER",
    "REQUEST_START_TIME_EXTENSION",
    "get_request_duration",
    "get_request_start_time",
    # Factory functions
    "compose_transport",
    "compose_sync_transport",
    "create_localhost_dns",
    "create_localhost_aware_client",
    "create_localhost_aware_sync_client",
]

__version__ = "1.0.0"
