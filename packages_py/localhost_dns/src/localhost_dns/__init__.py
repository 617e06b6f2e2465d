"""
Localhost-aware name resolution with connectivity probing and success caching.
"""
from .types import (
    AddressFamily,
    ResolutionSource,
    ResolvedAddress,
    LocalhostDnsConfig,
    LocalhostDnsStats,
    LocalhostDnsEvent,
    LocalhostDnsEventListener,
    LookupFunction,
    SyncLookupFunction,
    ConnectionCacheStore,
)
from .config import (
    LOCALHOST,
    LOCAL_IPV4,
    LOCAL_IPV6,
    merge_config,
    load_config_from_env,
    get_top_level_label,
    is_localhost_host,
    validate_port,
    get_default_port,
    get_connection_key,
    family_from_socket,
)
from .stores import MemoryConnectionStore, create_memory_store
from .probe import ConnectionProbe, SyncConnectionProbe, DEFAULT_PROBE_TIMEOUT_SECONDS
from .resolver import (
    LocalhostResolver,
    SyncLocalhostResolver,
    create_localhost_resolver,
    create_sync_localhost_resolver,
    system_lookup,
    system_lookup_sync,
)


__all__ = [
    # Types
    "AddressFamily",
    "ResolutionSource",
    "ResolvedAddress",
    "LocalhostDnsConfig",
    "LocalhostDnsStats",
    "LocalhostDnsEvent",
    "LocalhostDnsEventListener",
    "LookupFunction",
    "SyncLookupFunction",
    "ConnectionCacheStore",
    # Config
    "LOCALHOST",
    "LOCAL_IPV4",
    "LOCAL_IPV6",
    "merge_config",
    "load_config_from_env",
    "get_top_level_label",
    "is_localhost_host",
    "validate_port",
    "get_default_port",
    "get_connection_key",
    "family_from_socket",
    # Stores
    "MemoryConnectionStore",
    "create_memory_store",
    # Probes
    "ConnectionProbe",
    "SyncConnectionProbe",
    "DEFAULT_PROBE_TIMEOUT_SECONDS",
    # Resolver
    "LocalhostResolver",
    "SyncLocalhostResolver",
    "create_localhost_resolver",
    "create_sync_localhost_resolver",
    "system_lookup",
    "system_lookup_sync",
]


__version__ = "1.0.0"
