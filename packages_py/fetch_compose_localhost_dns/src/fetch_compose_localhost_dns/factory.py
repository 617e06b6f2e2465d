"""
Factory functions for localhost DNS and timing transports
"""
from typing import Any, Callable, Optional

import httpx

from localhost_dns import (
    ConnectionCacheStore,
    LocalhostDnsConfig,
    load_config_from_env,
)
from .transport import LocalhostDnsTransport, SyncLocalhostDnsTransport
from .timing import RequestTimingTransport, SyncRequestTimingTransport


def compose_transport(
    base: httpx.AsyncBaseTransport,
    *wrappers: Callable[[httpx.AsyncBaseTransport], httpx.AsyncBaseTransport],
) -> httpx.AsyncBaseTransport:
    """
    Compose multiple transport wrappers, innermost first.

    Example:
        base = httpx.AsyncHTTPTransport()
        transport = compose_transport(
            base,
            create_localhost_dns(),
            RequestTimingTransport,
        )
        client = httpx.AsyncClient(transport=transport)
    """
    transport = base
    for wrapper in wrappers:
        transport = wrapper(transport)
    return transport


def compose_sync_transport(
    base: httpx.BaseTransport,
    *wrappers: Callable[[httpx.BaseTransport], httpx.BaseTransport],
) -> httpx.BaseTransport:
    """
    Compose multiple sync transport wrappers.
    """
    transport = base
    for wrapper in wrappers:
        transport = wrapper(transport)
    return transport


def create_localhost_dns(
    *,
    config: Optional[LocalhostDnsConfig] = None,
    store: Optional[ConnectionCacheStore] = None,
) -> Callable[[httpx.AsyncBaseTransport], LocalhostDnsTransport]:
    """
    Create a transport wrapper function for compose_transport.

    Wrappers built with the same store share reachability results.
    """
    def wrapper(inner: httpx.AsyncBaseTransport) -> LocalhostDnsTransport:
        return LocalhostDnsTransport(inner, config=config, store=store)
    return wrapper


def create_localhost_aware_client(
    *,
    config: Optional[LocalhostDnsConfig] = None,
    store: Optional[ConnectionCacheStore] = None,
    timing: bool = True,
    base_url: Optional[str] = None,
    proxy: Optional[str] = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    Create an async client with localhost-aware resolution and request timing.

    When config is omitted it is read from LOCALHOST_DNS_* environment
    variables.

    Example:
        client = create_localhost_aware_client()
        response = await client.get("http://localhost:8080/x")
        response.headers["request-duration"]
    """
    transport: httpx.AsyncBaseTransport = LocalhostDnsTransport(
        httpx.AsyncHTTPTransport(proxy=proxy),
        config=config or load_config_from_env(),
        store=store,
    )
    if timing:
        transport = RequestTimingTransport(transport)

    if base_url is not None:
        client_kwargs["base_url"] = base_url
    return httpx.AsyncClient(transport=transport, **client_kwargs)


def create_localhost_aware_sync_client(
    *,
    config: Optional[LocalhostDnsConfig] = None,
    store: Optional[ConnectionCacheStore] = None,
    timing: bool = True,
    base_url: Optional[str] = None,
    proxy: Optional[str] = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """
    Create a sync client with localhost-aware resolution and request timing.

    Example:
        client = create_localhost_aware_sync_client()
        response = client.get("http://app.localhost:3000/")
    """
    transport: httpx.BaseTransport = SyncLocalhostDnsTransport(
        httpx.HTTPTransport(proxy=proxy),
        config=config or load_config_from_env(),
        store=store,
    )
    if timing:
        transport = SyncRequestTimingTransport(transport)

    if base_url is not None:
        client_kwargs["base_url"] = base_url
    return httpx.Client(transport=transport, **client_kwargs)
