"""
Localhost DNS transport wrapper for httpx
"""
import logging
from typing import Optional

import httpx

from localhost_dns import (
    ConnectionCacheStore,
    LocalhostDnsConfig,
    LocalhostResolver,
    ResolvedAddress,
    SyncLocalhostResolver,
)


logger = logging.getLogger("fetch_compose_localhost_dns.transport")


def rewrite_request(request: httpx.Request, resolved: ResolvedAddress) -> httpx.Request:
    """
    Point a request at a resolved literal address.

    The Host header keeps the original hostname, and for https the
    `sni_hostname` extension carries it so certificate checks still
    match the name the caller asked for.
    """
    hostname = request.url.host
    resolved_url = request.url.copy_with(host=resolved.address)

    extensions = dict(request.extensions)
    if request.url.scheme == "https" and hostname != resolved.address:
        extensions.setdefault("sni_hostname", hostname)

    headers = httpx.Headers(request.headers)
    if "host" not in headers:
        port = request.url.port
        headers["host"] = f"{hostname}:{port}" if port else hostname

    return httpx.Request(
        method=request.method,
        url=resolved_url,
        headers=headers,
        stream=request.stream,
        extensions=extensions,
    )


class LocalhostDnsTransport(httpx.AsyncBaseTransport):
    """
    Localhost-aware resolution transport wrapper for httpx.

    Requests whose host is `localhost`, `*.localhost`, `127.0.0.1` or
    `::1` are resolved with LocalhostResolver and sent to the literal
    address that accepts connections. Every other request goes to the
    inner transport untouched.

    Example:
        base = httpx.AsyncHTTPTransport()
        transport = LocalhostDnsTransport(base)
        client = httpx.AsyncClient(transport=transport)
        await client.get("http://app.localhost:3000/health")
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        *,
        config: Optional[LocalhostDnsConfig] = None,
        store: Optional[ConnectionCacheStore] = None,
        resolver: Optional[LocalhostResolver] = None,
    ) -> None:
        """
        Create a new LocalhostDnsTransport.

        Args:
            inner: The wrapped transport to delegate requests to
            config: Resolver config. Ignored when resolver is given
            store: Connection cache to share between transports
            resolver: A prebuilt resolver
        """
        self._inner = inner
        self._resolver = resolver or LocalhostResolver(config, store)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Handle an async HTTP request, resolving localhost names first"""
        url = request.url
        lookup = self._resolver.lookup_for(url.host, url.scheme, url.port)
        if lookup is None:
            return await self._inner.handle_async_request(request)

        resolved = await lookup(url.host)
        logger.debug(
            f"handle_async_request: {url.host} -> {resolved.address} (IPv{resolved.family})"
        )
        return await self._inner.handle_async_request(rewrite_request(request, resolved))

    @property
    def resolver(self) -> LocalhostResolver:
        """Get the underlying localhost resolver"""
        return self._resolver

    async def aclose(self) -> None:
        """Close the transport, leaving the connection store intact"""
        self._resolver.destroy()
        await self._inner.aclose()


class SyncLocalhostDnsTransport(httpx.BaseTransport):
    """
    Synchronous localhost-aware resolution transport wrapper for httpx.
    """

    def __init__(
        self,
        inner: httpx.BaseTransport,
        *,
        config: Optional[LocalhostDnsConfig] = None,
        store: Optional[ConnectionCacheStore] = None,
        resolver: Optional[SyncLocalhostResolver] = None,
    ) -> None:
        self._inner = inner
        self._resolver = resolver or SyncLocalhostResolver(config, store)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Handle a sync HTTP request, resolving localhost names first"""
        url = request.url
        lookup = self._resolver.lookup_for(url.host, url.scheme, url.port)
        if lookup is None:
            return self._inner.handle_request(request)

        resolved = lookup(url.host)
        logger.debug(
            f"handle_request: {url.host} -> {resolved.address} (IPv{resolved.family})"
        )
        return self._inner.handle_request(rewrite_request(request, resolved))

    @property
    def resolver(self) -> SyncLocalhostResolver:
        """Get the underlying localhost resolver"""
        return self._resolver

    def close(self) -> None:
        """Close the transport, leaving the connection store intact"""
        self._resolver.destroy()
        self._inner.close()
