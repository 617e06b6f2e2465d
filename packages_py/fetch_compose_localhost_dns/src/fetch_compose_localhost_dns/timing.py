"""
Request timing transport wrapper for httpx

Durations are wall-clock milliseconds measured around the inner
transport call. Time spent outside that window (client-side request
building, reading a streamed body later) is not included.
"""
import logging
import time
from typing import Optional

import httpx


logger = logging.getLogger("fetch_compose_localhost_dns.timing")

REQUEST_START_TIME_EXTENSION = "request_start_time"
REQUEST_DURATION_HEADER = "request-duration"


def now_ms() -> int:
    """Current wall-clock time in milliseconds"""
    return int(time.time() * 1000)


def mark_request_start(request: httpx.Request) -> int:
    """Stamp the request with its submission time and return it"""
    start = now_ms()
    request.extensions[REQUEST_START_TIME_EXTENSION] = start
    return start


def annotate_duration(response: httpx.Response, start_ms: int) -> int:
    """Set the request-duration header on a response and return the value"""
    duration = max(0, now_ms() - start_ms)
    response.headers[REQUEST_DURATION_HEADER] = str(duration)
    return duration


def get_request_start_time(request: httpx.Request) -> Optional[int]:
    """Read the submission timestamp from a request, if it was timed"""
    return request.extensions.get(REQUEST_START_TIME_EXTENSION)


def get_request_duration(response: httpx.Response) -> Optional[int]:
    """Read the request-duration annotation from a response, if present"""
    value = response.headers.get(REQUEST_DURATION_HEADER)
    if value is None:
        return None
    return int(value)


class RequestTimingTransport(httpx.AsyncBaseTransport):
    """
    Timing transport wrapper for httpx.

    Every response returned by the inner transport gets a
    `request-duration` header, including 4xx/5xx responses that
    `raise_for_status()` later turns into `httpx.HTTPStatusError`.
    Transport errors carry no response and are re-raised untouched.

    Example:
        transport = RequestTimingTransport(httpx.AsyncHTTPTransport())
        client = httpx.AsyncClient(transport=transport)
        response = await client.get("http://localhost:8080/")
        get_request_duration(response)  # e.g. 12
    """

    def __init__(self, inner: httpx.AsyncBaseTransport) -> None:
        self._inner = inner

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Handle an async HTTP request and annotate its duration"""
        start = mark_request_start(request)
        response = await self._inner.handle_async_request(request)
        duration = annotate_duration(response, start)
        logger.debug(
            f"handle_async_request: {request.method} {request.url} -> "
            f"{response.status_code} in {duration}ms"
        )
        return response

    async def aclose(self) -> None:
        """Close the transport"""
        await self._inner.aclose()


class SyncRequestTimingTransport(httpx.BaseTransport):
    """
    Synchronous timing transport wrapper for httpx.
    """

    def __init__(self, inner: httpx.BaseTransport) -> None:
        self._inner = inner

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Handle a sync HTTP request and annotate its duration"""
        start = mark_request_start(request)
        response = self._inner.handle_request(request)
        duration = annotate_duration(response, start)
        logger.debug(
            f"handle_request: {request.method} {request.url} -> "
            f"{response.status_code} in {duration}ms"
        )
        return response

    def close(self) -> None:
        """Close the transport"""
        self._inner.close()
