"""Pytest configuration and fixtures for localhost_dns tests."""
import socket
from typing import Generator

import pytest

from localhost_dns import MemoryConnectionStore


def _listen(family: int, host: str) -> socket.socket:
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind((host, 0))
    sock.listen(16)
    return sock


@pytest.fixture
def ipv4_listener() -> Generator[int, None, None]:
    """A TCP listener on 127.0.0.1; yields its port."""
    sock = _listen(socket.AF_INET, "127.0.0.1")
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def ipv6_listener() -> Generator[int, None, None]:
    """A TCP listener on ::1; yields its port. Skips when IPv6 loopback is unavailable."""
    try:
        sock = _listen(socket.AF_INET6, "::1")
    except OSError:
        pytest.skip("IPv6 loopback not available")
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def closed_port() -> int:
    """A 127.0.0.1 port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def store() -> MemoryConnectionStore:
    return MemoryConnectionStore()

