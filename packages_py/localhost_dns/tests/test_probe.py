"""
Tests for TCP connectivity probes

Coverage includes:
- Success against a live listener
- Failure against a closed port (never raises)
- Success caching (no new connection on a cache hit)
- Failures not cached (fresh attempt every time)
- Timeout handling
- Event emission
"""

import asyncio
from unittest.mock import patch

import pytest

from localhost_dns.probe import ConnectionProbe, SyncConnectionProbe
from localhost_dns.stores.memory import MemoryConnectionStore
from localhost_dns.types import LocalhostDnsEvent


class TestConnectionProbe:
    """Tests for the async ConnectionProbe"""

    @pytest.mark.asyncio
    async def test_success_against_listener(self, ipv4_listener, store):
        probe = ConnectionProbe(store)
        assert await probe.check("127.0.0.1", ipv4_listener) is True
        assert store.get(f"127.0.0.1:{ipv4_listener}") is True
        assert probe.attempts == 1

    @pytest.mark.asyncio
    async def test_failure_against_closed_port(self, closed_port, store):
        probe = ConnectionProbe(store)
        assert await probe.check("127.0.0.1", closed_port) is False
        assert store.size() == 0

    @pytest.mark.asyncio
    async def test_cache_hit_skips_connection(self, ipv4_listener, store):
        probe = ConnectionProbe(store)
        assert await probe.check("127.0.0.1", ipv4_listener) is True

        with patch("localhost_dns.probe.asyncio.open_connection") as open_connection:
            assert await probe.check("127.0.0.1", ipv4_listener) is True
            open_connection.assert_not_called()

        assert probe.attempts == 1
        assert probe.cache_hits == 1

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, closed_port, store):
        probe = ConnectionProbe(store)
        assert await probe.check("127.0.0.1", closed_port) is False
        assert await probe.check("127.0.0.1", closed_port) is False
        assert probe.attempts == 2
        assert probe.cache_hits == 0

    @pytest.mark.asyncio
    async def test_recovers_once_service_comes_up(self, closed_port, store):
        """A previously failed key is probed again and cached once it succeeds"""
        probe = ConnectionProbe(store)
        assert await probe.check("127.0.0.1", closed_port) is False

        server = await asyncio.start_server(lambda r, w: w.close(), "127.0.0.1", closed_port)
        try:
            assert await probe.check("127.0.0.1", closed_port) is True
        finally:
            server.close()
            await server.wait_closed()

        assert store.get(f"127.0.0.1:{closed_port}") is True

    @pytest.mark.asyncio
    async def test_timeout_reports_failure(self, store):
        async def never_connects(host, port):
            await asyncio.sleep(10)

        probe = ConnectionProbe(store, timeout_seconds=0.05)
        with patch("localhost_dns.probe.asyncio.open_connection", never_connects):
            assert await probe.check("127.0.0.1", 8080) is False
        assert store.size() == 0

    @pytest.mark.asyncio
    async def test_prepopulated_store_is_trusted(self, closed_port):
        store = MemoryConnectionStore()
        store.set(f"::1:{closed_port}")
        probe = ConnectionProbe(store)
        assert await probe.check("::1", closed_port) is True
        assert probe.attempts == 0

    @pytest.mark.asyncio
    async def test_emits_events(self, ipv4_listener, closed_port, store):
        events: list[LocalhostDnsEvent] = []
        probe = ConnectionProbe(store, emit=events.append)

        await probe.check("127.0.0.1", closed_port)
        await probe.check("127.0.0.1", ipv4_listener)
        await probe.check("127.0.0.1", ipv4_listener)

        assert [e.type for e in events] == ["probe:failure", "probe:success", "probe:hit"]
        assert events[1].data["key"] == f"127.0.0.1:{ipv4_listener}"

    @pytest.mark.asyncio
    async def test_ipv6_listener(self, ipv6_listener, store):
        probe = ConnectionProbe(store)
        assert await probe.check("::1", ipv6_listener) is True
        assert store.get(f"::1:{ipv6_listener}") is True

    @pytest.mark.asyncio
    async def test_rejects_invalid_port(self, store):
        probe = ConnectionProbe(store)
        with pytest.raises(ValueError):
            await probe.check("127.0.0.1", 0)


class TestSyncConnectionProbe:
    """Tests for the blocking SyncConnectionProbe"""

    def test_success_against_listener(self, ipv4_listener, store):
        probe = SyncConnectionProbe(store)
        assert probe.check("127.0.0.1", ipv4_listener) is True
        assert store.get(f"127.0.0.1:{ipv4_listener}") is True

    def test_failure_against_closed_port(self, closed_port, store):
        probe = SyncConnectionProbe(store)
        assert probe.check("127.0.0.1", closed_port) is False
        assert probe.check("127.0.0.1", closed_port) is False
        assert probe.attempts == 2
        assert store.size() == 0

    def test_cache_hit_skips_connection(self, ipv4_listener, store):
        probe = SyncConnectionProbe(store)
        probe.check("127.0.0.1", ipv4_listener)

        with patch("localhost_dns.probe.socket.create_connection") as create_connection:
            assert probe.check("127.0.0.1", ipv4_listener) is True
            create_connection.assert_not_called()

    def test_timeout_reports_failure(self, store):
        probe = SyncConnectionProbe(store, timeout_seconds=0.05)
        with patch(
            "localhost_dns.probe.socket.create_connection",
            side_effect=TimeoutError("timed out"),
        ):
            assert probe.check("::1", 8080) is False

    def test_default_store(self):
        probe = SyncConnectionProbe()
        assert isinstance(probe.store, MemoryConnectionStore)
        assert probe.timeout_seconds == 3.0

    def test_rejects_out_of_range_port(self, store):
        probe = SyncConnectionProbe(store)
        with patch("localhost_dns.probe.socket.create_connection") as create_connection:
            with pytest.raises(ValueError):
                probe.check("127.0.0.1", 65536)
            create_connection.assert_not_called()
        assert probe.attempts == 0
