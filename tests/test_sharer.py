"""Tests for the FileSharer service."""

import asyncio

import pytest

from peerlink.transfer import is_port_available, DYNAMIC_PORT_START, DYNAMIC_PORT_END

from conftest import LOOPBACK, fetch_raw, split_header, wait_until_listening


class TestFileSharer:

    def test_offer_file_returns_code_in_range(self, sharer, sample_file):
        code = sharer.offer_file(str(sample_file))

        assert DYNAMIC_PORT_START <= code <= DYNAMIC_PORT_END
        assert code in sharer.registry

    def test_offers_get_distinct_codes(self, sharer, tmp_path):
        codes = {sharer.offer_file(str(tmp_path / f'f{i}')) for i in range(20)}
        assert len(codes) == 20

    @pytest.mark.asyncio
    async def test_start_file_server_returns_immediately(self, sharer, sample_file):
        code = sharer.offer_file(str(sample_file))

        task = sharer.start_file_server(code)

        assert isinstance(task, asyncio.Task)
        assert not task.done()
        assert sharer.active_servers == 1

        await wait_until_listening(code)
        data = await fetch_raw(code)
        result = await task

        assert split_header(data)[1] == sample_file.read_bytes()
        assert result.success

    @pytest.mark.asyncio
    async def test_stats_after_transfer(self, sharer, sample_file):
        code = sharer.offer_file(str(sample_file))
        task = sharer.start_file_server(code)
        await wait_until_listening(code)
        await fetch_raw(code)
        await task
        await asyncio.sleep(0)

        stats = sharer.get_stats()
        assert stats['transfers_completed'] == 1
        assert stats['transfers_failed'] == 0
        assert stats['bytes_sent'] == sample_file.stat().st_size
        assert stats['active_servers'] == 0

    @pytest.mark.asyncio
    async def test_unknown_code_is_noop(self, sharer):
        code = sharer.registry.allocator.generate_code()

        result = await sharer.start_file_server(code)

        assert result is None
        assert sharer.get_stats()['transfers_completed'] == 0

    @pytest.mark.asyncio
    async def test_shutdown_releases_pending_listeners(self, sharer, sample_file):
        code = sharer.offer_file(str(sample_file))
        task = sharer.start_file_server(code)
        await wait_until_listening(code)

        await sharer.shutdown()

        assert task.cancelled()
        assert is_port_available(code, LOOPBACK)

    @pytest.mark.asyncio
    async def test_shutdown_without_servers(self, sharer):
        await sharer.shutdown()
        assert sharer.active_servers == 0
