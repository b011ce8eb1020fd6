"""Shared pytest fixtures for all tests."""

import asyncio
import os
from typing import Tuple

import pytest

from peerlink.config import Config
from peerlink.sharer import FileSharer
from peerlink.transfer import CodeAllocator, OfferRegistry, is_port_available

LOOPBACK = '127.0.0.1'


@pytest.fixture
def config(tmp_path):
    """
    Config bound to loopback with temporary directories.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Config instance
    """
    return Config(
        host=LOOPBACK,
        download_host=LOOPBACK,
        upload_dir=tmp_path / 'uploads',
        temp_dir=tmp_path / 'downloads',
        connect_timeout=2.0,
    )


@pytest.fixture
def registry():
    """Offer registry whose allocator probes loopback."""
    return OfferRegistry(CodeAllocator(host=LOOPBACK))


@pytest.fixture
def sharer(config, registry):
    return FileSharer(config, registry=registry)


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for transfers.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'notes.txt'
    file_path.write_text('Sample content for testing\nsecond line\n')
    return file_path


@pytest.fixture
def large_file(tmp_path):
    """10MB of random bytes."""
    file_path = tmp_path / 'large.bin'
    file_path.write_bytes(os.urandom(10 * 1024 * 1024))
    return file_path


async def wait_until_listening(code: int, timeout: float = 2.0):
    """Wait for a listener to hold `code` without connecting to it."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while is_port_available(code, LOOPBACK):
        if loop.time() > deadline:
            raise TimeoutError(f"Nothing listening on {code}")
        await asyncio.sleep(0.01)


async def fetch_raw(code: int) -> bytes:
    """Connect to a code and read until the sender closes."""
    reader, writer = await asyncio.open_connection(LOOPBACK, code)
    try:
        return await reader.read()
    finally:
        writer.close()
        await writer.wait_closed()


def split_header(data: bytes) -> Tuple[bytes, bytes]:
    """Split a raw transfer into (header line, body)."""
    index = data.index(b'\n') + 1
    return data[:index], data[index:]
