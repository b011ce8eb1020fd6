"""
File Receiver

Client side of the transfer protocol: connect to an invite code, read the
header line, then copy everything else to disk until the sender closes.

A close from the sender is the end-of-file marker, so a truncated transfer
is indistinguishable from a complete one at this layer.
"""

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from ..exceptions import TransferError
from .protocol import CHUNK_SIZE, MAX_HEADER_LENGTH, parse_header, read_header

logger = logging.getLogger(__name__)


@dataclass
class ReceivedFile:
    """A file received from a peer, stored under a temporary name."""
    file_name: str
    path: Path
    size: int


async def receive_file(host: str, code: int, dest_dir: Path,
                       chunk_size: int = CHUNK_SIZE,
                       timeout: Optional[float] = None) -> ReceivedFile:
    """
    Download the file offered on an invite code.

    Args:
        host: Address of the sharing peer
        code: Invite code (TCP port)
        dest_dir: Directory for the temporary download file
        chunk_size: Read buffer size
        timeout: Connect timeout in seconds (None waits forever)

    Returns:
        ReceivedFile with the suggested name and the local path

    Raises:
        TransferError: connection or I/O failure
    """
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, code, limit=MAX_HEADER_LENGTH),
            timeout=timeout
        )
    except (OSError, asyncio.TimeoutError) as e:
        raise TransferError(f"Failed to connect to {host}:{code}: {e}") from e

    try:
        header = await read_header(reader)
        file_name, well_formed = parse_header(header)
        if not well_formed:
            logger.warning("Filename header not found or malformed, "
                           f"using '{file_name}'")

        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)

        fd, name = tempfile.mkstemp(prefix='peerlink-download-', dir=dest_dir)
        os.close(fd)
        path = Path(name)

        size = 0
        try:
            async with aiofiles.open(path, 'wb') as f:
                while True:
                    chunk = await reader.read(chunk_size)
                    if not chunk:
                        break
                    await f.write(chunk)
                    size += len(chunk)
        except BaseException:
            await aiofiles.os.remove(path)
            raise

        logger.info(f"Received '{file_name}' from {host}:{code} ({size:,} bytes)")
        return ReceivedFile(file_name=file_name, path=path, size=size)

    except OSError as e:
        raise TransferError(f"Error receiving from {host}:{code}: {e}") from e
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
