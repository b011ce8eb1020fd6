"""
File Sender

Streams one file to one connected peer: header line, raw bytes, close.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import aiofiles

from .protocol import CHUNK_SIZE, build_header
from .registry import Offer

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    """Outcome of a single transfer, used for logging and stats."""
    code: int
    file_name: str
    peer: Optional[Tuple[str, int]] = None
    bytes_sent: int = 0
    success: bool = False
    error: Optional[str] = None


class FileSender:
    """
    Owns one accepted connection for the duration of a transfer.

    The file is opened before anything is written, so a missing file
    results in a bare close with no header. Partial deliveries are not
    signalled to the peer beyond the close itself.
    """

    def __init__(self, offer: Offer, reader: asyncio.StreamReader,
                 writer: asyncio.StreamWriter, chunk_size: int = CHUNK_SIZE):
        self.offer = offer
        self.reader = reader
        self.writer = writer
        self.chunk_size = chunk_size

    @property
    def peer(self) -> Optional[Tuple[str, int]]:
        return self.writer.get_extra_info('peername')

    async def send(self) -> TransferResult:
        """Write the header and file content, then close the connection."""
        result = TransferResult(
            code=self.offer.code,
            file_name=self.offer.file_name,
            peer=self.peer,
        )

        try:
            async with aiofiles.open(self.offer.file_path, 'rb') as f:
                self.writer.write(build_header(self.offer.file_path))
                await self.writer.drain()

                while True:
                    chunk = await f.read(self.chunk_size)
                    if not chunk:
                        break
                    self.writer.write(chunk)
                    await self.writer.drain()
                    result.bytes_sent += len(chunk)

            result.success = True
            logger.info(f"File '{result.file_name}' sent to {self._peer_host()} "
                        f"({result.bytes_sent:,} bytes)")
        except OSError as e:
            result.error = str(e)
            logger.error(f"Error sending file to {self._peer_host()}: {e}")
        finally:
            await self.close()

        return result

    async def close(self):
        """Close the connection, ignoring errors from an already dead peer."""
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error closing connection to {self._peer_host()}: {e}")

    def _peer_host(self) -> str:
        peer = self.peer
        return peer[0] if peer else 'unknown peer'
