"""
One-Shot Transfer Listener

Design Decision: Accepting exactly one peer
============================================

Options Considered:
1. asyncio.start_server + close on first connection
   - The server's accept loop may pick up several queued connections
     in one pass before close() takes effect

2. Raw listening socket + a single loop.sock_accept()
   - Exactly one accept call per listener, by construction

Decision: Raw socket with a single sock_accept()
- The listening socket is closed right after the accept, on every path
- The connection is handed to a separate FileSender task

Lifecycle:
```
REGISTERED -> LISTENING -> (no offer: no-op)
                        -> (bind failed: EVICTED)
                        -> CONNECTED -> STREAMING -> CLOSED
```
There is no accept timeout. A listener whose peer never shows up waits
until it is cancelled.
"""

import asyncio
import logging
import socket
from typing import Optional

from .protocol import CHUNK_SIZE
from .registry import Offer, OfferRegistry
from .sender import FileSender, TransferResult

logger = logging.getLogger(__name__)


class TransferListener:
    """Serves the offer registered on one invite code to one peer."""

    def __init__(self, registry: OfferRegistry, code: int, host: str = '0.0.0.0',
                 chunk_size: int = CHUNK_SIZE):
        self.registry = registry
        self.code = code
        self.host = host
        self.chunk_size = chunk_size

    def _bind(self) -> socket.socket:
        sock = socket.create_server((self.host, self.code), backlog=1)
        sock.setblocking(False)
        return sock

    async def serve(self) -> Optional[TransferResult]:
        """
        Bind, accept one connection and stream the offered file to it.

        Returns:
            The TransferResult, or None if nothing was transferred
            (unknown code, bind failure or accept failure).
        """
        offer = self.registry.get(self.code)
        if offer is None:
            logger.error(f"No file associated with code {self.code}")
            return None

        try:
            server_sock = self._bind()
        except OSError as e:
            # The port was taken between allocation and now
            self.registry.evict(self.code)
            logger.error(f"Error starting file server on code {self.code}: {e}")
            return None

        loop = asyncio.get_running_loop()
        try:
            logger.info(f"Serving file '{offer.file_name}' on code {self.code}")
            conn, addr = await loop.sock_accept(server_sock)
        except OSError as e:
            logger.error(f"Error accepting connection on code {self.code}: {e}")
            return None
        finally:
            server_sock.close()

        logger.info(f"Client connected on code {self.code}: {addr[0]}")

        handler = asyncio.create_task(
            self._handle_connection(conn, offer),
            name=f"peerlink-send-{self.code}",
        )
        return await handler

    async def _handle_connection(self, conn: socket.socket,
                                 offer: Offer) -> TransferResult:
        try:
            reader, writer = await asyncio.open_connection(sock=conn)
        except OSError as e:
            conn.close()
            logger.error(f"Error setting up connection on code {offer.code}: {e}")
            return TransferResult(code=offer.code, file_name=offer.file_name,
                                  error=str(e))

        sender = FileSender(offer, reader, writer, chunk_size=self.chunk_size)
        return await sender.send()
