"""
File Sharer - Main Service

Ties the transfer components together behind two calls:
- offer_file(path): register a file, get an invite code
- start_file_server(code): serve it to one peer in the background

One FileSharer is created per process and handed to whatever needs it
(the REST API, the CLI); there is no module-level state.
"""

import asyncio
import logging
from typing import Optional, Set

from .config import Config
from .transfer import CodeAllocator, OfferRegistry, TransferListener, TransferResult

logger = logging.getLogger(__name__)


class FileSharer:
    """
    Owns the offer registry and the background listener tasks.

    Each started server is one asyncio task (the accept) which spawns one
    more task for the connection it accepts (the copy).
    """

    def __init__(self, config: Config = None,
                 registry: Optional[OfferRegistry] = None):
        self.config = config or Config()
        self.registry = registry or OfferRegistry(
            CodeAllocator(host=self.config.host)
        )

        # Strong references so pending listeners are not garbage collected
        self._tasks: Set[asyncio.Task] = set()

        # Statistics
        self.transfers_completed = 0
        self.transfers_failed = 0
        self.bytes_sent = 0

    def offer_file(self, file_path: str) -> int:
        """
        Register a file for pickup.

        Args:
            file_path: Absolute path of a readable file

        Returns:
            The invite code
        """
        code = self.registry.offer(str(file_path))
        logger.info(f"Offered {file_path} with invite code {code}")
        return code

    def start_file_server(self, code: int) -> asyncio.Task:
        """
        Start serving the offer on `code` without waiting for a peer.

        Must be called from a running event loop. The returned task resolves
        to the TransferResult, or None if nothing was transferred; callers
        are free to ignore it.
        """
        listener = TransferListener(
            self.registry,
            code,
            host=self.config.host,
            chunk_size=self.config.chunk_size,
        )
        task = asyncio.get_running_loop().create_task(
            self._run_listener(listener),
            name=f"peerlink-listen-{code}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_listener(self, listener: TransferListener) -> Optional[TransferResult]:
        result = await listener.serve()
        if result is not None:
            self.bytes_sent += result.bytes_sent
            if result.success:
                self.transfers_completed += 1
            else:
                self.transfers_failed += 1
        return result

    @property
    def active_servers(self) -> int:
        return len(self._tasks)

    async def shutdown(self):
        """Cancel listeners that are still waiting or streaming."""
        tasks = list(self._tasks)
        if not tasks:
            return

        logger.info(f"Stopping {len(tasks)} pending file server(s)...")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def get_stats(self) -> dict:
        """Get sharer statistics."""
        return {
            'offers': len(self.registry),
            'active_servers': self.active_servers,
            'transfers_completed': self.transfers_completed,
            'transfers_failed': self.transfers_failed,
            'bytes_sent': self.bytes_sent,
        }
