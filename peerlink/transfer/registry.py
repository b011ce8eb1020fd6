"""
Offer Registry

Maps invite codes to the files they serve. One instance is owned by the
FileSharer and shared with every listener task, so all access goes through
a lock: callers may come from the event loop thread, from FastAPI's
threadpool or from tests.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from .allocator import CodeAllocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Offer:
    """A file waiting to be picked up on an invite code."""
    code: int
    file_path: str

    @property
    def file_name(self) -> str:
        return os.path.basename(self.file_path)


class OfferRegistry:
    """
    Thread-safe code -> Offer mapping.

    Entries are never expired; an offer leaves the registry only when its
    listener fails to bind.
    """

    def __init__(self, allocator: Optional[CodeAllocator] = None):
        self.allocator = allocator or CodeAllocator()
        self._offers: Dict[int, Offer] = {}
        self._lock = threading.Lock()

    def offer(self, file_path: str) -> int:
        """
        Register a file and return its invite code.

        The path is stored as given. The allocator's probe releases the port
        before we register it, so candidates already in the registry are
        discarded here as well.
        """
        while True:
            code = self.allocator.generate_code()
            with self._lock:
                if code not in self._offers:
                    self._offers[code] = Offer(code=code, file_path=str(file_path))
                    logger.debug(f"Registered {file_path} on code {code}")
                    return code
            logger.debug(f"Code {code} already registered, drawing again")

    def get(self, code: int) -> Optional[Offer]:
        with self._lock:
            return self._offers.get(code)

    def evict(self, code: int) -> Optional[Offer]:
        """Remove an offer, returning it if it was present."""
        with self._lock:
            return self._offers.pop(code, None)

    def __contains__(self, code: int) -> bool:
        with self._lock:
            return code in self._offers

    def __len__(self) -> int:
        with self._lock:
            return len(self._offers)
