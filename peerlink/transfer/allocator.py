"""
Invite Code Allocator

Design Decision: What is an invite code?
========================================

Options Considered:
1. Random token mapped to a shared port
   - Needs a multiplexing server and a handshake

2. The TCP port itself
   - The code *is* the address, no lookup needed on the wire
   - Short, numeric, easy to read out loud

Decision: The invite code is a port in the dynamic/private range
(49152-65535, RFC 6335). Availability is verified by actually binding
the port and releasing it, which is the only reliable answer the OS gives.

The probe is released before the listener binds again, so another process
can grab the port in between. The listener handles that case by evicting
the offer (see listener.py).
"""

import errno
import logging
import random
import socket
from typing import Optional

logger = logging.getLogger(__name__)

# Dynamic/private port range (inclusive)
DYNAMIC_PORT_START = 49152
DYNAMIC_PORT_END = 65535


def is_port_available(port: int, host: str = '') -> bool:
    """
    Check whether a TCP port can be bound right now.

    The socket is closed before returning, so the answer is only a hint.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(1)
        return True
    except OSError as e:
        if e.errno != errno.EADDRINUSE:
            logger.warning(f"Error checking port {port}: {e}")
        return False
    finally:
        sock.close()


class CodeAllocator:
    """
    Picks unused invite codes by random draw plus bind probe.

    There is no retry limit: under pathological port exhaustion
    generate_code() keeps drawing.
    """

    def __init__(self, host: str = '', rng: Optional[random.Random] = None,
                 start: int = DYNAMIC_PORT_START, end: int = DYNAMIC_PORT_END):
        self.host = host
        self.start = start
        self.end = end
        self._rng = rng or random.SystemRandom()

    def generate_code(self) -> int:
        """Return a code in [start, end] whose port could be bound."""
        while True:
            port = self._rng.randint(self.start, self.end)
            if is_port_available(port, self.host):
                return port
            logger.debug(f"Port {port} unavailable, drawing again")
