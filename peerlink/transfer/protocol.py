"""
File Transfer Protocol

Design Decision: Transfer Protocol
===================================

Options Considered:
1. HTTP - Standard, well-supported
   - Heavy, requires web server on both sides

2. Length-prefixed JSON header + binary data
   - Explicit framing, but needs a codec on both sides

3. Single text header line + raw bytes until close
   - Trivial to implement and to debug with netcat
   - End of file is the connection close

Decision: Single header line
- One connection carries exactly one file
- No framing, checksum or length field

Message Format:
```
"Filename: " <basename> "\n"
<raw file bytes until the sender closes the connection>
```
"""

import asyncio
import logging
import os
from typing import Tuple

from ..exceptions import TransferError

logger = logging.getLogger(__name__)

HEADER_PREFIX = "Filename: "
HEADER_TERMINATOR = b"\n"
DEFAULT_FILENAME = "downloaded_file"

# 64KB copy buffer
CHUNK_SIZE = 64 * 1024

# Upper bound on the header line, anything longer is not our protocol
MAX_HEADER_LENGTH = 64 * 1024


def build_header(file_path: str) -> bytes:
    """Encode the header line for a file."""
    file_name = os.path.basename(file_path)
    # fsencode keeps undecodable names byte-exact on the wire
    return HEADER_PREFIX.encode('utf-8') + os.fsencode(file_name) + HEADER_TERMINATOR


def parse_header(line: bytes) -> Tuple[str, bool]:
    """
    Extract the suggested file name from a header line.

    Returns:
        (file_name, well_formed). Malformed lines yield DEFAULT_FILENAME.
    """
    text = line.decode('utf-8', errors='replace').rstrip('\r\n')
    if not text.startswith(HEADER_PREFIX):
        return DEFAULT_FILENAME, False

    # Never trust a path from the wire
    name = os.path.basename(text[len(HEADER_PREFIX):].strip().replace('\\', '/'))
    if not name or name in ('.', '..'):
        return DEFAULT_FILENAME, False
    return name, True


async def read_header(reader: asyncio.StreamReader) -> bytes:
    """
    Read up to and including the first newline.

    A sender that closes before the newline yields whatever was received.
    """
    try:
        return await reader.readuntil(HEADER_TERMINATOR)
    except asyncio.IncompleteReadError as e:
        return e.partial
    except asyncio.LimitOverrunError as e:
        raise TransferError(f"Header line exceeds {MAX_HEADER_LENGTH} bytes") from e
