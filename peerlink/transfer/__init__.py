"""
Transfer Module - One-Shot File Transfers

Invite code allocation, the offer registry and the TCP sender/receiver.
"""

from .allocator import CodeAllocator, is_port_available, DYNAMIC_PORT_START, DYNAMIC_PORT_END
from .registry import Offer, OfferRegistry
from .protocol import build_header, parse_header, HEADER_PREFIX, CHUNK_SIZE
from .sender import FileSender, TransferResult
from .listener import TransferListener
from .receiver import ReceivedFile, receive_file

__all__ = [
    'CodeAllocator',
    'is_port_available',
    'DYNAMIC_PORT_START',
    'DYNAMIC_PORT_END',
    'Offer',
    'OfferRegistry',
    'build_header',
    'parse_header',
    'HEADER_PREFIX',
    'CHUNK_SIZE',
    'FileSender',
    'TransferResult',
    'TransferListener',
    'ReceivedFile',
    'receive_file',
]
