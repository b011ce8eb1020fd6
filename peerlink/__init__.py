"""
PeerLink - One-time file pickup over TCP, keyed by a numeric invite code.
"""

__version__ = "1.0.0"

from .config import Config, load_config
from .sharer import FileSharer

__all__ = ['Config', 'load_config', 'FileSharer', '__version__']
