"""Exceptions raised on the receiving side of a transfer."""


class PeerLinkError(Exception):
    """Base exception for peerlink."""
    pass


class TransferError(PeerLinkError):
    """A transfer could not be started or completed."""
    pass
