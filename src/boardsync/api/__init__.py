"""Remote board service access."""

from .client import BoardApiClient, BoardApiError, RemoteError, TransportError
from .offline import OfflineRemote
from .protocol import RemoteProtocol

__all__ = [
    "BoardApiClient",
    "BoardApiError",
    "OfflineRemote",
    "RemoteError",
    "RemoteProtocol",
    "TransportError",
]
