from .direct import DirectConnector, connect_to_compute
from .tunnel import DatabaseConnector, connect_to_database, open_tunnel

__all__ = [
    "DirectConnector",
    "connect_to_compute",
    "DatabaseConnector",
    "connect_to_database",
    "open_tunnel",
]
