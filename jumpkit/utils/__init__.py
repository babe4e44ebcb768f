from .logging import setup_logger, get_logger
from .secrets import lookup_secret

__all__ = [
    "setup_logger",
    "get_logger",
    "lookup_secret",
]
