from .base import Finder
from .ec2_finder import EC2Finder
from .rds_finder import RDSFinder
from .fanout import discover

__all__ = [
    "Finder",
    "EC2Finder",
    "RDSFinder",
    "discover",
]
