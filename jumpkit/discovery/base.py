from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, List, TypeVar

import boto3
import botocore.config

T = TypeVar("T")

SessionFactory = Callable[[], Any]

CLIENT_CONFIG = botocore.config.Config(connect_timeout=10, read_timeout=10)


class Finder(ABC, Generic[T]):
    """Lists the resources of one kind in a single region."""

    service: str = ""

    def __init__(self, session_factory: SessionFactory = boto3.session.Session):
        # boto3 sessions are not thread-safe, so every region query gets its own
        self.session_factory = session_factory

    def client(self, region: str):
        return self.session_factory().client(self.service, region_name=region, config=CLIENT_CONFIG)

    @abstractmethod
    def find(self, region: str, filter: str) -> List[T]:
        raise NotImplementedError
