"""
RDS discovery: database instances whose endpoint address contains the filter.

There is no state filter; an instance still being created has no endpoint and
is skipped.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from jumpkit.core.models import DatabaseInstance
from .base import Finder


def to_database(raw: Dict[str, Any], region: str) -> Optional[DatabaseInstance]:
    endpoint = raw.get("Endpoint") or {}
    address = endpoint.get("Address")
    if not address:
        return None
    return DatabaseInstance(
        endpoint=address,
        engine=raw.get("Engine", ""),
        region=region,
        identifier=raw.get("DBInstanceIdentifier"),
        port=endpoint.get("Port"),
    )


class RDSFinder(Finder[DatabaseInstance]):
    service = "rds"

    def find(self, region: str, filter: str) -> List[DatabaseInstance]:
        rds = self.client(region)
        paginator = rds.get_paginator("describe_db_instances")
        databases: List[DatabaseInstance] = []
        for page in paginator.paginate():
            for raw in page.get("DBInstances", []):
                db = to_database(raw, region)
                if db is not None and filter in db.endpoint:
                    databases.append(db)
        return databases
