"""
EC2 discovery: running instances whose Name tag contains the filter.
"""
from __future__ import annotations

from typing import Any, Dict, List

from jumpkit.core.models import Instance
from .base import Finder


def instance_name(tags: Dict[str, str]) -> str:
    return tags.get("Name", "")


def to_instance(raw: Dict[str, Any], region: str) -> Instance:
    tags = {t["Key"]: t.get("Value", "") for t in raw.get("Tags") or []}
    return Instance(
        name=instance_name(tags),
        instance_id=raw["InstanceId"],
        # EC2 reports an empty string rather than omitting the key
        public_address=raw.get("PublicDnsName") or None,
        private_address=raw.get("PrivateDnsName") or None,
        instance_type=raw.get("InstanceType", ""),
        tags=tags,
        key_name=raw.get("KeyName"),
        region=region,
    )


class EC2Finder(Finder[Instance]):
    service = "ec2"

    def find(self, region: str, filter: str) -> List[Instance]:
        ec2 = self.client(region)
        paginator = ec2.get_paginator("describe_instances")
        filters = [
            {"Name": "tag:Name", "Values": [f"*{filter}*"]},
            {"Name": "instance-state-name", "Values": ["running"]},
        ]
        instances: List[Instance] = []
        for page in paginator.paginate(Filters=filters):
            for reservation in page.get("Reservations", []):
                for raw in reservation.get("Instances", []):
                    instances.append(to_instance(raw, region))
        return instances
