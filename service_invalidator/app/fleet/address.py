"""
EC2 private address lookup for fleet members.
"""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import AddressLookupError
from shared.logging import get_logger

from .resolver import aws_client_config


class NodeAddressLookup:
    """Resolves an instance id to its private IP address."""

    def __init__(self, region: str, timeout: float = 5.0, client: Optional[Any] = None):
        self.region = region
        self.client = client or boto3.client(
            "ec2",
            region_name=region,
            config=aws_client_config(timeout),
        )
        self.logger = get_logger("invalidator.address_lookup")

    def resolve_address(self, member_id: str) -> str:
        """Return the private IP address of the given instance."""
        try:
            response = self.client.describe_instances(
                Filters=[{"Name": "instance-id", "Values": [member_id]}]
            )
        except (BotoCoreError, ClientError) as e:
            self.logger.error("Error during describe ec2 instance", member_id=member_id, error=str(e))
            raise AddressLookupError(member_id, "Describe instances failed", details={"error": str(e)})

        reservations = response.get("Reservations", [])
        instances = reservations[0].get("Instances", []) if reservations else []
        if not instances:
            self.logger.error("EC2 instance not found", member_id=member_id)
            raise AddressLookupError(member_id, "No matching instance")

        address = instances[0].get("PrivateIpAddress")
        if not address:
            self.logger.error("EC2 instance has no private address", member_id=member_id)
            raise AddressLookupError(member_id, "Instance has no private address")

        self.logger.debug("Resolved member address", member_id=member_id, address=address)
        return address
