"""
Auto Scaling group membership resolver.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import ResolutionError
from shared.logging import get_logger


class HealthStatus(str, Enum):
    """Member health as reported by the fleet manager."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "HealthStatus":
        """Map a raw AWS health string, ignoring case."""
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class FleetMember:
    """One instance of the fleet, valid for a single invocation."""
    instance_id: str
    health_status: HealthStatus

    @property
    def is_healthy(self) -> bool:
        return self.health_status is HealthStatus.HEALTHY


def aws_client_config(timeout: float) -> Config:
    """Bounded timeouts and no SDK-level retries for every AWS call."""
    return Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


class FleetResolver:
    """Lists the members of an Auto Scaling group."""

    def __init__(self, region: str, timeout: float = 5.0, client: Optional[Any] = None):
        self.region = region
        self.client = client or boto3.client(
            "autoscaling",
            region_name=region,
            config=aws_client_config(timeout),
        )
        self.logger = get_logger("invalidator.resolver")

    def resolve_members(self, asg_name: str) -> List[FleetMember]:
        """Return every member of the group with its raw health, in API order."""
        if not asg_name:
            raise ResolutionError("<unset>", "Auto Scaling group name is empty")

        try:
            result = self.client.describe_auto_scaling_groups(
                AutoScalingGroupNames=[asg_name]
            )
        except (BotoCoreError, ClientError) as e:
            self.logger.error(
                "Error during describe autoscaling groups",
                asg_name=asg_name,
                region=self.region,
                error=str(e)
            )
            raise ResolutionError(asg_name, "Describe autoscaling groups failed", details={"error": str(e)})

        groups = result.get("AutoScalingGroups", [])
        if not groups:
            self.logger.error("Auto Scaling group not found", asg_name=asg_name, region=self.region)
            raise ResolutionError(asg_name, "No such Auto Scaling group", details={"region": self.region})

        members = [
            FleetMember(
                instance_id=instance["InstanceId"],
                health_status=HealthStatus.parse(instance.get("HealthStatus")),
            )
            for instance in groups[0].get("Instances", [])
        ]

        self.logger.info(
            "Resolved fleet members",
            asg_name=asg_name,
            members=len(members),
            healthy=sum(1 for member in members if member.is_healthy)
        )
        return members
