"""
Fleet lookup for the Invalidator Service.

Wraps the two AWS inventory calls the broadcast needs:

- FleetResolver: Auto Scaling group membership and health
- NodeAddressLookup: EC2 private address of a member

Both are read-only and map botocore failures to shared errors.
"""

from .resolver import FleetMember, FleetResolver, HealthStatus
from .address import NodeAddressLookup

__all__ = [
    "FleetMember",
    "FleetResolver",
    "HealthStatus",
    "NodeAddressLookup",
]
