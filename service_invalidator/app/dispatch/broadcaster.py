"""
Fan-out of cache invalidation requests to fleet members.

Members are processed one at a time in the order the fleet manager returned
them. Unhealthy members are skipped. The first address lookup or dispatch
failure aborts the broadcast; members already invalidated stay invalidated
and the rest are left untouched. Re-triggering is safe because a full ban is
idempotent on the cache daemon.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import httpx

from shared.errors import DispatchError
from shared.logging import get_logger

from ..fleet import FleetMember, NodeAddressLookup


@dataclass
class BroadcastResult:
    """Outcome of a completed broadcast."""
    invalidated: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class BroadcastDispatcher:
    """Sends one invalidation request per healthy fleet member."""

    def __init__(self,
                 address_lookup: NodeAddressLookup,
                 cache_port: int = 6081,
                 method: str = "FULLBAN",
                 timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.address_lookup = address_lookup
        self.cache_port = cache_port
        self.method = method
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("invalidator.dispatcher")

    def node_url(self, address: str) -> str:
        return f"http://{address}:{self.cache_port}/"

    async def invalidate(self, address: str, client: Optional[httpx.AsyncClient] = None) -> None:
        """Ask the cache daemon at ``address`` to drop its whole cache."""
        if client is None:
            async with self._client() as own_client:
                return await self.invalidate(address, own_client)

        try:
            response = await client.request(self.method, self.node_url(address))
        except httpx.HTTPError as e:
            self.logger.error(
                "Error during send clear cache request to cache node",
                address=address,
                error=str(e)
            )
            raise DispatchError(address, f"{type(e).__name__}: {e}")

        if response.status_code != 200:
            self.logger.error(
                "Wrong status code replied from cache node",
                address=address,
                status_code=response.status_code
            )
            raise DispatchError(
                address,
                f"unexpected status {response.status_code}",
                details={"status_code": response.status_code}
            )

        self.logger.info("Cache node invalidated", address=address)

    async def broadcast(self, members: Sequence[FleetMember]) -> BroadcastResult:
        """Invalidate every healthy member in order, stopping at the first failure."""
        result = BroadcastResult()

        async with self._client() as client:
            for member in members:
                if not member.is_healthy:
                    self.logger.info(
                        "Skipping unhealthy member",
                        member_id=member.instance_id,
                        health_status=member.health_status.value
                    )
                    result.skipped.append(member.instance_id)
                    continue

                # boto3 blocks, keep it off the event loop
                address = await asyncio.to_thread(
                    self.address_lookup.resolve_address, member.instance_id
                )
                await self.invalidate(address, client)
                result.invalidated.append(address)

        self.logger.info(
            "Broadcast complete",
            invalidated=len(result.invalidated),
            skipped=len(result.skipped)
        )
        return result

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
