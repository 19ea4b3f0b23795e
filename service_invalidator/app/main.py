"""
Invalidator service: clears the cache of every healthy fleet member.
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from fastapi import Response

from shared.base_service import BaseService
from shared.config import InvalidatorConfig, get_config
from shared.errors import ConfigurationError, ResolutionError
from shared.logging import configure_logging, get_logger

from .dispatch import BroadcastDispatcher
from .fleet import FleetResolver, NodeAddressLookup


class InvalidatorService(BaseService):
    """Invalidator service implementation."""

    def __init__(self,
                 config: InvalidatorConfig,
                 fleet_resolver: Optional[FleetResolver] = None,
                 address_lookup: Optional[NodeAddressLookup] = None,
                 dispatcher: Optional[BroadcastDispatcher] = None):
        super().__init__(config)

        self.fleet_resolver = fleet_resolver or FleetResolver(
            config.region, timeout=config.aws_timeout_seconds
        )
        self.address_lookup = address_lookup or NodeAddressLookup(
            config.region, timeout=config.aws_timeout_seconds
        )
        self.dispatcher = dispatcher or BroadcastDispatcher(
            self.address_lookup,
            cache_port=config.cache_port,
            method=config.invalidation_method,
            timeout=config.dispatch_timeout_seconds
        )

        self._setup_invalidator_routes()

    def _setup_invalidator_routes(self):
        """Set up invalidator-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "fleet": self.config.asg_name,
                "region": self.config.region,
                "method": self.config.invalidation_method,
                "version": self.version
            }

        @self.app.api_route("/", methods=[self.config.invalidation_method])
        async def clear_cache():
            """Send the invalidation request to every healthy fleet member."""
            asg_name = self.config.asg_name

            try:
                members = await asyncio.to_thread(self.fleet_resolver.resolve_members, asg_name)
            except ResolutionError as e:
                if self.config.fail_on_resolution_error:
                    raise
                # Legacy behaviour: logged only, caller still sees success
                self.logger.warning("Fleet resolution failed, replying 200", error=e.message)
                return Response(status_code=200)

            # AddressLookupError and DispatchError surface as 500 via the base handler
            result = await self.dispatcher.broadcast(members)

            return {
                "fleet": asg_name,
                "invalidated": len(result.invalidated),
                "skipped": len(result.skipped)
            }

    def _check_dependencies(self):
        """Describe the configured fleet."""
        return {
            "fleet": self.config.asg_name or "unset",
            "region": self.config.region
        }


def create_app(config: Optional[InvalidatorConfig] = None):
    """Create FastAPI application."""
    service = InvalidatorService(config or get_config())
    return service.app


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Broadcast full cache invalidations to an Auto Scaling group.")
    parser.add_argument("--port", type=int, default=os.getenv("INVALIDATOR_PORT", "6051"), help="Port where the cache invalidator will listen")
    parser.add_argument("--region", default=os.getenv("INVALIDATOR_REGION", "eu-central-1"), help="Region to search for cache instances")
    parser.add_argument("--asgname", default=os.getenv("INVALIDATOR_ASG_NAME", ""), help="Name of the Auto Scaling group holding the cache instances")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    config = get_config(port=args.port, region=args.region, asg_name=args.asgname.strip())

    try:
        config.validate_fleet()
    except ConfigurationError as exc:
        configure_logging(config.service_name, config.log_level)
        get_logger(config.service_name).error("Refusing to start", error=exc.message, details=exc.details)
        return 2

    InvalidatorService(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
