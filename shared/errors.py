"""
Shared error handling for the fleet cache invalidator.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class InvalidatorException(Exception):
    """Base exception for invalidator errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(InvalidatorException):
    """Invalid or missing startup configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ResolutionError(InvalidatorException):
    """Fleet lookup failed or matched no fleet."""

    def __init__(self, fleet: str, message: str = "Fleet resolution failed", details: Optional[Dict[str, Any]] = None):
        self.fleet = fleet
        super().__init__("RESOLUTION_ERROR", f"{fleet}: {message}", {"fleet": fleet, **(details or {})})


class AddressLookupError(InvalidatorException):
    """A fleet member's private address could not be resolved."""

    def __init__(self, member_id: str, message: str = "Address lookup failed", details: Optional[Dict[str, Any]] = None):
        self.member_id = member_id
        super().__init__("ADDRESS_LOOKUP_ERROR", f"{member_id}: {message}", {"member_id": member_id, **(details or {})})


class DispatchError(InvalidatorException):
    """An invalidation request to a node failed."""

    def __init__(self, address: str, cause: str, details: Optional[Dict[str, Any]] = None):
        self.address = address
        self.cause = cause
        super().__init__(
            "DISPATCH_ERROR",
            f"{address}: {cause}",
            {"address": address, "cause": cause, **(details or {})}
        )
