"""
Shared utilities for the fleet cache invalidator.

This package holds the building blocks the invalidator service sits on:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding

Do not import from service_* packages into shared/.
"""
