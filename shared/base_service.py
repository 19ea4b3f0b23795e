"""
Base service class for the fleet cache invalidator.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from typing import Dict
import time

from shared.config import InvalidatorConfig
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.errors import InvalidatorException


class BaseService:
    """Base service class with common functionality."""

    version = "1.0.0"

    def __init__(self, config: InvalidatorConfig):
        self.config = config
        self.service_name = config.service_name

        configure_logging(self.service_name, self.config.log_level)
        self.logger = get_logger(self.service_name)

        self._start_time = time.time()

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"Fleet cache {self.service_name} service",
            version=self.version,
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        @self.app.middleware("http")
        async def add_request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get("x-request-id"))
            start_time = time.time()

            try:
                response = await call_next(request)
                duration = time.time() - start_time

                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )
                response.headers["X-Request-ID"] = request_id
                return response
            finally:
                clear_context()

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "service": self.service_name,
                "status": "ok",
                "uptime_seconds": self._get_uptime(),
                "dependencies": self._check_dependencies(),
                "version": self.version
            }

        @self.app.exception_handler(InvalidatorException)
        async def invalidator_exception_handler(request: Request, exc: InvalidatorException):
            """Handle InvalidatorException."""
            self.logger.error(
                "Invalidator error",
                code=exc.code,
                message=exc.message,
                details=exc.details
            )
            return JSONResponse(
                status_code=500,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    def _check_dependencies(self) -> Dict[str, str]:
        """Describe service dependencies. Override in subclasses."""
        return {}

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        # httptools only parses registered method names
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            http="h11",
            log_level=self.config.log_level.lower()
        )
