"""
API Gateway

Main gateway class that assembles the FastAPI application, its middleware
stack and the health endpoints. Acts as the single entry point for all API
requests.
"""
import os
from typing import Optional, List
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from ..core.config import CORS_ORIGINS, RATE_LIMIT_ENABLED, RATE_LIMIT_PER_MINUTE
from ..core.logging_config import get_logger
from .middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
)

logger = get_logger(__name__)


class APIGateway:
    """
    API Gateway that manages routing, middleware and health checks.
    
    Responsibilities:
    - Initialize FastAPI application
    - Register middleware (CORS, rate limiting, logging, error handling)
    - Register routers
    - Provide health check endpoints
    """
    
    def __init__(
        self,
        title: str = "Metadata Enhancer API",
        description: str = "AI-generated metadata for Google Drive files",
        version: str = "1.0.0",
        enable_docs: Optional[bool] = None
    ):
        """
        Initialize API Gateway.
        
        Args:
            title: API title
            description: API description
            version: API version
            enable_docs: Enable API docs (auto-detected from ENVIRONMENT if None)
        """
        self.title = title
        self.description = description
        self.version = version
        self.enable_docs = enable_docs if enable_docs is not None else (
            os.getenv("ENVIRONMENT") != "production"
        )
        self.routers: List[dict] = []
        
        self.app = FastAPI(
            title=self.title,
            description=self.description,
            version=self.version,
            docs_url="/docs" if self.enable_docs else None,
            redoc_url="/redoc" if self.enable_docs else None
        )
        
        # Every route shares the per-client default limit
        self.limiter = Limiter(
            key_func=get_remote_address,
            default_limits=[f"{RATE_LIMIT_PER_MINUTE}/minute"],
            enabled=RATE_LIMIT_ENABLED
        )
        self.app.state.limiter = self.limiter
        self.app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
        
        logger.info("API Gateway initialized")
    
    def setup_middleware(self):
        """Configure all middleware (added innermost first)."""
        logger.info("Setting up middleware...")
        
        self.app.add_middleware(ErrorHandlingMiddleware)
        logger.debug("  → Error handling middleware added")
        
        self.app.add_middleware(SlowAPIMiddleware)
        logger.debug(f"  → Rate limit middleware added (enabled: {RATE_LIMIT_ENABLED})")
        
        self.app.add_middleware(
            RequestLoggingMiddleware,
            skip_paths=["/health", "/docs", "/redoc", "/openapi.json"]
        )
        logger.debug("  → Request logging middleware added")
        
        self.app.add_middleware(RequestIDMiddleware)
        logger.debug("  → Request ID middleware added")
        
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.debug(f"  → CORS middleware added (origins: {', '.join(CORS_ORIGINS)})")
        
        logger.info("✅ All middleware configured")
    
    def register_router(
        self,
        router: APIRouter,
        prefix: str = "/api",
        tags: Optional[List[str]] = None
    ):
        """
        Register a router with the gateway.
        
        Args:
            router: FastAPI router instance
            prefix: URL prefix for the router
            tags: OpenAPI tags for documentation
        """
        self.app.include_router(router, prefix=prefix, tags=tags or [])
        self.routers.append({
            "prefix": prefix,
            "tags": tags or [],
            "routes": len(router.routes),
        })
        logger.info(f"Registered router {tags or []} at prefix '{prefix}' ({len(router.routes)} routes)")
    
    def register_health_endpoints(self):
        """Register health check endpoints."""
        
        @self.app.get("/")
        async def root():
            """Root endpoint - API information."""
            return {
                "message": f"{self.title} is running",
                "version": self.version,
                "status": "healthy",
            }
        
        @self.app.get("/health")
        async def health_check():
            """
            Health check endpoint for container orchestration.
            
            Returns 200 if healthy, 503 if the database or services are not ready.
            """
            from ..routers import dependencies
            
            if dependencies.db_service is None:
                logger.warning("Health check failed: Database not initialized")
                return JSONResponse(
                    status_code=503,
                    content={"status": "unhealthy", "reason": "Database not initialized"}
                )
            if dependencies.file_processor is None or dependencies.drive_service is None:
                logger.warning("Health check failed: Services not initialized")
                return JSONResponse(
                    status_code=503,
                    content={"status": "unhealthy", "reason": "Services not initialized"}
                )
            
            return {
                "status": "healthy",
                "database": "connected",
                "services": "initialized",
                "googleDrive": "connected" if dependencies.drive_service.is_authenticated() else "disconnected",
            }
        
        logger.info("Health check endpoints registered")
    
    def get_app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self.app
    
    def get_route_summary(self) -> dict:
        """Summary of registered routers and their route counts."""
        return {
            "total_routers": len(self.routers),
            "total_routes": sum(entry["routes"] for entry in self.routers),
            "routers": self.routers,
        }
