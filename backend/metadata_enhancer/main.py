import os
import sys
from pathlib import Path

from .gateway import APIGateway
from .routers import (
    account,
    auth,
    drive,
    export,
    files,
    processing,
    search,
    templates,
)
from .routers.dependencies import initialize_database, initialize_services, shutdown_services
from .core.config import (
    AI_PROVIDER,
    BATCH_DELAY_SECONDS,
    CORS_ORIGINS,
    DATABASE_TYPE,
    FFMPEG_PATH,
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_PER_MINUTE,
    TEMP_DIR,
)
from .core.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)

gateway = APIGateway(
    title="Metadata Enhancer API",
    description="Generate AI metadata for Google Drive files and write it back as file properties",
    version="1.0.0"
)

gateway.setup_middleware()

gateway.register_router(auth.router, tags=["Auth"])
gateway.register_router(drive.router, tags=["Drive"])
gateway.register_router(files.router, tags=["Files"])
gateway.register_router(templates.router, tags=["Templates"])
gateway.register_router(processing.router, tags=["Processing"])
gateway.register_router(export.router, tags=["Export"])
gateway.register_router(search.router, tags=["Search"])
gateway.register_router(account.router, tags=["Account"])

gateway.register_health_endpoints()

app = gateway.get_app()


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("=" * 60)
    logger.info("Starting Metadata Enhancer Backend...")
    logger.info("=" * 60)

    import fastapi
    import uvicorn
    logger.info("Framework & Server:")
    logger.info(f"  → FastAPI Version: {fastapi.__version__}")
    logger.info(f"  → Uvicorn Version: {uvicorn.__version__}")
    logger.info(f"  → Python Version: {sys.version.split()[0]}")

    logger.info("API Gateway Configuration:")
    logger.info(f"  → API Title: {app.title}")
    logger.info(f"  → Docs URL: {app.docs_url if app.docs_url else 'Disabled (production)'}")
    logger.info(f"  → Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"  → CORS Origins: {', '.join(CORS_ORIGINS)}")
    logger.info(f"  → Rate Limiting: {f'{RATE_LIMIT_PER_MINUTE}/minute' if RATE_LIMIT_ENABLED else 'Disabled'}")

    logger.info("Processing:")
    logger.info(f"  → AI Provider: {AI_PROVIDER}")
    logger.info(f"  → Database Backend: {DATABASE_TYPE.upper()}")
    logger.info(f"  → Batch Delay: {BATCH_DELAY_SECONDS}s")
    logger.info(f"  → ffmpeg: {FFMPEG_PATH}")

    if TEMP_DIR:
        Path(TEMP_DIR).mkdir(parents=True, exist_ok=True)
    logger.debug(f"Temp directory: {TEMP_DIR or 'system default'}")

    await initialize_database()
    await initialize_services()

    route_summary = gateway.get_route_summary()
    logger.info(
        f"  ✅ {route_summary['total_routers']} routers registered "
        f"({route_summary['total_routes']} routes)"
    )

    logger.info("=" * 60)
    logger.info("✅ Metadata Enhancer Backend initialized successfully")
    logger.info("=" * 60)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Metadata Enhancer Backend...")
    await shutdown_services()
    logger.info("Metadata Enhancer Backend shutdown complete")
