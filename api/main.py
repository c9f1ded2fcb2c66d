"""
Fraterny influencer API - main entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from lib.db import db
from lib.logging import get_logger, setup_logging
from lib.prometheus_metrics import set_app_info
from lib.settings import settings
from api.middleware.logging import install_logging
from api.routes.health import router as health_router
from api.routes.hello import router as hello_router
from api.routes.influencers import router as influencers_router
from api.routes.pages import router as pages_router

VERSION = "0.1.0"

setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle - connect/disconnect resources"""
    logger.info(f"Starting {settings.app_name} API...")

    if settings.store_backend == "postgres":
        await db.connect()
        logger.info("Connected to PostgreSQL database")

    app.state.settings = settings
    logger.info(f"Environment: {settings.environment}, store: {settings.store_backend}")
    yield

    await db.disconnect()
    logger.info("Disconnected from database")


app = FastAPI(
    title=settings.app_name,
    version=VERSION,
    lifespan=lifespan
)
set_app_info(settings.app_name, VERSION, settings.environment)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    # Wildcard origins can't be combined with credentials
    allow_credentials=settings.allowed_origins != ["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
    max_age=3600,
)

install_logging(app)

app.include_router(health_router)
app.include_router(hello_router)
app.include_router(influencers_router)
app.include_router(pages_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
