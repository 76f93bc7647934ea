# FastAPI application entry point
# Defines the main app instance and core routes

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI
from pydantic import BaseModel

from . import __version__
from .api import query
from .config import Settings, get_config
from .services.coordinator import ExecutionCoordinator
from .services.llm_client import LLMClient

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(settings: Settings, level_name: str | None = None) -> None:
    """Console logging at the configured level, plus a rotating file when LOG_FILE is set."""
    level = getattr(logging, (level_name or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    if settings.log_file:
        file_handler = RotatingFileHandler(settings.log_file, maxBytes=2_000_000, backupCount=3)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


configure_logging(get_config())
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    settings = get_config()
    try:
        settings.validate_credentials()
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    llm = LLMClient.from_settings(settings)
    coordinator = ExecutionCoordinator(settings, llm)
    app.state.coordinator = coordinator

    logger.info("Testing provider connections...")
    for report in await coordinator.initialize_providers():
        logger.info(report.message)
    logger.info("Startup complete")

    yield

    logger.info("Shutting down codepilot...")
    await coordinator.aclose()
    await llm.aclose()
    app.state.coordinator = None
    logger.info("Shutdown complete")


app = FastAPI(
    title="codepilot",
    description="Routes natural-language requests to Linear, GitHub and Supabase MCP tools",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(query.router)


@app.get("/", operation_id="root")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Welcome to codepilot"}


@app.get("/health", response_model=HealthResponse, operation_id="health")
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", message="Service is running")
