"""
Scodia Screening Service
========================
FastAPI application for photo-based postural asymmetry screening.
Not a medical diagnosis tool.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from scodia.config import get_settings
from scodia.routers import screening_router
from scodia.routers.screening import shutdown_detector

# Configure logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("scodia")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    The pose detector is created lazily on the first request and released here.
    """
    logger.info("Starting Scodia screening service...")
    logger.info(f"Language: {settings.LANGUAGE}")
    logger.info(f"Scoring weights: {settings.weights}")

    yield

    logger.info("Shutting down Scodia screening service...")
    shutdown_detector()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Scodia Screening API",
    description="Posture asymmetry screening from side and back photos",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(screening_router, prefix="/screening", tags=["screening"])


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
