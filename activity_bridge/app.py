# FILE: activity_bridge/app.py
"""
FastAPI application entry point for CATA authoring
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from activity_bridge import __version__
from activity_bridge.config import get_settings
from activity_bridge.routes import cata, health
from activity_bridge.services.telemetry import init_telemetry

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    logger.info(f"Starting activity bridge authoring service v{__version__}")
    init_telemetry()

    yield

    logger.info("Shutting down activity bridge authoring service")


app = FastAPI(
    title="Activity Bridge Authoring API",
    description="Authoring operations and grading for check-all-that-apply activities",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(cata.router, prefix="/cata", tags=["cata"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Activity Bridge Authoring",
        "version": __version__,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "activity_bridge.app:app",
        host=settings.service_host,
        port=settings.service_port,
        reload=settings.environment == "development"
    )
