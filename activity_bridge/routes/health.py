# FILE: activity_bridge/routes/health.py
"""
Health check endpoint
"""
import logging
from fastapi import APIRouter

from activity_bridge import __version__
from activity_bridge.config import get_settings
from activity_bridge.services.telemetry import get_telemetry_summary

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check():
    """Service status with telemetry counters"""
    settings = get_settings()
    telemetry = get_telemetry_summary()
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "telemetry_counters": telemetry["counters_in_memory"],
    }
