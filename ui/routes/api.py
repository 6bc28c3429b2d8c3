"""API routes for stats, subscribers and the latest scene."""

from fastapi import APIRouter, Response

from utils.timestamp import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["api"])

# These will be set by app.py
_engine = None
_bus = None
_file_logger = None


def init(engine, bus, file_logger):
    """Initialize with engine, bus, and logger references."""
    global _engine, _bus, _file_logger
    _engine = engine
    _bus = bus
    _file_logger = file_logger


@router.get("/stats")
async def stats():
    """Engine, field, bus and file logger statistics."""
    return {
        "timestamp": format_timestamp(),
        "simulation": _engine.get_stats(),
        "bus": _bus.get_stats(),
        "logger": _file_logger.get_stats(),
    }


@router.get("/subscribers")
async def subscribers():
    return await _bus.get_subscriber_info()


@router.get("/scene")
async def scene():
    """Most recently painted scene; 204 while no viewer is attached."""
    latest = _engine.latest_scene
    if latest is None:
        return Response(status_code=204)
    return latest.to_dict()


@router.get("/snapshot")
async def snapshot():
    return (await _engine.get_snapshot()).to_dict()
