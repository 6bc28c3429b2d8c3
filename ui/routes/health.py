"""Health, readiness and heartbeat routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.health import Status
from utils.timestamp import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["health"])

# Set by app.py
_engine = None
_health_checker = None


def init(engine, health_checker):
    global _engine, _health_checker
    _engine = engine
    _health_checker = health_checker


@router.get("/health")
async def health():
    """Aggregated component checks; 503 when a critical check fails."""
    report = await _health_checker.check()
    return JSONResponse(content=report.to_dict(), status_code=503 if report.status == Status.FAIL else 200)


@router.get("/ready")
async def ready():
    """Ready once the engine is ticking an active field."""
    is_ready = _engine.state != "stopped" and _engine.field.active
    body = {"ready": is_ready, "engine_state": _engine.state, "field_state": _engine.field.state}
    return JSONResponse(content=body, status_code=200 if is_ready else 503)


@router.get("/heartbeat")
async def heartbeat():
    """Cheap liveness probe for frequent polling."""
    snapshot = await _engine.get_snapshot()
    return {
        "status": "ok",
        "timestamp": format_timestamp(),
        "tick": snapshot.tick,
        "field_state": snapshot.state,
        "engine_state": _engine.state,
        "viewers": _engine.viewers,
    }
