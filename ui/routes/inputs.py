"""Pointer and viewport input from the renderer page."""

from fastapi import APIRouter
from pydantic import BaseModel

from simulation.world import World

router = APIRouter(prefix="/api/v1/input", tags=["input"])

# Set by app.py
_engine = None


class PointerPosition(BaseModel):
    x: float
    y: float


class ViewportSize(BaseModel):
    width: float
    height: float


def init(engine):
    global _engine
    _engine = engine


@router.post("/pointer", status_code=204)
async def pointer(position: PointerPosition):
    _engine.pointer_move(position.x, position.y)


@router.post("/viewport")
async def viewport(size: ViewportSize):
    """Resize the viewport; InputError (422) for non-positive sizes."""
    _engine.resize(size.width, size.height)
    world = World.from_viewport(_engine.inputs.viewport, _engine.config.height_fraction)
    return {"width": size.width, "height": size.height,
            "region": {"width": world.width, "height": world.height}}
