"""Simulation control routes."""

import time

from fastapi import APIRouter
from pydantic import BaseModel

from simulation.engine import EVENT_TOPIC

router = APIRouter(prefix="/api/v1/control", tags=["control"])

# These will be set by app.py
_engine = None
_bus = None


class DisplayMode(BaseModel):
    dark: bool


def init(engine, bus):
    """Initialize with engine and bus references."""
    global _engine, _bus
    _engine = engine
    _bus = bus


@router.post("/pause")
async def pause():
    """Stop running frames; the population stays as it is."""
    await _engine.pause()
    await _bus.publish({"kind": "paused", "timestamp": time.time()}, topic=EVENT_TOPIC)
    return {"ok": True}


@router.post("/resume")
async def resume():
    await _engine.resume()
    await _bus.publish({"kind": "resumed", "timestamp": time.time()}, topic=EVENT_TOPIC)
    return {"ok": True}


@router.post("/reset")
async def reset():
    """Respawn the population with the current palette."""
    _engine.reset()
    await _bus.publish({"kind": "reset", "timestamp": time.time()}, topic=EVENT_TOPIC)
    return {"ok": True}


@router.post("/display-mode")
async def display_mode(mode: DisplayMode):
    """Switch light/dark palette. An active field is rebuilt from scratch."""
    was_reset = await _engine.set_dark_mode(mode.dark)
    return {"ok": True, "dark": mode.dark, "reset": was_reset}
