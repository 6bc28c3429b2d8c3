"""Pytest fixtures for all tests."""

import pytest
from httpx import AsyncClient, ASGITransport

from ui.app import create_app
from communication.bus import EventBus
from simulation.engine import SimulationEngine
from simulation.entities import Particle, SQUARE
from simulation.field import ParticleField
from simulation.inputs import InputHub
from simulation.scheduler import FrameScheduler
from simulation.world import World
from config import SimulationConfig



@pytest.fixture
def world():
    """A 100x70 region (100x100 viewport, top 70%)."""
    return World(width=100, height=70)


@pytest.fixture
def particle():
    return Particle(id=1, x=50, y=30, vx=0.5, vy=-0.25, kind=SQUARE, size=20.0, color="#2563EB")


@pytest.fixture
def sim_config():
    return SimulationConfig(
        frame_interval=0.01,
        particle_count=5,
        viewport_width=100,
        viewport_height=100,
    )


@pytest.fixture
def scheduler():
    return FrameScheduler()


@pytest.fixture
def inputs():
    return InputHub(100, 100)


@pytest.fixture
def make_field(scheduler, inputs):
    """Build a field over the shared scheduler and input hub."""
    def factory(particle_count=5, seed=None, sink=None, **overrides):
        config = SimulationConfig(particle_count=particle_count, viewport_width=inputs.viewport.width,
                                  viewport_height=inputs.viewport.height, **overrides)
        return ParticleField(config, scheduler, inputs, sink=sink, seed=seed)
    return factory


@pytest.fixture
async def bus():
    return EventBus(queue_size=10)


@pytest.fixture
async def engine(bus, sim_config):
    eng = SimulationEngine(bus=bus, config=sim_config)
    yield eng
    if eng._task:
        await eng.stop()


@pytest.fixture
async def app():
    return create_app()


@pytest.fixture
async def client(app):
    """Async test client; lifespan does not run, so the engine stays stopped."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
