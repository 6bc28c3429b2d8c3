"""FastAPI application factory."""

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from communication.bus import DROP_OLDEST, EventBus
from config import load_config
from core.errors import FieldError, InputError
from core.health import (
    HealthChecker,
    check_event_loop,
    create_bus_check,
    create_engine_check,
    create_field_check,
    create_logger_check,
)
from internal.logging import get_logger, LogLevel, StructuredLogger, AsyncFileLogger
from utils.crash import create_async_handler
from simulation.engine import EVENT_TOPIC, SCENE_TOPIC, SimulationEngine
from simulation.scene import Scene
from ui.routes import control, api, health, inputs

STATIC_DIR = Path(__file__).parent / "static"


def create_app(config=None):
    """Create and configure the FastAPI application."""
    config = config or load_config()

    StructuredLogger.configure(min_level=LogLevel[config.logging.level.upper()])
    logger_instance = get_logger("app")

    bus = EventBus(queue_size=100)
    engine = SimulationEngine(bus=bus, config=config.simulation)
    file_logger = AsyncFileLogger(file_path=config.logging.file)
    health_checker = HealthChecker()
    health_checker.register("event_loop", check_event_loop, critical=True)
    health_checker.register("event_bus", create_bus_check(bus), critical=True)
    health_checker.register("simulation_engine", create_engine_check(engine), critical=True)
    health_checker.register("particle_field", create_field_check(engine.field), critical=True)
    health_checker.register("async_logger", create_logger_check(file_logger), critical=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger_instance.info("application starting", version="1.0.0")
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))

        await file_logger.start()
        # scenes arrive at frame rate; only lifecycle events go to the file
        log_sub = await bus.subscribe("logger", max_queue_size=200, topics=[EVENT_TOPIC])

        async def log_worker():
            while True:
                item = await log_sub.queue.get()
                file_logger.try_log("event", item)

        app.state.log_worker = asyncio.create_task(log_worker())

        await engine.start()
        logger_instance.info("application started", particles=config.simulation.particle_count)

        yield

        logger_instance.info("application shutting down")
        await engine.stop()
        app.state.log_worker.cancel()
        try:
            await app.state.log_worker
        except asyncio.CancelledError:
            pass
        await bus.unsubscribe("logger")
        await file_logger.stop()
        logger_instance.info("application shutdown complete")

    app = FastAPI(
        title="Particle Field",
        version="1.0.0",
        description="interactive particle field background",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.bus = bus

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.exception_handler(InputError)
    async def input_error(request: Request, exc: InputError):
        logger_instance.warn("input rejected", error=exc, path=request.url.path)
        return JSONResponse(status_code=422, content=exc.to_dict())

    @app.exception_handler(FieldError)
    async def field_error(request: Request, exc: FieldError):
        logger_instance.warn("field error", error=exc, path=request.url.path)
        return JSONResponse(status_code=409, content=exc.to_dict())

    control.init(engine, bus)
    api.init(engine, bus, file_logger)
    health.init(engine, health_checker)
    inputs.init(engine)

    app.include_router(control.router)
    app.include_router(api.router)
    app.include_router(health.router)
    app.include_router(inputs.router)

    @app.get("/", response_class=HTMLResponse)
    async def index():
        """Serve the renderer page."""
        return (STATIC_DIR / "index.html").read_text(encoding="utf-8")

    @app.get("/events")
    async def events(request: Request):
        """SSE endpoint - streams scenes and lifecycle events to the renderer."""
        subscriber_name = f"viewer-{uuid.uuid4().hex[:8]}"

        async def event_generator():
            # subscribe and attach on first iteration; the finally below undoes both
            sub = await bus.subscribe(subscriber_name, max_queue_size=4,
                                      topics=[SCENE_TOPIC, EVENT_TOPIC], overflow=DROP_OLDEST)
            engine.attach_viewer()
            try:
                snapshot = await engine.get_snapshot()
                yield format_sse("state", snapshot.to_dict())

                while True:
                    if await request.is_disconnected():
                        break

                    try:
                        item = await asyncio.wait_for(sub.queue.get(), timeout=1.0)
                    except asyncio.TimeoutError:
                        yield ": keep-alive\n\n"
                        continue

                    if isinstance(item, Scene):
                        yield format_sse("scene", item.to_dict())
                    else:
                        yield format_sse("event", item)
            finally:
                engine.detach_viewer()
                await bus.unsubscribe(subscriber_name)

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    return app


def format_sse(event, data):
    """Format data as Server-Sent Event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"
