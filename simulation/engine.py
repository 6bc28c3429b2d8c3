import asyncio
import time
from config import load_config
from internal.logging import get_logger
from simulation.field import ParticleField
from simulation.inputs import InputHub
from simulation.scheduler import FrameScheduler
from utils.timestamp import monotonic_ms

SCENE_TOPIC = "scene"
EVENT_TOPIC = "event"


class EngineState:
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class SimulationEngine:
    """Display refresh loop: drains the frame scheduler every frame_interval and publishes scenes."""

    def __init__(self, bus, config=None, seed=None):
        self.bus = bus
        self.config = config or load_config().simulation
        self._lock = asyncio.Lock()
        self._log = get_logger("engine")
        self.scheduler = FrameScheduler()
        self.inputs = InputHub(self.config.viewport_width, self.config.viewport_height)
        self.field = ParticleField(self.config, self.scheduler, self.inputs, sink=self._on_scene,
                                   seed=self.config.seed if seed is None else seed)
        self.field.detach_surface()
        self.latest_scene = None
        self.viewers = 0
        self.failed_frames = 0
        self._state = EngineState.STOPPED
        self._task = None
        self._stop = asyncio.Event()
        self._last_publish_frame = -1

    @property
    def paused(self):
        return self._state == EngineState.PAUSED

    @property
    def state(self):
        return self._state

    @property
    def tick(self):
        return self.field.frame

    def _on_scene(self, scene):
        self.latest_scene = scene

    def reset(self):
        if self.field.active:
            self.field.reset()
        self._log.info("field reset", tick=self.tick)

    async def start(self):
        if self._task:
            return
        self.field.activate()
        self._stop.clear()
        self._state = EngineState.RUNNING
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None
        self.field.deactivate()
        self._state = EngineState.STOPPED
        await self.bus.publish({"kind": "engine_stopped", "tick": self.tick}, topic=EVENT_TOPIC)

    async def pause(self):
        async with self._lock:
            self._state = EngineState.PAUSED
            self._log.info("engine paused", tick=self.tick)

    async def resume(self):
        async with self._lock:
            self._state = EngineState.RUNNING
            self._log.info("engine resumed", tick=self.tick)

    async def set_dark_mode(self, dark_mode):
        async with self._lock:
            was_reset = self.field.set_display_mode(dark_mode)
        await self.bus.publish({"kind": "display_mode", "dark_mode": self.field.dark_mode,
                                "reset": was_reset, "tick": self.tick}, topic=EVENT_TOPIC)
        return was_reset

    def pointer_move(self, x, y):
        self.inputs.pointer_move(x, y)

    def resize(self, width, height):
        self.inputs.resize(width, height)
        self._log.debug("viewport resized", width=width, height=height)

    def attach_viewer(self):
        self.viewers += 1
        self.field.attach_surface()
        return self.viewers

    def detach_viewer(self):
        self.viewers = max(0, self.viewers - 1)
        if self.viewers == 0:
            self.field.detach_surface()
            self.latest_scene = None
        return self.viewers

    async def get_snapshot(self):
        async with self._lock:
            return self.field.snapshot()

    def get_stats(self):
        return {
            "state": self._state,
            "tick": self.tick,
            "viewers": self.viewers,
            "failed_frames": self.failed_frames,
            "scheduler": {"frames": self.scheduler.frames, "pending": self.scheduler.pending},
            "field": self.field.stats(),
        }

    async def _loop(self):
        frame_interval = self.config.frame_interval
        next_frame_time = time.perf_counter()
        self._log.info("engine start", frame_interval=frame_interval)

        while not self._stop.is_set():
            wait_time = next_frame_time - time.perf_counter()
            if wait_time > 0:
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=wait_time)
                    break
                except asyncio.TimeoutError:
                    pass
            else:
                # behind schedule: drop the missed frames and let other tasks run
                await asyncio.sleep(0)
                if self._stop.is_set():
                    break
                next_frame_time = time.perf_counter()
            next_frame_time += frame_interval

            try:
                async with self._lock:
                    if self._state == EngineState.RUNNING:
                        self.scheduler.run_pending(monotonic_ms())
                    scene = self.latest_scene
            except Exception as exc:
                self.failed_frames += 1
                self._log.error("frame failed", error=exc, tick=self.tick)
                # the failing frame dropped its reschedule; keep the field ticking
                self.field.ensure_frame()
                continue

            if scene is not None and scene.frame != self._last_publish_frame:
                await self.bus.publish(scene, topic=SCENE_TOPIC)
                self._last_publish_frame = scene.frame

        self._log.info("engine stop", tick=self.tick)
