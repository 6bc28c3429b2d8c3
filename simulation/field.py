"""
Particle field: the population, its inputs and its two-state lifecycle.

Inactive fields hold no particles, no listeners and no pending frame.
Activation spawns the population, subscribes to pointer and resize events
and requests the first frame; every frame steps, renders and requests the
next one. Changing the display mode of an active field is a full reset.
"""

import random

from core.errors import FieldError
from internal.logging import get_logger
from simulation.entities import Particle
from simulation.inputs import POINTER_MOVE, RESIZE
from simulation.palette import mode_name, palette_for
from simulation.scene import build_scene
from simulation.state import StateSnapshot
from simulation.world import Surface, World


class FieldState:
    INACTIVE = "inactive"
    ACTIVE = "active"


class ParticleField:
    def __init__(self, config, scheduler, inputs, sink=None, seed=None):
        self.config = config
        self.scheduler = scheduler
        self.inputs = inputs
        self.sink = sink
        self.seed = seed
        self.dark_mode = config.dark_mode
        self.particles = []
        self.pointer = (0.0, 0.0)
        self.world = World.from_viewport(inputs.viewport, config.height_fraction)
        self.surface = Surface()
        self.frame = 0
        self.last_scene = None
        self._state = FieldState.INACTIVE
        self._frame_handle = None
        self._log = get_logger("field")

    @property
    def state(self):
        return self._state

    @property
    def active(self):
        return self._state == FieldState.ACTIVE

    @property
    def palette(self):
        return palette_for(self.dark_mode)

    def activate(self, dark_mode=None):
        if self.active:
            return
        if dark_mode is not None:
            self.dark_mode = bool(dark_mode)

        rng = random.Random(self.seed)
        world = World.from_viewport(self.inputs.viewport, self.config.height_fraction)
        palette = self.palette
        self.particles = [Particle.spawn(i, world, palette, rng) for i in range(self.config.particle_count)]

        self.inputs.add_listener(POINTER_MOVE, self.on_pointer_move)
        self.inputs.add_listener(RESIZE, self.on_resize)
        self._frame_handle = self.scheduler.request(self.tick)
        self._state = FieldState.ACTIVE
        self.on_resize()
        self._log.info("field activated", mode=mode_name(self.dark_mode), particles=len(self.particles))

    def deactivate(self):
        if not self.active:
            return
        # unhook everything first so no callback can touch the dropped population
        self.scheduler.cancel(self._frame_handle)
        self._frame_handle = None
        self.inputs.remove_listener(POINTER_MOVE, self.on_pointer_move)
        self.inputs.remove_listener(RESIZE, self.on_resize)
        self._state = FieldState.INACTIVE
        self.particles = []
        self._log.info("field deactivated", frame=self.frame)

    def set_display_mode(self, dark_mode):
        """Switch palette; an active field is torn down and rebuilt. Returns True on reset."""
        dark_mode = bool(dark_mode)
        if dark_mode == self.dark_mode:
            return False
        if not self.active:
            self.dark_mode = dark_mode
            return False
        self.deactivate()
        self.activate(dark_mode)
        return True

    def reset(self):
        self.deactivate()
        self.activate()

    def on_pointer_move(self, event):
        self.pointer = (event.x, event.y)

    def on_resize(self, event=None):
        viewport = self.inputs.viewport
        self.world = World.from_viewport(viewport, self.config.height_fraction)
        if self.surface is not None:
            self.surface.resize(self.world.width, self.world.height)

    def attach_surface(self):
        if self.surface is None:
            self.surface = Surface(self.world.width, self.world.height)

    def detach_surface(self):
        self.surface = None

    def step(self):
        if not self.active:
            raise FieldError("cannot step an inactive field", state=self._state)
        for particle in self.particles:
            particle.step(self.world, self.pointer, self.config)
        self.frame += 1

    def render(self):
        """Scene for the current frame, or None when there is no surface to paint."""
        if self.surface is None:
            return None
        scene = build_scene(self.frame, self.surface, self.particles, self.config, self.dark_mode)
        self.last_scene = scene
        return scene

    def tick(self, timestamp=None):
        """Frame callback: update, paint, schedule the next frame."""
        self._frame_handle = None
        if not self.active:
            return
        self.step()
        scene = self.render()
        if scene is not None and self.sink is not None:
            self.sink(scene)
        if self.active:
            self._frame_handle = self.scheduler.request(self.tick)

    def ensure_frame(self):
        """Re-request a frame if a failed tick left none pending."""
        if self.active and self._frame_handle is None:
            self._frame_handle = self.scheduler.request(self.tick)

    def max_speed(self):
        return max((particle.speed for particle in self.particles), default=0.0)

    def out_of_bounds(self):
        """Particles outside the region by more than the speed ceiling allows."""
        margin = self.config.max_speed
        return [p for p in self.particles if not self.world.contains(p.x, p.y, margin)]

    def snapshot(self):
        return StateSnapshot(self.frame, self._state, self.dark_mode,
                             (self.world.width, self.world.height), self.pointer,
                             [particle.to_state() for particle in self.particles])

    def stats(self):
        return {
            "state": self._state,
            "mode": mode_name(self.dark_mode),
            "frame": self.frame,
            "particles": len(self.particles),
            "surface": None if self.surface is None else [self.surface.width, self.surface.height],
            "max_speed": round(self.max_speed(), 4),
            "pointer": list(self.pointer),
            "pending_frame": self._frame_handle is not None,
        }
