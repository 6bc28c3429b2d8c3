import math

from simulation.state import ParticleState

CIRCLE = "circle"
TRIANGLE = "triangle"
SQUARE = "square"
SHAPE_KINDS = (CIRCLE, TRIANGLE, SQUARE)

SIZE_MIN = 15.0
SIZE_SPREAD = 25.0
VELOCITY_SPREAD = 0.8
ROTATION_SPEED_SPREAD = 0.5
PULSE_SPEED_MIN = 0.03
PULSE_SPEED_SPREAD = 0.02


class Particle:
    """A drifting shape that bounces inside the region and reacts to the pointer."""

    def __init__(self, id, x, y, vx, vy, kind=CIRCLE, size=20.0, color="#3ECF8E",
                 rotation=0.0, rotation_speed=0.0, pulse_phase=0.0, pulse_speed=0.0):
        self.id = id
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.kind = kind
        self.size = size
        self.color = color
        self.rotation = rotation
        self.rotation_speed = rotation_speed
        self.pulse_phase = pulse_phase
        self.pulse_speed = pulse_speed

    @classmethod
    def spawn(cls, id, world, palette, rng):
        """Random particle inside world. Draw order is fixed so seeded runs repeat."""
        x = rng.random() * world.width
        y = rng.random() * world.height
        vx = (rng.random() - 0.5) * VELOCITY_SPREAD
        vy = (rng.random() - 0.5) * VELOCITY_SPREAD
        kind = SHAPE_KINDS[int(rng.random() * len(SHAPE_KINDS))]
        size = rng.random() * SIZE_SPREAD + SIZE_MIN
        color = palette[int(rng.random() * len(palette))]
        rotation = rng.random() * 360
        rotation_speed = (rng.random() - 0.5) * ROTATION_SPEED_SPREAD
        pulse_phase = rng.random() * math.pi * 2
        pulse_speed = PULSE_SPEED_MIN + rng.random() * PULSE_SPEED_SPREAD
        return cls(id, x, y, vx, vy, kind, size, color, rotation, rotation_speed, pulse_phase, pulse_speed)

    @property
    def speed(self):
        return math.hypot(self.vx, self.vy)

    def pulse_scale(self, amplitude):
        return 1 + math.sin(self.pulse_phase) * amplitude

    def step(self, world, pointer, config):
        """Advance one tick with constant per-tick increments (no dt scaling)."""
        self.x += self.vx
        self.y += self.vy

        # Flip only; position is never clamped, so one tick of overshoot is possible
        if self.x < 0 or self.x > world.width:
            self.vx = -self.vx
        if self.y < 0 or self.y > world.height:
            self.vy = -self.vy

        self.rotation += self.rotation_speed
        self.pulse_phase += self.pulse_speed

        dx = pointer[0] - self.x
        dy = pointer[1] - self.y
        if math.hypot(dx, dy) < config.pointer_radius:
            angle = math.atan2(dy, dx)
            self.vx += math.cos(angle) * config.pointer_force
            self.vy += math.sin(angle) * config.pointer_force

        speed = self.speed
        if speed > config.max_speed:
            self.vx = self.vx / speed * config.max_speed
            self.vy = self.vy / speed * config.max_speed

    def to_state(self):
        """Immutable copy for snapshots."""
        return ParticleState(self.id, self.x, self.y, self.vx, self.vy, self.kind, self.size,
                             self.color, self.rotation, self.pulse_phase)
