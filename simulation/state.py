from utils.ksuid import generate_ksuid
from utils.timestamp import format_timestamp


class ParticleState:
    __slots__ = ("id", "x", "y", "vx", "vy", "kind", "size", "color", "rotation", "pulse_phase")

    def __init__(self, id, x, y, vx, vy, kind, size, color, rotation=0.0, pulse_phase=0.0):
        self.id, self.x, self.y, self.vx, self.vy = id, x, y, vx, vy
        self.kind, self.size, self.color = kind, size, color
        self.rotation, self.pulse_phase = rotation, pulse_phase

    def to_dict(self):
        return {"id": self.id, "x": self.x, "y": self.y, "vx": self.vx, "vy": self.vy,
                "kind": self.kind, "size": self.size, "color": self.color,
                "rotation": self.rotation, "pulse_phase": self.pulse_phase}


class StateSnapshot:
    __slots__ = ("id", "timestamp", "tick", "state", "dark_mode", "region", "pointer", "particles")

    def __init__(self, tick, state, dark_mode, region, pointer, particles, id=None, timestamp=None):
        self.id = id or generate_ksuid()
        self.timestamp = timestamp or format_timestamp()
        self.tick = tick
        self.state = state
        self.dark_mode = dark_mode
        self.region = region
        self.pointer = pointer
        self.particles = particles

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "tick": self.tick,
            "state": self.state,
            "dark_mode": self.dark_mode,
            "region": {"width": self.region[0], "height": self.region[1]},
            "pointer": {"x": self.pointer[0], "y": self.pointer[1]},
            "particles": [particle.to_dict() for particle in self.particles],
        }
