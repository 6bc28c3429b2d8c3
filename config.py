import json
from pathlib import Path

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"


class SimulationConfig:
    __slots__ = ("frame_interval", "particle_count", "viewport_width", "viewport_height",
                 "height_fraction", "max_speed", "pointer_radius", "pointer_force",
                 "connection_distance", "connection_opacity", "pulse_amplitude",
                 "dark_mode", "seed")

    def __init__(self, frame_interval=1 / 60, particle_count=20, viewport_width=1280, viewport_height=800,
                 height_fraction=0.7, max_speed=2.0, pointer_radius=200.0, pointer_force=0.02,
                 connection_distance=180.0, connection_opacity=0.3, pulse_amplitude=0.1,
                 dark_mode=False, seed=None):
        self.frame_interval = frame_interval
        self.particle_count = particle_count
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.height_fraction = height_fraction
        self.max_speed = max_speed
        self.pointer_radius = pointer_radius
        self.pointer_force = pointer_force
        self.connection_distance = connection_distance
        self.connection_opacity = connection_opacity
        self.pulse_amplitude = pulse_amplitude
        self.dark_mode = dark_mode
        self.seed = seed


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "file", "crash_file")

    def __init__(self, level="INFO", file="logs/field.log", crash_file="logs/crash.log"):
        self.level = level
        self.file = file
        self.crash_file = crash_file


class Config:
    __slots__ = ("simulation", "server", "logging")

    def __init__(self, simulation=None, server=None, logging=None):
        self.simulation = simulation or SimulationConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()

    @classmethod
    def from_dict(cls, d):
        return cls(
            SimulationConfig(**d.get("simulation", {})),
            ServerConfig(**d.get("server", {})),
            LoggingConfig(**d.get("logging", {})),
        )


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        return Config.from_dict(json.load(file))
