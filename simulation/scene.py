"""
Per-tick scene description.

A scene is the full list of draw commands for one frame: a clear, the
connection lines, then one shape per particle. Hosts repaint from scratch
with every scene; nothing is diffed against the previous frame.

The connection pass visits every unordered pair, O(N^2) per frame. That is
fine for a few dozen particles and becomes the bottleneck well before the
update step does.
"""

import math

from simulation.entities import CIRCLE, SQUARE, TRIANGLE
from simulation.palette import background_for

FILL_OPACITY = 0.15
STROKE_OPACITY = 0.4
SHAPE_STROKE_WIDTH = 1.5
CONNECTION_STROKE_WIDTH = 1.0


def connection_opacity(distance, threshold=180.0, cap=0.3):
    """Linear fade from cap at distance 0 down to 0 at the threshold."""
    if distance >= threshold:
        return 0.0
    return (1 - distance / threshold) * cap


class ClearCommand:
    __slots__ = ("width", "height", "background")
    op = "clear"

    def __init__(self, width, height, background):
        self.width = width
        self.height = height
        self.background = background

    def to_dict(self):
        return {"op": self.op, "width": self.width, "height": self.height, "background": self.background}


class ConnectionCommand:
    __slots__ = ("source", "target", "x1", "y1", "x2", "y2", "color_from", "color_to", "opacity")
    op = "connection"
    stroke_width = CONNECTION_STROKE_WIDTH

    def __init__(self, source, target, x1, y1, x2, y2, color_from, color_to, opacity):
        self.source, self.target = source, target
        self.x1, self.y1, self.x2, self.y2 = x1, y1, x2, y2
        self.color_from = color_from
        self.color_to = color_to
        self.opacity = opacity

    def to_dict(self):
        return {"op": self.op, "source": self.source, "target": self.target,
                "x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2,
                "gradient": [self.color_from, self.color_to],
                "opacity": self.opacity, "stroke_width": self.stroke_width}


class ShapeCommand:
    __slots__ = ("id", "kind", "x", "y", "size", "rotation", "color")
    op = "shape"
    fill_opacity = FILL_OPACITY
    stroke_opacity = STROKE_OPACITY
    stroke_width = SHAPE_STROKE_WIDTH

    def __init__(self, id, kind, x, y, size, rotation, color):
        self.id = id
        self.kind = kind
        self.x = x
        self.y = y
        self.size = size
        self.rotation = rotation
        self.color = color

    @property
    def radius(self):
        return self.size / 2

    def points(self):
        """Unrotated vertices; empty for circles. Rotation is applied about (x, y)."""
        half = self.size / 2
        if self.kind == TRIANGLE:
            return [(self.x, self.y - half), (self.x + half, self.y + half), (self.x - half, self.y + half)]
        if self.kind == SQUARE:
            return [(self.x - half, self.y - half), (self.x + half, self.y - half),
                    (self.x + half, self.y + half), (self.x - half, self.y + half)]
        return []

    def to_dict(self):
        d = {"op": self.op, "id": self.id, "kind": self.kind, "x": self.x, "y": self.y,
             "size": self.size, "color": self.color,
             "fill_opacity": self.fill_opacity, "stroke_opacity": self.stroke_opacity,
             "stroke_width": self.stroke_width}
        if self.kind == CIRCLE:
            d["r"] = self.radius
        else:
            d["rotation"] = self.rotation
            d["points"] = [list(point) for point in self.points()]
        return d


class Scene:
    __slots__ = ("frame", "width", "height", "dark_mode", "commands")

    def __init__(self, frame, width, height, dark_mode, commands):
        self.frame = frame
        self.width = width
        self.height = height
        self.dark_mode = dark_mode
        self.commands = tuple(commands)

    @property
    def connections(self):
        return [command for command in self.commands if command.op == ConnectionCommand.op]

    @property
    def shapes(self):
        return [command for command in self.commands if command.op == ShapeCommand.op]

    def to_dict(self):
        return {
            "frame": self.frame,
            "width": self.width,
            "height": self.height,
            "dark_mode": self.dark_mode,
            "commands": [command.to_dict() for command in self.commands],
        }


def build_scene(frame, surface, particles, config, dark_mode):
    commands = [ClearCommand(surface.width, surface.height, background_for(dark_mode))]

    threshold = config.connection_distance
    for i, first in enumerate(particles):
        for second in particles[i + 1:]:
            distance = math.hypot(second.x - first.x, second.y - first.y)
            if distance < threshold:
                commands.append(ConnectionCommand(
                    first.id, second.id, first.x, first.y, second.x, second.y,
                    first.color, second.color,
                    connection_opacity(distance, threshold, config.connection_opacity)))

    for particle in particles:
        commands.append(ShapeCommand(
            particle.id, particle.kind, particle.x, particle.y,
            particle.size * particle.pulse_scale(config.pulse_amplitude),
            particle.rotation, particle.color))

    return Scene(frame, surface.width, surface.height, dark_mode, commands)
