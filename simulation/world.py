"""Drawing region bounds and the surface the field paints into."""


class World:
    """Active region: full viewport width, top fraction of its height."""

    __slots__ = ("width", "height")

    def __init__(self, width, height):
        self.width = width
        self.height = height

    @classmethod
    def from_viewport(cls, viewport, height_fraction):
        return cls(viewport.width, viewport.height * height_fraction)

    def contains(self, x, y, margin=0.0):
        """True if (x, y) lies inside the region grown by margin on every side."""
        return -margin <= x <= self.width + margin and -margin <= y <= self.height + margin


class Surface:
    """Rendering surface owned exclusively by one field while attached."""

    __slots__ = ("width", "height")

    def __init__(self, width=0, height=0):
        self.width = width
        self.height = height

    def resize(self, width, height):
        self.width = width
        self.height = height
