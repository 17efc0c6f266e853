"""
Exception types raised by the rendering pipeline.
"""


class RenderError(Exception):
    """Base class for all renderer failures."""


class DegenerateGeometryError(RenderError, ValueError):
    """A ray, camera basis or orbit cannot be built from the given vectors."""


class TilePartitionError(RenderError, ValueError):
    """Tiles do not cover the image exactly once."""


class SceneError(RenderError, ValueError):
    """The scene definition violates an invariant (duplicate cells, bad material ids)."""


class ConfigurationError(RenderError, ValueError):
    """A run parameter (size, worker count, depth, fps) is out of range."""
