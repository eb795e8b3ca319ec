"""Error kinds raised by the renderer.

``DegenerateGeometry`` and ``InvalidSampler`` are also ``ValueError``
subclasses so callers that only care about bad input can catch that.
"""


class RenderError(Exception):
    """Base class for all renderer errors."""


class DegenerateGeometry(RenderError, ValueError):
    """Geometry that cannot be evaluated (zero-length vectors, bad radii, ...)."""


class InvalidSampler(RenderError, ValueError):
    """A sampler built from a malformed texel grid."""


class SceneValidationError(RenderError, ValueError):
    """A scene or raster description rejected before rendering starts."""


class UnsupportedOnDevice(RenderError):
    """Scene content that the Taichi backend cannot represent."""
