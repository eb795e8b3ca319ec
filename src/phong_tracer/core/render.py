"""Render driver: turns a scene into discrete pixels.

The driver walks the raster in row-major order (top row first, left to
right), shades each pixel and hands the 8-bit color to a pixel sink exactly
once, then signals frame completion.

Two backends compute the pixel colors:

- ``"python"``: the host path (camera -> nearest hit -> Phong) one pixel at
  a time.
- ``"taichi"``: the Taichi integrator shades every pixel in one parallel
  kernel; the driver then emits the results in the same raster order.
  Scenes the kernel cannot represent fall back to the host path.

A failure while shading one pixel never aborts the frame, whatever the
exception (including ones raised by user-supplied material functions or
surfaces): the pixel gets the background color and a ``PixelDiagnostic`` is
recorded and logged. Scene-level problems are raised by ``validate_scene``
before the first pixel.

Example:
    >>> from phong_tracer.core.render import FrameBuffer, RenderDriver, RenderSettings
    >>> driver = RenderDriver(scene, RenderSettings(width=256, height=192))
    >>> frame = FrameBuffer(256, 192)
    >>> report = driver.render(frame)
    >>> report.failed_pixels
    0
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Literal, Protocol

import numpy as np
import numpy.typing as npt

from phong_tracer.camera.image_plane import CameraRayGenerator
from phong_tracer.core.errors import RenderError, SceneValidationError, UnsupportedOnDevice
from phong_tracer.core.shading import shade
from phong_tracer.core.vector import Color, DiscreteColor
from phong_tracer.scene.scene import Scene, validate_scene

logger = logging.getLogger(__name__)

# Raster size used when none is given
DEFAULT_WIDTH = 256
DEFAULT_HEIGHT = 192

Backend = Literal["python", "taichi"]

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class PixelSink(Protocol):
    """Destination for rendered pixels."""

    def put_pixel(self, x: int, y: int, color: DiscreteColor) -> None: ...

    def frame_complete(self) -> None: ...


class FrameBuffer:
    """A pixel sink backed by a NumPy array.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: uint8 array of shape (height, width, 3), row 0 at the top.
        complete: Whether ``frame_complete`` has been called.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.pixels: npt.NDArray[np.uint8] = np.zeros((height, width, 3), dtype=np.uint8)
        self.complete = False

    def put_pixel(self, x: int, y: int, color: DiscreteColor) -> None:
        self.pixels[y, x] = color

    def frame_complete(self) -> None:
        self.complete = True

    def __repr__(self) -> str:
        return f"FrameBuffer(width={self.width}, height={self.height}, complete={self.complete})"


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for one render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        backend: ``"python"`` for the host path or ``"taichi"`` for the
            parallel kernel.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    backend: Backend = "python"

    def __post_init__(self) -> None:
        if self.backend not in ("python", "taichi"):
            raise SceneValidationError(f"Unknown backend: {self.backend}")


@dataclass(frozen=True)
class PixelDiagnostic:
    """Why a pixel was replaced by the background color."""

    x: int
    y: int
    reason: str


@dataclass
class RenderReport:
    """Summary of a finished render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        backend: The backend that actually shaded the pixels.
        diagnostics: One entry per pixel that failed to shade.
        elapsed: Wall-clock seconds spent in the pass.
    """

    width: int
    height: int
    backend: Backend
    diagnostics: list[PixelDiagnostic] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def failed_pixels(self) -> int:
        """Number of pixels that fell back to the background color."""
        return len(self.diagnostics)


class RenderDriver:
    """Renders a scene into a pixel sink.

    The scene is validated once, when a render pass starts.

    Attributes:
        scene: The scene to render.
        settings: Raster size and backend.
        last_report: Report of the most recent completed pass, if any.
    """

    def __init__(self, scene: Scene, settings: RenderSettings | None = None) -> None:
        self.scene = scene
        self.settings = settings or RenderSettings()
        self.last_report: RenderReport | None = None

    @property
    def width(self) -> int:
        """Raster width in pixels."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Raster height in pixels."""
        return self.settings.height

    def shade_pixel(self, camera: CameraRayGenerator, x: int, y: int) -> Color:
        """Shade one pixel on the host path."""
        return shade(self.scene, camera.primary_ray(x, y))

    def _pixel_source(self) -> tuple[Backend, Callable[[int, int], Color]]:
        """Pick the backend and return a function (x, y) -> Color."""
        camera = CameraRayGenerator.for_scene(self.scene, self.width, self.height)

        def host_pixel(x: int, y: int) -> Color:
            return self.shade_pixel(camera, x, y)

        if self.settings.backend == "python":
            return "python", host_pixel

        from phong_tracer.core.integrator import DeviceScene

        try:
            device = DeviceScene(self.scene, self.width, self.height)
        except UnsupportedOnDevice as e:
            logger.warning("Falling back to the python backend: %s", e)
            return "python", host_pixel

        colors, failed = device.render()

        def device_pixel(x: int, y: int) -> Color:
            if failed[x, y]:
                raise RenderError("non-finite color from the taichi kernel")
            r, g, b = colors[x, y]
            return Color(float(r), float(g), float(b))

        return "taichi", device_pixel

    def render_rows(self, sink: PixelSink) -> Generator[tuple[int, int], None, RenderReport]:
        """Render the frame, yielding progress after each row.

        Args:
            sink: Receives every pixel exactly once, then ``frame_complete``.

        Yields:
            Tuple of (rows_done, total_rows).

        Returns:
            The RenderReport, also stored in ``last_report``.

        Raises:
            SceneValidationError: If the scene or raster size is invalid.
            DegenerateGeometry: If the scene contains degenerate geometry.
        """
        validate_scene(self.scene, self.width, self.height)
        start_time = time.perf_counter()

        backend, pixel_color = self._pixel_source()
        report = RenderReport(self.width, self.height, backend)
        background = self.scene.background.to_discrete()

        for y in range(self.height):
            for x in range(self.width):
                try:
                    color = pixel_color(x, y)
                    if not color.is_finite():
                        raise RenderError(f"non-finite color {color.to_tuple()}")
                    discrete = color.to_discrete()
                except Exception as e:
                    report.diagnostics.append(PixelDiagnostic(x, y, f"{type(e).__name__}: {e}"))
                    logger.warning("Pixel (%d, %d) failed, using background: %s", x, y, e)
                    discrete = background
                sink.put_pixel(x, y, discrete)
            yield (y + 1, self.height)

        sink.frame_complete()
        report.elapsed = time.perf_counter() - start_time
        self.last_report = report
        logger.debug(
            "Rendered %dx%d with %s backend in %.3fs (%d failed pixels)",
            self.width,
            self.height,
            backend,
            report.elapsed,
            report.failed_pixels,
        )
        return report

    def render(self, sink: PixelSink, callback: ProgressCallback | None = None) -> RenderReport:
        """Render the frame into ``sink``.

        Args:
            sink: Receives every pixel exactly once, then ``frame_complete``.
            callback: Optional function called after each row with
                (rows_done, total_rows).

        Returns:
            The RenderReport for this pass.
        """
        rows = self.render_rows(sink)
        while True:
            try:
                rows_done, total = next(rows)
            except StopIteration as stop:
                return stop.value
            if callback is not None:
                callback(rows_done, total)

    def __repr__(self) -> str:
        return (
            f"RenderDriver(width={self.width}, height={self.height}, "
            f"backend={self.settings.backend!r}, surfaces={len(self.scene.geometry)})"
        )


def render_scene(
    scene: Scene,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    backend: Backend = "python",
) -> tuple[FrameBuffer, RenderReport]:
    """Render a scene into a new FrameBuffer.

    Args:
        scene: The scene to render.
        width: Image width in pixels.
        height: Image height in pixels.
        backend: ``"python"`` or ``"taichi"``.

    Returns:
        Tuple of (frame_buffer, report).
    """
    frame = FrameBuffer(width, height)
    report = RenderDriver(scene, RenderSettings(width, height, backend)).render(frame)
    return frame, report
