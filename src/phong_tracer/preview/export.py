"""Image export utilities for rendered frames.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from phong_tracer.core.render import render_scene
    >>> from phong_tracer.preview.export import save_png
    >>>
    >>> frame, report = render_scene(scene, 256, 192)
    >>> save_png(frame, "output.png")
    >>> frame_rmse(frame, load_png("reference.png"))
    0.0
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from phong_tracer.core.render import FrameBuffer

logger = logging.getLogger(__name__)


def frame_to_image(frame: FrameBuffer) -> PILImage.Image:
    """Wrap a frame buffer's pixels in a Pillow RGB image.

    Args:
        frame: The frame buffer. Row 0 of ``frame.pixels`` is the top row.

    Returns:
        A Pillow image of size (frame.width, frame.height).
    """
    return PILImage.fromarray(np.ascontiguousarray(frame.pixels, dtype=np.uint8))


def save_png(frame: FrameBuffer, filepath: str | os.PathLike[str]) -> None:
    """Save a frame buffer as a PNG file.

    Args:
        frame: The frame buffer to save.
        filepath: Output file path (should end in .png).

    Example:
        >>> frame = FrameBuffer(256, 192)
        >>> RenderDriver(scene).render(frame)
        >>> save_png(frame, "output.png")
    """
    frame_to_image(frame).save(filepath, format="PNG")
    logger.info("Saved %dx%d image to %s", frame.width, frame.height, filepath)


def load_png(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read an image file as a uint8 array of shape (height, width, 3)."""
    with PILImage.open(filepath) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8)


def frame_rmse(
    frame: FrameBuffer | npt.NDArray[np.uint8],
    reference: FrameBuffer | npt.NDArray[np.uint8],
) -> float:
    """Root mean squared difference between two 8-bit frames, in levels.

    Either argument may be a FrameBuffer or an (H, W, 3) array such as the
    one returned by ``load_png``.

    Raises:
        ValueError: If the frames differ in size.
    """
    a = frame.pixels if hasattr(frame, "pixels") else np.asarray(frame)
    b = reference.pixels if hasattr(reference, "pixels") else np.asarray(reference)
    if a.shape != b.shape:
        raise ValueError(f"Frame sizes differ: {a.shape} vs {b.shape}")
    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.mean(np.square(diff))))
