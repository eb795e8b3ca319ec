"""Texture decoding for image-backed samplers.

Images are decoded once with Pillow into a float32 texel grid of shape
``(width, height, 3)`` indexed ``grid[x, y]``. Image files store their top
row first; the grid's ``y`` axis points up, so ``v = 1`` samples the top of
the picture.

Example:
    >>> from phong_tracer.materials.texture_loader import load_texture
    >>> sampler = load_texture("earth.jpg")
    >>> sampler.evaluate(0.5, 0.5)
"""

from __future__ import annotations

import asyncio
import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from phong_tracer.materials.sampler import ImageSampler

logger = logging.getLogger(__name__)


def image_to_texels(image: PILImage.Image) -> npt.NDArray[np.float32]:
    """Convert a Pillow image to a texel grid.

    Args:
        image: Any Pillow image; it is converted to RGB if necessary.

    Returns:
        Array of shape (width, height, 3) with values in [0, 1].
    """
    if image.mode != "RGB":
        image = image.convert("RGB")
    # (H, W, 3) with row 0 at the top
    rows = np.asarray(image, dtype=np.float32) / 255.0
    # Flip so y points up, then swap to (W, H, 3)
    return np.ascontiguousarray(np.transpose(np.flipud(rows), (1, 0, 2)))


def load_texture_grid(image_path: str | os.PathLike[str]) -> npt.NDArray[np.float32]:
    """Decode an image file into a texel grid.

    Args:
        image_path: Path to the image file.

    Returns:
        Array of shape (width, height, 3) with values in [0, 1].

    Raises:
        FileNotFoundError: If the image file doesn't exist.
        ValueError: If Pillow cannot decode the file.
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Texture file not found: {image_path}")

    try:
        with PILImage.open(image_path) as img:
            texels = image_to_texels(img)
    except OSError as e:
        raise ValueError(f"Error loading texture {image_path}: {e}") from e

    logger.debug("Decoded texture %s (%dx%d)", image_path, texels.shape[0], texels.shape[1])
    return texels


def load_texture(image_path: str | os.PathLike[str]) -> ImageSampler:
    """Decode an image file into an ``ImageSampler``.

    Args:
        image_path: Path to the image file.

    Returns:
        An ImageSampler named after the path.
    """
    return ImageSampler(load_texture_grid(image_path), name=os.fspath(image_path))


async def load_texture_async(image_path: str | os.PathLike[str]) -> ImageSampler:
    """Decode a texture in a worker thread.

    Decoding must finish before the scene that uses the sampler is built;
    awaiting this coroutine guarantees that.
    """
    return await asyncio.to_thread(load_texture, image_path)
