"""Preview module for rendered output.

Components:
    export: PNG export and frame comparison utilities

Example:
    >>> from phong_tracer.preview import save_png
    >>> from phong_tracer.core.render import render_scene
    >>>
    >>> frame, report = render_scene(scene)
    >>> save_png(frame, "output.png")
"""

from phong_tracer.preview.export import (
    frame_rmse,
    frame_to_image,
    load_png,
    save_png,
)

__all__ = [
    "save_png",
    "load_png",
    "frame_to_image",
    "frame_rmse",
]
