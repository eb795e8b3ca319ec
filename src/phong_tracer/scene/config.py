"""Scene serialization to and from plain dictionaries / JSON.

The dictionary layout is::

    {
        "image_plane": {"corner00": [x, y, z], "corner10": ..., "corner01": ..., "corner11": ...},
        "camera_origin": [x, y, z],
        "ambient": [r, g, b],
        "background": [r, g, b],                  # optional, black by default
        "lights": [{"location": [...], "diffuse": [...], "specular": [...]}],
        "geometry": [                             # order is significant
            {"type": "sphere", "center": [...], "radius": 20.0, "material": MATERIAL},
            {"type": "plane", "point": [...], "normal": [...], "material": PLANE_MATERIAL},
            {"type": "box", "vmin": [...], "vmax": [...], "material": MATERIAL},
        ],
    }

``MATERIAL`` is either ``{"default": [r, g, b]}`` (see ``default_material``)
or ``{"ambient": S, "diffuse": S, "specular": S, "shininess": n}`` where each
sampler ``S`` is a color list or ``{"texture": "path/to/image.png"}``.

``PLANE_MATERIAL`` is ``{"type": "checkerboard", "even": MATERIAL,
"odd": MATERIAL, "cell_size": 10.0}`` (all keys but ``type`` optional) or
``{"type": "uniform", "material": MATERIAL}``.

Example:
    >>> from phong_tracer.scene.config import load_scene, save_scene
    >>> scene = load_scene("scenes/demo.json")
    >>> save_scene(scene, "copy.json")
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

from phong_tracer.core.vector import Color, Vector3
from phong_tracer.geometry.box import BoundingBox
from phong_tracer.geometry.plane import Plane
from phong_tracer.geometry.sphere import Sphere
from phong_tracer.materials.phong import (
    DEFAULT_CELL_SIZE,
    CheckerboardMaterial,
    Material,
    MaterialFunction,
    UniformMaterial,
    default_material,
)
from phong_tracer.materials.sampler import ConstantSampler, ImageSampler, Sampler
from phong_tracer.materials.texture_loader import load_texture
from phong_tracer.scene.scene import ImagePlane, PointLight, Scene

TextureLoader = Callable[[str], ImageSampler]

_CORNER_NAMES = ("corner00", "corner10", "corner01", "corner11")


# =============================================================================
# Export
# =============================================================================


def _sampler_to_config(sampler: Sampler) -> Any:
    if isinstance(sampler, ConstantSampler):
        return list(sampler.color.to_tuple())
    if isinstance(sampler, ImageSampler):
        if sampler.name is None:
            raise ValueError("Cannot serialize an ImageSampler without a name")
        return {"texture": sampler.name}
    raise ValueError(f"Cannot serialize sampler type {type(sampler).__name__}")


def material_to_config(material: Material) -> dict[str, Any]:
    """Export a material to a dictionary."""
    return {
        "ambient": _sampler_to_config(material.ambient),
        "diffuse": _sampler_to_config(material.diffuse),
        "specular": _sampler_to_config(material.specular),
        "shininess": material.shininess,
    }


def _plane_material_to_config(policy: MaterialFunction) -> dict[str, Any]:
    if isinstance(policy, CheckerboardMaterial):
        return {
            "type": "checkerboard",
            "even": material_to_config(policy.even),
            "odd": material_to_config(policy.odd),
            "cell_size": policy.cell_size,
        }
    if isinstance(policy, UniformMaterial):
        return {"type": "uniform", "material": material_to_config(policy.material)}
    raise ValueError(f"Cannot serialize plane material function {policy!r}")


def scene_to_dict(scene: Scene) -> dict[str, Any]:
    """Export a scene to a dictionary (for JSON serialization).

    Args:
        scene: The scene to export.

    Returns:
        A dictionary in the layout described in the module docstring.

    Raises:
        ValueError: If the scene holds values with no dictionary form
            (arbitrary plane material functions, unnamed textures,
            triangles).
    """
    geometry: list[dict[str, Any]] = []
    for surface in scene.geometry:
        if isinstance(surface, Sphere):
            geometry.append(
                {
                    "type": "sphere",
                    "center": list(surface.center.to_tuple()),
                    "radius": surface.radius,
                    "material": material_to_config(surface.material),
                }
            )
        elif isinstance(surface, Plane):
            geometry.append(
                {
                    "type": "plane",
                    "point": list(surface.point.to_tuple()),
                    "normal": list(surface.normal.to_tuple()),
                    "material": _plane_material_to_config(surface.material),
                }
            )
        elif isinstance(surface, BoundingBox):
            geometry.append(
                {
                    "type": "box",
                    "vmin": list(surface.vmin.to_tuple()),
                    "vmax": list(surface.vmax.to_tuple()),
                    "material": material_to_config(surface.material),
                }
            )
        else:
            raise ValueError(f"Cannot serialize surface type {type(surface).__name__}")

    return {
        "image_plane": {
            name: list(corner.to_tuple())
            for name, corner in zip(_CORNER_NAMES, scene.image_plane.corners())
        },
        "camera_origin": list(scene.camera_origin.to_tuple()),
        "ambient": list(scene.ambient.to_tuple()),
        "background": list(scene.background.to_tuple()),
        "lights": [
            {
                "location": list(light.location.to_tuple()),
                "diffuse": list(light.diffuse.to_tuple()),
                "specular": list(light.specular.to_tuple()),
            }
            for light in scene.lights
        ],
        "geometry": geometry,
    }


# =============================================================================
# Import
# =============================================================================


class _SceneReader:
    """Builds scene values from config dictionaries, caching textures by path."""

    def __init__(self, base_dir: str | os.PathLike[str] | None, texture_loader: TextureLoader) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.texture_loader = texture_loader
        self.textures: dict[str, ImageSampler] = {}

    def sampler(self, data: Any) -> Sampler:
        if isinstance(data, dict):
            if "texture" not in data:
                raise ValueError(f"Unknown sampler config: {data!r}")
            path = str(data["texture"])
            if path not in self.textures:
                resolved = path
                if self.base_dir is not None and not os.path.isabs(path):
                    resolved = str(self.base_dir / path)
                # Name stays relative to the scene file
                self.textures[path] = replace(self.texture_loader(resolved), name=path)
            return self.textures[path]
        return ConstantSampler(Color.of(data))

    def material(self, data: dict[str, Any]) -> Material:
        if "default" in data:
            return default_material(self.sampler(data["default"]))
        return Material(
            ambient=self.sampler(data.get("ambient", [0.0, 0.0, 0.0])),
            diffuse=self.sampler(data.get("diffuse", [0.0, 0.0, 0.0])),
            specular=self.sampler(data.get("specular", [0.0, 0.0, 0.0])),
            shininess=float(data.get("shininess", 1.0)),
        )

    def plane_material(self, data: dict[str, Any] | None) -> MaterialFunction:
        if data is None:
            return CheckerboardMaterial()
        policy_type = data.get("type", "").lower()
        if policy_type == "checkerboard":
            defaults = CheckerboardMaterial()
            return CheckerboardMaterial(
                even=self.material(data["even"]) if "even" in data else defaults.even,
                odd=self.material(data["odd"]) if "odd" in data else defaults.odd,
                cell_size=float(data.get("cell_size", DEFAULT_CELL_SIZE)),
            )
        if policy_type == "uniform":
            return UniformMaterial(self.material(data["material"]))
        raise ValueError(f"Unknown plane material type: {policy_type}")

    def surface(self, data: dict[str, Any]):
        surface_type = data.get("type", "").lower()
        if surface_type == "sphere":
            return Sphere(
                center=Vector3.of(data["center"]),
                radius=float(data["radius"]),
                material=self.material(data["material"]),
            )
        if surface_type == "plane":
            return Plane(
                point=Vector3.of(data["point"]),
                normal=Vector3.of(data["normal"]),
                material=self.plane_material(data.get("material")),
            )
        if surface_type == "box":
            return BoundingBox(
                vmin=Vector3.of(data["vmin"]),
                vmax=Vector3.of(data["vmax"]),
                material=self.material(data["material"]),
            )
        raise ValueError(f"Unknown surface type: {surface_type}")


def scene_from_dict(
    data: dict[str, Any],
    *,
    base_dir: str | os.PathLike[str] | None = None,
    texture_loader: TextureLoader = load_texture,
) -> Scene:
    """Build a scene from a dictionary.

    Args:
        data: Dictionary in the layout described in the module docstring.
        base_dir: Directory that relative texture paths are resolved against.
        texture_loader: Function decoding a texture path into an
            ImageSampler. Each distinct path is loaded once.

    Returns:
        The scene.

    Raises:
        ValueError: For unknown surface, sampler or plane material types.
        KeyError: If a required key is missing.
    """
    reader = _SceneReader(base_dir, texture_loader)

    plane_data = data.get("image_plane")
    image_plane = (
        ImagePlane(*(Vector3.of(plane_data[name]) for name in _CORNER_NAMES))
        if plane_data is not None
        else ImagePlane.default()
    )

    lights = [
        PointLight(
            location=Vector3.of(light["location"]),
            diffuse=Color.of(light.get("diffuse", [1.0, 1.0, 1.0])),
            specular=Color.of(light.get("specular", [1.0, 1.0, 1.0])),
        )
        for light in data.get("lights", [])
    ]

    return Scene(
        image_plane=image_plane,
        camera_origin=Vector3.of(data.get("camera_origin", [0.0, 0.0, -1.0])),
        ambient=Color.of(data.get("ambient", [0.0, 0.0, 0.0])),
        lights=lights,
        geometry=[reader.surface(surface) for surface in data.get("geometry", [])],
        background=Color.of(data.get("background", [0.0, 0.0, 0.0])),
    )


def load_scene(
    filepath: str | os.PathLike[str],
    *,
    texture_loader: TextureLoader = load_texture,
) -> Scene:
    """Load a scene from a JSON file.

    Relative texture paths are resolved against the file's directory.
    """
    path = Path(filepath)
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    return scene_from_dict(data, base_dir=path.parent, texture_loader=texture_loader)


def save_scene(scene: Scene, filepath: str | os.PathLike[str]) -> None:
    """Save a scene as a JSON file."""
    with Path(filepath).open("w", encoding="utf-8") as f:
        json.dump(scene_to_dict(scene), f, indent=2)
