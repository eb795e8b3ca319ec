"""Scene module: the scene value and queries against it.

Components:
    scene: ImagePlane, PointLight, Scene and validate_scene
    intersection: nearest_hit and in_shadow over an ordered surface list
    config: scene_to_dict / scene_from_dict and JSON load/save
    demo: build_demo_scene, the checkerboard-and-spheres demo
"""

from .config import load_scene, save_scene, scene_from_dict, scene_to_dict
from .demo import build_demo_scene
from .intersection import hit_distance, in_shadow, nearest_hit
from .scene import ImagePlane, PointLight, Scene, validate_scene

__all__ = [
    # Scene value
    "ImagePlane",
    "PointLight",
    "Scene",
    "validate_scene",
    # Intersection queries
    "nearest_hit",
    "in_shadow",
    "hit_distance",
    # Serialization
    "scene_to_dict",
    "scene_from_dict",
    "load_scene",
    "save_scene",
    # Demo
    "build_demo_scene",
]
