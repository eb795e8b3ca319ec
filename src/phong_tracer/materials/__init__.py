"""Materials module: samplers, Phong materials and texture loading.

Components:
    sampler: ConstantSampler and ImageSampler (nearest-texel lookup)
    phong: Material, default_material and plane material policies
    texture_loader: Pillow-based decoding of image files into texel grids

Materials are plain immutable values on the host. The Taichi integrator packs
them into fields when a scene is uploaded (see core.integrator).
"""

from phong_tracer.materials.phong import (
    DEFAULT_CELL_SIZE,
    CheckerboardMaterial,
    Material,
    MaterialFunction,
    UniformMaterial,
    default_material,
)
from phong_tracer.materials.sampler import (
    ConstantSampler,
    ImageSampler,
    Sampler,
    texel_index,
)
from phong_tracer.materials.texture_loader import (
    image_to_texels,
    load_texture,
    load_texture_async,
    load_texture_grid,
)

__all__ = [
    "Sampler",
    "ConstantSampler",
    "ImageSampler",
    "texel_index",
    "Material",
    "MaterialFunction",
    "default_material",
    "UniformMaterial",
    "CheckerboardMaterial",
    "DEFAULT_CELL_SIZE",
    "load_texture",
    "load_texture_grid",
    "load_texture_async",
    "image_to_texels",
]
