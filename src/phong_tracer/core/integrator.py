"""Taichi integrator: Phong shading for every pixel in one parallel kernel.

This module mirrors the host pipeline (camera -> nearest hit -> shadow rays
-> Phong) as Taichi functions so a whole frame can be shaded in parallel on
the CPU or GPU. The scene is packed once into read-only fields:

- Surfaces use a Structure of Arrays layout indexed in scene order, so
  nearest-hit ties and self-shadow exclusion behave as on the host.
- Materials store one sampler per Phong term (ambient, diffuse, specular).
  Image samplers point into a single flat texel atlas.
- Plane material functions must be ``UniformMaterial`` or
  ``CheckerboardMaterial``; anything else raises ``UnsupportedOnDevice``.

A pixel whose computation produces a non-finite color, or hits a degenerate
configuration (a light exactly on the surface, a zero-length primary ray),
is written as the background color and flagged in the failure mask.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phong_tracer.core.integrator import DeviceScene
    >>> device = DeviceScene(scene, 256, 192)
    >>> colors, failed = device.render()
    >>> colors.shape
    (256, 192, 3)
"""


from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from phong_tracer.core.errors import UnsupportedOnDevice
from phong_tracer.geometry.box import PARALLEL_EPSILON, BoundingBox
from phong_tracer.geometry.plane import PLANE_EPSILON, Plane
from phong_tracer.geometry.sphere import Sphere
from phong_tracer.materials.phong import CheckerboardMaterial, Material, UniformMaterial
from phong_tracer.materials.sampler import ConstantSampler, ImageSampler, Sampler
from phong_tracer.scene.scene import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Packing Constants
# =============================================================================

# Surface kinds
SURFACE_SPHERE = 0
SURFACE_PLANE = 1
SURFACE_BOX = 2

# Sampler kinds
SAMPLER_CONSTANT = 0
SAMPLER_IMAGE = 1

# Sampler slots per material, in Phong term order
SLOT_AMBIENT = 0
SLOT_DIFFUSE = 1
SLOT_SPECULAR = 2

# Surface index meaning "no surface"
NO_SURFACE = -1

INFINITY = float("inf")


# =============================================================================
# Host-side Packing
# =============================================================================


@dataclass
class PackedScene:
    """A scene flattened into NumPy arrays ready for upload.

    Arrays are sized for at least one element so that empty scenes can
    still allocate fields; the ``num_*`` counts give the valid lengths.
    """

    num_surfaces: int
    num_lights: int
    num_materials: int
    surface_kind: npt.NDArray[np.int32]
    surface_a: npt.NDArray[np.float32]
    surface_b: npt.NDArray[np.float32]
    surface_radius: npt.NDArray[np.float32]
    surface_material: npt.NDArray[np.int32]
    surface_material_odd: npt.NDArray[np.int32]
    surface_cell: npt.NDArray[np.float32]
    material_sampler: npt.NDArray[np.int32]
    material_color: npt.NDArray[np.float32]
    material_tex_offset: npt.NDArray[np.int32]
    material_tex_width: npt.NDArray[np.int32]
    material_tex_height: npt.NDArray[np.int32]
    material_shininess: npt.NDArray[np.float32]
    texels: npt.NDArray[np.float32]
    light_location: npt.NDArray[np.float32]
    light_diffuse: npt.NDArray[np.float32]
    light_specular: npt.NDArray[np.float32]
    corners: npt.NDArray[np.float32]
    camera_origin: tuple[float, float, float]
    ambient: tuple[float, float, float]
    background: tuple[float, float, float]


@dataclass
class _MaterialTable:
    """Deduplicating builder for the material and texel arrays."""

    materials: list[Material] = field(default_factory=list)
    indices: dict[Material, int] = field(default_factory=dict)
    textures: list[ImageSampler] = field(default_factory=list)
    texture_offsets: dict[int, int] = field(default_factory=dict)
    texel_count: int = 0

    def add(self, material: Material) -> int:
        if material not in self.indices:
            self.indices[material] = len(self.materials)
            self.materials.append(material)
            for sampler in (material.ambient, material.diffuse, material.specular):
                if isinstance(sampler, ImageSampler):
                    self._add_texture(sampler)
                elif not isinstance(sampler, ConstantSampler):
                    raise UnsupportedOnDevice(
                        f"Sampler type {type(sampler).__name__} cannot run on the device"
                    )
        return self.indices[material]

    def _add_texture(self, sampler: ImageSampler) -> None:
        if id(sampler) not in self.texture_offsets:
            self.texture_offsets[id(sampler)] = self.texel_count
            self.textures.append(sampler)
            self.texel_count += sampler.width * sampler.height

    def sampler_row(self, sampler: Sampler) -> tuple[int, tuple[float, float, float], int, int, int]:
        """Return (kind, color, offset, width, height) for one sampler slot."""
        if isinstance(sampler, ImageSampler):
            return (
                SAMPLER_IMAGE,
                (0.0, 0.0, 0.0),
                self.texture_offsets[id(sampler)],
                sampler.width,
                sampler.height,
            )
        return SAMPLER_CONSTANT, sampler.color.to_tuple(), 0, 1, 1


def _plane_materials(plane: Plane, table: _MaterialTable) -> tuple[int, int, float]:
    policy = plane.material
    if isinstance(policy, UniformMaterial):
        index = table.add(policy.material)
        return index, index, 1.0
    if isinstance(policy, CheckerboardMaterial):
        return table.add(policy.even), table.add(policy.odd), policy.cell_size
    raise UnsupportedOnDevice(
        f"Plane material function {policy!r} is not a UniformMaterial or CheckerboardMaterial"
    )


def pack_scene(scene: Scene) -> PackedScene:
    """Flatten a scene into arrays for the Taichi integrator.

    Args:
        scene: A validated scene.

    Returns:
        The packed arrays.

    Raises:
        UnsupportedOnDevice: If the scene holds primitives, samplers or
            plane material functions the kernel cannot evaluate.
    """
    table = _MaterialTable()
    num_surfaces = len(scene.geometry)
    ns = max(1, num_surfaces)

    surface_kind = np.zeros(ns, dtype=np.int32)
    surface_a = np.zeros((ns, 3), dtype=np.float32)
    surface_b = np.zeros((ns, 3), dtype=np.float32)
    surface_radius = np.zeros(ns, dtype=np.float32)
    surface_material = np.zeros(ns, dtype=np.int32)
    surface_material_odd = np.zeros(ns, dtype=np.int32)
    surface_cell = np.ones(ns, dtype=np.float32)

    for k, surface in enumerate(scene.geometry):
        if isinstance(surface, Sphere):
            surface_kind[k] = SURFACE_SPHERE
            surface_a[k] = surface.center.to_tuple()
            surface_radius[k] = surface.radius
            surface_material[k] = surface_material_odd[k] = table.add(surface.material)
        elif isinstance(surface, Plane):
            surface_kind[k] = SURFACE_PLANE
            surface_a[k] = surface.point.to_tuple()
            surface_b[k] = surface.normal.to_tuple()
            even, odd, cell = _plane_materials(surface, table)
            surface_material[k] = even
            surface_material_odd[k] = odd
            surface_cell[k] = cell
        elif isinstance(surface, BoundingBox):
            surface_kind[k] = SURFACE_BOX
            lo = np.minimum(surface.vmin.to_tuple(), surface.vmax.to_tuple())
            hi = np.maximum(surface.vmin.to_tuple(), surface.vmax.to_tuple())
            surface_a[k] = lo
            surface_b[k] = hi
            surface_material[k] = surface_material_odd[k] = table.add(surface.material)
        else:
            raise UnsupportedOnDevice(f"Surface type {type(surface).__name__} cannot run on the device")

    nm = max(1, len(table.materials))
    material_sampler = np.zeros((nm, 3), dtype=np.int32)
    material_color = np.zeros((nm, 3, 3), dtype=np.float32)
    material_tex_offset = np.zeros((nm, 3), dtype=np.int32)
    material_tex_width = np.ones((nm, 3), dtype=np.int32)
    material_tex_height = np.ones((nm, 3), dtype=np.int32)
    material_shininess = np.zeros(nm, dtype=np.float32)

    for m, material in enumerate(table.materials):
        material_shininess[m] = material.shininess
        for slot, sampler in enumerate((material.ambient, material.diffuse, material.specular)):
            kind, color, offset, width, height = table.sampler_row(sampler)
            material_sampler[m, slot] = kind
            material_color[m, slot] = color
            material_tex_offset[m, slot] = offset
            material_tex_width[m, slot] = width
            material_tex_height[m, slot] = height

    if table.textures:
        texels = np.concatenate([t.texels.reshape(-1, 3) for t in table.textures]).astype(np.float32)
    else:
        texels = np.zeros((1, 3), dtype=np.float32)

    num_lights = len(scene.lights)
    nl = max(1, num_lights)
    light_location = np.zeros((nl, 3), dtype=np.float32)
    light_diffuse = np.zeros((nl, 3), dtype=np.float32)
    light_specular = np.zeros((nl, 3), dtype=np.float32)
    for li, light in enumerate(scene.lights):
        light_location[li] = light.location.to_tuple()
        light_diffuse[li] = light.diffuse.to_tuple()
        light_specular[li] = light.specular.to_tuple()

    corners = np.array([c.to_tuple() for c in scene.image_plane.corners()], dtype=np.float32)

    return PackedScene(
        num_surfaces=num_surfaces,
        num_lights=num_lights,
        num_materials=len(table.materials),
        surface_kind=surface_kind,
        surface_a=surface_a,
        surface_b=surface_b,
        surface_radius=surface_radius,
        surface_material=surface_material,
        surface_material_odd=surface_material_odd,
        surface_cell=surface_cell,
        material_sampler=material_sampler,
        material_color=material_color,
        material_tex_offset=material_tex_offset,
        material_tex_width=material_tex_width,
        material_tex_height=material_tex_height,
        material_shininess=material_shininess,
        texels=texels,
        light_location=light_location,
        light_diffuse=light_diffuse,
        light_specular=light_specular,
        corners=corners,
        camera_origin=scene.camera_origin.to_tuple(),
        ambient=scene.ambient.to_tuple(),
        background=scene.background.to_tuple(),
    )


# =============================================================================
# Taichi Helpers
# =============================================================================


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linear interpolation ``a * (1 - t) + b * t``."""
    return a * (1.0 - t) + b * t


@ti.func
def texel_index(coordinate: ti.f32, size: ti.i32) -> ti.i32:
    """Nearest-texel index along one axis with clamping.

    Args:
        coordinate: Texture coordinate, clamped to [0, 1].
        size: Number of texels along the axis.

    Returns:
        An index in [0, size - 1].
    """
    clamped = tm.clamp(coordinate, 0.0, 1.0)
    index = ti.cast(ti.floor(clamped * ti.cast(size - 1, ti.f32) + 0.5), ti.i32)
    return ti.max(0, ti.min(index, size - 1))


# =============================================================================
# Device Scene
# =============================================================================


@ti.data_oriented
class DeviceScene:
    """A scene uploaded to Taichi fields, with a render target.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        num_surfaces: Number of surfaces in the scene.
        num_lights: Number of lights in the scene.
    """

    def __init__(self, scene: Scene, width: int, height: int) -> None:
        """Pack and upload a scene.

        Args:
            scene: A validated scene.
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            UnsupportedOnDevice: If the scene cannot be represented.
        """
        packed = pack_scene(scene)
        self.width = width
        self.height = height
        self.num_surfaces = packed.num_surfaces
        self.num_lights = packed.num_lights

        ns = packed.surface_kind.shape[0]
        self.surface_kind = ti.field(dtype=ti.i32, shape=ns)
        self.surface_a = ti.Vector.field(3, dtype=ti.f32, shape=ns)
        self.surface_b = ti.Vector.field(3, dtype=ti.f32, shape=ns)
        self.surface_radius = ti.field(dtype=ti.f32, shape=ns)
        self.surface_material = ti.field(dtype=ti.i32, shape=ns)
        self.surface_material_odd = ti.field(dtype=ti.i32, shape=ns)
        self.surface_cell = ti.field(dtype=ti.f32, shape=ns)

        nm = packed.material_shininess.shape[0]
        self.material_sampler = ti.field(dtype=ti.i32, shape=(nm, 3))
        self.material_color = ti.Vector.field(3, dtype=ti.f32, shape=(nm, 3))
        self.material_tex_offset = ti.field(dtype=ti.i32, shape=(nm, 3))
        self.material_tex_width = ti.field(dtype=ti.i32, shape=(nm, 3))
        self.material_tex_height = ti.field(dtype=ti.i32, shape=(nm, 3))
        self.material_shininess = ti.field(dtype=ti.f32, shape=nm)

        self.texels = ti.Vector.field(3, dtype=ti.f32, shape=packed.texels.shape[0])

        nl = packed.light_location.shape[0]
        self.light_location = ti.Vector.field(3, dtype=ti.f32, shape=nl)
        self.light_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=nl)
        self.light_specular = ti.Vector.field(3, dtype=ti.f32, shape=nl)

        self.corners = ti.Vector.field(3, dtype=ti.f32, shape=4)
        self.camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.ambient = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.background = ti.Vector.field(3, dtype=ti.f32, shape=())

        # Render target
        self.colors = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self.failed = ti.field(dtype=ti.i32, shape=(width, height))

        self._upload(packed)

    def _upload(self, packed: PackedScene) -> None:
        self.surface_kind.from_numpy(packed.surface_kind)
        self.surface_a.from_numpy(packed.surface_a)
        self.surface_b.from_numpy(packed.surface_b)
        self.surface_radius.from_numpy(packed.surface_radius)
        self.surface_material.from_numpy(packed.surface_material)
        self.surface_material_odd.from_numpy(packed.surface_material_odd)
        self.surface_cell.from_numpy(packed.surface_cell)

        self.material_sampler.from_numpy(packed.material_sampler)
        self.material_color.from_numpy(packed.material_color)
        self.material_tex_offset.from_numpy(packed.material_tex_offset)
        self.material_tex_width.from_numpy(packed.material_tex_width)
        self.material_tex_height.from_numpy(packed.material_tex_height)
        self.material_shininess.from_numpy(packed.material_shininess)

        self.texels.from_numpy(packed.texels)

        self.light_location.from_numpy(packed.light_location)
        self.light_diffuse.from_numpy(packed.light_diffuse)
        self.light_specular.from_numpy(packed.light_specular)

        self.corners.from_numpy(packed.corners)
        self.camera_origin[None] = list(packed.camera_origin)
        self.ambient[None] = list(packed.ambient)
        self.background[None] = list(packed.background)

    # -------------------------------------------------------------------------
    # Intersection
    # -------------------------------------------------------------------------

    @ti.func
    def _hit_sphere(self, k: ti.i32, origin: vec3, direction: vec3) -> ti.f32:
        """Smaller non-negative root of the ray-sphere quadratic, or -1."""
        ray_to_center = origin - self.surface_a[k]
        radius = self.surface_radius[k]
        a = tm.dot(direction, direction)
        b = 2.0 * tm.dot(ray_to_center, direction)
        c = tm.dot(ray_to_center, ray_to_center) - radius * radius
        discriminant = b * b - 4.0 * a * c

        t = -1.0
        if discriminant >= 0.0:
            sqrt_d = ti.sqrt(discriminant)
            t_near = (-b - sqrt_d) / (2.0 * a)
            t_far = (-b + sqrt_d) / (2.0 * a)
            if t_near >= 0.0:
                t = t_near
            elif t_far >= 0.0:
                t = t_far
        return t

    @ti.func
    def _hit_plane(self, k: ti.i32, origin: vec3, direction: vec3):
        """Front-face plane crossing as (t, normal); t is -1 on a miss."""
        normal = self.surface_b[k]
        denom = -tm.dot(normal, direction)

        t = -1.0
        if denom > PLANE_EPSILON:
            crossing = tm.dot(self.surface_a[k] - origin, -normal) / denom
            if crossing >= 0.0:
                t = crossing
        return t, normal

    @ti.func
    def _hit_box(self, k: ti.i32, origin: vec3, direction: vec3):
        """Slab test as (t, face_normal); t is -1 on a miss."""
        vmin = self.surface_a[k]
        vmax = self.surface_b[k]
        t_min = -INFINITY
        t_max = INFINITY
        normal = vec3(0.0, 0.0, 0.0)
        missed = 0
        entered = 0

        for axis in ti.static(range(3)):
            o = origin[axis]
            d = direction[axis]
            if ti.abs(d) < PARALLEL_EPSILON:
                if o < vmin[axis] or o > vmax[axis]:
                    missed = 1
            else:
                t0 = (vmin[axis] - o) / d
                t1 = (vmax[axis] - o) / d
                near = ti.min(t0, t1)
                far = ti.max(t0, t1)
                if near > t_min:
                    t_min = near
                    normal = vec3(0.0, 0.0, 0.0)
                    normal[axis] = ti.select(d > 0.0, -1.0, 1.0)
                    entered = 1
                if far < t_max:
                    t_max = far

        t = -1.0
        if missed == 0 and entered == 1 and t_min <= t_max and t_min >= 0.0:
            t = t_min
        return t, normal

    @ti.func
    def _intersect(self, k: ti.i32, origin: vec3, direction: vec3):
        """Dispatch on surface kind; returns (t, normal), t < 0 on a miss."""
        t = -1.0
        normal = vec3(0.0, 0.0, 0.0)
        kind = self.surface_kind[k]
        if kind == SURFACE_SPHERE:
            t = self._hit_sphere(k, origin, direction)
            if t >= 0.0:
                normal = tm.normalize(origin + t * direction - self.surface_a[k])
        elif kind == SURFACE_PLANE:
            plane_t, plane_normal = self._hit_plane(k, origin, direction)
            t = plane_t
            normal = plane_normal
        else:
            box_t, box_normal = self._hit_box(k, origin, direction)
            t = box_t
            normal = box_normal
        return t, normal

    @ti.func
    def _nearest(self, origin: vec3, direction: vec3, exclude: ti.i32):
        """Closest hit as (surface_index, t, normal); index is NO_SURFACE on a miss."""
        best_k = NO_SURFACE
        best_t = INFINITY
        best_normal = vec3(0.0, 0.0, 0.0)
        for k in range(self.num_surfaces):
            if k != exclude:
                t, normal = self._intersect(k, origin, direction)
                if t >= 0.0 and t < best_t:
                    best_k = k
                    best_t = t
                    best_normal = normal
        return best_k, best_t, best_normal

    @ti.func
    def _occluded(self, point: vec3, light_direction: vec3, light_distance: ti.f32, exclude: ti.i32) -> ti.i32:
        """1 if a surface other than ``exclude`` is closer than the light."""
        blocker, blocker_t, blocker_normal = self._nearest(point, light_direction, exclude)
        return ti.select(blocker_t < light_distance, 1, 0)

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    @ti.func
    def _material_at(self, k: ti.i32, point: vec3, normal: vec3):
        """Material index and texture coordinates as (m, u, v)."""
        kind = self.surface_kind[k]
        m = self.surface_material[k]
        u = 0.0
        v = 0.0
        if kind == SURFACE_SPHERE:
            u = ti.atan2(normal.x, normal.z) / (2.0 * tm.pi) + 0.5
            v = 0.5 * normal.y + 0.5
        elif kind == SURFACE_PLANE:
            cell = self.surface_cell[k]
            cx = ti.cast(ti.floor(point.x / cell), ti.i32)
            cz = ti.cast(ti.floor(point.z / cell), ti.i32)
            if ((cx + cz) & 1) == 1:
                m = self.surface_material_odd[k]
            u = point.x - ti.floor(point.x)
            v = point.z - ti.floor(point.z)
        return m, u, v

    @ti.func
    def _sample(self, m: ti.i32, slot: ti.i32, u: ti.f32, v: ti.f32) -> vec3:
        """Evaluate sampler ``slot`` of material ``m`` at (u, v)."""
        color = self.material_color[m, slot]
        if self.material_sampler[m, slot] == SAMPLER_IMAGE:
            width = self.material_tex_width[m, slot]
            height = self.material_tex_height[m, slot]
            x = texel_index(u, width)
            y = texel_index(v, height)
            color = self.texels[self.material_tex_offset[m, slot] + x * height + y]
        return color

    # -------------------------------------------------------------------------
    # Shading
    # -------------------------------------------------------------------------

    @ti.func
    def _shade(self, origin: vec3, direction: vec3):
        """Phong color for a primary ray as (color, ok)."""
        color = self.background[None]
        ok = 1
        k, t, normal = self._nearest(origin, direction, NO_SURFACE)
        if k != NO_SURFACE:
            point = origin + t * direction
            m, u, v = self._material_at(k, point, normal)
            hit_diffuse = self._sample(m, SLOT_DIFFUSE, u, v)
            hit_specular = self._sample(m, SLOT_SPECULAR, u, v)
            shininess = self.material_shininess[m]

            ambient = self._sample(m, SLOT_AMBIENT, u, v) * self.ambient[None]
            diffuse = vec3(0.0, 0.0, 0.0)
            specular = vec3(0.0, 0.0, 0.0)

            view_vector = point - self.camera_origin[None]
            if tm.length(view_vector) == 0.0:
                ok = 0
            view = tm.normalize(view_vector)

            for li in range(self.num_lights):
                to_light = self.light_location[li] - point
                light_distance = tm.length(to_light)
                if light_distance == 0.0:
                    ok = 0
                else:
                    light_direction = to_light / light_distance
                    alignment = tm.dot(normal, light_direction)
                    if alignment >= 0.0:
                        if self._occluded(point, light_direction, light_distance, k) == 0:
                            diffuse += hit_diffuse * self.light_diffuse[li] * alignment
                            reflection = normal * (2.0 * alignment) - light_direction
                            view_alignment = -tm.dot(view, reflection)
                            if view_alignment >= 0.0:
                                specular += (
                                    hit_specular
                                    * self.light_specular[li]
                                    * ti.pow(view_alignment, shininess)
                                )

            color = ambient + diffuse + specular
        return color, ok

    @ti.kernel
    def _render_kernel(self):
        """Shade every pixel of the render target."""
        for i, j in ti.ndrange(self.width, self.height):
            alpha = ti.cast(i, ti.f32) / self.width
            beta = ti.cast(j, ti.f32) / self.height
            top = lerp(self.corners[0], self.corners[1], alpha)
            bottom = lerp(self.corners[2], self.corners[3], alpha)
            origin = lerp(top, bottom, beta)
            offset = origin - self.camera_origin[None]

            color = self.background[None]
            failed = 0
            length = tm.length(offset)
            if length == 0.0:
                failed = 1
            else:
                shaded, ok = self._shade(origin, offset / length)
                color = shaded
                if ok == 0:
                    failed = 1

            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    failed = 1

            if failed == 1:
                color = self.background[None]
            self.colors[i, j] = color
            self.failed[i, j] = failed

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def render(self) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.bool_]]:
        """Shade the whole frame.

        Returns:
            Tuple of (colors, failed): colors has shape (width, height, 3)
            and holds unclamped linear RGB; failed has shape
            (width, height) and marks pixels replaced by the background.
        """
        self._render_kernel()
        return self.colors.to_numpy(), self.failed.to_numpy().astype(bool)

    def __repr__(self) -> str:
        return (
            f"DeviceScene(width={self.width}, height={self.height}, "
            f"surfaces={self.num_surfaces}, lights={self.num_lights})"
        )
