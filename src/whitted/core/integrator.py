"""Recursive Whitted shading and the render driver.

This module turns primary rays into pixel colors. For every ray it finds the
nearest primitive, evaluates Phong shading from every point light (with hard
shadows), and adds weighted mirror reflection and refraction contributions.
Rays that escape the scene, and rays whose recursion budget is spent, take the
environment color.

Taichi functions cannot recurse, so the recursion tree of a single primary ray
is walked with a bounded explicit work-list. Each entry is a ray plus the
scalar product of the reflect/refract albedo weights along its branch and its
remaining depth. Every pushed child has one less depth than its parent, so the
list never holds more than MAX_DEPTH + 1 entries.

The render kernel is parallel over pixels. Pixels are independent and the
scene is read-only while rendering, so the output does not depend on
scheduling.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.default_scene import create_default_scene
    >>> from whitted.camera.pinhole import RenderSettings
    >>> from whitted.core.integrator import render_image
    >>>
    >>> scene = create_default_scene()
    >>> image = render_image(RenderSettings(width=64, height=64))
    >>> image.shape
    (64, 64, 3)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from whitted.camera.pinhole import (
    MAX_DEPTH,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    RenderSettings,
    get_ray,
)
from whitted.core.ray import Ray, dot, make_ray, norm, normalize, ray_at, reflect, refract, vec3
from whitted.materials.phong import (
    MaterialRecord,
    eval_phong_diffuse,
    eval_phong_specular,
    get_material,
)
from whitted.scene.environment import sample_environment
from whitted.scene.intersection import intersect_scene, primitive_normal
from whitted.scene.lights import get_light_intensity, get_light_position, num_lights

rgb8 = ti.types.vector(3, ti.u8)
ivec3 = ti.types.vector(3, ti.i32)

# =============================================================================
# Rendering Constants
# =============================================================================

# Offset along the normal for secondary and shadow ray origins
SHADOW_BIAS = 1e-3

# Work-list capacity: the root plus one pending sibling per depth level
STACK_SIZE = MAX_DEPTH + 1

# =============================================================================
# Render Target
# =============================================================================

# Indexed [x, y] with y = 0 at the top row
_pixel_buffer = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


# =============================================================================
# Shading
# =============================================================================


@ti.func
def _offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a ray origin off the surface on the side the ray travels to.

    Args:
        point: The intersection point.
        normal: The unit surface normal.
        direction: The direction of the new ray.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + SHADOW_BIAS * offset_dir


@ti.func
def shade_direct(ray: Ray, point: vec3, normal: vec3, material: MaterialRecord) -> vec3:
    """Local Phong shading at a hit point.

    Each light contributes only if the shadow ray toward it reaches the light
    before hitting any primitive. Lights sitting exactly on the point are
    skipped.

    Args:
        ray: The incoming ray.
        point: The hit point.
        normal: The unit surface normal at the hit point.
        material: The material of the hit primitive.

    Returns:
        albedo[0] * diffuse_color * sum(diffuse) + albedo[1] * sum(specular).
    """
    diffuse_intensity = 0.0
    specular_intensity = 0.0

    for i in range(num_lights[None]):
        to_light = get_light_position(i) - point
        light_dist = norm(to_light)
        if light_dist > 0.0:
            light_dir = normalize(to_light)
            shadow_origin = _offset_ray_origin(point, normal, light_dir)
            shadow_hit = intersect_scene(make_ray(shadow_origin, light_dir))

            if shadow_hit.hit == 0 or shadow_hit.t > light_dist:
                intensity = get_light_intensity(i)
                diffuse_intensity += intensity * eval_phong_diffuse(light_dir, normal)
                specular_intensity += intensity * eval_phong_specular(
                    light_dir, normal, ray.direction, material.specular_exponent
                )

    diffuse = material.diffuse_color * (diffuse_intensity * material.albedo[0])
    specular = vec3(1.0, 1.0, 1.0) * (specular_intensity * material.albedo[1])
    return diffuse + specular


@ti.func
def cast_ray(ray: Ray, depth: ti.i32) -> vec3:
    """Color seen along a ray, with up to `depth` levels of secondary rays.

    A ray with no remaining depth, or one that hits nothing, takes the
    environment color for its direction. A ray that hits a primitive gets its
    local Phong shading plus albedo[2] times the color of the mirror reflection
    and albedo[3] times the color of the refraction. Branches with zero weight
    are not traced, and refraction contributes nothing under total internal
    reflection.

    Args:
        ray: The ray to trace. Its direction must be unit length.
        depth: Remaining recursion budget, in [0, MAX_DEPTH].

    Returns:
        The (unclamped) RGB color.
    """
    # One vector per component keeps each local array small
    ox = ti.Vector.zero(ti.f64, STACK_SIZE)
    oy = ti.Vector.zero(ti.f64, STACK_SIZE)
    oz = ti.Vector.zero(ti.f64, STACK_SIZE)
    dx = ti.Vector.zero(ti.f64, STACK_SIZE)
    dy = ti.Vector.zero(ti.f64, STACK_SIZE)
    dz = ti.Vector.zero(ti.f64, STACK_SIZE)
    weights = ti.Vector.zero(ti.f64, STACK_SIZE)
    depths = ti.Vector.zero(ti.i32, STACK_SIZE)

    ox[0] = ray.origin.x
    oy[0] = ray.origin.y
    oz[0] = ray.origin.z
    dx[0] = ray.direction.x
    dy[0] = ray.direction.y
    dz[0] = ray.direction.z
    weights[0] = 1.0
    depths[0] = depth
    top = 1

    color = vec3(0.0, 0.0, 0.0)

    while top > 0:
        top -= 1
        current = Ray(
            origin=vec3(ox[top], oy[top], oz[top]),
            direction=vec3(dx[top], dy[top], dz[top]),
        )
        weight = weights[top]
        remaining = depths[top]

        hit_found = 0
        hit_t = 0.0
        primitive_id = -1
        material_id = -1
        if remaining > 0:
            hit_record = intersect_scene(current)
            hit_found = hit_record.hit
            hit_t = hit_record.t
            primitive_id = hit_record.primitive_id
            material_id = hit_record.material_id

        if hit_found == 0:
            color += weight * sample_environment(current.direction)
        else:
            material = get_material(material_id)
            point = ray_at(current, hit_t)
            normal = primitive_normal(primitive_id, point)

            color += weight * shade_direct(current, point, normal, material)

            reflect_weight = weight * material.albedo[2]
            if reflect_weight != 0.0:
                reflect_dir = normalize(reflect(current.direction, normal))
                reflect_origin = _offset_ray_origin(point, normal, reflect_dir)
                ox[top] = reflect_origin.x
                oy[top] = reflect_origin.y
                oz[top] = reflect_origin.z
                dx[top] = reflect_dir.x
                dy[top] = reflect_dir.y
                dz[top] = reflect_dir.z
                weights[top] = reflect_weight
                depths[top] = remaining - 1
                top += 1

            refract_weight = weight * material.albedo[3]
            if refract_weight != 0.0:
                refract_dir = normalize(
                    refract(current.direction, normal, material.refractive_index)
                )
                # Zero direction means total internal reflection
                if norm(refract_dir) > 0.0:
                    refract_origin = _offset_ray_origin(point, normal, refract_dir)
                    ox[top] = refract_origin.x
                    oy[top] = refract_origin.y
                    oz[top] = refract_origin.z
                    dx[top] = refract_dir.x
                    dy[top] = refract_dir.y
                    dz[top] = refract_dir.z
                    weights[top] = refract_weight
                    depths[top] = remaining - 1
                    top += 1

    return color


# =============================================================================
# Tone Mapping
# =============================================================================


@ti.func
def tone_map(color: vec3) -> vec3:
    """Scale a color down so its largest channel is at most 1.

    Colors already within range are returned unchanged. Hue is preserved.
    """
    max_channel = ti.max(color.x, ti.max(color.y, color.z))
    result = color
    if max_channel > 1.0:
        result = color * (1.0 / max_channel)
    return result


@ti.func
def quantize(color: vec3) -> rgb8:
    """Convert a [0, 1] color to 8-bit channels (x 255, clamped, truncated)."""
    scaled = ti.min(ti.max(color * 255.0, 0.0), 255.0)
    return rgb8(ti.cast(scaled.x, ti.u8), ti.cast(scaled.y, ti.u8), ti.cast(scaled.z, ti.u8))


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32, fov_radians: ti.f64, depth: ti.i32):
    """Render every pixel of a width x height image into the pixel buffer."""
    for x, y in ti.ndrange(width, height):
        ray = get_ray(x, y, width, height, fov_radians)
        _pixel_buffer[x, y] = quantize(tone_map(cast_ray(ray, depth)))


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64, depth: ti.i32
) -> vec3:
    return cast_ray(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), depth)


@ti.kernel
def _sample_environment_kernel(dx: ti.f64, dy: ti.f64, dz: ti.f64) -> vec3:
    return sample_environment(vec3(dx, dy, dz))


@ti.kernel
def _tone_map_kernel(r: ti.f64, g: ti.f64, b: ti.f64) -> vec3:
    return tone_map(vec3(r, g, b))


@ti.kernel
def _quantize_kernel(r: ti.f64, g: ti.f64, b: ti.f64) -> ivec3:
    rgb = quantize(vec3(r, g, b))
    return ivec3(ti.cast(rgb.x, ti.i32), ti.cast(rgb.y, ti.i32), ti.cast(rgb.z, ti.i32))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(settings: RenderSettings | None = None) -> npt.NDArray[np.uint8]:
    """Render the current scene.

    The scene (primitives, materials, lights and environment) must be fully
    populated before calling; it is read-only for the duration of the render.

    Args:
        settings: Image size, field of view and recursion depth. Defaults to
            RenderSettings().

    Returns:
        A (height, width, 3) uint8 array. Row 0 is the top of the image.
    """
    if settings is None:
        settings = RenderSettings()

    _render_kernel(settings.width, settings.height, settings.fov_radians, settings.depth)

    pixels = _pixel_buffer.to_numpy()[: settings.width, : settings.height]
    return np.ascontiguousarray(np.transpose(pixels, (1, 0, 2)))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 1,
) -> tuple[float, float, float]:
    """Trace a single ray through the current scene.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        origin: Ray origin.
        direction: Ray direction. Normalized before tracing; must be nonzero.
        depth: Remaining recursion budget, in [0, MAX_DEPTH].

    Returns:
        The (unclamped) RGB color.

    Raises:
        ValueError: If depth is out of range or direction is the zero vector.
    """
    if not 0 <= depth <= MAX_DEPTH:
        raise ValueError(f"depth must be in [0, {MAX_DEPTH}], got {depth}")
    if not any(direction):
        raise ValueError("direction must be nonzero")

    color = _trace_ray_kernel(*origin, *direction, depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def sample_environment_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Environment color seen along a direction."""
    color = _sample_environment_kernel(*direction)
    return (float(color[0]), float(color[1]), float(color[2]))


def tone_map_color(color: tuple[float, float, float]) -> tuple[float, float, float]:
    """Apply tone mapping to a single color."""
    result = _tone_map_kernel(*color)
    return (float(result[0]), float(result[1]), float(result[2]))


def quantize_color(color: tuple[float, float, float]) -> tuple[int, int, int]:
    """Convert a single [0, 1] color to 8-bit channels."""
    result = _quantize_kernel(*color)
    return (int(result[0]), int(result[1]), int(result[2]))
