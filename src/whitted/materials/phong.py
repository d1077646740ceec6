"""Phong-style material model and the scene material table.

A material combines a diffuse color, a specular exponent and four albedo
weights that scale the four light transport channels of the Whitted model:

    color = diffuse_color * diffuse * albedo[0]
          + white * specular * albedo[1]
          + reflected * albedo[2]
          + refracted * albedo[3]

where diffuse and specular are the accumulated light intensities:

    diffuse  += I * max(0, dot(l, n))
    specular += I * max(0, dot(-reflect(-l, n), d)) ** specular_exponent

The albedo weights are not normalized; a mirror may use a specular albedo far
above 1.

Materials are interned in a table of Taichi fields and referenced from
primitives by integer id, so any number of primitives can share one material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.materials.phong import Material, add_material
    >>> ivory = Material(
    ...     diffuse_color=(0.4, 0.4, 0.3),
    ...     specular_exponent=50.0,
    ...     albedo=(0.6, 0.3, 0.1, 0.0),
    ... )
    >>> material_id = add_material(ivory)
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti

from whitted.core.ray import dot, reflect, vec3

vec4 = ti.types.vector(4, ti.f64)


@dataclass(frozen=True)
class Material:
    """Python-side description of a material.

    Attributes:
        diffuse_color: Diffuse RGB color, nominally in [0, 1] (not enforced).
        specular_exponent: Phong shininess. Must be positive.
        albedo: Weights of the (diffuse, specular, reflect, refract) channels.
        refractive_index: Refractive index of the material. Must be positive.
    """

    diffuse_color: tuple[float, float, float]
    specular_exponent: float
    albedo: tuple[float, float, float, float]
    refractive_index: float = 1.0

    def __post_init__(self) -> None:
        if len(self.diffuse_color) != 3:
            raise ValueError(
                f"diffuse_color must have 3 components, got {len(self.diffuse_color)}"
            )
        if len(self.albedo) != 4:
            raise ValueError(f"albedo must have 4 components, got {len(self.albedo)}")
        if self.specular_exponent <= 0.0:
            raise ValueError(
                f"specular_exponent must be positive, got {self.specular_exponent}"
            )
        if self.refractive_index <= 0.0:
            raise ValueError(
                f"refractive_index must be positive, got {self.refractive_index}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the material as a JSON-compatible dictionary."""
        return {
            "diffuse_color": list(self.diffuse_color),
            "specular_exponent": self.specular_exponent,
            "albedo": list(self.albedo),
            "refractive_index": self.refractive_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        """Build a material from a dictionary produced by to_dict().

        Raises:
            ValueError: If a required key is missing or a value is invalid.
        """
        missing = {"diffuse_color", "specular_exponent", "albedo"} - data.keys()
        if missing:
            raise ValueError(f"Material is missing required keys: {sorted(missing)}")
        color_list = data["diffuse_color"]
        albedo_list = data["albedo"]
        return cls(
            diffuse_color=tuple(float(c) for c in color_list),
            specular_exponent=float(data["specular_exponent"]),
            albedo=tuple(float(a) for a in albedo_list),
            refractive_index=float(data.get("refractive_index", 1.0)),
        )


@ti.dataclass
class MaterialRecord:
    """Kernel-side view of a material.

    Attributes:
        diffuse_color: Diffuse RGB color.
        specular_exponent: Phong shininess.
        albedo: (diffuse, specular, reflect, refract) weights.
        refractive_index: Refractive index of the material.
    """

    diffuse_color: vec3
    specular_exponent: ti.f64
    albedo: vec4
    refractive_index: ti.f64


# =============================================================================
# Phong Terms
# =============================================================================


@ti.func
def eval_phong_diffuse(light_dir: vec3, normal: vec3) -> ti.f64:
    """Lambert cosine factor of a light direction, clamped at zero."""
    return ti.max(0.0, dot(light_dir, normal))


@ti.func
def eval_phong_specular(
    light_dir: vec3, normal: vec3, view_dir: vec3, specular_exponent: ti.f64
) -> ti.f64:
    """Phong highlight factor.

    Args:
        light_dir: Unit direction from the surface point toward the light.
        normal: Unit surface normal.
        view_dir: Unit direction of the incoming (viewing) ray.
        specular_exponent: Phong shininess.

    Returns:
        max(0, dot(-reflect(-light_dir, normal), view_dir)) ** specular_exponent
    """
    cos_alpha = ti.max(0.0, dot(-reflect(-light_dir, normal), view_dir))
    return cos_alpha**specular_exponent


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

material_diffuse_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_specular_exponents = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(4, dtype=ti.f64, shape=MAX_MATERIALS)
material_refractive_indices = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Add a material to the material table.

    Args:
        material: The material to store.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_diffuse_colors[idx] = list(material.diffuse_color)
    material_specular_exponents[idx] = material.specular_exponent
    material_albedos[idx] = list(material.albedo)
    material_refractive_indices[idx] = material.refractive_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> MaterialRecord:
    """Look up a material by id.

    Args:
        material_id: The id returned by add_material().

    Returns:
        The material properties.
    """
    return MaterialRecord(
        diffuse_color=material_diffuse_colors[material_id],
        specular_exponent=material_specular_exponents[material_id],
        albedo=material_albedos[material_id],
        refractive_index=material_refractive_indices[material_id],
    )
