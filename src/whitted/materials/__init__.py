"""Materials module.

The Whitted renderer has a single material model:

Components:
    phong: Phong-style material (diffuse color, specular exponent, four
        albedo weights, refractive index) and the material table

Materials live in a scene-owned table of Taichi fields. Primitives refer to
them by integer id, so a material is stored once however many primitives
share it.
"""

from .phong import (
    MAX_MATERIALS,
    Material,
    MaterialRecord,
    add_material,
    clear_materials,
    eval_phong_diffuse,
    eval_phong_specular,
    get_material,
    get_material_count,
)

__all__ = [
    "Material",
    "MaterialRecord",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "eval_phong_diffuse",
    "eval_phong_specular",
]
