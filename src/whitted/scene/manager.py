"""Unified scene manager coordinating primitives, materials, lights and environment.

This module provides the high-level scene building API. It validates input,
writes primitives, materials and lights to their Taichi field tables, and
keeps a Python-side record of everything it added so a scene can be exported
to and loaded from a JSON-compatible dictionary.

The scene tables are module-level Taichi fields, so there is one active scene
per process. Creating a SceneManager clears it. A scene must be complete
before render_image() is called; nothing writes to it during a render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.materials.phong import Material
    >>> from whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> rubber = scene.add_material(
    ...     Material((0.3, 0.1, 0.1), specular_exponent=10.0, albedo=(0.9, 0.1, 0.0, 0.0))
    ... )
    >>> scene.add_sphere(center=(1.5, -0.5, -18.0), radius=3.0, material_id=rubber)
    >>> scene.add_light(position=(-20.0, 20.0, 20.0), intensity=1.5)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from whitted.materials.phong import (
    Material,
    add_material,
    clear_materials,
    get_material_count,
)
from whitted.scene.environment import (
    DEFAULT_ENVIRONMENT_COLOR,
    clear_environment_map,
    get_environment_color,
    has_environment_map,
    reset_environment,
    set_environment_color,
    set_environment_map,
)
from whitted.scene.intersection import (
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_primitive_count,
    get_sphere_count,
)
from whitted.scene.lights import add_light, clear_lights, get_light_count

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        primitive_id: The index of the sphere in the primitive table.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material id assigned to the sphere.
    """

    primitive_id: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        primitive_id: The index of the plane in the primitive table.
        y: Height of the plane.
        x_range: (x_min, x_max) bounds.
        z_range: (z_min, z_max) bounds.
        material_id: The material id assigned to the plane.
    """

    primitive_id: int
    y: float
    x_range: tuple[float, float]
    z_range: tuple[float, float]
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light in the scene."""

    position: tuple[float, float, float]
    intensity: float


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        planes: List of plane configurations.
        lights: List of light configurations.
        environment: Environment configuration ("color" and optional "map").
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    environment: dict[str, Any] = field(default_factory=dict)


def _as_vec3(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _as_range(values: Any, name: str) -> tuple[float, float]:
    """Convert a (min, max) pair to a float tuple."""
    if len(values) != 2:
        raise ValueError(f"{name} must be a (min, max) pair, got {len(values)} values")
    low, high = float(values[0]), float(values[1])
    if low > high:
        raise ValueError(f"{name} is empty: min {low} > max {high}")
    return (low, high)


class SceneManager:
    """Unified scene manager for the Whitted renderer.

    The SceneManager provides a high-level API for building scenes. Materials
    are interned once and referenced from primitives by id; primitives keep
    their insertion order, which decides exact distance ties.

    Attributes:
        materials: Materials in id order.
        spheres: SphereInfo for all spheres in the scene.
        planes: PlaneInfo for all planes in the scene.
        lights: LightInfo for all lights in the scene.
        environment_map_path: Path of the loaded environment texture, if any.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_material(
        ...     Material((0.6, 0.7, 0.8), 125.0, (0.0, 0.5, 0.1, 0.9), refractive_index=1.3)
        ... )
        >>> scene.add_sphere((-1.0, -1.5, -8.0), 2.0, glass)
        >>> scene.add_plane(-3.0, (-10.0, 10.0), (-100.0, -5.0), glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[Material] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.lights: list[LightInfo] = []
        self.environment_map_path: str | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        clear_lights()
        reset_environment()
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self.lights.clear()
        self.environment_map_path = None

    def clear(self) -> None:
        """Clear the entire scene and restore the default environment."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Add a material to the scene.

        Args:
            material: The material to intern.

        Returns:
            The material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = add_material(material)
        self.materials.append(material)
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material(self, material_id: int) -> Material | None:
        """Get a material by id, or None if the id is unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material_id: The material id to assign to the sphere.

        Returns:
            The primitive id of the sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If radius is not positive or material_id is invalid.
        """
        self._check_material_id(material_id)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        center = _as_vec3(center, "center")

        primitive_id = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                primitive_id=primitive_id,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return primitive_id

    def add_plane(
        self,
        y: float,
        x_range: tuple[float, float],
        z_range: tuple[float, float],
        material_id: int,
    ) -> int:
        """Add a bounded horizontal plane to the scene.

        Args:
            y: Height of the plane.
            x_range: (x_min, x_max) bounds of the rectangle.
            z_range: (z_min, z_max) bounds of the rectangle.
            material_id: The material id to assign to the plane.

        Returns:
            The primitive id of the plane.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If a range is empty or material_id is invalid.
        """
        self._check_material_id(material_id)
        x_range = _as_range(x_range, "x_range")
        z_range = _as_range(z_range, "z_range")

        primitive_id = add_plane(y, x_range, z_range, material_id)
        self.planes.append(
            PlaneInfo(
                primitive_id=primitive_id,
                y=y,
                x_range=x_range,
                z_range=z_range,
                material_id=material_id,
            )
        )
        return primitive_id

    # =========================================================================
    # Lights and Environment
    # =========================================================================

    def add_light(self, position: tuple[float, float, float], intensity: float) -> int:
        """Add a point light.

        Args:
            position: Light position as (x, y, z).
            intensity: Light intensity. Must be positive.

        Returns:
            The index of the light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If intensity is not positive.
        """
        if intensity <= 0.0:
            raise ValueError(f"Light intensity must be positive, got {intensity}")
        position = _as_vec3(position, "position")
        idx = add_light(position, intensity)
        self.lights.append(LightInfo(position=position, intensity=intensity))
        return idx

    def set_environment_color(self, color: tuple[float, float, float]) -> None:
        """Set the flat color seen by rays that escape the scene."""
        set_environment_color(_as_vec3(color, "environment color"))

    def get_environment_color(self) -> tuple[float, float, float]:
        """Get the flat environment color."""
        return get_environment_color()

    def set_environment_map(self, image: npt.NDArray[np.uint8]) -> None:
        """Use an in-memory equirectangular RGB8 texture as the environment.

        Raises:
            ValueError: If the image has the wrong shape, dtype or size.
        """
        set_environment_map(image)
        self.environment_map_path = None

    def load_environment_map(self, path: str | Path) -> None:
        """Load an equirectangular texture from an image file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the image exceeds the supported size.
        """
        from whitted.output.export import load_environment_map

        set_environment_map(load_environment_map(path))
        self.environment_map_path = str(path)

    def clear_environment_map(self) -> None:
        """Go back to the flat environment color."""
        clear_environment_map()
        self.environment_map_path = None

    def has_environment_map(self) -> bool:
        """Check if an environment texture is in use."""
        return has_environment_map()

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return get_primitive_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        An in-memory environment texture set with set_environment_map() has
        no path and is not exported.
        """
        config = SceneConfig()
        config.materials = [material.to_dict() for material in self.materials]
        config.spheres = [
            {
                "center": list(sphere.center),
                "radius": sphere.radius,
                "material_id": sphere.material_id,
            }
            for sphere in self.spheres
        ]
        config.planes = [
            {
                "y": plane.y,
                "x_range": list(plane.x_range),
                "z_range": list(plane.z_range),
                "material_id": plane.material_id,
            }
            for plane in self.planes
        ]
        config.lights = [
            {"position": list(light.position), "intensity": light.intensity}
            for light in self.lights
        ]
        config.environment = {"color": list(self.get_environment_color())}
        if self.environment_map_path is not None:
            config.environment["map"] = self.environment_map_path
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first. Spheres are added before planes, so
        they come first in the primitive table.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            self.add_material(Material.from_dict(mat_config))

        for sphere_config in config.spheres:
            self.add_sphere(
                sphere_config.get("center", [0.0, 0.0, 0.0]),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
            )

        for plane_config in config.planes:
            self.add_plane(
                float(plane_config.get("y", 0.0)),
                plane_config.get("x_range", [-1.0, 1.0]),
                plane_config.get("z_range", [-1.0, 1.0]),
                int(plane_config.get("material_id", 0)),
            )

        for light_config in config.lights:
            self.add_light(
                light_config.get("position", [0.0, 0.0, 0.0]),
                float(light_config.get("intensity", 1.0)),
            )

        self.set_environment_color(
            config.environment.get("color", list(DEFAULT_ENVIRONMENT_COLOR))
        )
        env_map = config.environment.get("map")
        if env_map is not None:
            self.load_environment_map(env_map)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "planes": config.planes,
            "lights": config.lights,
            "environment": config.environment,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'planes', 'lights'
                and 'environment' keys. Missing keys mean empty.

        Raises:
            ValueError: If the dictionary has unknown keys or invalid data.
        """
        unknown = set(data) - {"materials", "spheres", "planes", "lights", "environment"}
        if unknown:
            raise ValueError(f"Unknown scene keys: {sorted(unknown)}")
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
            lights=data.get("lights", []),
            environment=data.get("environment", {}),
        )
        self.from_config(config)
