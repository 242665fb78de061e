"""Scene manager coordinating primitives and lights.

This module provides a high-level scene construction API on top of the
Taichi field storage in scene.intersection. The SceneManager validates
input, normalizes plane normals and cylinder axes, and keeps a Python-side
record of every primitive and light so a scene can be exported to and
rebuilt from a plain configuration.

The SceneManager maintains:
- An insertion-ordered list of primitive records (any kind)
- A list of light records
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_plane(dist=0.0, normal=(0, 1, 0), color=(0.8, 0.8, 0.8))
    >>> scene.add_sphere(center=(0, 1, 0), radius=1.0, reflectivity=0.5)
    >>> scene.add_light(position=(5, 5, 5), color=(1, 1, 1))
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.prism.core.ray import normalize_vector
from src.prism.geometry.primitive import PrimitiveKind
from src.prism.scene import intersection
from src.prism.scene.intersection import (
    DEFAULT_SURFACE_COLOR,
    MAX_LIGHTS,
    MAX_PRIMITIVES,
    clear_scene,
    get_light_count,
    get_primitive_count,
)

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        index: The index in the primitive storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        color: Surface albedo.
        reflectivity: Mirror reflectivity in [0, 1].
    """

    index: int
    center: Vec3
    radius: float
    color: Vec3
    reflectivity: float

    kind = PrimitiveKind.SPHERE


@dataclass(frozen=True)
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        index: The index in the primitive storage arrays.
        dist: Signed distance term of N.X + dist = 0.
        normal: Unit plane normal.
        color: Surface albedo.
        reflectivity: Mirror reflectivity in [0, 1].
    """

    index: int
    dist: float
    normal: Vec3
    color: Vec3
    reflectivity: float

    kind = PrimitiveKind.PLANE


@dataclass(frozen=True)
class CylinderInfo:
    """Information about a cylinder in the scene.

    Attributes:
        index: The index in the primitive storage arrays.
        center: Midpoint of the axis segment.
        axis: Unit axis direction.
        radius: Radius of the lateral surface.
        height: Length along the axis.
        color: Surface albedo.
        reflectivity: Mirror reflectivity in [0, 1].
    """

    index: int
    center: Vec3
    axis: Vec3
    radius: float
    height: float
    color: Vec3
    reflectivity: float

    kind = PrimitiveKind.CYLINDER


@dataclass(frozen=True)
class LightInfo:
    """A point light: position and emitted color."""

    index: int
    position: Vec3
    color: Vec3


PrimitiveInfo = SphereInfo | PlaneInfo | CylinderInfo


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        primitives: Ordered primitive configurations, each with a "type"
            key of "sphere", "plane" or "cylinder".
        lights: Light configurations.
    """

    primitives: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


def as_vec3(values: Sequence[float], name: str) -> Vec3:
    """Convert a 3-component sequence to a tuple of floats."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def validate_color(color: Sequence[float]) -> Vec3:
    rgb = as_vec3(color, "color")
    if not all(0.0 <= c <= 1.0 for c in rgb):
        raise ValueError(f"Surface color components must be in [0, 1], got {rgb}")
    return rgb


def validate_reflectivity(reflectivity: float) -> float:
    if not 0.0 <= reflectivity <= 1.0:
        raise ValueError(f"Reflectivity must be in [0, 1], got {reflectivity}")
    return float(reflectivity)


def validate_non_negative(value: float, name: str) -> float:
    if not value >= 0.0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return float(value)


def validate_light_color(color: Sequence[float]) -> Vec3:
    rgb = as_vec3(color, "color")
    if any(c < 0.0 for c in rgb):
        raise ValueError(f"Light color components must be non-negative, got {rgb}")
    return rgb


class SceneManager:
    """Scene container owning primitives and lights.

    Primitives and lights are stored by value in Taichi fields; the
    manager keeps matching Python records in insertion order. There is no
    removal operation, only clear().

    Attributes:
        primitives: Records for all primitives, in insertion order.
        lights: Records for all lights, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_plane(0.0, (0, 1, 0))
        >>> scene.add_sphere((0, 1, 0), 1.0, color=(0.9, 0.2, 0.2))
        >>> scene.add_cylinder((2, 1, 0), (0, 1, 0), 0.5, 2.0, reflectivity=0.3)
        >>> scene.add_light((0, 10, 10))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.primitives: list[PrimitiveInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        self.primitives.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives and lights)."""
        self._clear_all()

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        color: Sequence[float] = DEFAULT_SURFACE_COLOR,
        reflectivity: float = 0.0,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (non-negative).
            color: Surface albedo as (R, G, B), each in [0, 1].
            reflectivity: Mirror reflectivity in [0, 1].

        Returns:
            The primitive index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of primitives is exceeded.
            ValueError: If any parameter is out of range.
        """
        center_v = as_vec3(center, "center")
        radius = validate_non_negative(radius, "radius")
        rgb = validate_color(color)
        reflectivity = validate_reflectivity(reflectivity)

        index = intersection.add_sphere(center_v, radius, rgb, reflectivity)
        self.primitives.append(SphereInfo(index, center_v, radius, rgb, reflectivity))
        logger.debug("Added sphere %d at %s, radius %g", index, center_v, radius)
        return index

    def add_plane(
        self,
        dist: float,
        normal: Sequence[float],
        color: Sequence[float] = DEFAULT_SURFACE_COLOR,
        reflectivity: float = 0.0,
    ) -> int:
        """Add an infinite plane N.X + dist = 0 to the scene.

        Args:
            dist: Signed distance term.
            normal: Plane normal (normalized here; must be nonzero).
            color: Surface albedo as (R, G, B), each in [0, 1].
            reflectivity: Mirror reflectivity in [0, 1].

        Returns:
            The primitive index of the added plane.

        Raises:
            GeometryError: If the normal is zero-length.
            RuntimeError: If the maximum number of primitives is exceeded.
            ValueError: If any parameter is out of range.
        """
        unit_normal = normalize_vector(normal, "plane normal")
        rgb = validate_color(color)
        reflectivity = validate_reflectivity(reflectivity)

        index = intersection.add_plane(float(dist), unit_normal, rgb, reflectivity)
        self.primitives.append(PlaneInfo(index, float(dist), unit_normal, rgb, reflectivity))
        logger.debug("Added plane %d, normal %s, dist %g", index, unit_normal, dist)
        return index

    def add_cylinder(
        self,
        center: Sequence[float],
        axis: Sequence[float],
        radius: float,
        height: float,
        color: Sequence[float] = DEFAULT_SURFACE_COLOR,
        reflectivity: float = 0.0,
    ) -> int:
        """Add a finite cylinder (no end caps) to the scene.

        Args:
            center: Midpoint of the axis segment.
            axis: Long axis direction (normalized here; must be nonzero).
            radius: Radius of the lateral surface (non-negative).
            height: Length along the axis (non-negative).
            color: Surface albedo as (R, G, B), each in [0, 1].
            reflectivity: Mirror reflectivity in [0, 1].

        Returns:
            The primitive index of the added cylinder.

        Raises:
            GeometryError: If the axis is zero-length.
            RuntimeError: If the maximum number of primitives is exceeded.
            ValueError: If any parameter is out of range.
        """
        center_v = as_vec3(center, "center")
        unit_axis = normalize_vector(axis, "cylinder axis")
        radius = validate_non_negative(radius, "radius")
        height = validate_non_negative(height, "height")
        rgb = validate_color(color)
        reflectivity = validate_reflectivity(reflectivity)

        index = intersection.add_cylinder(center_v, unit_axis, radius, height, rgb, reflectivity)
        self.primitives.append(
            CylinderInfo(index, center_v, unit_axis, radius, height, rgb, reflectivity)
        )
        logger.debug("Added cylinder %d at %s, axis %s", index, center_v, unit_axis)
        return index

    def add_light(
        self,
        position: Sequence[float],
        color: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Add a point light.

        Args:
            position: Light position.
            color: Emitted color; components must be non-negative.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If any color component is negative.
        """
        position_v = as_vec3(position, "position")
        rgb = validate_light_color(color)

        index = intersection.add_light(position_v, rgb)
        self.lights.append(LightInfo(index, position_v, rgb))
        logger.debug("Added light %d at %s", index, position_v)
        return index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return get_primitive_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_primitive_info(self, index: int) -> PrimitiveInfo | None:
        """Get the record of a primitive by index, or None if not found."""
        if 0 <= index < len(self.primitives):
            return self.primitives[index]
        return None

    def count_kind(self, kind: PrimitiveKind) -> int:
        """Count the primitives of one kind."""
        return sum(1 for p in self.primitives if p.kind == kind)

    def closest_hit(
        self, origin: Sequence[float], direction: Sequence[float]
    ) -> tuple[PrimitiveInfo | None, float]:
        """Find the nearest primitive along a ray.

        Returns:
            Tuple (record, t); (None, NO_INTERSECTION) on a miss.

        Raises:
            GeometryError: If the direction is zero-length.
        """
        index, t = intersection.closest_hit(origin, direction)
        return self.get_primitive_info(index), t

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for prim in self.primitives:
            if isinstance(prim, SphereInfo):
                config.primitives.append(
                    {
                        "type": "sphere",
                        "center": list(prim.center),
                        "radius": prim.radius,
                        "color": list(prim.color),
                        "reflectivity": prim.reflectivity,
                    }
                )
            elif isinstance(prim, PlaneInfo):
                config.primitives.append(
                    {
                        "type": "plane",
                        "dist": prim.dist,
                        "normal": list(prim.normal),
                        "color": list(prim.color),
                        "reflectivity": prim.reflectivity,
                    }
                )
            else:
                config.primitives.append(
                    {
                        "type": "cylinder",
                        "center": list(prim.center),
                        "axis": list(prim.axis),
                        "radius": prim.radius,
                        "height": prim.height,
                        "color": list(prim.color),
                        "reflectivity": prim.reflectivity,
                    }
                )

        for light in self.lights:
            config.lights.append({"position": list(light.position), "color": list(light.color)})

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and adds every primitive and light in
        order.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for prim_config in config.primitives:
            prim_type = prim_config.get("type", "").lower()
            color = prim_config.get("color", list(DEFAULT_SURFACE_COLOR))
            reflectivity = prim_config.get("reflectivity", 0.0)
            if prim_type == "sphere":
                self.add_sphere(
                    prim_config.get("center", [0.0, 0.0, 0.0]),
                    prim_config.get("radius", 1.0),
                    color,
                    reflectivity,
                )
            elif prim_type == "plane":
                self.add_plane(
                    prim_config.get("dist", 0.0),
                    prim_config.get("normal", [0.0, 1.0, 0.0]),
                    color,
                    reflectivity,
                )
            elif prim_type == "cylinder":
                self.add_cylinder(
                    prim_config.get("center", [0.0, 0.0, 0.0]),
                    prim_config.get("axis", [0.0, 1.0, 0.0]),
                    prim_config.get("radius", 1.0),
                    prim_config.get("height", 1.0),
                    color,
                    reflectivity,
                )
            else:
                raise ValueError(f"Unknown primitive type: {prim_type}")

        for light_config in config.lights:
            self.add_light(
                light_config.get("position", [0.0, 0.0, 0.0]),
                light_config.get("color", [1.0, 1.0, 1.0]),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"primitives": config.primitives, "lights": config.lights}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'primitives' and 'lights' keys."""
        config = SceneConfig(
            primitives=data.get("primitives", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_primitives() -> int:
        """Get the maximum number of primitives supported."""
        return MAX_PRIMITIVES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS
