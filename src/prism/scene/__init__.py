"""Scene module for scene storage, construction and input.

Components:
    intersection: Primitive and light storage in Taichi fields, closest-hit search
    manager: Validating scene manager with configuration round trip
    reader: Line-oriented scene description reader
    demo: Built-in demo scene

Scene data is organized for efficient Taichi access:
    - Structure-of-Arrays layout for geometric data
    - A single insertion-ordered array shared by all primitive kinds
"""

from .demo import DEMO_SCENE_TEXT, DemoSceneParams, create_demo_scene
from .intersection import (
    DEFAULT_SURFACE_COLOR,
    MAX_LIGHTS,
    MAX_PRIMITIVES,
    ClosestHit,
    add_cylinder,
    add_light,
    add_plane,
    add_sphere,
    clear_scene,
    closest_hit,
    find_closest_object,
    get_intersections,
    get_light_count,
    get_normal,
    get_primitive_count,
)
from .manager import (
    CylinderInfo,
    LightInfo,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)
from .reader import (
    SceneDescription,
    SceneParseError,
    load_scene_file,
    parse_scene,
    read_scene,
)

__all__ = [
    # Intersection module
    "ClosestHit",
    "DEFAULT_SURFACE_COLOR",
    "MAX_PRIMITIVES",
    "MAX_LIGHTS",
    "add_sphere",
    "add_plane",
    "add_cylinder",
    "add_light",
    "clear_scene",
    "closest_hit",
    "find_closest_object",
    "get_intersections",
    "get_normal",
    "get_primitive_count",
    "get_light_count",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    "PlaneInfo",
    "CylinderInfo",
    "LightInfo",
    # Reader module
    "SceneDescription",
    "SceneParseError",
    "parse_scene",
    "read_scene",
    "load_scene_file",
    # Demo scene
    "DEMO_SCENE_TEXT",
    "DemoSceneParams",
    "create_demo_scene",
]
