"""Built-in demo scene: three spheres over a plane.

The scene contains:
- A light gray ground plane (y = 0), slightly reflective
- A red matte sphere, a green half-mirror sphere and a blue mirror sphere
- A short vertical cylinder behind the spheres
- Two white point lights

It exercises every primitive kind as well as diffuse lighting and mirror
reflection, and is what ``examples/render_demo.py`` renders.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.scene.demo import create_demo_scene
    >>> from src.prism.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
"""

from dataclasses import dataclass

from src.prism.camera.pinhole import PinholeCamera
from src.prism.scene.manager import SceneManager


@dataclass
class DemoSceneParams:
    """Parameters for configuring the demo scene.

    Attributes:
        ground_color: Albedo of the ground plane.
        ground_reflectivity: Reflectivity of the ground plane.
        light_color: Color of both point lights.
        mirror_reflectivity: Reflectivity of the blue sphere.
    """

    ground_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    ground_reflectivity: float = 0.2
    light_color: tuple[float, float, float] = (0.7, 0.7, 0.7)
    mirror_reflectivity: float = 0.9


def create_demo_scene(
    params: DemoSceneParams | None = None,
    scene: SceneManager | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the demo scene.

    Args:
        params: Optional scene parameters; defaults are used if omitted.
        scene: Optional SceneManager to fill; it is cleared first. A new
            one is created if omitted.

    Returns:
        Tuple of (scene, camera).
    """
    if params is None:
        params = DemoSceneParams()
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    # Ground: N.X + d = 0 with N = +y, d = 0
    scene.add_plane(
        dist=0.0,
        normal=(0.0, 1.0, 0.0),
        color=params.ground_color,
        reflectivity=params.ground_reflectivity,
    )

    scene.add_sphere(center=(-2.2, 1.0, 0.0), radius=1.0, color=(0.9, 0.2, 0.2))
    scene.add_sphere(
        center=(0.0, 1.0, -1.0), radius=1.0, color=(0.2, 0.9, 0.3), reflectivity=0.5
    )
    scene.add_sphere(
        center=(2.2, 1.0, 0.0),
        radius=1.0,
        color=(0.2, 0.3, 0.9),
        reflectivity=params.mirror_reflectivity,
    )

    scene.add_cylinder(
        center=(0.0, 1.5, -4.0),
        axis=(0.0, 1.0, 0.0),
        radius=0.6,
        height=3.0,
        color=(0.9, 0.8, 0.3),
        reflectivity=0.3,
    )

    scene.add_light(position=(-5.0, 8.0, 6.0), color=params.light_color)
    scene.add_light(position=(6.0, 5.0, 4.0), color=params.light_color)

    camera = PinholeCamera(
        position=(0.0, 2.5, 8.0),
        target=(0.0, 1.0, 0.0),
        up=(0.0, 1.0, 0.0),
        fov=50.0,
    )

    return scene, camera


DEMO_SCENE_TEXT = """\
# Three spheres over a plane
camera (0 2.5 8) (0 1 0) (0 1 0) 50
light (-5 8 6) [0.7 0.7 0.7]
light (6 5 4) [0.7 0.7 0.7]
plane 0 (0 1 0) [0.8 0.8 0.8] 0.2
sphere (-2.2 1 0) 1 [0.9 0.2 0.2]
sphere (0 1 -1) 1 [0.2 0.9 0.3] 0.5
sphere (2.2 1 0) 1 [0.2 0.3 0.9] 0.9
cylinder (0 1.5 -4) (0 1 0) 0.6 3 [0.9 0.8 0.3] 0.3
"""
