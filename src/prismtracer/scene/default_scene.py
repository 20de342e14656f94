"""Ready-made demonstration scenes.

create_default_scene() builds the classic four-sphere scene:

- A tinted glass sphere in the centre
- A small blue diffuse sphere on the right
- A red diffuse sphere on the left
- A very large green diffuse sphere acting as the ground

seen by a 16:9 camera at the origin looking down -z.

create_prism_scene() swaps the glass for a dispersive sphere and places a
metal mirror plane behind the spheres, so the split colour channels show up
in the reflection.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.scene.default_scene import create_default_scene
    >>> from prismtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
"""

from prismtracer.camera.pinhole import PinholeCamera
from prismtracer.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

ASPECT_RATIO = 16.0 / 9.0
VIEWPORT_HEIGHT = 2.0
FOCAL_LENGTH = 1.0

GLASS_COLOUR = (0.9, 0.8, 0.9)
GLASS_IOR = 1.5

# Blue is refracted more strongly than red
PRISM_IORS = (1.50, 1.52, 1.54)
PRISM_COLOUR = (1.0, 1.0, 1.0)

MIRROR_COLOUR = (0.8, 0.8, 0.8)

RED = (1.0, 0.0, 0.0)
GREEN = (0.0, 1.0, 0.0)
BLUE = (0.0, 0.0, 1.0)

GROUND_CENTRE = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0


def create_default_camera(aspect_ratio: float = ASPECT_RATIO) -> PinholeCamera:
    """Camera at the origin looking down -z with a viewport 2 units high."""
    return PinholeCamera(
        origin=(0.0, 0.0, 0.0),
        focal_length=FOCAL_LENGTH,
        viewport_height=VIEWPORT_HEIGHT,
        aspect_ratio=aspect_ratio,
        horizontal=(1.0, 0.0, 0.0),
        vertical=(0.0, 1.0, 0.0),
    )


def create_default_scene(
    aspect_ratio: float = ASPECT_RATIO,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the four-sphere demonstration scene.

    Bodies are added centre, right, left, ground, which fixes their scan
    order for the nearest-hit query.

    Args:
        aspect_ratio: Camera aspect ratio, normally width / height of the
            output image.

    Returns:
        A tuple of (SceneManager, PinholeCamera). The camera still has to be
        passed to setup_camera() before rendering.
    """
    scene = SceneManager()

    scene.add_dielectric_sphere((0.0, 0.0, -1.0), 0.5, colour=GLASS_COLOUR, ior=GLASS_IOR)
    scene.add_diffuse_sphere((1.0, 0.0, -1.0), 0.2, colour=BLUE)
    scene.add_diffuse_sphere((-1.0, 0.0, -1.0), 0.4, colour=RED)
    scene.add_diffuse_sphere(GROUND_CENTRE, GROUND_RADIUS, colour=GREEN)

    return scene, create_default_camera(aspect_ratio)


def create_prism_scene(
    aspect_ratio: float = ASPECT_RATIO,
) -> tuple[SceneManager, PinholeCamera]:
    """Create a scene showing chromatic dispersion.

    A dispersive sphere replaces the glass sphere of the default scene, and a
    vertical mirror plane stands behind the spheres facing the camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()

    scene.add_dispersive_sphere((0.0, 0.0, -1.0), 0.5, colour=PRISM_COLOUR, iors=PRISM_IORS)
    scene.add_diffuse_sphere((1.0, 0.0, -1.0), 0.2, colour=BLUE)
    scene.add_diffuse_sphere((-1.0, 0.0, -1.0), 0.4, colour=RED)
    scene.add_diffuse_sphere(GROUND_CENTRE, GROUND_RADIUS, colour=GREEN)

    mirror = scene.add_metal_material(MIRROR_COLOUR)
    # Normal = x_axis cross y_axis = +z, towards the camera
    scene.add_plane(
        origin=(-2.0, -0.5, -2.5),
        x_axis=(1.0, 0.0, 0.0),
        y_axis=(0.0, 1.0, 0.0),
        extents=(4.0, 2.0),
        material_id=mirror,
    )

    return scene, create_default_camera(aspect_ratio)
