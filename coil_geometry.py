# coil_geometry.py
import logging
import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  (registers the 3d projection)

from coils import helmholtz_centers

logger = logging.getLogger(__name__)


def generate_loop_path(loop_radius, axial_offset=0.0, points_per_loop=200):
    """
    Points on a circular winding of radius loop_radius in the plane x = axial_offset.
    The path is closed: the last point repeats the first.
    """
    if points_per_loop < 2:
        raise ValueError("points_per_loop must be at least 2")
    theta = np.linspace(0, 2 * np.pi, points_per_loop)
    x = np.full_like(theta, axial_offset, dtype=float)
    y = loop_radius * np.cos(theta)
    z = loop_radius * np.sin(theta)
    return np.column_stack((x, y, z))


def get_coil_paths(params):
    """
    Builds the list of winding paths for the configuration named in params.
    Supports "single" (one loop at the origin) and "helmholtz" (loops at +-R/2).
    """
    configuration = params.get("configuration", "single")
    loop_radius = params.get("loop_radius", 0.1)
    points_per_loop = int(params.get("points_per_loop", 200))

    if loop_radius <= 0:
        raise ValueError(f"loop_radius must be positive, got {loop_radius}")

    if configuration == "helmholtz":
        centers = helmholtz_centers(loop_radius)
    elif configuration == "single":
        centers = (0.0,)
    else:
        raise ValueError(f"Unknown coil configuration '{configuration}'")

    return [generate_loop_path(loop_radius, c, points_per_loop) for c in centers]


def plot_coil_geometry(coil_paths, loop_radius, ax=None, title="Coil Geometry"):
    """
    Plots winding paths on a given or new 3D axis. The coil axis (x) is drawn
    as a dashed line through the assembly.
    """
    if ax is None:
        fig = plt.figure(figsize=(7, 7))
        ax = fig.add_subplot(111, projection='3d')

    for i, path_array in enumerate(coil_paths):
        if isinstance(path_array, np.ndarray) and path_array.ndim == 2 and path_array.shape[1] == 3:
            ax.plot(path_array[:, 0], path_array[:, 1], path_array[:, 2],
                    color='#B87333', linewidth=2.0, label=f"Loop {i + 1}")
        else:
            logger.warning("Skipping malformed coil path %d", i)

    axis_extent = loop_radius * 1.5
    ax.plot([-axis_extent, axis_extent], [0, 0], [0, 0], 'k--', linewidth=0.8)

    ax.set_xlabel('X axis (m)')
    ax.set_ylabel('Y axis (m)')
    ax.set_zlabel('Z axis (m)')
    ax.set_title(title)

    ax.set_xlim([-axis_extent, axis_extent])
    ax.set_ylim([-loop_radius * 1.1, loop_radius * 1.1])
    ax.set_zlim([-loop_radius * 1.1, loop_radius * 1.1])
    ax.set_box_aspect((axis_extent * 2, loop_radius * 2.2, loop_radius * 2.2))
    return ax


if __name__ == '__main__':
    print("--- Demonstrating coil geometry ---")
    demo_radius = 0.1
    paths = get_coil_paths({"configuration": "helmholtz", "loop_radius": demo_radius})
    print(f"Generated {len(paths)} winding paths for a Helmholtz pair with R={demo_radius:.2f} m.")
    plot_coil_geometry(paths, demo_radius, title="Helmholtz Pair")
    plt.show(block=True)
