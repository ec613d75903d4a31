import numpy as np
from numpy.typing import NDArray
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection


def _set_limits(ax, points: NDArray[np.float64]):
    if len(points) == 0:
        return
    # Attempt to set equal aspect ratio for a more realistic view
    ax.set_box_aspect([1, 1, 1])

    mins = points.min(axis=0)
    maxs = points.max(axis=0)
    # Add a small buffer for better visualization
    buffer = max((maxs - mins).max() * 0.05, 1e-6)
    ax.set_xlim(mins[0] - buffer, maxs[0] + buffer)
    ax.set_ylim(mins[1] - buffer, maxs[1] + buffer)
    ax.set_zlim(mins[2] - buffer, maxs[2] + buffer)


def _draw_triangles(ax, triangles, face_color, edge_color, alpha):
    if len(triangles):
        poly3d = Poly3DCollection(triangles, facecolors=face_color, edgecolors=edge_color,
                                  linewidths=0.3, alpha=alpha)
        ax.add_collection3d(poly3d)

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")
    _set_limits(ax, triangles.reshape(-1, 3))


def _draw_normals(ax, points, normals, normal_length, normal_color):
    if normals is None or len(points) == 0:
        return
    normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    ax.quiver(points[:, 0], points[:, 1], points[:, 2],
              normals[:, 0], normals[:, 1], normals[:, 2],
              length=normal_length, color=normal_color, linewidth=0.8)


def plot_indexed_buffers(indices: NDArray[np.uint32], positions: NDArray[np.float64],
                         normals: NDArray[np.float64] = None, title="Indexed Buffers", figsize=(10, 8),
                         face_color='skyblue', edge_color='black', alpha=0.7,
                         normal_length=0.1, normal_color='red', ax=None):
    """
    Plots the triangles described by an indexed buffer triple.

    Parameters
    ----------
    indices : NDArray[np.uint32]
        Flat array of 3F vertex slots, three per triangle.

    positions : NDArray[np.float64]
        V x 3 vertex positions addressed by ``indices``.

    normals : NDArray[np.float64], optional
        V x 3 vertex normals. When given, drawn as arrows at every vertex.

    normal_length : float, optional
        Length of the normal arrows. Default is 0.1.

    ax : matplotlib.axes.Axes, optional
        Existing 3D axes to plot on. If None, new figure and axes are created.

    Returns
    -------
    fig : matplotlib.figure.Figure
        The figure containing the plot.

    ax : matplotlib.axes.Axes
        The 3D axes containing the plot.
    """
    if ax is None:
        fig = plt.figure(figsize=figsize)
        ax = fig.add_subplot(111, projection='3d')
    else:
        fig = ax.figure

    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    triangles = positions[np.asarray(indices, dtype=np.int64).reshape(-1, 3)]

    _draw_triangles(ax, triangles, face_color, edge_color, alpha)
    # one arrow per vertex, not per triangle corner
    _draw_normals(ax, positions, normals, normal_length, normal_color)

    ax.set_title(title)
    return fig, ax


def plot_non_indexed_buffers(positions: NDArray[np.float64], normals: NDArray[np.float64] = None,
                             title="Non-Indexed Buffers", figsize=(10, 8),
                             face_color='skyblue', edge_color='black', alpha=0.7,
                             normal_length=0.1, normal_color='red', ax=None):
    """Plots the triangles of a non-indexed buffer pair, nine floats per triangle."""
    if ax is None:
        fig = plt.figure(figsize=figsize)
        ax = fig.add_subplot(111, projection='3d')
    else:
        fig = ax.figure

    triangles = np.asarray(positions, dtype=np.float64).reshape(-1, 3, 3)

    _draw_triangles(ax, triangles, face_color, edge_color, alpha)
    _draw_normals(ax, triangles.reshape(-1, 3), normals, normal_length, normal_color)
    ax.set_title(title)
    return fig, ax
