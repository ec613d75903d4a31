#!/usr/bin/env python3
"""Simple triangle meshes for examples and tests."""

import numpy as np

from data_types import Mesh3d


def cylinder(angle_subdivisions: int, capped: bool = True) -> Mesh3d:
    """Return a unit-radius cylinder of length 1 along +x with outward winding.

    - angle_subdivisions: number of vertices on each rim (at least 3)
    - capped: close both ends with a fan around a center vertex

    Vertex layout: rim at x=0, then rim at x=1, then the two cap centers.
    """
    if angle_subdivisions < 3:
        raise ValueError(f"A cylinder needs at least 3 angle subdivisions, got {angle_subdivisions}")

    n = angle_subdivisions
    angles = 2.0 * np.pi * np.arange(n) / n
    rim = np.stack([np.zeros(n), np.cos(angles), np.sin(angles)], axis=1)
    top_rim = rim + np.array([1.0, 0.0, 0.0])

    i = np.arange(n)
    j = (i + 1) % n
    # two triangles per side quad
    side = np.concatenate([
        np.stack([i, j, n + j], axis=1),
        np.stack([i, n + j, n + i], axis=1),
    ])

    if not capped:
        return Mesh3d(vertices=np.vstack([rim, top_rim]), faces=side)

    bottom_center, top_center = 2 * n, 2 * n + 1
    centers = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    bottom_cap = np.stack([np.full(n, bottom_center), j, i], axis=1)
    top_cap = np.stack([np.full(n, top_center), n + i, n + j], axis=1)

    return Mesh3d(
        vertices=np.vstack([rim, top_rim, centers]),
        faces=np.concatenate([side, bottom_cap, top_cap]),
    )


def square() -> Mesh3d:
    """Unit square in the xy-plane split into two triangles facing +z."""
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ])
    faces = np.array([
        [0, 1, 2],
        [0, 2, 3],
    ])
    return Mesh3d(vertices=vertices, faces=faces)


def cube() -> Mesh3d:
    """Closed cube spanning [-1, 1] on every axis, 8 shared vertices and 12 triangles."""
    vertices = np.array([
        [-1, -1, -1],
        [-1, -1,  1],
        [-1,  1, -1],
        [-1,  1,  1],
        [ 1, -1, -1],
        [ 1, -1,  1],
        [ 1,  1, -1],
        [ 1,  1,  1],
    ], dtype=np.float64)

    faces = np.array([
        [0, 1, 2], [1, 3, 2],  # -X face
        [4, 6, 5], [5, 6, 7],  # +X face
        [0, 4, 1], [1, 4, 5],  # -Y face
        [2, 3, 6], [3, 7, 6],  # +Y face
        [0, 2, 4], [2, 6, 4],  # -Z face
        [1, 5, 3], [3, 5, 7],  # +Z face
    ], dtype=np.int64)

    return Mesh3d(vertices=vertices, faces=faces)
