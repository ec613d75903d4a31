"""
Render buffers extracted from a half-edge mesh.

Two layouts are produced:

- indexed: one position and one normal per vertex, in ``vertex_iter`` order,
  plus three indices per face into those arrays,
  ``(i0, i1, i2) = (indices[3*f], indices[3*f+1], indices[3*f+2])``.
- non-indexed: the three corners of every face written out in full, nine
  floats per face, with no sharing between faces.

Every call recomputes its output from the current mesh state. Nothing is
cached between calls and the returned arrays do not reference the mesh.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from data_types import HalfedgeMeshLike, MeshConsistencyError, VertexID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexedBuffers:
    indices: NDArray[np.uint32]  # 3F, triangle corners as slots into positions/normals
    positions: NDArray[np.float64]  # V x 3
    normals: NDArray[np.float64]  # V x 3


@dataclass(frozen=True)
class NonIndexedBuffers:
    positions: NDArray[np.float64]  # 9F, three corners per face
    normals: NDArray[np.float64]  # 9F, same corner order as positions


@dataclass(frozen=True)
class MeshBuffers:
    indexed: IndexedBuffers
    non_indexed: NonIndexedBuffers


def push_vec3(buffer: list, vec3) -> None:
    """Append the three components of a vector to a flat buffer."""
    for i in range(3):
        buffer.append(float(vec3[i]))


def _vertex_slots(mesh: HalfedgeMeshLike) -> dict:
    """Map each vertex to its position in ``vertex_iter`` order."""
    return {vertex_id: slot for slot, vertex_id in enumerate(mesh.vertex_iter())}


def _face_indices(mesh: HalfedgeMeshLike, vertex_slots: dict) -> NDArray[np.uint32]:
    # Resolving vertices through the slot dict keeps this linear in mesh size.
    # Searching the vertex list for every half-edge would be quadratic.
    indices = []
    for face_id in mesh.face_iter():
        corners = 0
        for halfedge_id in mesh.face_halfedge_iter(face_id):
            vertex_id = mesh.walker_from_halfedge(halfedge_id).vertex_id()
            if vertex_id is None:
                raise MeshConsistencyError(f"Half-edge {halfedge_id} of face {face_id} has no destination vertex")
            try:
                indices.append(vertex_slots[vertex_id])
            except KeyError:
                raise MeshConsistencyError(
                    f"Face {face_id} references vertex {vertex_id} which is not in the mesh's vertex list"
                ) from None
            corners += 1
        if corners != 3:
            raise MeshConsistencyError(f"Face {face_id} has {corners} corners, expected a triangle")
    return np.array(indices, dtype=np.uint32)


def _triangle_corners(face_id, corners) -> tuple:
    corners = tuple(corners)
    if len(corners) != 3:
        raise MeshConsistencyError(f"Face {face_id} has {len(corners)} corners, expected a triangle")
    return corners


def _vertex_vectors(mesh: HalfedgeMeshLike, lookup: Callable) -> NDArray[np.float64]:
    return np.array([lookup(vertex_id) for vertex_id in mesh.vertex_iter()], dtype=np.float64).reshape(-1, 3)


def indices_buffer(mesh: HalfedgeMeshLike) -> NDArray[np.uint32]:
    """
    Return the face indices, three per face in winding order, as slots into
    ``positions_buffer`` and ``normals_buffer``.

    Raises
    ------
    MeshConsistencyError
        If a face reaches a vertex that ``vertex_iter`` does not report, or a
        half-edge has no destination vertex.
    """
    return _face_indices(mesh, _vertex_slots(mesh))


def positions_buffer(mesh: HalfedgeMeshLike) -> NDArray[np.float64]:
    """
    Return the vertex positions as a V x 3 array in ``vertex_iter`` order.

    The connectivity is given by ``indices_buffer``.
    """
    return _vertex_vectors(mesh, mesh.vertex_position)


def normals_buffer(mesh: HalfedgeMeshLike) -> NDArray[np.float64]:
    """
    Return the vertex normals as a V x 3 array in ``vertex_iter`` order.

    The normal of a vertex is the average of the normals of its adjacent faces,
    recomputed from the mesh on every call.
    """
    return _vertex_vectors(mesh, mesh.vertex_normal)


def indexed_buffers(mesh: HalfedgeMeshLike) -> IndexedBuffers:
    """Return indices, positions and normals built against one vertex enumeration."""
    vertex_ids = list(mesh.vertex_iter())
    vertex_slots = {vertex_id: slot for slot, vertex_id in enumerate(vertex_ids)}
    buffers = IndexedBuffers(
        indices=_face_indices(mesh, vertex_slots),
        positions=np.array([mesh.vertex_position(v) for v in vertex_ids], dtype=np.float64).reshape(-1, 3),
        normals=np.array([mesh.vertex_normal(v) for v in vertex_ids], dtype=np.float64).reshape(-1, 3),
    )
    logger.debug("Indexed buffers: %d vertices, %d triangles", len(vertex_ids), len(buffers.indices) // 3)
    return buffers


def non_indexed_positions_buffer(mesh: HalfedgeMeshLike) -> NDArray[np.float64]:
    """Return the face corner positions, nine floats per face."""
    positions = []
    for face_id in mesh.face_iter():
        p0, p1, p2 = _triangle_corners(face_id, mesh.face_positions(face_id))
        push_vec3(positions, p0)
        push_vec3(positions, p1)
        push_vec3(positions, p2)
    return np.array(positions, dtype=np.float64)


def non_indexed_normals_buffer(mesh: HalfedgeMeshLike) -> NDArray[np.float64]:
    """
    Return the face corner normals, nine floats per face, in the same corner
    order as ``non_indexed_positions_buffer``.

    Each corner gets the normal of its vertex, the average of the normals of
    the faces adjacent to that vertex, recomputed on every call.
    """
    normals = []
    for face_id in mesh.face_iter():
        v0, v1, v2 = _triangle_corners(face_id, mesh.face_vertices(face_id))
        push_vec3(normals, mesh.vertex_normal(v0))
        push_vec3(normals, mesh.vertex_normal(v1))
        push_vec3(normals, mesh.vertex_normal(v2))
    return np.array(normals, dtype=np.float64)


def non_indexed_buffers(mesh: HalfedgeMeshLike) -> NonIndexedBuffers:
    """Return the non-indexed positions and normals together."""
    return NonIndexedBuffers(
        positions=non_indexed_positions_buffer(mesh),
        normals=non_indexed_normals_buffer(mesh),
    )


def export_buffers(mesh: HalfedgeMeshLike) -> MeshBuffers:
    """
    Build both layouts in one pass over the mesh.

    Vertex normals are computed once per vertex and shared between the two
    layouts. The result equals calling the separate builders.
    """
    vertex_ids = list(mesh.vertex_iter())
    vertex_slots = {vertex_id: slot for slot, vertex_id in enumerate(vertex_ids)}
    vertex_normals: dict[VertexID, NDArray[np.float64]] = {}

    def normal_of(vertex_id):
        if vertex_id not in vertex_normals:
            vertex_normals[vertex_id] = mesh.vertex_normal(vertex_id)
        return vertex_normals[vertex_id]

    indexed = IndexedBuffers(
        indices=_face_indices(mesh, vertex_slots),
        positions=np.array([mesh.vertex_position(v) for v in vertex_ids], dtype=np.float64).reshape(-1, 3),
        normals=np.array([normal_of(v) for v in vertex_ids], dtype=np.float64).reshape(-1, 3),
    )

    positions = []
    normals = []
    for face_id in mesh.face_iter():
        for corner in _triangle_corners(face_id, mesh.face_positions(face_id)):
            push_vec3(positions, corner)
        for vertex_id in _triangle_corners(face_id, mesh.face_vertices(face_id)):
            push_vec3(normals, normal_of(vertex_id))
    non_indexed = NonIndexedBuffers(
        positions=np.array(positions, dtype=np.float64),
        normals=np.array(normals, dtype=np.float64),
    )

    logger.debug(
        "Exported buffers: %d vertices, %d triangles, %d distinct normals computed",
        len(vertex_ids), len(indexed.indices) // 3, len(vertex_normals),
    )
    return MeshBuffers(indexed=indexed, non_indexed=non_indexed)
