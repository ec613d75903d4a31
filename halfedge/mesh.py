"""
Half-edge mesh used as the source of exported render buffers.

Every face owns three half-edges linked in a cycle by ``next``. A half-edge
stores its *destination* vertex, so walking a face from its first half-edge
yields the face corners in winding order. Edges on the mesh boundary get a
twin half-edge without a face.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np
import trimesh
from numpy.typing import NDArray

from data_types import FaceID, HalfedgeID, Mesh3d, VertexID

logger = logging.getLogger(__name__)


@dataclass
class Halfedge:
    vertex: VertexID  # destination
    face: Optional[FaceID]  # None on the boundary
    next: Optional[HalfedgeID] = None
    twin: Optional[HalfedgeID] = None


class Walker:
    """Cursor over the half-edges of a mesh. Moving past the boundary leaves it on no half-edge."""

    def __init__(self, mesh: "HalfedgeMesh", halfedge_id: Optional[HalfedgeID]):
        self._mesh = mesh
        self._current = halfedge_id

    def _halfedge(self) -> Optional[Halfedge]:
        if self._current is None:
            return None
        return self._mesh._halfedges[self._current]

    def halfedge_id(self) -> Optional[HalfedgeID]:
        return self._current

    def vertex_id(self) -> Optional[VertexID]:
        halfedge = self._halfedge()
        return None if halfedge is None else halfedge.vertex

    def face_id(self) -> Optional[FaceID]:
        halfedge = self._halfedge()
        return None if halfedge is None else halfedge.face

    def twin_id(self) -> Optional[HalfedgeID]:
        halfedge = self._halfedge()
        return None if halfedge is None else halfedge.twin

    def as_next(self) -> "Walker":
        halfedge = self._halfedge()
        self._current = None if halfedge is None else halfedge.next
        return self

    def as_twin(self) -> "Walker":
        self._current = self.twin_id()
        return self

    def as_previous(self) -> "Walker":
        # Faces are triangles, so the previous half-edge is two steps ahead.
        return self.as_next().as_next()


class HalfedgeMesh:
    """
    Triangle mesh with half-edge connectivity.

    Parameters
    ----------
    vertices : array_like
        V x 3 vertex positions.
    faces : array_like
        F x 3 vertex indices, each row in winding order.

    Raises
    ------
    ValueError
        If a face references a missing vertex, repeats a vertex, or if a
        directed edge is used by more than one face (non-manifold edge or
        inconsistent face orientation).
    """

    def __init__(self, vertices, faces):
        positions = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)

        self._positions = {VertexID(i): positions[i].copy() for i in range(len(positions))}
        self._halfedges: dict[HalfedgeID, Halfedge] = {}
        self._face_halfedge: dict[FaceID, HalfedgeID] = {}
        self._outgoing: dict[VertexID, list[HalfedgeID]] = {v: [] for v in self._positions}

        directed_edges: dict[tuple[VertexID, VertexID], HalfedgeID] = {}
        for face_index, face in enumerate(faces):
            self._add_face(FaceID(face_index), [VertexID(int(v)) for v in face], directed_edges)
        self._add_boundary_halfedges(directed_edges)

        logger.debug(
            "Built half-edge mesh: %d vertices, %d faces, %d half-edges",
            self.no_vertices(), self.no_faces(), self.no_halfedges(),
        )

    @classmethod
    def from_mesh3d(cls, mesh: Mesh3d) -> "HalfedgeMesh":
        return cls(mesh.vertices, mesh.faces)

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> "HalfedgeMesh":
        return cls.from_mesh3d(Mesh3d.from_trimesh(mesh))

    def _new_halfedge(self, halfedge: Halfedge) -> HalfedgeID:
        halfedge_id = HalfedgeID(len(self._halfedges))
        self._halfedges[halfedge_id] = halfedge
        return halfedge_id

    def _add_face(self, face_id, corners, directed_edges):
        if any(v not in self._positions for v in corners):
            raise ValueError(f"Face {face_id} references a vertex outside 0-{len(self._positions) - 1}: {corners}")
        if len(set(corners)) != 3:
            raise ValueError(f"Face {face_id} repeats a vertex: {corners}")

        # Half-edge k runs from corner k-1 to corner k, so walking from the
        # first half-edge visits the corners in their given order.
        halfedge_ids = []
        for k in range(3):
            origin, destination = corners[k - 1], corners[k]
            if (origin, destination) in directed_edges:
                raise ValueError(
                    f"Edge {origin}->{destination} of face {face_id} is already used by another face"
                )
            halfedge_id = self._new_halfedge(Halfedge(vertex=destination, face=face_id))
            directed_edges[(origin, destination)] = halfedge_id
            self._outgoing[origin].append(halfedge_id)
            twin_id = directed_edges.get((destination, origin))
            if twin_id is not None:
                self._halfedges[halfedge_id].twin = twin_id
                self._halfedges[twin_id].twin = halfedge_id
            halfedge_ids.append(halfedge_id)

        for k in range(3):
            self._halfedges[halfedge_ids[k]].next = halfedge_ids[(k + 1) % 3]
        self._face_halfedge[face_id] = halfedge_ids[0]

    def _add_boundary_halfedges(self, directed_edges):
        for (origin, destination), halfedge_id in list(directed_edges.items()):
            if self._halfedges[halfedge_id].twin is not None:
                continue
            twin_id = self._new_halfedge(Halfedge(vertex=origin, face=None, twin=halfedge_id))
            self._halfedges[halfedge_id].twin = twin_id
            self._outgoing[destination].append(twin_id)

    # Iteration

    def vertex_iter(self) -> Iterator[VertexID]:
        return iter(self._positions)

    def face_iter(self) -> Iterator[FaceID]:
        return iter(self._face_halfedge)

    def halfedge_iter(self) -> Iterator[HalfedgeID]:
        return iter(self._halfedges)

    def face_halfedge_iter(self, face_id: FaceID) -> Iterator[HalfedgeID]:
        first = self._face_halfedge[face_id]
        current = first
        while True:
            yield current
            current = self._halfedges[current].next
            if current == first:
                break

    def vertex_halfedge_iter(self, vertex_id: VertexID) -> Iterator[HalfedgeID]:
        """Outgoing half-edges of a vertex, including boundary half-edges."""
        return iter(self._outgoing[vertex_id])

    def walker_from_halfedge(self, halfedge_id: HalfedgeID) -> Walker:
        return Walker(self, halfedge_id)

    def walker_from_face(self, face_id: FaceID) -> Walker:
        return Walker(self, self._face_halfedge[face_id])

    # Counts

    def no_vertices(self) -> int:
        return len(self._positions)

    def no_faces(self) -> int:
        return len(self._face_halfedge)

    def no_halfedges(self) -> int:
        return len(self._halfedges)

    def is_closed(self) -> bool:
        return all(halfedge.face is not None for halfedge in self._halfedges.values())

    # Geometry

    def vertex_position(self, vertex_id: VertexID) -> NDArray[np.float64]:
        return self._positions[vertex_id].copy()

    def face_vertices(self, face_id: FaceID) -> tuple[VertexID, VertexID, VertexID]:
        walker = self.walker_from_face(face_id)
        v0 = walker.vertex_id()
        v1 = walker.as_next().vertex_id()
        v2 = walker.as_next().vertex_id()
        return v0, v1, v2

    def face_positions(self, face_id: FaceID):
        v0, v1, v2 = self.face_vertices(face_id)
        return self.vertex_position(v0), self.vertex_position(v1), self.vertex_position(v2)

    def face_center(self, face_id: FaceID) -> NDArray[np.float64]:
        p0, p1, p2 = self.face_positions(face_id)
        return (p0 + p1 + p2) / 3.0

    def face_area(self, face_id: FaceID) -> float:
        p0, p1, p2 = self.face_positions(face_id)
        return 0.5 * np.linalg.norm(np.cross(p1 - p0, p2 - p0))

    def face_normal(self, face_id: FaceID) -> NDArray[np.float64]:
        """Unit normal of the face plane, oriented by the winding order. Zero for a face without area."""
        p0, p1, p2 = self.face_positions(face_id)
        normal = np.cross(p1 - p0, p2 - p0)
        length = np.linalg.norm(normal)
        if length == 0.0:
            return normal
        return normal / length

    def vertex_normal(self, vertex_id: VertexID) -> NDArray[np.float64]:
        """
        Average of the normals of the faces around a vertex, normalized.

        Faces without area have no normal and do not contribute. Computed from the current positions on every call.
        """
        normal = np.zeros(3)
        for halfedge_id in self.vertex_halfedge_iter(vertex_id):
            face_id = self._halfedges[halfedge_id].face
            if face_id is not None:
                normal += self.face_normal(face_id)
        length = np.linalg.norm(normal)
        if length == 0.0:
            return normal
        return normal / length
