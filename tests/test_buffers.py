"""
Tests for the indexed and non-indexed buffer builders.
"""

import os
import sys
import numpy as np
import pytest

# Add the parent directory to the Python path so we can import the export module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from data_types import MeshConsistencyError
from halfedge import HalfedgeMesh, cylinder, cube, square
from export import (
    indices_buffer,
    positions_buffer,
    normals_buffer,
    indexed_buffers,
    non_indexed_positions_buffer,
    non_indexed_normals_buffer,
    non_indexed_buffers,
    export_buffers,
)
from export.buffers import push_vec3


class FakeWalker:
    def __init__(self, vertex_id):
        self._vertex_id = vertex_id

    def vertex_id(self):
        return self._vertex_id


class FakeMesh:
    """
    Minimal mesh with arbitrary vertex identifiers.

    ``faces`` maps face ids to three vertex ids, ``halfedge_targets`` lets a
    test break the destination of individual half-edges.
    """

    def __init__(self, positions, faces):
        self.positions = {v: np.asarray(p, dtype=np.float64) for v, p in positions.items()}
        self.faces = faces
        self.halfedge_targets = {}
        for face_id, corners in faces.items():
            for k, vertex_id in enumerate(corners):
                self.halfedge_targets[(face_id, k)] = vertex_id
        self.normal_calls = 0

    def vertex_iter(self):
        return iter(self.positions)

    def face_iter(self):
        return iter(self.faces)

    def face_halfedge_iter(self, face_id):
        return iter([(face_id, k) for k in range(len(self.faces[face_id]))])

    def walker_from_halfedge(self, halfedge_id):
        return FakeWalker(self.halfedge_targets[halfedge_id])

    def vertex_position(self, vertex_id):
        return self.positions[vertex_id]

    def vertex_normal(self, vertex_id):
        self.normal_calls += 1
        position = self.positions[vertex_id]
        return position / max(np.linalg.norm(position), 1.0)

    def face_positions(self, face_id):
        return tuple(self.positions[v] for v in self.faces[face_id])

    def face_vertices(self, face_id):
        return tuple(self.faces[face_id])

    def no_faces(self):
        return len(self.faces)

    def no_vertices(self):
        return len(self.positions)


def create_fake_mesh():
    """Two triangles over vertex ids that are neither contiguous nor sorted."""
    positions = {
        40: [0.0, 0.0, 0.0],
        7: [1.0, 0.0, 0.0],
        99: [1.0, 1.0, 0.0],
        12: [0.0, 1.0, 2.0],
    }
    faces = {
        5: (40, 7, 99),
        3: (40, 99, 12),
    }
    return FakeMesh(positions, faces)


def corner_blocks(flat_buffer):
    """Split a non-indexed buffer into F x 3 x 3 corner vectors."""
    return np.asarray(flat_buffer).reshape(-1, 3, 3)


def test_indexed_export_cylinder():
    """Indexed buffers of a closed cylinder line up with the mesh's faces and normals."""
    mesh = HalfedgeMesh.from_mesh3d(cylinder(16))
    indices = indices_buffer(mesh)
    positions = positions_buffer(mesh)
    normals = normals_buffer(mesh)

    assert len(indices) == mesh.no_faces() * 3
    assert len(positions) == mesh.no_vertices()
    assert len(normals) == mesh.no_vertices()

    face_ids = list(mesh.face_iter())
    face_centers = np.array([mesh.face_center(face_id) for face_id in face_ids])

    for face, face_id in enumerate(face_ids):
        i0, i1, i2 = indices[3 * face: 3 * face + 3]
        assert len({i0, i1, i2}) == 3

        center = (positions[i0] + positions[i1] + positions[i2]) / 3.0
        assert np.linalg.norm(face_centers - center, axis=1).min() < 1e-5
        assert np.linalg.norm(mesh.face_center(face_id) - center) < 1e-5

        n0, n1, n2 = normals[i0], normals[i1], normals[i2]
        for vertex_id in mesh.face_vertices(face_id):
            vertex_normal = mesh.vertex_normal(vertex_id)
            assert any(np.array_equal(n, vertex_normal) for n in (n0, n1, n2))


def test_indexed_export_follows_winding_order():
    """Each index triple reproduces the face corners in the face's own order."""
    mesh = HalfedgeMesh.from_mesh3d(cylinder(16))
    positions = positions_buffer(mesh)
    triangles = positions[indices_buffer(mesh).reshape(-1, 3)]

    for face, face_id in enumerate(mesh.face_iter()):
        for k, corner in enumerate(mesh.face_positions(face_id)):
            assert np.array_equal(triangles[face, k], corner)


def test_non_indexed_export_cylinder():
    """Non-indexed buffers hold nine floats per face, in winding order."""
    mesh = HalfedgeMesh.from_mesh3d(cylinder(16))
    positions = non_indexed_positions_buffer(mesh)
    normals = non_indexed_normals_buffer(mesh)

    assert len(positions) == mesh.no_faces() * 3 * 3
    assert len(normals) == mesh.no_faces() * 3 * 3

    position_blocks = corner_blocks(positions)
    normal_blocks = corner_blocks(normals)
    for face, face_id in enumerate(mesh.face_iter()):
        center = position_blocks[face].mean(axis=0)
        assert np.linalg.norm(mesh.face_center(face_id) - center) < 1e-5

        for k, vertex_id in enumerate(mesh.face_vertices(face_id)):
            assert np.array_equal(normal_blocks[face, k], mesh.vertex_normal(vertex_id))


def test_indexed_and_non_indexed_agree():
    """Expanding the indexed buffers through the indices gives the non-indexed buffers."""
    mesh = HalfedgeMesh.from_mesh3d(cube())
    indexed = indexed_buffers(mesh)
    non_indexed = non_indexed_buffers(mesh)

    triangles = indexed.indices.reshape(-1, 3)
    assert np.array_equal(indexed.positions[triangles], corner_blocks(non_indexed.positions))
    assert np.array_equal(indexed.normals[triangles], corner_blocks(non_indexed.normals))


def test_buffer_dtypes_and_shapes():
    mesh = HalfedgeMesh.from_mesh3d(square())
    indexed = indexed_buffers(mesh)
    non_indexed = non_indexed_buffers(mesh)

    assert indexed.indices.dtype == np.uint32
    assert indexed.indices.shape == (6,)
    assert indexed.positions.dtype == np.float64
    assert indexed.positions.shape == (4, 3)
    assert indexed.normals.shape == (4, 3)
    assert non_indexed.positions.dtype == np.float64
    assert non_indexed.positions.shape == (18,)
    assert non_indexed.normals.shape == (18,)

    assert indexed.indices.tolist() == [0, 1, 2, 0, 2, 3]
    assert np.allclose(indexed.normals, [[0.0, 0.0, 1.0]] * 4)


def test_repeated_export_is_identical():
    mesh = HalfedgeMesh.from_mesh3d(cylinder(16))
    builders = [
        indices_buffer,
        positions_buffer,
        normals_buffer,
        non_indexed_positions_buffer,
        non_indexed_normals_buffer,
    ]
    for builder in builders:
        first = builder(mesh)
        second = builder(mesh)
        assert first is not second
        assert first.dtype == second.dtype
        assert first.tobytes() == second.tobytes()


def test_export_without_faces():
    """A mesh with vertices but no faces exports empty face buffers."""
    mesh = HalfedgeMesh(vertices=[[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]], faces=np.zeros((0, 3), dtype=np.int64))

    assert indices_buffer(mesh).shape == (0,)
    assert non_indexed_positions_buffer(mesh).shape == (0,)
    assert non_indexed_normals_buffer(mesh).shape == (0,)
    assert positions_buffer(mesh).shape == (2, 3)
    # Isolated vertices have no adjacent faces to average
    assert np.array_equal(normals_buffer(mesh), np.zeros((2, 3)))


def test_export_empty_mesh():
    mesh = HalfedgeMesh(vertices=np.zeros((0, 3)), faces=np.zeros((0, 3), dtype=np.int64))
    buffers = export_buffers(mesh)

    assert buffers.indexed.indices.shape == (0,)
    assert buffers.indexed.positions.shape == (0, 3)
    assert buffers.indexed.normals.shape == (0, 3)
    assert buffers.non_indexed.positions.shape == (0,)
    assert buffers.non_indexed.normals.shape == (0,)


def test_indices_are_slots_not_identifiers():
    """Index values count positions in vertex_iter order, whatever the identifiers are."""
    mesh = create_fake_mesh()
    indexed = indexed_buffers(mesh)

    # vertex_iter order: 40, 7, 99, 12
    assert indexed.indices.tolist() == [0, 1, 2, 0, 2, 3]
    assert np.array_equal(indexed.positions[3], [0.0, 1.0, 2.0])
    assert np.array_equal(indices_buffer(mesh), indexed.indices)
    assert np.array_equal(positions_buffer(mesh), indexed.positions)
    assert np.array_equal(normals_buffer(mesh), indexed.normals)

    # Faces come out in face_iter order, not sorted by id
    blocks = corner_blocks(non_indexed_positions_buffer(mesh))
    assert np.array_equal(blocks[0], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0]])


def test_export_buffers_matches_separate_builders():
    mesh = HalfedgeMesh.from_mesh3d(cylinder(8, capped=False))
    buffers = export_buffers(mesh)

    assert np.array_equal(buffers.indexed.indices, indices_buffer(mesh))
    assert np.array_equal(buffers.indexed.positions, positions_buffer(mesh))
    assert np.array_equal(buffers.indexed.normals, normals_buffer(mesh))
    assert np.array_equal(buffers.non_indexed.positions, non_indexed_positions_buffer(mesh))
    assert np.array_equal(buffers.non_indexed.normals, non_indexed_normals_buffer(mesh))


def test_export_buffers_computes_each_normal_once():
    mesh = create_fake_mesh()
    export_buffers(mesh)
    assert mesh.normal_calls == mesh.no_vertices()

    # The separate builders recompute on every call
    mesh.normal_calls = 0
    normals_buffer(mesh)
    non_indexed_normals_buffer(mesh)
    assert mesh.normal_calls == mesh.no_vertices() + 3 * mesh.no_faces()


def test_halfedge_without_destination_raises():
    mesh = create_fake_mesh()
    mesh.halfedge_targets[(3, 1)] = None

    with pytest.raises(MeshConsistencyError):
        indices_buffer(mesh)
    with pytest.raises(MeshConsistencyError):
        indexed_buffers(mesh)
    with pytest.raises(MeshConsistencyError):
        export_buffers(mesh)


def test_face_with_unknown_vertex_raises():
    mesh = create_fake_mesh()
    mesh.halfedge_targets[(5, 2)] = 1000

    with pytest.raises(MeshConsistencyError, match="1000"):
        indices_buffer(mesh)
    with pytest.raises(MeshConsistencyError):
        export_buffers(mesh)


def test_non_triangle_face_raises():
    mesh = create_fake_mesh()
    mesh.faces[5] = (40, 7, 99, 12)
    mesh.halfedge_targets[(5, 3)] = 12

    with pytest.raises(MeshConsistencyError, match="4 corners"):
        indices_buffer(mesh)
    with pytest.raises(MeshConsistencyError, match="4 corners"):
        non_indexed_positions_buffer(mesh)
    with pytest.raises(MeshConsistencyError, match="4 corners"):
        non_indexed_normals_buffer(mesh)


def test_non_triangle_corner_lookup_raises_in_combined_export():
    """The corner accessors are checked even when the half-edge loop is a triangle."""
    mesh = create_fake_mesh()
    mesh.faces[5] = (40, 7, 99, 12)
    mesh.face_halfedge_iter = lambda face_id: iter([(face_id, k) for k in range(3)])

    assert len(indices_buffer(mesh)) == 6
    with pytest.raises(MeshConsistencyError, match="4 corners"):
        export_buffers(mesh)


def test_consistency_error_is_a_value_error():
    assert issubclass(MeshConsistencyError, ValueError)


def test_push_vec3():
    buffer = [1.0]
    push_vec3(buffer, np.array([2.0, 3.0, 4.0]))
    push_vec3(buffer, (5, 6, 7))
    assert buffer == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0]
    assert all(isinstance(value, float) for value in buffer)


def test_export_reflects_current_positions():
    """Buffers are snapshots, rebuilt from the mesh on every call."""
    mesh = create_fake_mesh()
    before = positions_buffer(mesh)

    mesh.positions[7] = np.array([5.0, 0.0, 0.0])
    after = positions_buffer(mesh)

    assert np.array_equal(before[1], [1.0, 0.0, 0.0])
    assert np.array_equal(after[1], [5.0, 0.0, 0.0])
