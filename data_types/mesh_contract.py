"""
The read-only mesh interface that the buffer builders consume.
"""

from typing import Iterable, Optional, Protocol, Tuple

import numpy as np
from numpy.typing import NDArray

from .ids import FaceID, HalfedgeID, VertexID


class WalkerLike(Protocol):
    def vertex_id(self) -> Optional[VertexID]:
        """Destination vertex of the current half-edge, or None if there is none."""
        ...


class HalfedgeMeshLike(Protocol):
    """
    Anything that can be exported to render buffers.

    Precondition: ``vertex_iter`` and ``face_iter`` must yield every element
    exactly once and in the same order for the whole duration of one export
    call. Index values in the indexed buffers are positions in the
    ``vertex_iter`` order, so a backend whose iteration order changes between
    two calls made during one export produces meaningless indices.
    """

    def vertex_iter(self) -> Iterable[VertexID]: ...

    def face_iter(self) -> Iterable[FaceID]: ...

    def face_halfedge_iter(self, face_id: FaceID) -> Iterable[HalfedgeID]: ...

    def walker_from_halfedge(self, halfedge_id: HalfedgeID) -> WalkerLike: ...

    def vertex_position(self, vertex_id: VertexID) -> NDArray[np.float64]: ...

    def vertex_normal(self, vertex_id: VertexID) -> NDArray[np.float64]: ...

    def face_positions(
        self, face_id: FaceID
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]: ...

    def face_vertices(self, face_id: FaceID) -> Tuple[VertexID, VertexID, VertexID]: ...

    def no_faces(self) -> int: ...

    def no_vertices(self) -> int: ...
