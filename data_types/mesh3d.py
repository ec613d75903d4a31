from dataclasses import dataclass
import numpy as np
import trimesh
from numpy.typing import NDArray


@dataclass
class Mesh3d:
    vertices: NDArray[np.float64]  # V x 3 array of vertex coordinates
    faces: NDArray[np.int64]  # F x 3 array of vertex *indices* which are face corners, in winding order

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> "Mesh3d":
        """Copy the vertex and face arrays out of a loaded trimesh."""
        return cls(vertices=np.array(mesh.vertices), faces=np.array(mesh.faces))
