from .ids import VertexID, FaceID, HalfedgeID
from .mesh3d import Mesh3d
from .mesh_contract import HalfedgeMeshLike, WalkerLike
from .errors import MeshConsistencyError
