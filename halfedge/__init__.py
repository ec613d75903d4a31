from .mesh import HalfedgeMesh, Walker
from .primitives import cylinder, square, cube
