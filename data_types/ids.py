"""
Identifiers for half-edge mesh elements.

Identifiers are plain integers wrapped in distinct types so they can be used
directly as dict keys. They only mean something to the mesh that issued them.
"""

from typing import NewType

VertexID = NewType("VertexID", int)
FaceID = NewType("FaceID", int)
HalfedgeID = NewType("HalfedgeID", int)
