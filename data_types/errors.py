class MeshConsistencyError(ValueError):
    """
    Raised when a mesh contradicts its own connectivity while being exported.

    Examples are a half-edge with no destination vertex, or a face referencing a
    vertex that the mesh does not report from ``vertex_iter``. This indicates a
    broken mesh backend rather than bad user input, so the export is aborted.
    """
