from .buffers import (
    IndexedBuffers,
    NonIndexedBuffers,
    MeshBuffers,
    indices_buffer,
    positions_buffer,
    normals_buffer,
    indexed_buffers,
    non_indexed_positions_buffer,
    non_indexed_normals_buffer,
    non_indexed_buffers,
    export_buffers,
)
