import argparse
import os
import sys
import trimesh
import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from halfedge import HalfedgeMesh, cylinder
from export import export_buffers
from plotting import plot_indexed_buffers, plot_non_indexed_buffers


DEFAULT_CYLINDER_SUBDIVISIONS = 16
PLOT_ALPHA = 0.7
NORMAL_ARROW_LENGTH = 0.1


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description='Export render buffers from triangle meshes.')
    parser.add_argument('load_filepaths', type=str, nargs='*', help='Paths to STL files to export')
    parser.add_argument('--cylinder', type=int, nargs='?', const=DEFAULT_CYLINDER_SUBDIVISIONS, default=None,
                        metavar='N', help='Also export a closed cylinder with N angle subdivisions')
    parser.add_argument('--non-indexed', action='store_true', help='Plot the non-indexed buffers instead of the indexed ones')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output with visualizations')

    args = parser.parse_args(argv)

    if not args.load_filepaths and args.cylinder is None:
        print("Error: Give at least one STL file or --cylinder.")
        sys.exit(1)

    for load_filepath in args.load_filepaths:
        if not load_filepath.lower().endswith('.stl'):
            print(f"Error: The file must have a .stl extension. Got: {load_filepath}")
            sys.exit(1)

        if not os.path.isfile(load_filepath):
            print(f"Error: The file {load_filepath} does not exist.")
            sys.exit(1)

    return args


def load_stl_file(load_filepath) -> HalfedgeMesh:
    try:
        mesh = trimesh.load(load_filepath, force='mesh')
        return HalfedgeMesh.from_trimesh(mesh)

    except Exception as e:
        print(f"Error loading the STL file: {e}")
        sys.exit(1)


def summarize_buffers(name, buffers) -> str:
    indexed = buffers.indexed
    non_indexed = buffers.non_indexed
    lines = [
        f"{name}:",
        f"  vertices: {len(indexed.positions)}",
        f"  triangles: {len(indexed.indices) // 3}",
        f"  indices: {len(indexed.indices)}",
        f"  non-indexed floats: {len(non_indexed.positions)} positions, {len(non_indexed.normals)} normals",
    ]
    if len(indexed.positions):
        min_point = indexed.positions.min(axis=0)
        max_point = indexed.positions.max(axis=0)
        lines.append(f"  bounds: {np.round(min_point, 4).tolist()} to {np.round(max_point, 4).tolist()}")
    return "\n".join(lines)


def main(argv=None):
    args = parse_args(argv)

    meshes = []
    if args.cylinder is not None:
        meshes.append((f"cylinder({args.cylinder})", HalfedgeMesh.from_mesh3d(cylinder(args.cylinder))))

    for load_filepath in tqdm(args.load_filepaths, desc="Loading meshes", disable=len(args.load_filepaths) < 2):
        meshes.append((os.path.basename(load_filepath), load_stl_file(load_filepath)))

    for name, mesh in meshes:
        buffers = export_buffers(mesh)
        print(summarize_buffers(name, buffers))

        if args.verbose:
            if args.non_indexed:
                plot_non_indexed_buffers(buffers.non_indexed.positions, buffers.non_indexed.normals,
                                         title=name, alpha=PLOT_ALPHA, normal_length=NORMAL_ARROW_LENGTH)
            else:
                plot_indexed_buffers(buffers.indexed.indices, buffers.indexed.positions, buffers.indexed.normals,
                                     title=name, alpha=PLOT_ALPHA, normal_length=NORMAL_ARROW_LENGTH)
            plt.tight_layout()
            plt.show()


if __name__ == "__main__":
    main()
