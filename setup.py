from setuptools import setup, find_packages

setup(
    name="mesh-buffers",
    version="0.1.0",
    description="Export half-edge triangle meshes to indexed and non-indexed render buffers",
    author="",
    packages=find_packages(exclude=["tests"]),
    py_modules=["mesh_buffers"],
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "trimesh",
        "matplotlib",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
