"""
mesh_exporter: merged-mesh to Wavefront OBJ/MTL exporter.

Takes a triangulated mesh produced by an external merge step (positions,
per-corner normals and UVs, per-triangle material slots, material table)
and writes a portable OBJ + MTL pair with one decoded texture image per
material under a Textures/ folder next to them.

The version string below is the single source of truth for the package
version, referenced by pyproject.toml.
"""

__version__ = "0.1.0"
