"""Shared fixtures and helpers for the exporter tests."""

import pytest

from mesh_exporter.core.materials import Material, MaterialInstance
from mesh_exporter.core.mesh import (
    MaterialSlot,
    MergedMesh,
    MeshDescription,
    Triangle,
    Vertex,
    VertexInstance,
)
from mesh_exporter.core.textures import PlatformData, SourceFormat, Texture2D, TextureSource


def gray_texture(name="T_Gray"):
    """2x2 G8 texture with values 0, 85, 170, 255."""
    return Texture2D(
        name=name,
        source=TextureSource(2, 2, SourceFormat.G8, [bytes([0, 85, 170, 255])]),
    )


def platform_only_texture(name="T_Streamed", data=None):
    """Streamed 2x2 texture with no source and BGRA platform data."""
    if data is None:
        data = bytes([
            10, 20, 30, 255,   40, 50, 60, 255,
            70, 80, 90, 128,   1, 2, 3, 0,
        ])
    return Texture2D(
        name=name,
        source=None,
        platform_data=PlatformData(2, 2, [data]),
        is_streamed=True,
    )


def triangle_mesh(material=None, name="Tri"):
    """One triangle, three vertices, one material slot."""
    description = MeshDescription(
        vertices=[
            Vertex(0, (0.0, 0.0, 0.0)),
            Vertex(1, (1.0, 0.0, 0.0)),
            Vertex(2, (0.0, 1.0, 2.0)),
        ],
        instances=[
            VertexInstance(0, 0, (0.0, 0.0, 1.0), (0.0, 0.0)),
            VertexInstance(1, 1, (0.0, 0.0, 1.0), (1.0, 0.0)),
            VertexInstance(2, 2, (0.0, 0.0, 1.0), (0.0, 1.0)),
        ],
        triangles=[Triangle((0, 1, 2), 0)],
    )
    if material is None:
        material = Material("M_Plain")
    return MergedMesh(
        name=name,
        description=description,
        material_slots=[MaterialSlot(0, material.name, material)],
    )


def quad_mesh(materials):
    """
    Two triangles sharing an edge, each on its own slot.

    Four shared vertices, six vertex instances (one per corner). The
    triangle list is declared slot 1 first, so ordering by slot is visible.
    """
    description = MeshDescription(
        vertices=[
            Vertex(0, (0.0, 0.0, 0.0)),
            Vertex(1, (1.0, 0.0, 0.0)),
            Vertex(2, (1.0, 1.0, 0.0)),
            Vertex(3, (0.0, 1.0, 0.0)),
        ],
        instances=[
            VertexInstance(0, 0, (0.0, 0.0, 1.0), (0.0, 0.0)),
            VertexInstance(1, 1, (0.0, 0.0, 1.0), (1.0, 0.0)),
            VertexInstance(2, 2, (0.0, 0.0, 1.0), (1.0, 1.0)),
            VertexInstance(3, 0, (0.0, 0.0, 1.0), (0.0, 0.0)),
            VertexInstance(4, 2, (0.0, 0.0, 1.0), (1.0, 1.0)),
            VertexInstance(5, 3, (0.0, 0.0, 1.0), (0.0, 1.0)),
        ],
        triangles=[
            Triangle((3, 4, 5), 1),
            Triangle((0, 1, 2), 0),
        ],
    )
    slots = [
        MaterialSlot(i, material.name if material else f"slot_{i}", material)
        for i, material in enumerate(materials)
    ]
    return MergedMesh(name="Quad", description=description, material_slots=slots)


def parse_obj(text):
    """Minimal OBJ reader: returns records grouped by keyword."""
    records = {"v": [], "vt": [], "vn": [], "f": [], "usemtl": [], "mtllib": []}
    for line in text.splitlines():
        if not line or line.startswith("#"):
            continue
        keyword, *fields = line.split()
        if keyword == "f":
            records["f"].append([tuple(int(i) for i in corner.split("/")) for corner in fields])
        elif keyword in ("v", "vt", "vn"):
            records[keyword].append(tuple(float(value) for value in fields))
        else:
            records[keyword].append(" ".join(fields))
    return records


@pytest.fixture
def textured_material():
    return Material("M_Gray", {"BaseColor": gray_texture()})


@pytest.fixture
def instance_material():
    return MaterialInstance(
        "MI_Streamed",
        texture_parameter_values=[("Mask", None), ("Custom", platform_only_texture())],
    )
