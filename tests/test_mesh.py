import numpy as np
import pytest
import trimesh

from mesh_exporter.core.errors import GeometryError, InputError
from mesh_exporter.core.exporter import merge_and_export_meshes
from mesh_exporter.core.materials import Material
from mesh_exporter.core.mesh import (
    MeshDescription,
    Triangle,
    Vertex,
    VertexInstance,
    describe_mesh,
    merge_trimeshes,
    mesh_from_trimesh,
)

from conftest import gray_texture, parse_obj, triangle_mesh


def make_triangle(offset=0.0, with_uv=False):
    vertices = np.array([
        [offset, 0.0, 0.0],
        [offset + 1.0, 0.0, 0.0],
        [offset, 1.0, 0.0],
    ])
    faces = np.array([[0, 1, 2]])
    visual = None
    if with_uv:
        visual = trimesh.visual.TextureVisuals(uv=np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]))
    return trimesh.Trimesh(vertices=vertices, faces=faces, visual=visual, process=False)


def test_validate_accepts_fixture_mesh():
    triangle_mesh().description.validate()


def test_validate_rejects_missing_instance():
    description = MeshDescription(
        vertices=[Vertex(0, (0.0, 0.0, 0.0))],
        instances=[VertexInstance(0, 0, (0.0, 0.0, 1.0), (0.0, 0.0))],
        triangles=[Triangle((0, 0, 7), 0)],
    )
    with pytest.raises(GeometryError):
        description.validate()


def test_validate_rejects_missing_vertex():
    description = MeshDescription(
        vertices=[],
        instances=[VertexInstance(0, 3, (0.0, 0.0, 1.0), (0.0, 0.0))],
    )
    with pytest.raises(GeometryError):
        description.validate()


def test_describe_mesh_counts():
    assert describe_mesh(triangle_mesh()) == {
        "vertices": 3,
        "instances": 3,
        "triangles": 1,
        "materials": 1,
    }


def test_mesh_from_trimesh_builds_one_instance_per_corner():
    merged = mesh_from_trimesh(make_triangle(with_uv=True), name="Single")
    description = merged.description

    assert len(description.vertices) == 3
    assert len(description.instances) == 3
    assert description.triangles[0].instance_ids == (0, 1, 2)
    assert description.instances[1].uv == (1.0, 0.0)
    assert np.allclose(description.instances[0].normal, (0.0, 0.0, 1.0))
    assert merged.material_slots[0].material.name == "Single_material"


def test_mesh_without_uv_gets_zero_uvs():
    merged = mesh_from_trimesh(make_triangle())
    assert all(instance.uv == (0.0, 0.0) for instance in merged.description.instances)


def test_merge_offsets_vertices_and_tags_slots():
    materials = [Material("M_A"), Material("M_B")]
    merged = merge_trimeshes([make_triangle(), make_triangle(offset=5.0)], materials)
    description = merged.description

    assert len(description.vertices) == 6
    assert [t.material_slot for t in description.triangles] == [0, 1]
    second = [description.instance_lookup()[i].vertex_id for i in description.triangles[1].instance_ids]
    assert second == [3, 4, 5]
    assert description.vertices[3].position == (5.0, 0.0, 0.0)
    assert [slot.name for slot in merged.material_slots] == ["M_A", "M_B"]


def test_merge_shares_slot_for_shared_material():
    shared = Material("M_Shared")
    merged = merge_trimeshes([make_triangle(), make_triangle(2.0)], [shared, shared])

    assert len(merged.material_slots) == 1
    assert [t.material_slot for t in merged.description.triangles] == [0, 0]


def test_merge_keeps_uvs_of_textured_sources():
    merged = merge_trimeshes([make_triangle(with_uv=True), make_triangle(3.0)])
    uvs = [instance.uv for instance in merged.description.instances]

    assert uvs[:3] == [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
    assert uvs[3:] == [(0.0, 0.0)] * 3


def test_merge_rejects_empty_input():
    with pytest.raises(InputError):
        merge_trimeshes([])


def test_merge_rejects_misaligned_materials():
    with pytest.raises(InputError):
        merge_trimeshes([make_triangle()], [Material("A"), Material("B")])


def test_end_to_end_with_trimesh_sources(tmp_path):
    materials = [Material("M_Gray", {"BaseColor": gray_texture()}), Material("M_Plain")]
    out = tmp_path / "level" / "merged.obj"

    ok = merge_and_export_meshes(
        [make_triangle(with_uv=True), make_triangle(offset=2.0)],
        out,
        lambda sources: merge_trimeshes(sources, materials),
        export_as_gltf=False,
    )

    assert ok
    records = parse_obj(out.read_text())
    assert len(records["v"]) == 6
    assert len(records["f"]) == 2
    assert records["usemtl"] == ["M_Gray", "M_Plain"]
    assert (out.parent / "Textures" / "T_Gray.tga").exists()


def test_validate_rejects_vertex_ids_not_matching_positions():
    description = MeshDescription(
        vertices=[Vertex(10 + i, (float(i), 0.0, 0.0)) for i in range(3)],
        instances=[VertexInstance(i, 10 + i, (0.0, 0.0, 1.0), (0.0, 0.0)) for i in range(3)],
        triangles=[Triangle((0, 1, 2), 0)],
    )
    with pytest.raises(GeometryError, match="position"):
        description.validate()


def test_validate_rejects_duplicate_instance_ids():
    description = MeshDescription(
        vertices=[Vertex(0, (0.0, 0.0, 0.0))],
        instances=[
            VertexInstance(0, 0, (0.0, 0.0, 1.0), (0.0, 0.0)),
            VertexInstance(0, 0, (0.0, 0.0, 1.0), (1.0, 0.0)),
        ],
    )
    with pytest.raises(GeometryError):
        description.validate()
