"""
Merged mesh data model, plus adapters from trimesh.

The exporter consumes a single MergedMesh produced by an external merge
step. Its geometry is a MeshDescription with three ordered element sets:

    vertices   shared positions (one per unique position)
    instances  one per triangle corner; carries the normal and UV, and
               points at the vertex it sits on. Normals and UVs are not
               shared across corners of different triangles.
    triangles  three instance IDs plus the material slot index.

The material table is a list of MaterialSlot objects in the order of the
source mesh's material table. A slot's material may be None (the slot is
then skipped at export time).

mesh_from_trimesh() and merge_trimeshes() adapt trimesh objects into this
model. They are the ready-made merge collaborator used when the caller has
trimesh meshes in hand; the merging itself is trimesh.util.concatenate.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import trimesh

from mesh_exporter.core.errors import GeometryError, InputError
from mesh_exporter.core.materials import Material

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vertex:
    id: int
    position: tuple


@dataclass(frozen=True)
class VertexInstance:
    id: int
    vertex_id: int
    normal: tuple
    uv: tuple


@dataclass(frozen=True)
class Triangle:
    instance_ids: tuple
    material_slot: int


@dataclass
class MaterialSlot:
    """One entry of the mesh's material table."""
    index: int
    name: str
    material: object = None


@dataclass
class MeshDescription:
    """
    Geometry of a merged mesh.

    Vertex IDs must match their position in the vertex list (0..N-1 in
    declared order), since OBJ face records address vertices as id + 1.
    Instance IDs only need to be unique. validate() checks both, plus the
    referential invariant.
    """
    vertices: list = field(default_factory=list)
    instances: list = field(default_factory=list)
    triangles: list = field(default_factory=list)

    def instance_lookup(self) -> dict:
        return {instance.id: instance for instance in self.instances}

    def validate(self) -> None:
        """
        Check that every triangle corner and every instance resolves.

        Raises:
            GeometryError: On a vertex ID that is not its list position, a
                           duplicate instance ID, or the first dangling
                           instance or vertex reference.
        """
        for position, vertex in enumerate(self.vertices):
            if vertex.id != position:
                raise GeometryError(
                    f"Vertex id {vertex.id} does not match its position {position}"
                )

        vertex_ids = {vertex.id for vertex in self.vertices}
        instances = self.instance_lookup()
        if len(instances) != len(self.instances):
            raise GeometryError("Duplicate vertex instance ids")

        for instance in self.instances:
            if instance.vertex_id not in vertex_ids:
                raise GeometryError(
                    f"Vertex instance {instance.id} references missing vertex {instance.vertex_id}"
                )

        for index, triangle in enumerate(self.triangles):
            if len(triangle.instance_ids) != 3:
                raise GeometryError(f"Triangle {index} does not have exactly three corners")
            for instance_id in triangle.instance_ids:
                if instance_id not in instances:
                    raise GeometryError(
                        f"Triangle {index} references missing vertex instance {instance_id}"
                    )


@dataclass
class MergedMesh:
    """
    Output of the merge step, input of the exporter.

    description is None when the mesh has no retrievable geometry; the
    exporter treats that as a fatal GeometryError.
    """
    name: str
    description: MeshDescription | None = None
    material_slots: list = field(default_factory=list)

    def sorted_slots(self) -> list:
        return sorted(self.material_slots, key=lambda slot: slot.index)


def describe_mesh(mesh: MergedMesh) -> dict:
    """
    Summarize a merged mesh for log output.

    Returns a dict with vertex, instance, triangle and material slot counts
    (all zero when the mesh has no description).
    """
    description = mesh.description
    return {
        "vertices": len(description.vertices) if description else 0,
        "instances": len(description.instances) if description else 0,
        "triangles": len(description.triangles) if description else 0,
        "materials": len(mesh.material_slots),
    }


# ---------------------------------------------------------------------------
# trimesh adapters
# ---------------------------------------------------------------------------

def _uv_or_zeros(mesh: trimesh.Trimesh) -> np.ndarray:
    """Per-vertex UVs of a trimesh, or zeros if it carries none."""
    uv = getattr(mesh.visual, "uv", None)
    if uv is None or len(uv) != len(mesh.vertices):
        return np.zeros((len(mesh.vertices), 2), dtype=np.float64)
    return np.array(uv, dtype=np.float64)


def _description_from_arrays(vertices, faces, normals, uvs, face_slots) -> MeshDescription:
    """
    Build a MeshDescription from flat per-vertex arrays.

    Every face corner becomes its own vertex instance (ID = 3 * face + corner),
    carrying the normal and UV of the vertex it sits on.
    """
    description = MeshDescription()
    description.vertices = [
        Vertex(i, tuple(float(c) for c in position))
        for i, position in enumerate(vertices)
    ]

    for face_index, face in enumerate(faces):
        corner_ids = []
        for corner, vertex_id in enumerate(face):
            instance_id = face_index * 3 + corner
            vertex_id = int(vertex_id)
            description.instances.append(VertexInstance(
                id=instance_id,
                vertex_id=vertex_id,
                normal=tuple(float(c) for c in normals[vertex_id]),
                uv=tuple(float(c) for c in uvs[vertex_id]),
            ))
            corner_ids.append(instance_id)
        description.triangles.append(
            Triangle(tuple(corner_ids), int(face_slots[face_index]))
        )

    return description


def mesh_from_trimesh(mesh: trimesh.Trimesh, material_slots=None,
                      face_material_slots=None, name: str = "MergedMesh") -> MergedMesh:
    """
    Wrap a single trimesh.Trimesh as a MergedMesh.

    Args:
        mesh:                Source triangle mesh. Vertex normals are taken
                             from trimesh (computed from faces if not stored);
                             UVs from mesh.visual.uv when present.
        material_slots:      Material table. Defaults to one slot holding a
                             plain Material named after the mesh.
        face_material_slots: Per-face slot index. Defaults to slot 0.
        name:                Name recorded in the OBJ header.

    Returns:
        MergedMesh with a populated description.
    """
    faces = np.asarray(mesh.faces, dtype=np.int64)

    if material_slots is None:
        material_slots = [MaterialSlot(0, f"{name}_material", Material(f"{name}_material"))]
    if face_material_slots is None:
        face_material_slots = np.zeros(len(faces), dtype=np.int64)

    description = _description_from_arrays(
        np.asarray(mesh.vertices, dtype=np.float64),
        faces,
        np.asarray(mesh.vertex_normals, dtype=np.float64),
        _uv_or_zeros(mesh),
        face_material_slots,
    )
    return MergedMesh(name=name, description=description, material_slots=list(material_slots))


def merge_trimeshes(meshes, materials=None, name: str = "MergedMesh") -> MergedMesh:
    """
    Merge several trimesh meshes into one MergedMesh.

    Geometry is combined with trimesh.util.concatenate. Normals and UVs are
    stacked per source mesh in the same order, so they stay aligned with the
    concatenated vertex array even when the sources' visuals differ.

    Args:
        meshes:    Sequence of trimesh.Trimesh.
        materials: Optional sequence, one material (or None) per source mesh.
                   Source meshes sharing the same material object share a
                   slot. Defaults to one plain Material per source mesh.
        name:      Name of the merged mesh.

    Returns:
        MergedMesh whose triangles are tagged with their source's slot.

    Raises:
        InputError: If meshes is empty or materials does not line up.
    """
    meshes = list(meshes)
    if not meshes:
        raise InputError("No meshes to merge")

    if materials is None:
        materials = [Material(f"{name}_material_{i}") for i in range(len(meshes))]
    materials = list(materials)
    if len(materials) != len(meshes):
        raise InputError(
            f"Got {len(materials)} materials for {len(meshes)} meshes"
        )

    logger.info("Merging %d meshes...", len(meshes))

    # One slot per distinct material object, in first-seen order.
    slots = []
    slot_by_material = {}
    source_slots = []
    for i, material in enumerate(materials):
        key = id(material) if material is not None else ("null", i)
        if key not in slot_by_material:
            slot_name = material.name if material is not None else f"slot_{len(slots)}"
            slot_by_material[key] = len(slots)
            slots.append(MaterialSlot(len(slots), slot_name, material))
        source_slots.append(slot_by_material[key])

    # Geometry-only copies: concatenating textured visuals tries to pack
    # their materials, which is not needed here.
    combined = trimesh.util.concatenate([
        trimesh.Trimesh(vertices=m.vertices, faces=m.faces, process=False)
        for m in meshes
    ])

    normals = np.vstack([np.asarray(m.vertex_normals, dtype=np.float64) for m in meshes])
    uvs = np.vstack([_uv_or_zeros(m) for m in meshes])
    face_slots = np.repeat(
        np.array(source_slots, dtype=np.int64),
        [len(m.faces) for m in meshes],
    )

    description = _description_from_arrays(
        np.asarray(combined.vertices, dtype=np.float64),
        np.asarray(combined.faces, dtype=np.int64),
        normals,
        uvs,
        face_slots,
    )

    logger.info(
        "Successfully merged %d meshes into: %s (%d vertices, %d triangles)",
        len(meshes), name, len(description.vertices), len(description.triangles),
    )
    return MergedMesh(name=name, description=description, material_slots=slots)
