"""
Wavefront OBJ and MTL text generation.

serialize_obj() turns a MergedMesh into OBJ text:

    # header comments
    mtllib <stem>.mtl
    v  x z y        one per vertex, declared order
    vt u 1-v        one per vertex instance, declared order
    vn x z y        one per vertex instance, same order as vt
    usemtl <name>   one group per material slot, ascending slot index
    f  v/t/n v/t/n v/t/n

Coordinate system: the source is Z-up, OBJ consumers expect Y-up, so every
position and normal is written with Y and Z swapped. No scaling. V is flipped
because OBJ puts the texture origin at the bottom-left.

Index spaces: v indices are vertex_id + 1. vt and vn share one 1-based
counter over vertex instances because both streams are written one line per
instance in the same order, so line N of each belongs to the same instance.

build_mtl() writes the matching material library once textures are known.
"""

import logging
from dataclasses import dataclass, field

from mesh_exporter.core.errors import GeometryError
from mesh_exporter.core.paths import sanitize_file_name
from mesh_exporter.core.settings import (
    COORDINATE_PRECISION,
    MTL_AMBIENT,
    MTL_DIFFUSE,
    MTL_ILLUMINATION,
    MTL_OPACITY,
    MTL_SHININESS,
    MTL_SPECULAR,
)

logger = logging.getLogger(__name__)


def swap_up_axis(vector):
    """(x, y, z) -> (x, z, y). A pure permutation: it is its own inverse."""
    x, y, z = vector
    return (x, z, y)


@dataclass
class ObjDocument:
    """Serialized OBJ text plus what the MTL stage needs to know."""
    text: str
    # Non-null material slots, in the order their usemtl groups were written.
    materials: list = field(default_factory=list)
    vertex_count: int = 0
    instance_count: int = 0
    face_count: int = 0


def _fmt(value: float, precision: int) -> str:
    return f"{value:.{precision}f}"


def serialize_obj(mesh, mtl_file_name: str, precision: int = COORDINATE_PRECISION) -> ObjDocument:
    """
    Build the OBJ text for a merged mesh.

    Args:
        mesh:          MergedMesh to export.
        mtl_file_name: File name for the mtllib line. Pass the OBJ file's own
                       stem + ".mtl", not the mesh name.
        precision:     Decimal places for v / vt / vn values.

    Returns:
        ObjDocument with the text and the material slots that were emitted.

    Raises:
        GeometryError: If the mesh has no geometry description.
    """
    description = mesh.description
    if description is None:
        raise GeometryError(f"Failed to get mesh description for {mesh.name}")

    lines = [
        "# Exported by mesh_exporter",
        f"# Mesh: {mesh.name}",
        f"mtllib {mtl_file_name}",
        "",
    ]

    logger.info(
        "Exporting %d vertices, %d triangles",
        len(description.vertices), len(description.triangles),
    )

    for vertex in description.vertices:
        x, y, z = swap_up_axis(vertex.position)
        lines.append(f"v {_fmt(x, precision)} {_fmt(y, precision)} {_fmt(z, precision)}")
    lines.append("")

    # Shared vt/vn index, keyed by instance identity.
    instance_to_index = {}
    for obj_index, instance in enumerate(description.instances, start=1):
        u, v = instance.uv
        lines.append(f"vt {_fmt(u, precision)} {_fmt(1.0 - v, precision)}")
        instance_to_index[instance.id] = obj_index
    lines.append("")

    for instance in description.instances:
        x, y, z = swap_up_axis(instance.normal)
        lines.append(f"vn {_fmt(x, precision)} {_fmt(y, precision)} {_fmt(z, precision)}")
    lines.append("")

    # Bucket triangles by slot once, keeping their declared order.
    triangles_by_slot = {}
    for triangle in description.triangles:
        triangles_by_slot.setdefault(triangle.material_slot, []).append(triangle)

    instances = description.instance_lookup()
    slots = mesh.sorted_slots()
    known_slots = {slot.index for slot in slots}

    logger.info("Mesh has %d materials/sections", len(slots))

    orphaned = sum(
        len(tris) for slot_index, tris in triangles_by_slot.items()
        if slot_index not in known_slots
    )
    if orphaned:
        logger.warning("%d triangles reference a material slot that does not exist; skipped", orphaned)

    emitted = []
    face_count = 0
    for slot in slots:
        if slot.material is None:
            skipped = len(triangles_by_slot.get(slot.index, []))
            logger.warning("Material %d is null; skipping %d triangles", slot.index, skipped)
            continue

        material_name = sanitize_file_name(slot.material.name)
        lines.append("")
        lines.append(f"# Material: {material_name}")
        lines.append(f"usemtl {material_name}")

        slot_faces = 0
        for triangle in triangles_by_slot.get(slot.index, []):
            corners = []
            for instance_id in triangle.instance_ids:
                vertex_index = instances[instance_id].vertex_id + 1
                uv_normal_index = instance_to_index[instance_id]
                corners.append(f"{vertex_index}/{uv_normal_index}/{uv_normal_index}")
            lines.append("f " + " ".join(corners))
            slot_faces += 1

        logger.info("Exported %d faces for material: %s", slot_faces, material_name)
        face_count += slot_faces
        emitted.append(slot)

    return ObjDocument(
        text="\n".join(lines) + "\n",
        materials=emitted,
        vertex_count=len(description.vertices),
        instance_count=len(description.instances),
        face_count=face_count,
    )


def _triple(values) -> str:
    return " ".join(f"{value:.1f}" for value in values)


def build_mtl(materials, texture_paths=None) -> str:
    """
    Build the MTL text for the emitted material slots.

    Args:
        materials:     MaterialSlot objects with a non-null material, in the
                       order they appear in the OBJ.
        texture_paths: {slot index: relative texture path}. Slots without an
                       entry get no map_Kd line.

    Returns:
        MTL file contents, one newmtl block per slot.
    """
    texture_paths = texture_paths or {}
    lines = []

    for slot in materials:
        lines.append(f"newmtl {sanitize_file_name(slot.material.name)}")
        lines.append(f"Ka {_triple(MTL_AMBIENT)}")
        lines.append(f"Kd {_triple(MTL_DIFFUSE)}")
        lines.append(f"Ks {_triple(MTL_SPECULAR)}")
        lines.append(f"Ns {MTL_SHININESS:.1f}")
        lines.append(f"d {MTL_OPACITY:.1f}")
        lines.append(f"illum {MTL_ILLUMINATION}")

        texture_path = texture_paths.get(slot.index)
        if texture_path:
            lines.append(f"map_Kd {texture_path}")
        lines.append("")

    return "\n".join(lines) + "\n" if lines else ""
