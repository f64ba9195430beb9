"""
Export orchestration for mesh_exporter.

Public entry points (none of them raise; every failure comes back as False
plus log output):

    merge_and_export_meshes(sources, export_path, merge, export_as_gltf)
        Full run: hand the source meshes to the external merge step, create
        the export directory, then export the merged mesh.
    export_to_obj(mesh, file_path)
        Export one merged mesh as OBJ + MTL + Textures/.
    export_to_gltf(mesh, file_path)
        Known limitation: no binary container encoder exists, so this logs a
        warning and writes OBJ/MTL next to the requested path instead.

Ordering and failure policy of export_to_obj:
    1. Validate: mesh present, has a geometry description, has triangles.
    2. Serialize the OBJ text and write it in one call.
    3. Only if the OBJ write succeeded: resolve and export each material's
       texture, then write the MTL.
    4. Report success iff the OBJ was written. MTL and texture failures only
       degrade the output (missing file, untextured material).

Everything runs synchronously on the calling thread. Per-material failures
are local: one material's texture problem never blocks the next material.
"""

import logging
from pathlib import Path
from typing import Callable

from mesh_exporter.core.errors import (
    ExportError,
    ExportIOError,
    FormatError,
    InputError,
    ResolutionMiss,
)
from mesh_exporter.core.materials import resolve_texture
from mesh_exporter.core.mesh import describe_mesh
from mesh_exporter.core.obj_writer import build_mtl, serialize_obj
from mesh_exporter.core.paths import (
    ExportArtifact,
    artifact_for,
    ensure_directory,
    sanitize_file_name,
    write_text,
)
from mesh_exporter.core.settings import GLTF_EXTENSIONS, OBJ_EXTENSION, ExportSettings
from mesh_exporter.core.texture_writer import export_texture

logger = logging.getLogger(__name__)


def _no_progress(message: str) -> None:
    pass


def export_materials(materials, artifact: ExportArtifact,
                     settings: ExportSettings | None = None,
                     on_progress: Callable[[str], None] | None = None) -> bool:
    """
    Export the textures of the emitted materials and write the MTL file.

    Args:
        materials:   MaterialSlot objects with a non-null material, as
                     returned in ObjDocument.materials.
        artifact:    Paths of the export (MTL path, Textures/ directory).
        settings:    Export configuration; defaults to ExportSettings().
        on_progress: Optional status callback.

    Returns:
        True if the MTL file was written. Texture problems never make this
        return False; they only drop the map_Kd line of that material.
    """
    settings = settings or ExportSettings()
    on_progress = on_progress or _no_progress

    logger.info("Exporting %d materials", len(materials))
    texture_paths = {}

    for slot in materials:
        material_name = sanitize_file_name(slot.material.name)
        logger.info("Processing material: %s", material_name)
        on_progress(f"Processing material: {material_name}")

        if not settings.export_textures:
            continue

        try:
            texture = resolve_texture(slot.material, settings.parameter_names)
        except ResolutionMiss as e:
            logger.warning("%s", e)
            continue

        try:
            texture_paths[slot.index] = export_texture(
                texture,
                artifact.texture_dir,
                settings.texture_encoders,
                settings.textures_dir_name,
            )
        except FormatError as e:
            logger.warning("Skipping texture %s: %s", texture.name, e)
        except ExportError as e:
            logger.error("Failed to save texture file for %s: %s", material_name, e)
        except Exception:
            # Image encoding is external; a failure stays local to this material.
            logger.exception("Failed to export texture %s", texture.name)

    mtl_text = build_mtl(materials, texture_paths)
    try:
        write_text(artifact.mtl_path, mtl_text)
    except ExportIOError as e:
        logger.error("MTL file not saved: %s", e)
        return False

    logger.info("MTL file saved: %s", artifact.mtl_path)
    logger.debug("MTL Content:\n%s", mtl_text)
    return True


def export_to_obj(mesh, file_path, settings: ExportSettings | None = None,
                  on_progress: Callable[[str], None] | None = None) -> bool:
    """
    Export a merged mesh as <file_path> + matching .mtl + Textures/.

    Args:
        mesh:        MergedMesh to export.
        file_path:   Destination .obj path. Its stem names the MTL file.
        settings:    Export configuration; defaults to ExportSettings().
        on_progress: Optional status callback.

    Returns:
        True if the OBJ file was written (regardless of MTL/texture results).
    """
    settings = settings or ExportSettings()
    on_progress = on_progress or _no_progress

    try:
        if mesh is None:
            raise InputError("Cannot export null mesh")

        description = mesh.description
        if description is not None:
            description.validate()
            if not description.triangles:
                raise InputError(f"Mesh {mesh.name} has no triangles")

        artifact = artifact_for(file_path, settings.textures_dir_name)
        logger.info("Exporting mesh %s: %s", mesh.name, describe_mesh(mesh))

        on_progress("Writing geometry...")
        document = serialize_obj(mesh, artifact.mtl_file_name, settings.precision)
        write_text(artifact.obj_path, document.text)
    except ExportError as e:
        logger.error("OBJ export failed: %s", e)
        return False

    logger.info("Successfully exported to OBJ: %s", artifact.obj_path)

    on_progress("Writing materials...")
    export_materials(document.materials, artifact, settings, on_progress)

    on_progress(f"Exported {document.face_count} faces to {artifact.obj_path.name}")
    return True


def export_to_gltf(mesh, file_path, settings: ExportSettings | None = None,
                   on_progress: Callable[[str], None] | None = None) -> bool:
    """
    GLTF request. Writes OBJ/MTL instead; see module docstring.

    A .gltf or .glb suffix is replaced with .obj; any other path is used
    as-is.
    """
    logger.warning("GLTF export is not implemented. Falling back to OBJ export.")

    path = Path(file_path)
    if path.suffix.lower() in GLTF_EXTENSIONS:
        path = path.with_suffix(OBJ_EXTENSION)
    return export_to_obj(mesh, path, settings, on_progress)


def merge_and_export_meshes(source_meshes, export_path, merge: Callable,
                            export_as_gltf: bool = True,
                            settings: ExportSettings | None = None,
                            on_progress: Callable[[str], None] | None = None) -> bool:
    """
    Merge source meshes with an external merge step and export the result.

    Args:
        source_meshes:  Meshes to merge (any objects the merge step accepts).
        export_path:    Destination path (.obj, or .gltf/.glb when
                        export_as_gltf is set).
        merge:          Callable taking the list of source meshes and
                        returning a MergedMesh, or None on failure. For
                        trimesh inputs use mesh.merge_trimeshes.
        export_as_gltf: Format preference. GLTF currently degrades to OBJ.
        settings:       Export configuration; defaults to ExportSettings().
        on_progress:    Optional status callback.

    Returns:
        True if the export wrote its OBJ file.
    """
    on_progress = on_progress or _no_progress
    logger.info("Starting mesh merge and export process...")

    sources = list(source_meshes or [])
    if not sources:
        logger.error("%s", InputError("No source meshes to merge"))
        return False

    on_progress(f"Merging {len(sources)} meshes...")
    try:
        merged = merge(sources)
    except ExportError as e:
        logger.error("Failed to merge meshes: %s", e)
        return False
    except Exception:
        # The merge step is external; whatever it raises must not escape.
        logger.exception("Failed to merge meshes")
        return False

    if merged is None:
        logger.error("Merged mesh is null")
        return False

    try:
        ensure_directory(Path(export_path).parent)
    except ExportIOError as e:
        logger.error("%s", e)
        return False

    if export_as_gltf:
        success = export_to_gltf(merged, export_path, settings, on_progress)
    else:
        success = export_to_obj(merged, export_path, settings, on_progress)

    if success:
        logger.info("Successfully exported merged mesh to: %s", export_path)
    else:
        logger.error("Failed to export merged mesh")
    return success
