"""
Output path policy and whole-buffer file writes.

An export produces three things next to each other:

    <dir>/<stem>.obj
    <dir>/<stem>.mtl       stem is the OBJ file's own base name, never the
                           mesh's internal name, so the pair always matches
    <dir>/Textures/        one image per textured material

ExportArtifact is the typed container for those paths, so no other module
builds them by string concatenation.

Every file is written in one call from a fully built buffer. A failed write
raises ExportIOError; there is no partial/streamed write to roll back.
"""

from dataclasses import dataclass
from pathlib import Path

from mesh_exporter.core.errors import ExportIOError
from mesh_exporter.core.settings import MTL_EXTENSION, TEXTURES_DIR_NAME

# Characters that are unsafe in file names on at least one platform.
UNSAFE_FILENAME_CHARS = ' /\\:*?"<>|'

_SANITIZE_TABLE = str.maketrans({char: "_" for char in UNSAFE_FILENAME_CHARS})


def sanitize_file_name(name: str) -> str:
    """
    Replace every unsafe character (space / \\ : * ? " < > |) with "_".

    Sanitizing twice gives the same result as sanitizing once. Distinct names
    may collide after replacement ("A B" and "A:B" both become "A_B"); no
    attempt is made to tell them apart, so the later file overwrites the
    earlier one.
    """
    return name.translate(_SANITIZE_TABLE)


@dataclass(frozen=True)
class ExportArtifact:
    """Paths of one OBJ/MTL/Textures export."""
    obj_path: Path
    mtl_path: Path
    texture_dir: Path

    @property
    def mtl_file_name(self) -> str:
        return self.mtl_path.name


def artifact_for(obj_path, textures_dir_name: str = TEXTURES_DIR_NAME) -> ExportArtifact:
    """Derive the MTL and texture directory paths that pair with an OBJ path."""
    obj_path = Path(obj_path)
    return ExportArtifact(
        obj_path=obj_path,
        mtl_path=obj_path.with_name(obj_path.stem + MTL_EXTENSION),
        texture_dir=obj_path.parent / textures_dir_name,
    )


def write_bytes(path: Path, data: bytes) -> None:
    """
    Write a complete buffer to path in one call.

    Raises:
        ExportIOError: Wrapping the OSError if the write fails.
    """
    try:
        Path(path).write_bytes(data)
    except OSError as e:
        raise ExportIOError(f"Failed to write {path}: {e}") from e


def write_text(path: Path, text: str) -> None:
    # Always "\n" line endings, so output is byte-identical across platforms.
    write_bytes(path, text.encode("utf-8"))


def ensure_directory(path: Path) -> None:
    """
    Create a directory (and parents) if it does not exist yet.

    Raises:
        ExportIOError: If the directory cannot be created.
    """
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportIOError(f"Failed to create directory {path}: {e}") from e
