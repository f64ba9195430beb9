"""
Texture extraction, encoding and writing.

Turns one resolved Texture2D into an image file under the export's Textures/
folder and returns the path the MTL should reference.

Extraction is two-tier:
    Tier 1  authoring source. Valid source with non-empty mip 0 data; the
            declared source format is kept.
    Tier 2  platform data. Only reached when Tier 1 is missing or empty
            (typical for streamed/virtual textures). The first mip is assumed
            to be 4 bytes per pixel, blue-green-red-alpha, and must hold at
            least width * height * 4 bytes or the texture is skipped.

Encoding goes through Pillow. Containers are tried in the order configured
in settings.TEXTURE_ENCODERS (uncompressed TGA, then PNG); an encode or write
failure moves on to the next one with the same pixels.
"""

import io
import logging
import struct
from pathlib import Path

import numpy as np
from PIL import Image

from mesh_exporter.core.errors import ExportIOError, FormatError
from mesh_exporter.core.fallback import first_success
from mesh_exporter.core.paths import ensure_directory, sanitize_file_name, write_bytes
from mesh_exporter.core.pixels import normalize_pixels
from mesh_exporter.core.settings import TEXTURE_ENCODERS, TEXTURES_DIR_NAME
from mesh_exporter.core.textures import BYTES_PER_PIXEL, SourceFormat, SourceTexture, Texture2D

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Extraction tiers
# ---------------------------------------------------------------------------

def extract_from_source(texture: Texture2D) -> SourceTexture:
    """
    Tier 1: snapshot the authoring source's mip 0.

    Raises:
        FormatError: If the texture has no valid source or mip 0 is empty.
    """
    source = texture.source
    if source is None or not source.is_valid():
        raise FormatError(f"Texture source is invalid: {texture.name}")

    raw = source.mip_data(0)
    if not raw:
        raise FormatError(f"Texture has no mip data: {texture.name}")

    logger.info(
        "Texture size: %dx%d, Format: %s, Data size: %d",
        source.width, source.height, source.format, len(raw),
    )
    return SourceTexture(
        width=source.width,
        height=source.height,
        source_format=source.format,
        raw_bytes=raw,
        is_streamed_or_virtual=texture.is_streamed,
    )


def extract_from_platform_data(texture: Texture2D) -> SourceTexture:
    """
    Tier 2: snapshot the first mip of the runtime platform data.

    Raises:
        FormatError: If there is no platform data or its first mip is smaller
                     than width * height * 4 bytes.
    """
    platform = texture.platform_data
    if platform is None or platform.width <= 0 or platform.height <= 0:
        raise FormatError(f"Texture has no platform data: {texture.name}")

    raw = platform.first_mip()
    expected = platform.width * platform.height * BYTES_PER_PIXEL
    if len(raw) < expected:
        raise FormatError(
            f"Platform data size mismatch for {texture.name}: "
            f"{len(raw)} bytes, expected {expected}"
        )

    logger.info(
        "Using platform data for %s: %dx%d, Data size: %d",
        texture.name, platform.width, platform.height, len(raw),
    )
    return SourceTexture(
        width=platform.width,
        height=platform.height,
        source_format=SourceFormat.BGRA8,
        raw_bytes=raw,
        is_streamed_or_virtual=texture.is_streamed,
    )


def extract_source_texture(texture: Texture2D) -> SourceTexture:
    """Run Tier 1, then Tier 2. Raises FormatError if neither yields data."""
    _, snapshot = first_success([
        ("Texture source", lambda: extract_from_source(texture)),
        ("Platform data", lambda: extract_from_platform_data(texture)),
    ])
    return snapshot


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_image(pixels: np.ndarray, image_format: str) -> bytes:
    """
    Encode a canonical RGBA8 buffer into an image container.

    Args:
        pixels:       (height, width, 4) uint8 array.
        image_format: Pillow format name ("TGA", "PNG", ...).

    Returns:
        The encoded file contents.

    Raises:
        ExportIOError: If Pillow cannot encode the buffer in that format, or
                       produced no data.
    """
    buffer = io.BytesIO()
    try:
        # (h, w, 4) uint8 is inferred as RGBA.
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(buffer, format=image_format)
    except (OSError, ValueError, KeyError, struct.error) as e:
        raise ExportIOError(f"Failed to compress texture data as {image_format}: {e}") from e

    data = buffer.getvalue()
    if not data:
        raise ExportIOError(f"Failed to compress texture data as {image_format}")
    return data


def write_texture_image(pixels: np.ndarray, texture_dir: Path, base_name: str,
                        encoders=TEXTURE_ENCODERS) -> str:
    """
    Encode and write pixels, trying each configured container in order.

    Returns:
        File name (no directory) of the image that was written.

    Raises:
        ExportIOError: If every container failed to encode or write.
    """
    def attempt(image_format, extension):
        file_name = base_name + extension
        data = encode_image(pixels, image_format)
        write_bytes(Path(texture_dir) / file_name, data)
        return file_name

    label, file_name = first_success(
        (image_format, lambda f=image_format, e=extension: attempt(f, e))
        for image_format, extension in encoders
    )
    logger.info("Successfully exported texture: %s (%s)", Path(texture_dir) / file_name, label)
    return file_name


def export_texture(texture: Texture2D, texture_dir: Path,
                   encoders=TEXTURE_ENCODERS,
                   textures_dir_name: str = TEXTURES_DIR_NAME) -> str:
    """
    Extract, normalize, encode and write one texture.

    Args:
        texture:           Resolved base color texture.
        texture_dir:       Absolute Textures/ directory of this export.
        encoders:          Ordered (Pillow format, extension) pairs.
        textures_dir_name: Folder name used in the returned relative path.

    Returns:
        Path relative to the OBJ/MTL pair, e.g. "Textures/T_Brick.tga", using
        forward slashes as MTL readers expect.

    Raises:
        FormatError:   No usable pixel data.
        ExportIOError: No container could be written.
    """
    logger.info("Attempting to export texture: %s", texture.name)

    snapshot = extract_source_texture(texture)
    pixels = normalize_pixels(snapshot)

    ensure_directory(texture_dir)
    file_name = write_texture_image(
        pixels, texture_dir, sanitize_file_name(texture.name), encoders,
    )
    return f"{textures_dir_name}/{file_name}"
