"""
Pixel format normalization.

Every texture path converges here: raw bytes in one of the source encodings
go in, a canonical pixel buffer comes out. The canonical buffer is a numpy
array of shape (height, width, 4), dtype uint8, channels in R, G, B, A order.
This is the only place in the package that reorders bytes; the encoder and
everything else downstream only ever see the canonical buffer.

Per-format rules (w * h = pixel count):

    BGRA8    Swap B and R for every complete 4-byte pixel present. A short
             buffer is tolerated: pixels past the end of the data stay zero.
    RGBA8    Straight copy of min(w * h * 4, len(raw)) bytes.
    G8       One byte per pixel broadcast to R, G and B, alpha 255. Pixels
             past the end of the data stay zero.
    Unknown  If there are at least w * h * 4 bytes, reinterpret them as BGRA8.
             This is a heuristic, not a confirmed conversion, and is logged as
             such. Output may look wrong but will not crash.

Anything else raises FormatError; the caller exports the material untextured.

The functions here are pure: no I/O, same input always gives the same output.
"""

import logging

import numpy as np

from mesh_exporter.core.errors import FormatError
from mesh_exporter.core.textures import BYTES_PER_PIXEL, SourceFormat, SourceTexture

logger = logging.getLogger(__name__)


def swap_red_blue(buffer: np.ndarray) -> np.ndarray:
    """
    Return a copy of a (..., 4) uint8 buffer with channels 0 and 2 swapped.

    BGRA <-> RGBA. Applying it twice gives back the input.
    """
    return np.ascontiguousarray(buffer[..., [2, 1, 0, 3]])


def _empty_canvas(width: int, height: int) -> np.ndarray:
    return np.zeros((height, width, BYTES_PER_PIXEL), dtype=np.uint8)


def _four_channel(raw: bytes, width: int, height: int) -> np.ndarray:
    """
    Lay out the complete 4-byte pixels of raw on a zeroed canvas.

    Trailing bytes that do not form a whole pixel, and bytes past the
    canonical size, are ignored.
    """
    pixel_count = width * height
    available = min(pixel_count, len(raw) // BYTES_PER_PIXEL)

    flat = _empty_canvas(width, height).reshape(-1, BYTES_PER_PIXEL)
    if available:
        data = np.frombuffer(raw, dtype=np.uint8, count=available * BYTES_PER_PIXEL)
        flat[:available] = data.reshape(-1, BYTES_PER_PIXEL)
    return flat.reshape(height, width, BYTES_PER_PIXEL)


def bgra_to_rgba(raw: bytes, width: int, height: int) -> np.ndarray:
    return swap_red_blue(_four_channel(raw, width, height))


def rgba_copy(raw: bytes, width: int, height: int) -> np.ndarray:
    canvas = _empty_canvas(width, height)
    flat = canvas.reshape(-1)
    count = min(flat.size, len(raw))
    if count:
        flat[:count] = np.frombuffer(raw, dtype=np.uint8, count=count)
    return canvas


def gray_to_rgba(raw: bytes, width: int, height: int) -> np.ndarray:
    flat = _empty_canvas(width, height).reshape(-1, BYTES_PER_PIXEL)
    count = min(width * height, len(raw))
    if count:
        gray = np.frombuffer(raw, dtype=np.uint8, count=count)
        flat[:count, 0] = gray
        flat[:count, 1] = gray
        flat[:count, 2] = gray
        flat[:count, 3] = 255
    return flat.reshape(height, width, BYTES_PER_PIXEL)


# Confirmed source encodings and their converters.
_CONVERTERS = {
    SourceFormat.BGRA8: bgra_to_rgba,
    SourceFormat.RGBA8: rgba_copy,
    SourceFormat.G8: gray_to_rgba,
}


def normalize_pixels(texture: SourceTexture) -> np.ndarray:
    """
    Convert a SourceTexture's raw bytes to the canonical RGBA8 buffer.

    Args:
        texture: Snapshot produced by one of the extraction tiers.

    Returns:
        (height, width, 4) uint8 array in RGBA order.

    Raises:
        FormatError: Non-positive dimensions, or a format that is neither a
                     confirmed encoding nor eligible for the BGRA8 heuristic.
    """
    width, height = texture.width, texture.height
    if width <= 0 or height <= 0:
        raise FormatError(f"Invalid texture size: {width}x{height}")

    raw = bytes(texture.raw_bytes)
    converter = _CONVERTERS.get(texture.source_format)
    if converter is not None:
        required = width * height * (1 if texture.source_format == SourceFormat.G8 else BYTES_PER_PIXEL)
        if len(raw) < required:
            logger.warning(
                "Texture data shorter than expected (%d < %d bytes); missing pixels left blank",
                len(raw), required,
            )
        return converter(raw, width, height)

    if len(raw) >= width * height * BYTES_PER_PIXEL:
        # Kept separate from the confirmed conversions above so diagnostics
        # never mistake a guess for a known layout.
        logger.warning(
            "HEURISTIC: unsupported texture format %r reinterpreted as BGRA8 "
            "(%dx%d, %d bytes); colors may be wrong",
            texture.source_format, width, height, len(raw),
        )
        return bgra_to_rgba(raw, width, height)

    raise FormatError(
        f"Unsupported texture format: {texture.source_format} "
        f"({len(raw)} bytes for {width}x{height})"
    )
