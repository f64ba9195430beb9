"""
Texture data model.

A Texture2D can carry its pixels in two places:

    source         Authoring-time data. Uncompressed, present whenever the
                   texture is still editable. Mip 0 is the full resolution
                   image in the encoding named by TextureSource.format.
    platform_data  Runtime data cooked for the target platform. Used only as
                   a fallback (streamed and virtualized textures often have no
                   usable source). The first mip is read as 4 bytes per pixel
                   in blue-green-red-alpha order.

Whichever tier succeeds produces a SourceTexture: a flat snapshot of
(width, height, format, bytes) which is all the pixel normalizer needs.
"""

from dataclasses import dataclass, field


class SourceFormat:
    """
    Pixel encodings a texture source can declare.

    String constants rather than an enum so values compare directly against
    whatever the producer hands in.
    """
    BGRA8 = "BGRA8"
    RGBA8 = "RGBA8"
    G8 = "G8"
    UNKNOWN = "Unknown"


# Bytes per pixel of every 4-channel 8-bit layout (BGRA8, RGBA8, canonical).
BYTES_PER_PIXEL = 4


@dataclass
class TextureSource:
    """Authoring-time, uncompressed pixel data for a texture."""
    width: int
    height: int
    format: str = SourceFormat.BGRA8
    mips: list[bytes] = field(default_factory=list)

    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0 and bool(self.mips)

    def mip_data(self, level: int = 0) -> bytes:
        """Return the raw bytes of one mip level, or b"" if it is missing."""
        if level < 0 or level >= len(self.mips):
            return b""
        return bytes(self.mips[level])


@dataclass
class PlatformData:
    """Runtime (cooked) texture data: a mip chain of platform-format bytes."""
    width: int
    height: int
    mips: list[bytes] = field(default_factory=list)

    def first_mip(self) -> bytes:
        return bytes(self.mips[0]) if self.mips else b""


@dataclass
class Texture2D:
    """A named 2D texture as referenced from a material parameter."""
    name: str
    source: TextureSource | None = None
    platform_data: PlatformData | None = None
    # Streamed or virtual textures usually lack usable source data, which is
    # what pushes extraction to the platform tier.
    is_streamed: bool = False


@dataclass
class SourceTexture:
    """
    Snapshot of one texture's raw pixels, ready for normalization.

    Produced by the texture extraction tiers in texture_writer.py and consumed
    by pixels.normalize_pixels().
    """
    width: int
    height: int
    source_format: str
    raw_bytes: bytes
    is_streamed_or_virtual: bool = False

    @property
    def pixel_count(self) -> int:
        return self.width * self.height
