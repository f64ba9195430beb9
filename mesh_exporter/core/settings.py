"""
Export configuration for mesh_exporter.

Everything tunable about the OBJ/MTL output lives here as module-level
constants so it is easy to find and tweak. A run can override a subset of
them through ExportSettings, a typed container passed down the pipeline
instead of loose keyword arguments.

OBJ/MTL layout produced with the defaults:
    <export-dir>/
        <name>.obj          geometry, references <name>.mtl via mtllib
        <name>.mtl          one newmtl block per material slot
        Textures/
            <texture>.tga   decoded base-color texture (PNG if TGA fails)
"""

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

# Subdirectory (relative to the OBJ/MTL pair) that receives every texture.
# The MTL map_Kd lines reference textures through this relative folder.
TEXTURES_DIR_NAME = "Textures"

OBJ_EXTENSION = ".obj"
MTL_EXTENSION = ".mtl"

# Suffixes treated as a GLTF request. No binary container encoder exists, so
# these are rewritten to OBJ_EXTENSION by the GLTF entry point.
GLTF_EXTENSIONS = (".gltf", ".glb")


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

# Decimal places for v / vt / vn records.
COORDINATE_PRECISION = 6


# ---------------------------------------------------------------------------
# Materials
# ---------------------------------------------------------------------------

# Texture parameter names probed (in order) when looking for the
# representative base color texture of a material. First hit wins.
BASE_COLOR_PARAMETER_NAMES = (
    "BaseColor",
    "Diffuse",
    "DiffuseTexture",
    "BaseColorTexture",
    "Texture",
    "Albedo",
)

# Fixed lighting constants written into every newmtl block.
MTL_AMBIENT = (1.0, 1.0, 1.0)
MTL_DIFFUSE = (0.8, 0.8, 0.8)
MTL_SPECULAR = (0.5, 0.5, 0.5)
MTL_SHININESS = 32.0
MTL_OPACITY = 1.0
MTL_ILLUMINATION = 2


# ---------------------------------------------------------------------------
# Texture encoders
# ---------------------------------------------------------------------------

# Ordered (Pillow format name, file extension) pairs. The first entry is the
# primary container (uncompressed TGA); the rest are fallbacks tried with the
# same pixels when an earlier encoder or its file write fails.
TEXTURE_ENCODERS = (
    ("TGA", ".tga"),
    ("PNG", ".png"),
)


@dataclass(frozen=True)
class ExportSettings:
    """
    Per-run overrides for the export pipeline.

    Defaults mirror the module constants above, so ExportSettings() is the
    standard configuration.
    """
    precision: int = COORDINATE_PRECISION
    textures_dir_name: str = TEXTURES_DIR_NAME
    texture_encoders: tuple = TEXTURE_ENCODERS
    parameter_names: tuple = BASE_COLOR_PARAMETER_NAMES
    # When False the MTL is still written but no texture is decoded.
    export_textures: bool = True
