"""
Materials and base color texture resolution.

The merge step hands over two kinds of material:

    Material          a plain material with a table of named texture
                      parameters.
    MaterialInstance  a parameterized variant: an ordered list of texture
                      parameter overrides on top of an optional parent.

Both expose the same two-method capability, and the resolver only relies on
that capability:

    texture_parameter(name)  -> texture bound to that parameter, or None
    override_textures()      -> [(parameter name, texture or None), ...]
                                (always empty for a plain Material)

Resolution order for one material (resolve_texture):
    1. Probe BASE_COLOR_PARAMETER_NAMES in order; first non-null hit wins.
    2. Otherwise take the first non-null override texture, if any.
    3. Otherwise raise ResolutionMiss: the material is exported untextured.
"""

import logging
from dataclasses import dataclass, field

from mesh_exporter.core.errors import ResolutionMiss
from mesh_exporter.core.settings import BASE_COLOR_PARAMETER_NAMES
from mesh_exporter.core.textures import Texture2D

logger = logging.getLogger(__name__)


@dataclass
class Material:
    """A plain material: name plus named texture parameters."""
    name: str
    texture_parameters: dict = field(default_factory=dict)

    def texture_parameter(self, name: str) -> Texture2D | None:
        return self.texture_parameters.get(name)

    def override_textures(self) -> list[tuple[str, Texture2D | None]]:
        return []


@dataclass
class MaterialInstance:
    """
    A material instance with its own texture parameter overrides.

    Named lookups check the overrides first and fall back to the parent, so
    an instance that only overrides "Roughness" still reports its parent's
    "BaseColor" texture.
    """
    name: str
    texture_parameter_values: list = field(default_factory=list)
    parent: "Material | MaterialInstance | None" = None

    def texture_parameter(self, name: str) -> Texture2D | None:
        for param_name, texture in self.texture_parameter_values:
            if param_name == name and texture is not None:
                return texture
        if self.parent is not None:
            return self.parent.texture_parameter(name)
        return None

    def override_textures(self) -> list[tuple[str, Texture2D | None]]:
        return list(self.texture_parameter_values)


def resolve_texture(material, parameter_names=BASE_COLOR_PARAMETER_NAMES) -> Texture2D:
    """
    Find the single representative (base color) texture of a material.

    Args:
        material:        Material or MaterialInstance.
        parameter_names: Conventional parameter names to probe, in order.

    Returns:
        The resolved Texture2D.

    Raises:
        ResolutionMiss: If no parameter name hits and there is no non-null
                        override, or the hit is not a 2D texture.
    """
    texture = None

    for param_name in parameter_names:
        texture = material.texture_parameter(param_name)
        if texture is not None:
            logger.info("Found texture with parameter name: %s", param_name)
            break

    if texture is None:
        for param_name, value in material.override_textures():
            if value is not None:
                texture = value
                logger.info("Found texture from material instance: %s", param_name)
                break

    if texture is None:
        raise ResolutionMiss(f"No base color texture found for material: {material.name}")

    # Parameters may bind cube maps, render targets, etc. Only plain 2D
    # textures can be decoded to an image file.
    if not isinstance(texture, Texture2D):
        raise ResolutionMiss(
            f"Texture for material {material.name} is not a 2D texture "
            f"({type(texture).__name__})"
        )

    return texture
