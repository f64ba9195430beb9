import pytest

from mesh_exporter.core.errors import ResolutionMiss
from mesh_exporter.core.materials import Material, MaterialInstance, resolve_texture
from mesh_exporter.core.textures import Texture2D

from conftest import gray_texture


def test_base_color_parameter_is_found():
    texture = gray_texture()
    material = Material("M", {"BaseColor": texture})
    assert resolve_texture(material) is texture


def test_parameter_names_are_probed_in_order():
    diffuse = Texture2D("T_Diffuse")
    albedo = Texture2D("T_Albedo")
    material = Material("M", {"Albedo": albedo, "Diffuse": diffuse})

    assert resolve_texture(material) is diffuse


def test_null_parameter_does_not_count_as_hit():
    albedo = Texture2D("T_Albedo")
    material = Material("M", {"BaseColor": None, "Albedo": albedo})
    assert resolve_texture(material) is albedo


def test_instance_falls_back_to_first_non_null_override(instance_material):
    texture = resolve_texture(instance_material)
    assert texture.name == "T_Streamed"


def test_instance_named_override_wins_over_positional():
    first = Texture2D("T_First")
    named = Texture2D("T_Named")
    instance = MaterialInstance(
        "MI",
        texture_parameter_values=[("Detail", first), ("Diffuse", named)],
    )
    assert resolve_texture(instance) is named


def test_instance_inherits_parent_parameters():
    parent_texture = Texture2D("T_Parent")
    parent = Material("M_Parent", {"BaseColor": parent_texture})
    instance = MaterialInstance("MI", texture_parameter_values=[], parent=parent)

    assert resolve_texture(instance) is parent_texture


def test_plain_material_has_no_overrides():
    assert Material("M").override_textures() == []


def test_unresolvable_material_is_a_miss():
    with pytest.raises(ResolutionMiss):
        resolve_texture(Material("M_Untextured", {"Roughness": Texture2D("T_R")}))


def test_non_2d_texture_is_a_miss():
    material = Material("M", {"BaseColor": object()})
    with pytest.raises(ResolutionMiss):
        resolve_texture(material)


def test_custom_parameter_names():
    texture = Texture2D("T")
    material = Material("M", {"Colour": texture})
    assert resolve_texture(material, ("Colour",)) is texture
