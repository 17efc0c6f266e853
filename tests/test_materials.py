import numpy as np
import pytest
from voxel_timelapse.errors import SceneError
from voxel_timelapse.materials import Material, MaterialTable


def test_coefficients_are_clamped():
    material = Material("odd", albedo=[1.5, -0.2, 0.5], specular=2.0, shininess=0.1,
                        emissive=[-1.0, 3.0, 0.0], reflection=-0.5, uv_scale=-2.0)
    np.testing.assert_array_equal(material.albedo, [1.0, 0.0, 0.5])
    np.testing.assert_array_equal(material.emissive, [0.0, 3.0, 0.0])
    assert material.specular == 1.0
    assert material.shininess == 1.0
    assert material.reflection == 0.0
    assert material.uv_scale == 1.0


def test_defaults():
    material = Material("plain", albedo=[0.5, 0.5, 0.5])
    np.testing.assert_array_equal(material.emissive, [0.0, 0.0, 0.0])
    assert not material.is_emissive
    assert material.texture is None
    assert Material("lamp", albedo=[1, 1, 1], emissive=[0.1, 0, 0]).is_emissive


def test_table_lookup():
    table = MaterialTable([
        Material("a", albedo=[0.1, 0.2, 0.3]),
        Material("b", albedo=[0.4, 0.5, 0.6], reflection=0.3, texture="b.png"),
    ])
    assert len(table) == 2
    assert table.id_of("b") == 1
    assert table.by_name("a").name == "a"
    assert [m.name for m in table] == ["a", "b"]
    np.testing.assert_array_equal(table.albedo[[1, 0, 1]][:, 0], [0.4, 0.1, 0.4])
    np.testing.assert_array_equal(table.reflection, [0.0, 0.3])
    assert table.textures == [None, "b.png"]


def test_animated_uv_flag():
    table = MaterialTable([
        Material("stone", albedo=[0.5, 0.5, 0.5]),
        Material("water", albedo=[0.2, 0.3, 0.5], texture="water.png", animated_uv=True),
    ])
    np.testing.assert_array_equal(table.animated_uv, [False, True])
    with pytest.raises(ValueError):
        table.animated_uv[0] = True


def test_packed_arrays_read_only():
    table = MaterialTable([Material("a", albedo=[0.1, 0.2, 0.3])])
    with pytest.raises(ValueError):
        table.albedo[0, 0] = 1.0


def test_duplicate_names_rejected():
    with pytest.raises(SceneError):
        MaterialTable([Material("a", albedo=[0, 0, 0]), Material("a", albedo=[1, 1, 1])])


def test_unknown_name_and_id():
    table = MaterialTable([Material("a", albedo=[0, 0, 0])])
    with pytest.raises(SceneError):
        table.id_of("missing")
    with pytest.raises(SceneError):
        table.validate_ids([0, 1])
    with pytest.raises(SceneError):
        table.validate_ids([-1])
    table.validate_ids([0, 0])


if __name__ == "__main__":
    pytest.main([__file__])
