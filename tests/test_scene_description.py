"""Tests for scene descriptions (dict and JSON import/export)."""

import json

import pytest


class TestSceneToDict:
    """Tests for scene_to_dict."""

    def test_cornell_box_export(self):
        from lumen.scene import create_cornell_box_scene, scene_to_dict

        shapes, _ = create_cornell_box_scene()
        data = scene_to_dict(shapes)

        assert set(data["materials"]) == {"light", "white", "left_wall", "right_wall"}
        assert len(data["shapes"]) == 8
        assert data["shapes"][0] == {
            "center": [2.0, 0.0, 0.0],
            "type": "plane",
            "normal": [-1.0, 0.0, 0.0],
            "material": "left_wall",
        }
        assert data["shapes"][7]["type"] == "sphere"
        assert data["shapes"][7]["material"] == "white"

    def test_unnamed_materials_get_generated_names(self):
        from lumen.geometry import Sphere
        from lumen.materials import Material
        from lumen.scene import scene_to_dict

        a = Material(color=(1.0, 0.0, 0.0))
        b = Material(color=(0.0, 1.0, 0.0))
        data = scene_to_dict([Sphere((0, 0, 0), 1.0, a), Sphere((0, 0, 3), 1.0, b)])
        assert list(data["materials"]) == ["material_0", "material_1"]

    def test_duplicate_names_raise(self):
        from lumen.geometry import Sphere
        from lumen.materials import Material
        from lumen.scene import scene_to_dict

        a = Material(color=(1.0, 0.0, 0.0), name="paint")
        b = Material(color=(0.0, 1.0, 0.0), name="paint")
        with pytest.raises(ValueError, match="Duplicate"):
            scene_to_dict([Sphere((0, 0, 0), 1.0, a), Sphere((0, 0, 3), 1.0, b)])


class TestSceneFromDict:
    """Tests for scene_from_dict."""

    def test_round_trip_keeps_shared_materials(self):
        from lumen.geometry import Plane, Sphere
        from lumen.scene import create_cornell_box_scene, scene_from_dict, scene_to_dict

        shapes, _ = create_cornell_box_scene()
        restored = scene_from_dict(scene_to_dict(shapes))

        assert [type(s) for s in restored] == [type(s) for s in shapes]
        assert isinstance(restored[0], Plane)
        assert isinstance(restored[6], Sphere)
        assert restored[6].radius == 4.0
        # Floor, ceiling, back, front and the subject share one white material
        assert restored[2].material is restored[3].material
        assert restored[7].material is restored[2].material
        assert restored[6].material.emission == (10.0, 10.0, 10.0)

    def test_unknown_type_raises(self):
        from lumen.scene import scene_from_dict

        data = {
            "materials": {"white": {"color": [1, 1, 1]}},
            "shapes": [{"type": "cube", "center": [0, 0, 0], "material": "white"}],
        }
        with pytest.raises(ValueError, match="unknown type"):
            scene_from_dict(data)

    def test_unknown_material_raises(self):
        from lumen.scene import scene_from_dict

        data = {
            "materials": {},
            "shapes": [{"type": "sphere", "center": [0, 0, 0], "radius": 1, "material": "x"}],
        }
        with pytest.raises(ValueError, match="unknown material"):
            scene_from_dict(data)

    def test_invalid_geometry_raises(self):
        from lumen.scene import scene_from_dict

        data = {
            "materials": {"white": {"color": [1, 1, 1]}},
            "shapes": [{"type": "sphere", "center": [0, 0, 0], "radius": -1, "material": "white"}],
        }
        with pytest.raises(ValueError):
            scene_from_dict(data)

    def test_bad_vector_raises(self):
        from lumen.scene import scene_from_dict

        data = {
            "materials": {"white": {"color": [1, 1]}},
            "shapes": [],
        }
        with pytest.raises(ValueError, match="3 numbers"):
            scene_from_dict(data)


class TestSceneFiles:
    """Tests for save_scene and load_scene."""

    def test_save_and_load(self, tmp_path):
        from lumen.scene import create_cornell_box_scene, load_scene, save_scene

        shapes, _ = create_cornell_box_scene()
        path = tmp_path / "cornell.json"
        save_scene(shapes, path)

        assert json.loads(path.read_text())["shapes"][6]["radius"] == 4.0
        restored = load_scene(path)
        assert len(restored) == 8
        assert restored[0].center == (2.0, 0.0, 0.0)

    def test_invalid_json_raises_value_error(self, tmp_path):
        from lumen.scene import load_scene

        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid scene description"):
            load_scene(path)

    def test_missing_file(self, tmp_path):
        from lumen.scene import load_scene

        with pytest.raises(FileNotFoundError):
            load_scene(tmp_path / "missing.json")
