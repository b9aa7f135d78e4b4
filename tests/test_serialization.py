"""Tests for saving and loading projects."""

import json

import pytest

from conlang_editor import (
    ConlangEditor,
    DataImportError,
    EngineConfig,
    ExportError,
)
from conlang_editor.serialization import (
    FORMAT_VERSION,
    project_from_dict,
    project_to_dict,
)


@pytest.fixture
def project(editor_with_lineage):
    """A derived project with removed slots in every registry."""
    ed, proto, daughter = editor_with_lineage
    ed.add_surface_rule(daughter, "d", "ð")
    ed.add_phonetic_rule(daughter, "a", "ɑ")
    ed.derive(daughter, proto)
    ed.remove_word(proto, 1)
    ed.remove_pos(1)
    removed = ed.add_language("Scratch")
    ed.remove_language(removed)
    return ed


class TestToDict:

    def test_shape(self, project):
        data = project_to_dict(project)
        assert data["version"] == FORMAT_VERSION
        assert data["languages"][2] is None
        assert data["pos"] == [{"name": "noun", "abbr": "n"}, None]
        proto = data["languages"][0]
        assert proto["vocab"][1] is None
        daughter = data["languages"][1]
        assert daughter["ancestor"] == 0
        assert daughter["sound_changes"]["categories"]["C"] == ["p", "t", "k"]
        assert daughter["sound_changes"]["rules"] == [
            {"target": "C", "replacement": "D", "environment": "A_A"}
        ]
        assert daughter["vocab"][0] == {
            "surface": "paða",
            "gloss": "foot",
            "pos": 0,
            "phonetic": "pɑdɑ",
            "mnemonic": "pada",
            "note": "",
            "ancestors": [{"lang": 0, "word": 0}],
        }

    def test_round_trip_in_memory(self, project):
        data = project_to_dict(project)
        assert project_to_dict(project_from_dict(data)) == data


class TestFiles:

    def test_json_round_trip(self, project, tmp_path):
        path = tmp_path / "project.json"
        project.save(path)
        loaded = ConlangEditor.load(path)
        assert loaded.to_dict() == project.to_dict()
        assert loaded.languages.raw()[2] is None
        assert not loaded.get_language(0).vocab.is_live(1)

    def test_json_keeps_unicode_readable(self, project, tmp_path):
        path = tmp_path / "project.json"
        project.save(path)
        text = path.read_text(encoding="utf-8")
        assert "paða" in text
        assert json.loads(text)["version"] == FORMAT_VERSION

    def test_json_indent_from_config(self, editor, tmp_path):
        editor.config = EngineConfig(indent=4)
        editor.add_language("L")
        path = tmp_path / "project.json"
        editor.save(path)
        assert '\n    "version"' in path.read_text(encoding="utf-8")

    @pytest.mark.parametrize("suffix", [".yaml", ".yml"])
    def test_yaml_round_trip(self, project, tmp_path, suffix):
        path = tmp_path / f"project{suffix}"
        project.save(path)
        assert path.read_text(encoding="utf-8").startswith("version:")
        assert ConlangEditor.load(path).to_dict() == project.to_dict()

    def test_loaded_project_keeps_working(self, project, tmp_path):
        path = tmp_path / "project.json"
        project.save(path)
        loaded = ConlangEditor.load(path)
        # its ancestor word was removed before saving
        loaded.remove_word(1, 1)
        loaded.add_word(0, "tepi", "roof", 0)
        report = loaded.derive(1, 0)
        assert report.fused == (0, 2)
        assert loaded.get_word(1, report.inherited[0]).mnemonic == "tebi"

    def test_config_passed_through(self, project, tmp_path):
        path = tmp_path / "project.json"
        project.save(path)
        loaded = ConlangEditor.load(path, config=EngineConfig(max_iterations=5))
        assert loaded.config.max_iterations == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConlangEditor.load(tmp_path / "missing.json")

    def test_unwritable_destination(self, project, tmp_path):
        with pytest.raises(ExportError):
            project.save(tmp_path / "no" / "such" / "dir" / "project.json")


class TestMalformed:

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "project.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataImportError, match="Invalid JSON"):
            ConlangEditor.load(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text("languages: [unclosed", encoding="utf-8")
        with pytest.raises(DataImportError, match="Invalid YAML"):
            ConlangEditor.load(path)

    def test_root_must_be_mapping(self):
        with pytest.raises(DataImportError):
            project_from_dict([])

    def test_unsupported_version(self):
        with pytest.raises(DataImportError, match="version"):
            project_from_dict({"version": "99", "languages": [], "pos": []})

    def test_missing_language_name(self):
        with pytest.raises(DataImportError):
            project_from_dict({"languages": [{"vocab": []}]})

    def test_bad_surface_pattern(self):
        data = {
            "languages": [
                {"name": "L", "surface_rules": [{"pattern": "(", "replacement": "x"}]}
            ],
        }
        with pytest.raises(DataImportError, match="Invalid rule"):
            project_from_dict(data)

    def test_bad_category_key(self):
        data = {
            "languages": [
                {"name": "L", "sound_changes": {"categories": {"CC": ["p"]}}}
            ],
        }
        with pytest.raises(DataImportError):
            project_from_dict(data)

    def test_stale_sound_change_loads(self):
        data = {
            "languages": [
                {
                    "name": "L",
                    "sound_changes": {
                        "categories": {"D": ["b"]},
                        "rules": [{"target": "p", "replacement": "D", "environment": "_"}],
                    },
                }
            ],
        }
        editor = project_from_dict(data)
        assert len(editor.list_sound_changes(0)) == 1
        assert [r.rule_id for r in editor.validate()] == ["VAL-RUL-001"]
