"""Tests for YAML loading and parsing of the serializer configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from scene_config import (
    DEFAULT_CONFIG_PATH,
    clear_config_cache,
    get_active_config,
)
from scene_config.loader import (
    compute_checksum,
    load_serializer_config,
    load_yaml_file,
    parse_binding,
    parse_serializer_config,
    parse_structural,
)
from scene_config.schema import MemberFilterConfig, PropertyBinding
from scene_kernel.exceptions import ConfigurationError


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "serializer.yaml"
    path.write_text(text)
    return path


class TestDefaults:
    """The packaged defaults.yaml."""

    def test_defaults_file_is_packaged(self):
        assert DEFAULT_CONFIG_PATH.exists()

    def test_default_vocabulary(self):
        config = get_active_config()
        assert "fusion" in config.classifier.hostile_namespace_prefixes
        assert "NetworkBehaviour" in config.classifier.hostile_type_names

    def test_default_camera_bindings(self):
        config = get_active_config()
        keys = [b.key for b in config.camera.properties]
        assert keys[0] == "nearClipPlane"
        assert "gameObject" in keys
        assert len(keys) == 26

    def test_default_member_filters(self):
        members = get_active_config().members
        assert "transform" in members.skipped
        assert members.substitution_for("material") == "shared_material"
        assert members.substitution_for("speed") is None

    def test_default_raw_extras(self):
        extras = get_active_config().extractor.extras_for("PlayerRef")
        assert extras == (
            PropertyBinding("playerId", "player_id"),
            PropertyBinding("isRealPlayer", "is_real_player"),
        )

    def test_default_config_is_cached(self):
        assert get_active_config() is get_active_config()

    def test_clear_config_cache_reloads(self):
        first = get_active_config()
        clear_config_cache()
        second = get_active_config()
        assert first is not second
        assert first == second

    def test_config_trace_logged(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "SCENE_CONFIG_TRACE"]
        assert traces
        assert traces[-1]["checksum"] == config.checksum
        assert traces[-1]["max_depth"] == 8


class TestLoadFromFile:
    def test_explicit_path(self, tmp_path):
        path = _write(
            tmp_path,
            "classifier:\n  hostile_type_names: [Ghost]\nstructural:\n  max_depth: 3\n",
        )
        config = get_active_config(path)
        assert config.classifier.hostile_type_names == ("Ghost",)
        assert config.structural.max_depth == 3
        assert config.source == str(path)

    def test_missing_sections_use_defaults(self, tmp_path):
        config = load_serializer_config(_write(tmp_path, "{}\n"))
        assert config.camera.properties == ()
        assert config.extractor.raw_attribute == "raw"
        assert config.structural.max_depth == 8

    def test_empty_file_is_empty_config(self, tmp_path):
        assert load_yaml_file(_write(tmp_path, "")) == {}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_serializer_config(tmp_path / "absent.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            load_serializer_config(_write(tmp_path, "classifier: [unclosed\n"))

    def test_non_mapping_document_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_serializer_config(_write(tmp_path, "- a\n- b\n"))
        assert exc_info.value.section == "<root>"


class TestSectionValidation:
    """Wrong shapes raise ConfigurationError naming the section."""

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_serializer_config({"camera": ["nearClipPlane"]})
        assert exc_info.value.section == "camera"

    def test_string_list_required(self):
        with pytest.raises(ConfigurationError):
            parse_serializer_config({"members": {"skipped": "transform"}})

    def test_binding_requires_both_keys(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_binding({"key": "depth"}, "camera")
        assert "attribute" in exc_info.value.reason

    def test_binding_parsed(self):
        assert parse_binding({"key": "k", "attribute": "a"}, "camera") == (
            PropertyBinding("k", "a")
        )

    @pytest.mark.parametrize("value", [0, -1, True, "8", 2.5])
    def test_max_depth_must_be_positive_int(self, value):
        with pytest.raises(ConfigurationError):
            parse_structural({"max_depth": value})

    def test_extractor_attribute_must_be_non_empty(self):
        with pytest.raises(ConfigurationError):
            parse_serializer_config({"extractor": {"raw_attribute": ""}})

    def test_substitutions_must_map_names(self):
        with pytest.raises(ConfigurationError):
            parse_serializer_config(
                {"members": {"edit_mode_substitutions": ["material"]}}
            )


class TestChecksum:
    def test_deterministic_and_order_independent(self):
        a = {"classifier": {"hostile_type_names": ["A"]}, "structural": {"max_depth": 2}}
        b = {"structural": {"max_depth": 2}, "classifier": {"hostile_type_names": ["A"]}}
        assert compute_checksum(a) == compute_checksum(b)

    def test_changes_with_content(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})

    def test_parsed_config_carries_checksum(self):
        data = {"structural": {"max_depth": 4}}
        assert parse_serializer_config(data).checksum == compute_checksum(data)


class TestMemberFilterConfig:
    def test_skipped_for_matches_any_listed_type(self):
        filters = MemberFilterConfig(
            skipped=("transform",),
            skipped_by_type=(("pkg.Camera", ("rect",)),),
        )
        assert filters.skipped_for(["pkg.FancyCamera", "pkg.Camera"]) == {
            "transform",
            "rect",
        }
        assert filters.skipped_for(["pkg.Light"]) == {"transform"}


@pytest.fixture(autouse=True)
def _restore_default_config():
    yield
    clear_config_cache()
