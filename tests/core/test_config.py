"""Tests for configuration loading and CLI merging."""

from pathlib import Path
from uuid import UUID

import pytest
from pydantic import ValidationError

from jsontimeline.core.config import (
    AttrKeyRename,
    ImportSettings,
    JsonTimelineSettings,
    TimestampUnit,
    load_settings,
    merge_cli_overrides,
)

IMPORT_CONFIG = """\
[metadata]
run-id = 'a1a2a3a4b1b2c1c2d1d2d3d4d5d6d7d1'
event-names = ["msg", "type"]
event-name-prefix = "ev-"
timeline-names = ["host"]
timeline-name-prefix = "tl-"
timeline-attrs = ["region"]
timestamp-attr = "ts"
timestamp-attr-units = "millis"
non-json-regex = '^(\\w+): (.*)$'
non-json-attrs = ["level", "text"]
inputs = ["path/a.json", "path/b.json"]
rename-timeline-attrs = [{original = "region", new = "zone"}]
rename-event-attrs = ["msg,message"]

[sink]
kind = "jsonl"
path = "out.jsonl"
"""


class TestTimestampUnit:
    @pytest.mark.parametrize(
        ("text", "unit"),
        [
            ("s", TimestampUnit.SECONDS),
            ("Seconds", TimestampUnit.SECONDS),
            ("ms", TimestampUnit.MILLISECONDS),
            ("millis", TimestampUnit.MILLISECONDS),
            ("us", TimestampUnit.MICROSECONDS),
            ("microseconds", TimestampUnit.MICROSECONDS),
            ("NS", TimestampUnit.NANOSECONDS),
            ("nanos", TimestampUnit.NANOSECONDS),
        ],
    )
    def test_parse(self, text: str, unit: TimestampUnit) -> None:
        assert TimestampUnit.parse(text) is unit

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown time unit"):
            TimestampUnit.parse("fortnights")

    def test_factors(self) -> None:
        assert TimestampUnit.SECONDS.to_ns_factor() == 1e9
        assert TimestampUnit.MILLISECONDS.to_ns_factor() == 1e6
        assert TimestampUnit.MICROSECONDS.to_ns_factor() == 1e3
        assert TimestampUnit.NANOSECONDS.to_ns_factor() == 1.0


class TestAttrKeyRename:
    def test_parse_splits_on_first_comma(self) -> None:
        assert AttrKeyRename.parse("a,b,c") == AttrKeyRename(original="a", new="b,c")

    def test_parse_requires_comma(self) -> None:
        with pytest.raises(ValueError, match="no ','"):
            AttrKeyRename.parse("ab")

    def test_empty_side_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AttrKeyRename.parse(",b")


class TestImportSettings:
    def test_defaults(self) -> None:
        settings = ImportSettings()
        assert settings.inputs == []
        assert settings.timestamp_unit is TimestampUnit.NANOSECONDS
        assert settings.on_record_error == "abort"
        assert settings.compile_non_json_regex() is None

    def test_frozen(self) -> None:
        settings = ImportSettings()
        with pytest.raises(ValidationError):
            settings.event_names = ["x"]  # type: ignore[misc]

    def test_invalid_regex_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Invalid non-json regex"):
            ImportSettings(non_json_regex="(unclosed")

    def test_unit_aliases_accepted(self) -> None:
        assert ImportSettings(timestamp_attr_units="secs").timestamp_unit is TimestampUnit.SECONDS

    def test_bad_on_record_error(self) -> None:
        with pytest.raises(ValidationError):
            ImportSettings(on_record_error="ignore")


class TestLoadSettings:
    def test_load_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(IMPORT_CONFIG)

        settings = load_settings(path)
        meta = settings.metadata

        assert meta.run_id == UUID("a1a2a3a4b1b2c1c2d1d2d3d4d5d6d7d1")
        assert meta.event_names == ["msg", "type"]
        assert meta.event_name_prefix == "ev-"
        assert meta.timeline_names == ["host"]
        assert meta.timeline_name_prefix == "tl-"
        assert meta.timeline_attrs == ["region"]
        assert meta.timestamp_attr == "ts"
        assert meta.timestamp_attr_units is TimestampUnit.MILLISECONDS
        assert meta.non_json_regex == r"^(\w+): (.*)$"
        assert meta.non_json_attrs == ["level", "text"]
        assert meta.inputs == [Path("path/a.json"), Path("path/b.json")]
        assert meta.rename_timeline_attrs == [AttrKeyRename(original="region", new="zone")]
        assert meta.rename_event_attrs == [AttrKeyRename(original="msg", new="message")]
        assert settings.sink.kind == "jsonl"
        assert settings.sink.path == "out.jsonl"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.toml")

    def test_env_var_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TL_OUT", "/tmp/events.jsonl")
        path = tmp_path / "config.toml"
        path.write_text('[sink]\npath = "${TL_OUT}"\n\n[metadata]\nevent-name-prefix = "${UNSET_VAR:-dflt}"\n')

        settings = load_settings(path)

        assert settings.sink.path == "/tmp/events.jsonl"
        assert settings.metadata.event_name_prefix == "dflt"

    def test_validation_error_surfaces(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[metadata]\ntimestamp-attr-units = "weeks"\n')

        with pytest.raises(ValidationError):
            load_settings(path)


class TestMergeCliOverrides:
    @pytest.fixture
    def base(self) -> JsonTimelineSettings:
        return JsonTimelineSettings(
            metadata=ImportSettings(
                event_names=["msg"],
                timeline_names=["host"],
                non_json_attrs=["a", "b"],
                timestamp_attr="ts",
                rename_event_attrs=[AttrKeyRename(original="x", new="y")],
                inputs=[Path("a.json")],
            )
        )

    def test_lists_extend(self, base: JsonTimelineSettings) -> None:
        merged = merge_cli_overrides(base, event_names=["type"], inputs=[Path("b.json")])
        assert merged.metadata.event_names == ["msg", "type"]
        assert merged.metadata.inputs == [Path("a.json"), Path("b.json")]

    def test_scalars_replace_only_when_given(self, base: JsonTimelineSettings) -> None:
        assert merge_cli_overrides(base).metadata.timestamp_attr == "ts"
        assert merge_cli_overrides(base, timestamp_attr="time").metadata.timestamp_attr == "time"

    def test_non_json_attrs_replace(self, base: JsonTimelineSettings) -> None:
        assert merge_cli_overrides(base, non_json_attrs=["c"]).metadata.non_json_attrs == ["c"]
        assert merge_cli_overrides(base, non_json_attrs=[]).metadata.non_json_attrs == ["a", "b"]

    def test_cli_renames_come_first(self, base: JsonTimelineSettings) -> None:
        merged = merge_cli_overrides(base, rename_event_attrs=[AttrKeyRename(original="x", new="z")])
        assert [r.new for r in merged.metadata.rename_event_attrs] == ["z", "y"]

    def test_sink_overrides(self, base: JsonTimelineSettings) -> None:
        merged = merge_cli_overrides(base, sink_kind="null", sink_path="x.jsonl")
        assert merged.sink.kind == "null"
        assert merged.sink.path == "x.jsonl"

    def test_input_settings_untouched(self, base: JsonTimelineSettings) -> None:
        merge_cli_overrides(base, event_names=["type"])
        assert base.metadata.event_names == ["msg"]
