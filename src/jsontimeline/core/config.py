# src/jsontimeline/core/config.py
"""
Configuration schema and loading for jsontimeline imports.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example TOML:
    [metadata]
    timeline-names = ["host"]
    event-names = ["msg", "type"]
    timestamp-attr = "ts"
    timestamp-attr-units = "ms"
    non-json-regex = '^(\\w+): (.*)$'
    non-json-attrs = ["level", "text"]
    inputs = ["logs/a.json"]

    [sink]
    kind = "jsonl"
    path = "events.jsonl"
"""

from __future__ import annotations

import os
import re
from enum import StrEnum
from pathlib import Path
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "JSONTIMELINE"


class TimestampUnit(StrEnum):
    """Units of the configured timestamp attribute in the source data."""

    SECONDS = "s"
    MILLISECONDS = "ms"
    MICROSECONDS = "us"
    NANOSECONDS = "ns"

    @classmethod
    def parse(cls, text: str) -> TimestampUnit:
        """Parse a unit name, accepting the short and long spellings.

        Raises:
            ValueError: If the unit is not recognised
        """
        try:
            return _UNIT_ALIASES[text.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown time unit {text!r} (expected one of s, ms, us, ns)") from None

    def to_ns_factor(self) -> float:
        return _NS_FACTORS[self]


_UNIT_ALIASES: dict[str, TimestampUnit] = {
    "s": TimestampUnit.SECONDS,
    "secs": TimestampUnit.SECONDS,
    "seconds": TimestampUnit.SECONDS,
    "ms": TimestampUnit.MILLISECONDS,
    "millis": TimestampUnit.MILLISECONDS,
    "milliseconds": TimestampUnit.MILLISECONDS,
    "us": TimestampUnit.MICROSECONDS,
    "micros": TimestampUnit.MICROSECONDS,
    "microseconds": TimestampUnit.MICROSECONDS,
    "ns": TimestampUnit.NANOSECONDS,
    "nanos": TimestampUnit.NANOSECONDS,
    "nanoseconds": TimestampUnit.NANOSECONDS,
}

_NS_FACTORS: dict[TimestampUnit, float] = {
    TimestampUnit.SECONDS: 1_000_000_000.0,
    TimestampUnit.MILLISECONDS: 1_000_000.0,
    TimestampUnit.MICROSECONDS: 1_000.0,
    TimestampUnit.NANOSECONDS: 1.0,
}


class AttrKeyRename(BaseModel):
    """Rename an attribute key as it is imported."""

    model_config = {"frozen": True}

    original: str = Field(min_length=1, description="The attr key to rename")
    new: str = Field(min_length=1, description="The new attr key name to use")

    @classmethod
    def parse(cls, text: str) -> AttrKeyRename:
        """Parse the 'original,new' command-line form (split on the first comma)."""
        original, sep, new = text.partition(",")
        if not sep:
            raise ValueError(f"invalid original,new: no ',' found in {text!r}")
        return cls(original=original, new=new)


def _coerce_renames(value: Any) -> Any:
    if isinstance(value, list):
        return [AttrKeyRename.parse(item) if isinstance(item, str) else item for item in value]
    return value


class ImportSettings(BaseModel):
    """How records are classified, named and timestamped.

    Loaded from the [metadata] section of the config file.
    """

    model_config = {"frozen": True}

    run_id: UUID | None = Field(default=None, description="Run ID reported in the import summary")

    event_names: list[str] = Field(
        default_factory=list,
        description="Attribute paths naming an event, checked in order; the first present wins",
    )
    event_name_prefix: str | None = Field(default=None, description="Prefix added to each event name")

    timeline_names: list[str] = Field(
        default_factory=list,
        description="Attribute paths naming (and identifying) a timeline, checked in order",
    )
    timeline_name_prefix: str | None = Field(default=None, description="Prefix added to each timeline name")
    timeline_attrs: list[str] = Field(
        default_factory=list,
        description="Attribute paths routed to the timeline instead of the event",
    )

    rename_timeline_attrs: list[AttrKeyRename] = Field(default_factory=list)
    rename_event_attrs: list[AttrKeyRename] = Field(default_factory=list)

    timestamp_attr: str | None = Field(default=None, description="Attribute path holding the event timestamp")
    timestamp_attr_units: TimestampUnit | None = Field(
        default=None,
        description="Units of timestamp_attr in the source data (default: ns)",
    )

    non_json_regex: str | None = Field(
        default=None,
        description="Regex applied to lines that are not JSON",
    )
    non_json_attrs: list[str] = Field(
        default_factory=list,
        description="Attribute names for non_json_regex capture groups, positionally",
    )

    inputs: list[Path] = Field(default_factory=list, description="Input files, processed in order")

    on_record_error: Literal["abort", "skip"] = Field(
        default="abort",
        description="Abort the run on an unassemblable record, or log and skip it",
    )

    @field_validator("timestamp_attr_units", mode="before")
    @classmethod
    def parse_timestamp_units(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, TimestampUnit):
            return TimestampUnit.parse(v)
        return v

    @field_validator("rename_timeline_attrs", "rename_event_attrs", mode="before")
    @classmethod
    def parse_renames(cls, v: Any) -> Any:
        return _coerce_renames(v)

    @field_validator("non_json_regex")
    @classmethod
    def validate_regex(cls, v: str | None) -> str | None:
        """Compile the regex at config time so errors surface before reading input."""
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid non-json regex: {e}") from e
        return v

    @property
    def timestamp_unit(self) -> TimestampUnit:
        return self.timestamp_attr_units or TimestampUnit.NANOSECONDS

    def compile_non_json_regex(self) -> re.Pattern[str] | None:
        return re.compile(self.non_json_regex) if self.non_json_regex is not None else None


class SinkSettings(BaseModel):
    """Where prepared events go. Loaded from the [sink] section."""

    model_config = {"frozen": True}

    kind: Literal["jsonl", "null"] = Field(
        default="jsonl",
        description="jsonl: write every sink call as a JSON line; null: discard (dry run)",
    )
    path: str = Field(default="-", description="Output path for the jsonl sink, '-' for stdout")
    encoding: str = "utf-8"


class JsonTimelineSettings(BaseModel):
    """Top-level configuration. Validated and frozen after construction."""

    model_config = {"frozen": True}

    metadata: ImportSettings = Field(default_factory=ImportSettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left as-is.
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        if default is not None:
            return default
        return match.group(0)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _normalize_keys(value: Any) -> Any:
    """Lowercase dict keys and turn kebab-case into snake_case.

    Config files use kebab-case ("event-names"); environment overrides arrive
    upper-cased ("EVENT_NAMES"). Every dict in the schema is structural, so
    rewriting keys never touches user data.
    """
    if isinstance(value, dict):
        return {str(k).lower().replace("-", "_"): _normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> JsonTimelineSettings:
    """Load settings from a TOML/YAML file with environment variable overrides.

    Precedence (highest first):
    1. Environment variables (JSONTIMELINE_*), e.g. JSONTIMELINE_SINK__PATH
    2. Config file
    3. Defaults from the Pydantic schema

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix=ENV_PREFIX,
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _normalize_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return JsonTimelineSettings(**raw_config)


def merge_cli_overrides(
    settings: JsonTimelineSettings,
    *,
    inputs: list[Path] | None = None,
    event_names: list[str] | None = None,
    timeline_names: list[str] | None = None,
    timeline_attrs: list[str] | None = None,
    timeline_name_prefix: str | None = None,
    event_name_prefix: str | None = None,
    timestamp_attr: str | None = None,
    timestamp_attr_units: TimestampUnit | None = None,
    non_json_regex: str | None = None,
    non_json_attrs: list[str] | None = None,
    rename_timeline_attrs: list[AttrKeyRename] | None = None,
    rename_event_attrs: list[AttrKeyRename] | None = None,
    run_id: UUID | None = None,
    on_record_error: Literal["abort", "skip"] | None = None,
    sink_kind: Literal["jsonl", "null"] | None = None,
    sink_path: str | None = None,
) -> JsonTimelineSettings:
    """Merge command-line options over loaded settings.

    List options extend the configured lists, except non_json_attrs, which
    replaces them when given (the names are positional, so mixing two lists
    would be meaningless). Scalar options replace when given. CLI renames
    come before configured renames.
    """
    meta = settings.metadata.model_dump()

    meta["inputs"] = [*meta["inputs"], *(inputs or [])]
    meta["event_names"] = [*meta["event_names"], *(event_names or [])]
    meta["timeline_names"] = [*meta["timeline_names"], *(timeline_names or [])]
    meta["timeline_attrs"] = [*meta["timeline_attrs"], *(timeline_attrs or [])]
    meta["rename_timeline_attrs"] = [
        *(r.model_dump() for r in rename_timeline_attrs or []),
        *meta["rename_timeline_attrs"],
    ]
    meta["rename_event_attrs"] = [
        *(r.model_dump() for r in rename_event_attrs or []),
        *meta["rename_event_attrs"],
    ]
    if non_json_attrs:
        meta["non_json_attrs"] = list(non_json_attrs)

    scalars: dict[str, Any] = {
        "timeline_name_prefix": timeline_name_prefix,
        "event_name_prefix": event_name_prefix,
        "timestamp_attr": timestamp_attr,
        "timestamp_attr_units": timestamp_attr_units,
        "non_json_regex": non_json_regex,
        "run_id": run_id,
        "on_record_error": on_record_error,
    }
    meta.update({k: v for k, v in scalars.items() if v is not None})

    sink = settings.sink.model_dump()
    if sink_kind is not None:
        sink["kind"] = sink_kind
    if sink_path is not None:
        sink["path"] = sink_path

    return JsonTimelineSettings(metadata=ImportSettings(**meta), sink=SinkSettings(**sink))
