"""Factories for settings used across tests."""

from __future__ import annotations

from typing import Any

from jsontimeline.core.config import ImportSettings


def make_settings(**overrides: Any) -> ImportSettings:
    """ImportSettings with a "host" timeline name and "msg" event name by default."""
    values: dict[str, Any] = {
        "timeline_names": ["host"],
        "event_names": ["msg"],
    }
    values.update(overrides)
    return ImportSettings(**values)
