"""Milestone maintainer settings: per-milestone phases and policy durations.

Settings are loaded once (usually from ``milestone.yaml``) and passed
explicitly to the service and the policy engine. They are validated eagerly so
a bad configuration fails before any issue is touched.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import pandas as pd
import pytz
import yaml

from .config import (
    DEFAULT_APPROVAL_GRACE_PERIOD,
    DEFAULT_FREEZE_UPDATE_INTERVAL,
    DEFAULT_LABEL_GRACE_PERIOD,
    DEFAULT_SLUSH_UPDATE_INTERVAL,
    DEFAULT_WARNING_INTERVAL,
    TIMEZONE,
    LabelTaxonomy,
)
from .phase import Phase, normalize_phase, update_interval_for

DEFAULT_SETTINGS_FILE = "milestone.yaml"

DURATION_FIELDS = (
    "warning_interval",
    "label_grace_period",
    "approval_grace_period",
    "slush_update_interval",
    "freeze_update_interval",
)

_PLAIN_NUMBER = re.compile(r"^[+-]?\d+(?:\.\d+)?$")


class ConfigError(ValueError):
    """Raised when the maintainer configuration is invalid."""


def _seconds(value: float, name: str) -> timedelta:
    if not math.isfinite(value):
        raise ConfigError(f"{name}: invalid duration {value!r}")
    try:
        return timedelta(seconds=value)
    except OverflowError as exc:
        raise ConfigError(f"{name}: duration {value!r} is out of range") from exc


def parse_duration(value: Any, name: str) -> timedelta:
    """Parse ``value`` into a timedelta.

    Accepts timedelta objects, numbers of seconds (bare or quoted) and
    pandas timedelta strings such as ``"24h"`` or ``"3 days"``.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ConfigError(f"{name}: expected a duration, got {value!r}")
    if isinstance(value, (int, float)):
        return _seconds(value, name)
    text = str(value).strip()
    # pandas reads a unitless string as nanoseconds
    if _PLAIN_NUMBER.match(text):
        return _seconds(float(text), name)
    try:
        parsed = pd.to_timedelta(text)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}: invalid duration {value!r}") from exc
    if pd.isna(parsed):
        raise ConfigError(f"{name}: invalid duration {value!r}")
    return parsed.to_pytimedelta()


def parse_modes(raw: Any) -> dict[str, Phase]:
    if not isinstance(raw, Mapping):
        raise ConfigError("modes: expected a mapping of milestone title to phase")
    modes: dict[str, Phase] = {}
    for milestone, value in raw.items():
        title = str(milestone).strip()
        if not title:
            raise ConfigError("modes: milestone title must not be empty")
        phase = normalize_phase(value)
        if phase is None:
            allowed = ", ".join(p.value for p in Phase)
            raise ConfigError(f"modes: invalid phase {value!r} for {title} (expected one of {allowed})")
        modes[title] = phase
    return modes


@dataclass(frozen=True, slots=True)
class MilestoneSettings:
    modes: Mapping[str, Phase] = field(default_factory=dict)
    warning_interval: timedelta = DEFAULT_WARNING_INTERVAL
    label_grace_period: timedelta = DEFAULT_LABEL_GRACE_PERIOD
    approval_grace_period: timedelta = DEFAULT_APPROVAL_GRACE_PERIOD
    slush_update_interval: timedelta = DEFAULT_SLUSH_UPDATE_INTERVAL
    freeze_update_interval: timedelta = DEFAULT_FREEZE_UPDATE_INTERVAL
    freeze_date: str = ""
    timezone: str = TIMEZONE
    sig_mention_template: str = ""
    taxonomy: LabelTaxonomy = field(default_factory=LabelTaxonomy)

    def validate(self) -> MilestoneSettings:
        for name in DURATION_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, timedelta) or value <= timedelta(0):
                raise ConfigError(f"{name} must be greater than zero")
        if not self.freeze_date or not self.freeze_date.strip():
            raise ConfigError("freeze_date must be supplied")
        for milestone, phase in self.modes.items():
            if not isinstance(phase, Phase):
                raise ConfigError(f"modes: invalid phase {phase!r} for {milestone}")
        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError as exc:
            raise ConfigError(f"timezone: unknown timezone {self.timezone!r}") from exc
        return self

    def phase_for(self, milestone: str) -> Phase | None:
        return self.modes.get(milestone)

    def update_interval(self, phase: Phase) -> timedelta:
        return update_interval_for(phase, self.slush_update_interval, self.freeze_update_interval)

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MilestoneSettings:
        if not isinstance(data, Mapping):
            raise ConfigError("settings: expected a mapping at the top level")
        if not data.get("modes"):
            raise ConfigError("modes: at least one milestone must be configured")
        kwargs: dict[str, Any] = {"modes": parse_modes(data["modes"])}
        for name in DURATION_FIELDS:
            if data.get(name) is not None:
                kwargs[name] = parse_duration(data[name], name)
        for name in ("freeze_date", "timezone", "sig_mention_template"):
            if data.get(name) is not None:
                kwargs[name] = str(data[name])
        return cls(**kwargs).validate()


def load_settings(path: str | Path | None = None) -> MilestoneSettings:
    """Load and validate settings from a YAML file.

    Missing duration keys fall back to the defaults in ``config.py``;
    ``modes`` and ``freeze_date`` must be present.
    """
    yaml_path = Path(path or DEFAULT_SETTINGS_FILE)
    if not yaml_path.exists():
        raise ConfigError(f"settings file not found: {yaml_path}")
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse {yaml_path}: {exc}") from exc
    return MilestoneSettings.from_mapping(data)
