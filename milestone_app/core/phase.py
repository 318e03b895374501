"""Release phase normalization and phase-dependent settings.

The release process moves a milestone through three phases: ``dev`` (normal
development), ``slush`` (code slush) and ``freeze`` (code freeze). This module
centralizes parsing of phase names coming from configuration files so that
aliases like ``code-freeze`` map to the canonical phase.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum


class Phase(str, Enum):
    DEV = "dev"
    SLUSH = "slush"
    FREEZE = "freeze"


# Keys should be lowercase for case-insensitive matching
PHASE_ALIASES: dict[str, Phase] = {
    "dev": Phase.DEV,
    "development": Phase.DEV,
    "slush": Phase.SLUSH,
    "code-slush": Phase.SLUSH,
    "code slush": Phase.SLUSH,
    "freeze": Phase.FREEZE,
    "code-freeze": Phase.FREEZE,
    "code freeze": Phase.FREEZE,
    "frozen": Phase.FREEZE,
}


def normalize_phase(value: str | Phase | None) -> Phase | None:
    """Map a raw phase string to a :class:`Phase`.

    Parameters
    ----------
    value : str | Phase | None
        Phase name from configuration.

    Returns
    -------
    Phase | None
        Canonical phase, or None when the value is empty or unknown.

    Examples
    --------
    >>> normalize_phase("Code-Freeze")
    <Phase.FREEZE: 'freeze'>
    >>> normalize_phase("beta") is None
    True
    """
    if isinstance(value, Phase):
        return value
    if not value:
        return None
    return PHASE_ALIASES.get(str(value).strip().lower())


def update_interval_for(phase: Phase, slush_interval: timedelta, freeze_interval: timedelta) -> timedelta:
    """Return how often blockers must be updated during ``phase``.

    Development has no update requirement and yields a zero interval.
    """
    if phase is Phase.SLUSH:
        return slush_interval
    if phase is Phase.FREEZE:
        return freeze_interval
    return timedelta(0)

