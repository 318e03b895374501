"""Milestone policy engine.

Classifies a tracked object into one of five milestone states and collects
the message sections that explain the classification. The engine is a pure
function of the object, its history, the settings and the current time; all
tracker mutations are left to the reconcilers in ``reconcile.py``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import ClassVar

from .config import (
    APPROVED_LABEL,
    BLOCKER_LABEL,
    IN_PROGRESS_LABEL,
    LABELS_INCOMPLETE_LABEL,
    NEEDS_APPROVAL_LABEL,
    STATE_CONFIGS,
    StateConfig,
)
from .grace import grace_period_remaining, is_expired
from .labels import check_labels
from .models import ObjectHistory, TrackedObject
from .phase import Phase
from .settings import MilestoneSettings
from .stale import last_modification_time, update_overdue


class MilestoneState(Enum):
    CURRENT = "current"  # No change is required.
    NEEDS_LABELING = "needs-labeling"  # kind/priority/sig labels are missing or ambiguous.
    NEEDS_APPROVAL = "needs-approval"  # The approval label is missing.
    NEEDS_ATTENTION = "needs-attention"  # Status label missing or an update is required.
    NEEDS_REMOVAL = "needs-removal"  # The object must leave the milestone.

    @property
    def config(self) -> StateConfig:
        return STATE_CONFIGS[self.value]


# ------------------ Message Sections ------------------
@dataclass(frozen=True, slots=True)
class Section:
    name: ClassVar[str] = ""
    removal: ClassVar[bool] = False


@dataclass(frozen=True, slots=True)
class LabelSummary(Section):
    name: ClassVar[str] = "summarizeLabels"

    kind: str
    kind_description: str
    priority: str
    priority_description: str
    sig_labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LabelingWarning(Section):
    name: ClassVar[str] = "warnIncompleteLabels"

    label_errors: tuple[str, ...]
    remove_after: timedelta | None = None


@dataclass(frozen=True, slots=True)
class LabelingRemoval(Section):
    name: ClassVar[str] = "removeIncompleteLabels"
    removal: ClassVar[bool] = True

    label_errors: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ApprovalWarning(Section):
    name: ClassVar[str] = "warnUnapproved"

    remove_after: timedelta | None = None


@dataclass(frozen=True, slots=True)
class ApprovalRemoval(Section):
    name: ClassVar[str] = "removeUnapproved"
    removal: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class MissingStatusWarning(Section):
    name: ClassVar[str] = "warnMissingInProgress"


@dataclass(frozen=True, slots=True)
class UpdateRequired(Section):
    name: ClassVar[str] = "warnUpdateRequired"

    last_updated: datetime


@dataclass(frozen=True, slots=True)
class UpdateIntervalReminder(Section):
    name: ClassVar[str] = "warnUpdateInterval"

    update_interval: timedelta


@dataclass(frozen=True, slots=True)
class NonBlockerReminder(Section):
    name: ClassVar[str] = "warnNonBlockerRemoval"


@dataclass(frozen=True, slots=True)
class FreezeRemoval(Section):
    name: ClassVar[str] = "removeNonBlocker"
    removal: ClassVar[bool] = True


# ------------------ Decision Record ------------------
@dataclass(slots=True)
class DecisionRecord:
    milestone: str
    phase: Phase
    obj_type: str
    is_blocker: bool = False
    state: MilestoneState = MilestoneState.CURRENT
    sections: list[Section] = field(default_factory=list)
    sig_labels: tuple[str, ...] = ()

    def add(self, section: Section, state: MilestoneState | None = None) -> None:
        self.sections.append(section)
        if state is not None:
            self.state = state

    def section(self, kind: type[Section]) -> Section | None:
        for section in self.sections:
            if isinstance(section, kind):
                return section
        return None

    @property
    def section_names(self) -> set[str]:
        return {s.name for s in self.sections}

    def visible_sections(self) -> list[Section]:
        """Sections to render; removal suppresses every warning-only section."""
        if self.state is not MilestoneState.NEEDS_REMOVAL:
            return list(self.sections)
        return [s for s in self.sections if s.removal]


def decide(
    obj: TrackedObject,
    history: ObjectHistory,
    settings: MilestoneSettings,
    milestone: str,
    phase: Phase,
    now: datetime,
) -> DecisionRecord:
    """Classify ``obj`` for ``milestone`` in ``phase``.

    Branches are evaluated in a fixed order and the first that applies wins:
    incomplete labels, missing approval, then phase-specific checks.
    """
    is_blocker = obj.has_label(BLOCKER_LABEL)
    record = DecisionRecord(milestone=milestone, phase=phase, obj_type=obj.obj_type, is_blocker=is_blocker)

    check = check_labels(obj.labels, settings.taxonomy)
    if not check.complete:
        remaining = grace_period_remaining(
            obj,
            history.events,
            history.bot_name,
            LABELS_INCOMPLETE_LABEL,
            settings.label_grace_period,
            now,
            is_blocker,
            now,
        )
        if is_expired(remaining):
            record.add(LabelingRemoval(check.errors), MilestoneState.NEEDS_REMOVAL)
        else:
            record.add(LabelingWarning(check.errors, remaining), MilestoneState.NEEDS_LABELING)
        return record

    record.sig_labels = check.sig_labels
    record.add(
        LabelSummary(
            kind=check.kind,
            kind_description=settings.taxonomy.kind_description(check.kind),
            priority=check.priority,
            priority_description=settings.taxonomy.priority_description(check.priority, obj.obj_type),
            sig_labels=check.sig_labels,
        ),
        MilestoneState.CURRENT,
    )

    if not obj.has_label(APPROVED_LABEL):
        if is_blocker:
            record.add(ApprovalWarning(None), MilestoneState.NEEDS_APPROVAL)
            return record
        remaining = grace_period_remaining(
            obj,
            history.events,
            history.bot_name,
            NEEDS_APPROVAL_LABEL,
            settings.approval_grace_period,
            now,
            False,
            now,
        )
        if is_expired(remaining):
            record.add(ApprovalRemoval(), MilestoneState.NEEDS_REMOVAL)
        else:
            record.add(ApprovalWarning(remaining), MilestoneState.NEEDS_APPROVAL)
        return record

    # Status and updates are not required during development
    if phase is Phase.DEV:
        return record

    if phase is Phase.FREEZE and not is_blocker:
        record.add(FreezeRemoval(), MilestoneState.NEEDS_REMOVAL)
        return record

    if not obj.has_label(IN_PROGRESS_LABEL):
        record.add(MissingStatusWarning(), MilestoneState.NEEDS_ATTENTION)

    if not is_blocker:
        record.add(NonBlockerReminder())
        return record

    interval = settings.update_interval(phase)
    if interval > timedelta(0):
        last_update = last_modification_time(obj, history)
        if update_overdue(last_update, interval, now):
            record.add(UpdateRequired(last_update), MilestoneState.NEEDS_ATTENTION)
        record.add(UpdateIntervalReminder(interval))
    return record
