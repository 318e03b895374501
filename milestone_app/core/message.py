"""Render a policy decision into the notification the maintainer posts."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from .config import (
    APPROVED_LABEL,
    BLOCKER_LABEL,
    IN_PROGRESS_LABEL,
    MILESTONE_HELP_DETAIL,
    MILESTONE_NOTIFIER_NAME,
)
from .labels import quote_label
from .notification import Notification
from .policy import (
    ApprovalRemoval,
    ApprovalWarning,
    DecisionRecord,
    FreezeRemoval,
    LabelingRemoval,
    LabelingWarning,
    LabelSummary,
    MilestoneState,
    MissingStatusWarning,
    NonBlockerReminder,
    Section,
    UpdateIntervalReminder,
    UpdateRequired,
)
from .settings import MilestoneSettings

EXAMPLE_UPDATE = """Example update:

```
ACK.  In progress
ETA: DD/MM/YYYY
Risks: Complicated fix required
```"""


@dataclass(frozen=True, slots=True)
class MilestoneChange:
    notification: Notification
    label: str
    comment_interval: timedelta | None
    remove_from_milestone: bool


def day_phrase(days: int) -> str:
    unit = "day" if days in (1, -1) else "days"
    return f"{days} {unit}"


def duration_to_max_days(duration: timedelta) -> str:
    """Whole days in ``duration``, rounded down (``2 days``, ``1 day``)."""
    return day_phrase(math.floor(duration.total_seconds() / 86400))


def remaining_days(remaining: timedelta) -> str:
    """Whole days left before a deadline, not counting the day in progress.

    A deadline exactly three days out reads "2 days", the same as one a few
    seconds less than three days out, so the text does not change between
    two runs moments apart.
    """
    seconds = remaining.total_seconds()
    if seconds <= 0:
        return day_phrase(math.floor(seconds / 86400))
    return day_phrase(math.ceil(seconds / 86400) - 1)


def format_date(value: datetime, settings: MilestoneSettings) -> str:
    local = value.astimezone(settings.tz)
    return f"{local:%b} {local.day}"


class _Renderer:
    """Renders sections in a fixed order, independent of insertion order."""

    ORDER: tuple[type[Section], ...] = (
        ApprovalWarning,
        ApprovalRemoval,
        MissingStatusWarning,
        UpdateRequired,
        UpdateIntervalReminder,
        NonBlockerReminder,
        FreezeRemoval,
        LabelingWarning,
        LabelingRemoval,
    )

    def __init__(self, decision: DecisionRecord, settings: MilestoneSettings):
        self.decision = decision
        self.settings = settings
        self.obj_type = decision.obj_type
        self.obj_type_title = decision.obj_type.title()
        self.milestone = f"{decision.milestone} milestone"

    def render(self) -> str:
        visible = self.decision.visible_sections()
        out = ""
        for kind in self.ORDER:
            for section in visible:
                if isinstance(section, kind):
                    out += f"\n{self._paragraph(section)}\n"
        for section in visible:
            if isinstance(section, LabelSummary):
                out += self._summary(section)
        return out

    def _paragraph(self, section: Section) -> str:
        obj_type = self.obj_type
        if isinstance(section, ApprovalWarning):
            warning = ""
            if section.remove_after is not None:
                warning = (
                    f" If the label is not applied within {remaining_days(section.remove_after)}, "
                    f"the {obj_type} will be moved out of the {self.milestone}."
                )
            return (
                f"**Action required**: This {obj_type} must have the {quote_label(APPROVED_LABEL)} "
                f"label applied by a SIG maintainer.{warning}"
            )
        if isinstance(section, ApprovalRemoval):
            return (
                f"**Important**: This {obj_type} was missing the {quote_label(APPROVED_LABEL)} label "
                f"for more than {duration_to_max_days(self.settings.approval_grace_period)}."
            )
        if isinstance(section, MissingStatusWarning):
            phase = self.decision.phase.value
            return (
                f"**Action required**: During code {phase}, {obj_type}s in the milestone should be in progress.\n"
                f"If this {obj_type} is not being actively worked on, please remove it from the milestone.\n"
                f"If it is being worked on, please add the {quote_label(IN_PROGRESS_LABEL)} label so it can be "
                f"tracked with other in-flight {obj_type}s."
            )
        if isinstance(section, UpdateRequired):
            return (
                f"**Action Required**: This {obj_type} has not been updated since "
                f"{format_date(section.last_updated, self.settings)}. Please provide an update."
            )
        if isinstance(section, UpdateIntervalReminder):
            return (
                f"**Note**: This {obj_type} is marked as {quote_label(BLOCKER_LABEL)}, and must be updated every "
                f"{duration_to_max_days(section.update_interval)} during code {self.decision.phase.value}.\n\n"
                f"{EXAMPLE_UPDATE}"
            )
        if isinstance(section, NonBlockerReminder):
            return (
                f"**Note**: If this {obj_type} is not resolved or labeled as {quote_label(BLOCKER_LABEL)} "
                f"by {self.settings.freeze_date} it will be moved out of the {self.milestone}."
            )
        if isinstance(section, FreezeRemoval):
            return (
                f"**Important**: Code freeze is in effect and only {obj_type}s with {quote_label(BLOCKER_LABEL)} "
                f"may remain in the {self.milestone}."
            )
        if isinstance(section, LabelingWarning):
            warning = ""
            if section.remove_after is not None:
                warning = (
                    f" If the required changes are not made within {remaining_days(section.remove_after)}, "
                    f"the {obj_type} will be moved out of the {self.milestone}."
                )
            errors = "\n".join(section.label_errors)
            return f"**Action required**: This {obj_type} requires label changes.{warning}\n\n{errors}"
        if isinstance(section, LabelingRemoval):
            errors = "\n".join(section.label_errors)
            return (
                f"**Important**: This {obj_type} was missing labels required for the {self.milestone} "
                f"for more than {duration_to_max_days(self.settings.label_grace_period)}.\n\n{errors}"
            )
        raise ValueError(f"unknown section: {section!r}")

    def _summary(self, section: LabelSummary) -> str:
        is_open = " open" if self.decision.state is MilestoneState.CURRENT else ""
        sigs = " ".join(quote_label(s) for s in section.sig_labels)
        return (
            f"<details{is_open}>\n"
            f"<summary>{self.obj_type_title} Labels</summary>\n\n"
            f"- {sigs}: {self.obj_type_title} will be escalated to these SIGs if needed.\n"
            f"- {quote_label(section.priority)}: {section.priority_description}\n"
            f"- {quote_label(section.kind)}: {section.kind_description}\n"
            f"</details>"
        )


def render_body(decision: DecisionRecord, settings: MilestoneSettings) -> str:
    """Markdown body for ``decision`` (sections only, no title or help)."""
    return _Renderer(decision, settings).render()


def sig_mentions(decision: DecisionRecord, settings: MilestoneSettings) -> str:
    template = settings.sig_mention_template
    if not template:
        return ""
    prefix = settings.taxonomy.sig_prefix
    return " ".join(template.format(sig=label[len(prefix):]) for label in decision.sig_labels)


def build_change(decision: DecisionRecord, settings: MilestoneSettings) -> MilestoneChange:
    """Turn a decision into the label/notification/milestone changes to apply."""
    state_config = decision.state.config
    mentions = sig_mentions(decision, settings) if state_config.notify_sigs else ""
    message = f"{mentions}\n\n{render_body(decision, settings)}\n{MILESTONE_HELP_DETAIL}"
    title = state_config.title.format(obj_type=decision.obj_type.title())
    return MilestoneChange(
        notification=Notification(MILESTONE_NOTIFIER_NAME, title, message),
        label=state_config.label,
        comment_interval=settings.warning_interval if state_config.warn_on_interval else None,
        remove_from_milestone=decision.state is MilestoneState.NEEDS_REMOVAL,
    )
