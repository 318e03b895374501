"""Central configuration: label names, label taxonomy, milestone state table, defaults."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta

# =============================================================================
# GitHub Connection Settings
# =============================================================================
GITHUB_DEFAULT_ENDPOINT = "https://api.github.com"
GITHUB_TOKEN_FILE = "/etc/github/oauth"
GITHUB_PAGE_SIZE = 100
GITHUB_TIMEOUT_SECONDS = 30.0
TIMEZONE = "UTC"

# =============================================================================
# Notification
# =============================================================================
MILESTONE_NOTIFIER_NAME = "MilestoneNotifier"

# Release milestones look like "v1.8" or "v1.10.2"
RELEASE_MILESTONE_PATTERN = r"^v\d+\.\d+"

# =============================================================================
# Milestone State Labels
# These are applied by the maintainer and are mutually exclusive.
# =============================================================================
LABELS_INCOMPLETE_LABEL = "milestone/incomplete-labels"
NEEDS_APPROVAL_LABEL = "milestone/needs-approval"
NEEDS_ATTENTION_LABEL = "milestone/needs-attention"
REMOVED_LABEL = "milestone/removed"

MILESTONE_STATE_LABELS: Sequence[str] = (
    LABELS_INCOMPLETE_LABEL,
    NEEDS_APPROVAL_LABEL,
    NEEDS_ATTENTION_LABEL,
    REMOVED_LABEL,
)

# Applied manually by SIG maintainers, never by the maintainer itself
APPROVED_LABEL = "status/approved-for-milestone"
IN_PROGRESS_LABEL = "status/in-progress"

BLOCKER_LABEL = "priority/critical-urgent"
SIG_LABEL_PREFIX = "sig/"

# =============================================================================
# Label Taxonomy
# Closed enumerations: label name -> description. Priority descriptions take
# an ``{obj_type}`` placeholder.
# =============================================================================
KIND_LABELS: tuple[tuple[str, str], ...] = (
    ("kind/bug", "Fixes a bug discovered during the current release."),
    ("kind/cleanup", "Adding tests, refactoring, fixing old bugs."),
    ("kind/feature", "New functionality."),
)

PRIORITY_LABELS: tuple[tuple[str, str], ...] = (
    (
        BLOCKER_LABEL,
        "Never automatically move {obj_type} out of a release milestone; "
        "continually escalate to contributor and SIG through all available channels.",
    ),
    (
        "priority/important-longterm",
        "Escalate to the {obj_type} owners; move out of the milestone after 1 attempt.",
    ),
    (
        "priority/important-soon",
        "Escalate to the {obj_type} owners and SIG owner; "
        "move out of milestone after several unsuccessful escalation attempts.",
    ),
)


@dataclass(frozen=True, slots=True)
class LabelTaxonomy:
    kinds: tuple[tuple[str, str], ...] = KIND_LABELS
    priorities: tuple[tuple[str, str], ...] = PRIORITY_LABELS
    sig_prefix: str = SIG_LABEL_PREFIX

    def kind_description(self, label: str) -> str:
        return dict(self.kinds).get(label, "")

    def priority_description(self, label: str, obj_type: str) -> str:
        template = dict(self.priorities).get(label, "")
        return template.format(obj_type=obj_type)


# =============================================================================
# Milestone State Table
# =============================================================================
@dataclass(frozen=True, slots=True)
class StateConfig:
    # Title of the notification; ``{obj_type}`` is the title-cased object type
    title: str
    # State label to apply (all other state labels are removed)
    label: str = ""
    # Whether the notification is repeated on the warning interval
    warn_on_interval: bool = False
    # Whether SIGs are mentioned in the notification
    notify_sigs: bool = False


# Keyed by MilestoneState.value (see policy.py)
STATE_CONFIGS: dict[str, StateConfig] = {
    "current": StateConfig(title="Milestone {obj_type} **Current**"),
    "needs-labeling": StateConfig(
        title="Milestone {obj_type} Labels **Incomplete**",
        label=LABELS_INCOMPLETE_LABEL,
        warn_on_interval=True,
    ),
    "needs-approval": StateConfig(
        title="Milestone {obj_type} **Needs Approval**",
        label=NEEDS_APPROVAL_LABEL,
        warn_on_interval=True,
        notify_sigs=True,
    ),
    "needs-attention": StateConfig(
        title="Milestone {obj_type} **Needs Attention**",
        label=NEEDS_ATTENTION_LABEL,
        warn_on_interval=True,
        notify_sigs=True,
    ),
    "needs-removal": StateConfig(
        title="Milestone **Removed** From {obj_type}",
        label=REMOVED_LABEL,
        notify_sigs=True,
    ),
}

MILESTONE_HELP_DETAIL = """<details>
<summary>Help</summary>
<ul>
 <li><a href="https://github.com/kubernetes/community/blob/master/contributors/devel/release/issues.md">Additional instructions</a></li>
 <li><a href="https://github.com/kubernetes/test-infra/blob/master/commands.md">Commands for setting labels</a></li>
</ul>
</details>
"""

# =============================================================================
# Default Durations
# =============================================================================
DEFAULT_WARNING_INTERVAL = timedelta(days=1)
DEFAULT_LABEL_GRACE_PERIOD = timedelta(days=3)
DEFAULT_APPROVAL_GRACE_PERIOD = timedelta(days=7)
DEFAULT_SLUSH_UPDATE_INTERVAL = timedelta(days=3)
DEFAULT_FREEZE_UPDATE_INTERVAL = timedelta(days=1)

# =============================================================================
# Report Columns
# =============================================================================
RESULT_CORE_COLUMNS: Sequence[str] = (
    "number",
    "title",
    "obj_type",
    "milestone",
    "phase",
    "state",
    "label",
    "sections",
    "remove_from_milestone",
    "error",
)

DISPLAY_ORDER_REPORT: Sequence[str] = (
    "Object",
    "title",
    "obj_type",
    "milestone",
    "phase",
    "state",
    "label",
    "sections",
    "remove_from_milestone",
    "error",
)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"
    state_order: Sequence[str] = field(
        default=("current", "needs-labeling", "needs-approval", "needs-attention", "needs-removal")
    )


SETTINGS = AppSettings()
