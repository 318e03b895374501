"""MilestoneService: orchestrates filtering, history fetch, decision and apply steps."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from .config import BLOCKER_LABEL, RELEASE_MILESTONE_PATTERN
from .github_client import GitHubAPI, TrackerError
from .mappers import map_comment, map_event, map_issue
from .message import MilestoneChange, build_change
from .models import ObjectHistory, TrackedObject
from .phase import Phase
from .policy import DecisionRecord, decide
from .reconcile import reconcile_notification, update_state_label
from .settings import MilestoneSettings

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]

_RELEASE_RE = re.compile(RELEASE_MILESTONE_PATTERN)


def release_milestone(title: str | None) -> str | None:
    """Return ``title`` if it names a release milestone (``vX.Y``), else None."""
    if title and _RELEASE_RE.match(title):
        return title
    return None


@dataclass(slots=True)
class MaintainResult:
    obj: TrackedObject
    milestone: str | None = None
    phase: Phase | None = None
    decision: DecisionRecord | None = None
    change: MilestoneChange | None = None
    mutations: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MilestoneService:
    def __init__(self, api: GitHubAPI, settings: MilestoneSettings):
        self.api = api
        self.settings = settings.validate()

    # ------------------ Filtering ------------------
    def target(self, obj: TrackedObject) -> tuple[str, Phase] | None:
        """Milestone and phase governing ``obj``, or None if it is not maintained."""
        if obj.is_closed:
            logger.debug("Ignoring closed %s %s/%s#%d", obj.obj_type, obj.org, obj.repo, obj.number)
            return None
        milestone = release_milestone(obj.milestone)
        if milestone is None:
            logger.debug("Ignoring %s/%s#%d without a release milestone", obj.org, obj.repo, obj.number)
            return None
        phase = self.settings.phase_for(milestone)
        if phase is None:
            logger.debug("Ignoring %s/%s#%d in untargeted milestone %s", obj.org, obj.repo, obj.number, milestone)
            return None
        return milestone, phase

    # ------------------ Fetch ------------------
    def fetch_history(self, obj: TrackedObject, phase: Phase | None = None) -> ObjectHistory:
        """Read comments and events for ``obj``.

        Review comments only feed the staleness check, which applies to
        blockers outside development, so they are skipped otherwise.
        """
        bot_name = self.api.bot_name()
        comments = [map_comment(c) for c in self.api.list_comments(obj.org, obj.repo, obj.number)]
        events = [map_event(e) for e in self.api.list_events(obj.org, obj.repo, obj.number)]
        review_comments = []
        if obj.is_pr and phase is not Phase.DEV and obj.has_label(BLOCKER_LABEL):
            review_comments = [
                map_comment(c) for c in self.api.list_review_comments(obj.org, obj.repo, obj.number)
            ]
        return ObjectHistory(
            bot_name=bot_name,
            comments=comments,
            events=events,
            review_comments=review_comments,
        )

    # ------------------ Decide / Apply ------------------
    def evaluate(
        self,
        obj: TrackedObject,
        milestone: str,
        phase: Phase,
        now: datetime,
        history: ObjectHistory | None = None,
    ) -> tuple[MaintainResult, ObjectHistory]:
        history = history or self.fetch_history(obj, phase)
        decision = decide(obj, history, self.settings, milestone, phase, now)
        change = build_change(decision, self.settings)
        result = MaintainResult(obj=obj, milestone=milestone, phase=phase, decision=decision, change=change)
        return result, history

    def maintain(self, obj: TrackedObject, now: datetime | None = None) -> MaintainResult | None:
        """Bring ``obj`` into compliance. Returns None for objects that are not maintained.

        Steps run in a fixed order (state label, notification, milestone) and
        each may raise TrackerError; nothing is rolled back, the next run
        converges from whatever state was left.
        """
        targeted = self.target(obj)
        if targeted is None:
            return None
        milestone, phase = targeted
        now = now or datetime.now(UTC)
        result, history = self.evaluate(obj, milestone, phase, now)
        change = result.change
        logger.debug(
            "%s/%s#%d in %s (%s): %s",
            obj.org,
            obj.repo,
            obj.number,
            milestone,
            phase.value,
            result.decision.state.value,
        )

        result.mutations.extend(update_state_label(self.api, obj, change.label))
        result.mutations.extend(
            reconcile_notification(
                self.api,
                obj,
                change.notification,
                history.comments,
                history.bot_name,
                change.comment_interval,
                now,
            )
        )
        if change.remove_from_milestone:
            self.api.clear_milestone(obj.org, obj.repo, obj.number)
            result.mutations.append("clear-milestone")
            logger.info("Removed %s/%s#%d from milestone %s", obj.org, obj.repo, obj.number, milestone)
        return result

    def scan(
        self,
        org: str,
        repo: str,
        *,
        progress: ProgressCallback | None = None,
        now: datetime | None = None,
    ) -> list[MaintainResult]:
        """Maintain every open issue and pull request in the targeted milestones.

        A tracker failure on one object is logged and recorded on its result,
        and a malformed search result is logged and skipped; the remaining
        objects are still processed.
        """
        results: list[MaintainResult] = []
        for milestone in self.settings.modes:
            if progress:
                progress(f"Querying {org}/{repo} milestone {milestone}", None, None)
            raw_issues = self.api.find_issues(org, repo, milestone)
            total = len(raw_issues)
            for idx, raw in enumerate(raw_issues, start=1):
                result = self._maintain_raw(raw, org, repo, milestone, now)
                if result is not None:
                    results.append(result)
                if progress:
                    progress(f"Maintaining milestone {milestone}", idx, total)
        return results

    def _maintain_raw(
        self,
        raw: dict,
        org: str,
        repo: str,
        milestone: str,
        now: datetime | None,
    ) -> MaintainResult | None:
        try:
            obj = map_issue(raw, org, repo)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Skipping malformed search result in %s/%s milestone %s: %s", org, repo, milestone, exc)
            return None
        try:
            return self.maintain(obj, now=now)
        except (TrackerError, ValueError) as exc:
            logger.error("Error maintaining %s/%s#%d in milestone %s: %s", org, repo, obj.number, milestone, exc)
            return MaintainResult(obj=obj, milestone=milestone, error=str(exc))
