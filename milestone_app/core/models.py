"""Domain data models for tracked issues / pull requests, comments and events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class CommentModel:
    id: int | None
    author: str | None
    body: str | None
    created: datetime | None
    updated: datetime | None


@dataclass(slots=True)
class EventModel:
    event: str | None
    actor: str | None
    created: datetime | None
    label: str | None = None


@dataclass(slots=True)
class TrackedObject:
    org: str
    repo: str
    number: int
    title: str | None
    state: str
    milestone: str | None
    created: datetime
    is_pr: bool = False
    html_url: str | None = None
    labels: list[str] = field(default_factory=list)

    def has_label(self, name: str) -> bool:
        return name in self.labels

    @property
    def obj_type(self) -> str:
        return "pull request" if self.is_pr else "issue"

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"


@dataclass(slots=True)
class ObjectHistory:
    """Everything read from the tracker about one object in one invocation."""

    bot_name: str
    comments: list[CommentModel] = field(default_factory=list)
    events: list[EventModel] = field(default_factory=list)
    review_comments: list[CommentModel] = field(default_factory=list)
