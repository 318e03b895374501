"""Structured notifications embedded in comment bodies.

A notification is a comment written by the bot that can be found again later:

    [NAME] arguments on one line

    free-form context, possibly spanning several lines
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# [NOTIFNAME] Arguments\n\nContext
NOTIFICATION_RE = re.compile(r"^\[([^\]\s]+)\] *?([^\n]*)(?:\n\n(.*))?", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Notification:
    name: str
    arguments: str = ""
    context: str = ""

    def __post_init__(self):
        # Names are case-insensitive; keep the canonical upper-case form so
        # structural equality holds between parsed and freshly built values.
        object.__setattr__(self, "name", self.name.upper())
        object.__setattr__(self, "arguments", self.arguments.strip())
        object.__setattr__(self, "context", self.context.strip())

    def __str__(self) -> str:
        text = f"[{self.name}]"
        if self.arguments:
            text += f" {self.arguments}"
        if self.context:
            text += f"\n\n{self.context}"
        return text

    def matches(self, name: str) -> bool:
        return self.name == name.upper()


def parse_notification(body: str | None) -> Notification | None:
    """Read a notification from a comment body, or None if there is none."""
    if not body:
        return None
    match = NOTIFICATION_RE.match(body)
    if match is None:
        return None
    return Notification(
        name=match.group(1),
        arguments=match.group(2) or "",
        context=match.group(3) or "",
    )
