"""Label triad validation: exactly one kind, exactly one priority, at least one sig."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .config import LabelTaxonomy


class AmbiguousLabelError(ValueError):
    """Raised when more than one label of a closed enumeration is present."""


@dataclass(frozen=True, slots=True)
class LabelCheck:
    kind: str | None
    priority: str | None
    sig_labels: tuple[str, ...] = ()
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def complete(self) -> bool:
        return not self.errors


def quote_label(label: str) -> str:
    """Format a label name as inline markdown code."""
    if label:
        return f"`{label}`"
    return label


def format_label_list(names: Iterable[str]) -> str:
    """Render names as "`a`, `b` or `c`" (sorted, quoted)."""
    quoted = sorted(quote_label(n) for n in names)
    if not quoted:
        return ""
    if len(quoted) == 1:
        return quoted[0]
    return ", ".join(quoted[:-1]) + " or " + quoted[-1]


def unique_label_name(labels: Iterable[str], choices: Sequence[tuple[str, str]]) -> str | None:
    """Return the single label from ``choices`` present in ``labels``.

    Returns None when no label matches and raises AmbiguousLabelError when
    more than one does.
    """
    names = {name for name, _ in choices}
    found: str | None = None
    for label in labels:
        if label not in names:
            continue
        if found is not None and found != label:
            raise AmbiguousLabelError(f"found more than one matching label: {found}, {label}")
        found = label
    return found


def sig_label_names(labels: Iterable[str], prefix: str) -> list[str]:
    return [label for label in labels if label.startswith(prefix)]


def _exactly_one(labels: Sequence[str], choices: Sequence[tuple[str, str]]) -> str | None:
    try:
        return unique_label_name(labels, choices)
    except AmbiguousLabelError:
        return None


def check_labels(labels: Iterable[str], taxonomy: LabelTaxonomy) -> LabelCheck:
    """Validate ``labels`` against the taxonomy.

    Ambiguity (two kind labels, say) is reported exactly like absence.
    Errors are ordered kind, priority, sig owner.
    """
    labels = list(labels)
    errors: list[str] = []

    kind = _exactly_one(labels, taxonomy.kinds)
    if kind is None:
        choices = format_label_list(name for name, _ in taxonomy.kinds)
        errors.append(f"_**kind**_: Must specify exactly one of {choices}.")

    priority = _exactly_one(labels, taxonomy.priorities)
    if priority is None:
        choices = format_label_list(name for name, _ in taxonomy.priorities)
        errors.append(f"_**priority**_: Must specify exactly one of {choices}.")

    sigs = sig_label_names(labels, taxonomy.sig_prefix)
    if not sigs:
        errors.append(
            f"_**sig owner**_: Must specify at least one label prefixed with {quote_label(taxonomy.sig_prefix)}."
        )

    return LabelCheck(kind=kind, priority=priority, sig_labels=tuple(sigs), errors=tuple(errors))
