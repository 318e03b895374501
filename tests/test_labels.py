import pytest

from milestone_app.core.config import LabelTaxonomy
from milestone_app.core.labels import (
    AmbiguousLabelError,
    check_labels,
    format_label_list,
    unique_label_name,
)

TAXONOMY = LabelTaxonomy()
COMPLETE = ["kind/bug", "priority/important-soon", "sig/node"]


def test_unique_label_name():
    choices = TAXONOMY.kinds
    assert unique_label_name(["kind/bug", "other"], choices) == "kind/bug"
    assert unique_label_name(["kind/bug", "kind/bug"], choices) == "kind/bug"
    assert unique_label_name(["other"], choices) is None
    with pytest.raises(AmbiguousLabelError):
        unique_label_name(["kind/bug", "kind/feature"], choices)


def test_format_label_list():
    assert format_label_list([]) == ""
    assert format_label_list(["b"]) == "`b`"
    assert format_label_list(["c", "a", "b"]) == "`a`, `b` or `c`"


def test_complete_labels():
    check = check_labels(COMPLETE + ["sig/api-machinery"], TAXONOMY)
    assert check.complete
    assert check.kind == "kind/bug"
    assert check.priority == "priority/important-soon"
    assert check.sig_labels == ("sig/node", "sig/api-machinery")


def test_errors_are_ordered_kind_priority_sig():
    check = check_labels([], TAXONOMY)
    assert not check.complete
    assert len(check.errors) == 3
    assert check.errors[0].startswith("_**kind**_: Must specify exactly one of `kind/bug`, `kind/cleanup` or")
    assert check.errors[1].startswith("_**priority**_: Must specify exactly one of")
    assert check.errors[2] == "_**sig owner**_: Must specify at least one label prefixed with `sig/`."


def test_ambiguous_reported_like_missing():
    ambiguous = check_labels(["kind/bug", "kind/feature", "priority/important-soon", "sig/node"], TAXONOMY)
    missing = check_labels(["priority/important-soon", "sig/node"], TAXONOMY)
    assert ambiguous.errors == missing.errors
    assert ambiguous.kind is None


def test_only_sig_missing():
    check = check_labels(["kind/bug", "priority/critical-urgent"], TAXONOMY)
    assert len(check.errors) == 1
    assert "sig owner" in check.errors[0]
