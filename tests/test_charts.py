import pandas as pd

from milestone_app.visual.charts import state_chart, state_counts
from milestone_app.visual.tables import filter_states, prepare_report_table


def _sample_df():
    rows = [
        ("v1.8", 1, "needs-removal"),
        ("v1.8", 2, "current"),
        ("v1.8", 3, "current"),
        ("v1.9", 4, "needs-labeling"),
    ]
    return pd.DataFrame(
        [
            {
                "milestone": m,
                "number": n,
                "title": f"Object {n}",
                "state": s,
                "html_url": f"https://github.com/o/r/issues/{n}",
            }
            for m, n, s in rows
        ]
    )


def test_state_counts_orders_states():
    counts = state_counts(_sample_df())
    assert list(zip(counts["milestone"], counts["state"], counts["count"])) == [
        ("v1.8", "current", 2),
        ("v1.8", "needs-removal", 1),
        ("v1.9", "needs-labeling", 1),
    ]
    assert counts.loc[0, "objects"] == "#2: Object 2\n#3: Object 3"


def test_state_chart():
    assert state_chart(_sample_df()) is not None
    assert state_chart(pd.DataFrame()) is None


def test_report_table_helpers():
    df = _sample_df()
    table, cols, cfg = prepare_report_table(df)
    assert cols[0] == "Object"
    assert "Object" in cfg
    assert list(filter_states(table, ["current"])["number"]) == [2, 3]
    assert len(filter_states(table, [])) == 4
