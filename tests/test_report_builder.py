from datetime import UTC, datetime

from jira_timing.core.models import ReportRow
from jira_timing.report.builder import ReportBuilder, format_cell, report_columns


def _row(key="BUG-1", summary="Crash", minutes=None, days=None, **overrides):
    data = dict(
        issue_key=key,
        summary=summary,
        status="Backlog",
        priority="High",
        start_time=datetime(2024, 1, 1, tzinfo=UTC),
        backlog_days=30,
        status2_time=None,
        time_spent_minutes=minutes,
        time_spent_days=days,
        assignee="Unassigned",
        custom_value="N/A",
    )
    data.update(overrides)
    return ReportRow(**data)


def test_header_interpolates_status2_and_custom_label():
    cols = report_columns("In Progress", "Affected Customers")
    assert cols[6] == "In Progress Time"
    assert cols[-1] == "Affected Customers"
    assert len(cols) == 11


def test_summary_quotes_are_doubled():
    builder = ReportBuilder("In Progress")
    builder.add(_row(summary='He said "hi"'))
    line = builder.render().splitlines()[1]
    assert line.split(",")[1] == '"He said ""hi"""'


def test_absent_values_render_empty_and_zero_renders():
    builder = ReportBuilder("Done")
    builder.add(_row(summary=None, backlog_days=0))
    cells = builder.render().splitlines()[1].split(",")
    assert cells[1] == '""'
    assert cells[4] == "2024-01-01T00:00:00+00:00"
    assert cells[5] == "0"
    assert cells[6:9] == ["", "", ""]


def test_rows_keep_processing_order():
    builder = ReportBuilder("Done")
    for key in ("BUG-3", "BUG-1", "BUG-2"):
        builder.add(_row(key=key))
    lines = builder.render().splitlines()
    assert [ln.split(",")[0] for ln in lines[1:]] == ["BUG-3", "BUG-1", "BUG-2"]
    assert lines[0].startswith("Issue Key,Summary,Status")


def test_average_uses_present_values_only():
    builder = ReportBuilder("Done")
    assert builder.average_time_spent_days() == 0.0
    builder.add(_row(days=4, minutes=5760))
    builder.add(_row(days=None))
    builder.add(_row(days=8, minutes=11520))
    assert builder.average_time_spent_days() == 6.0


def test_to_dataframe_columns():
    builder = ReportBuilder("In Progress", "Customers")
    builder.add(_row(days=2, minutes=2880))
    df = builder.to_dataframe()
    assert list(df.columns) == report_columns("In Progress", "Customers")
    assert df.loc[0, "Time Spent (Days)"] == 2


def test_write_overwrites(tmp_path):
    target = tmp_path / "out" / "report.csv"
    target.parent.mkdir()
    target.write_text("stale content\nmore\nlines\n")
    builder = ReportBuilder("Done")
    builder.add(_row())
    builder.write(target)
    text = target.read_text()
    assert "stale" not in text
    assert len(text.splitlines()) == 2


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell(float("nan")) == ""
    assert format_cell(12) == "12"
