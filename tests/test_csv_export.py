"""
Tests for CSV export of clicks.
"""
from datetime import datetime, timezone

from mailshort_app.models.click import ClickEvent
from mailshort_app.services.csv_export import clicks_to_csv, export_filename


def click(referer=None, user_agent=None, ts=None):
    return ClickEvent(
        link_code="abcdEFGH",
        ts=ts or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        referer=referer,
        user_agent=user_agent,
    )


class TestClicksToCsv:
    def test_header_only_when_no_clicks(self):
        assert clicks_to_csv([]) == "ts,referer,ua\n"

    def test_plain_row(self):
        body = clicks_to_csv([click("https://mail.example/", "Mozilla/5.0")])

        assert body.splitlines() == [
            "ts,referer,ua",
            "2025-01-01T12:00:00+00:00,https://mail.example/,Mozilla/5.0",
        ]

    def test_quote_and_comma_escaped(self):
        body = clicks_to_csv([click(referer='a,"b"')])

        assert body.splitlines()[1] == '2025-01-01T12:00:00+00:00,"a,""b""",'

    def test_newline_field_quoted(self):
        body = clicks_to_csv([click(user_agent="line1\nline2")])

        assert body.endswith('"line1\nline2"\n')

    def test_missing_values_are_empty(self):
        body = clicks_to_csv([click()])
        assert body.splitlines()[1] == "2025-01-01T12:00:00+00:00,,"

    def test_rows_keep_given_order(self):
        first = click(referer="first", ts=datetime(2025, 1, 1, tzinfo=timezone.utc))
        second = click(referer="second", ts=datetime(2025, 1, 2, tzinfo=timezone.utc))

        lines = clicks_to_csv([first, second]).splitlines()
        assert "first" in lines[1]
        assert "second" in lines[2]


def test_export_filename():
    assert export_filename("abcdEFGH") == "link_abcdEFGH_clicks.csv"
