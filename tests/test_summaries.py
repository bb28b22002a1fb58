# tests/test_summaries.py
from unittest.mock import patch

import pytest

from floatchat.errors import BackendError, TransportError
from floatchat.models import QueryResult
from floatchat.summaries import (
    INSIGHT_HEADER,
    NO_RESULTS_MESSAGE,
    SUMMARY_FAILED_MESSAGE,
    error_reply,
    format_row,
    insight_digest,
    short_summary,
    suggestions_reply,
)


class TestFormatRow:
    def test_float_row_priority_order(self):
        row = {"ocean_region": "Arabian Sea", "status": "active", "float_id": "F1",
               "total_profiles": 3, "latitude": 15.5, "longitude": 70}
        assert format_row(row) == (
            "Float ID: F1 | Location: 15.5°N, 70°E | Status: active | Region: Arabian Sea | Profiles: 3"
        )

    def test_float_row_omits_absent_fields(self):
        assert format_row({"float_id": "F1", "latitude": 1.0, "status": None}) == "Float ID: F1"

    def test_depth_zero_uses_profile_style(self):
        assert format_row({"depth": 0, "temperature": 28.4}) == "Depth: 0m | Temperature: 28.4°C"

    def test_profile_row_with_salinity_only(self):
        assert format_row({"depth": 50.5, "salinity": 35}) == "Depth: 50.5m | Salinity: 35 PSU"

    def test_generic_row_keeps_key_order(self):
        assert format_row({"b": 1, "a": None, "c": True}) == "b: 1 | a: N/A | c: true"


class TestShortSummary:
    def test_two_float_rows(self):
        qr = QueryResult(results=[{"float_id": "F1", "status": "active"}, {"float_id": "F2", "status": "lost"}])
        text = short_summary(qr, "x", emojis=False)
        assert text.startswith("**Query Results:** Found 2 records")
        assert "Float ID: F1 | Status: active" in text
        assert "Float ID: F2 | Status: lost" in text

    def test_summary_is_prepended(self):
        qr = QueryResult(results=[{"a": 1}], summary="One row back.")
        text = short_summary(qr, "q", emojis=False)
        assert text.startswith("**Summary:** One row back.")
        assert "Found 1 records" in text

    def test_caps_preview_at_three_rows(self):
        qr = QueryResult(results=[{"n": i} for i in range(7)])
        text = short_summary(qr, "q")
        assert "**3.** n: 2" in text
        assert "n: 3" not in text
        assert "... and 4 more results" in text

    def test_empty_result_still_reports_count(self):
        text = short_summary(QueryResult(), "nothing")
        assert "Found 0 records" in text
        assert "Data Results" not in text

    @pytest.mark.parametrize("rows", [
        [{"float_id": "F1", "latitude": None, "longitude": None, "status": None}],
        [{"depth": None, "temperature": None}],
        [{"x": None}, {}],
    ])
    def test_never_renders_raw_nulls(self, rows):
        text = short_summary(QueryResult(results=rows), None)
        for token in ("None", "null", "undefined"):
            assert token not in text
        assert f"Found {len(rows)} records" in text


class TestReplies:
    def test_error_reply_lists_suggestions(self):
        text = error_reply(BackendError("Query too vague"), emojis=False)
        assert text.startswith("I encountered an error processing your query.")
        assert "**Error:** Query too vague" in text
        assert "• Try rephrasing your question" in text

    def test_error_reply_default_message(self):
        text = error_reply(TransportError())
        assert "Could not reach the FloatChat service." in text
        assert text.startswith("❌")

    def test_suggestions_numbered(self):
        assert suggestions_reply(["a", "", "b"], emojis=False) == "Suggestions:\n\n1. a\n2. b"

    def test_no_suggestions(self):
        assert suggestions_reply([], emojis=False).endswith("No suggestions available.")


class TestInsightDigest:
    def test_empty_inputs(self):
        assert insight_digest(None) == NO_RESULTS_MESSAGE
        assert insight_digest([]) == NO_RESULTS_MESSAGE
        assert insight_digest(QueryResult()) == NO_RESULTS_MESSAGE
        assert insight_digest({"results": []}) == NO_RESULTS_MESSAGE

    def test_single_row_min_avg_max_equal(self):
        text = insight_digest([{"temp": "12.5", "region": "Arabian Sea"}])
        assert text.startswith(INSIGHT_HEADER)
        assert "temp: avg 12.500, min 12.500, max 12.500 (based on 1 values)." in text
        assert "region: top values → Arabian Sea (1)." in text
        assert "Example row: temp=12.5 | region=Arabian Sea" in text

    def test_unparsable_values_are_ignored(self):
        text = insight_digest([{"v": 1}, {"v": "x"}, {"v": "3"}, {"v": None}])
        assert "v: avg 2.000, min 1.000, max 3.000 (based on 2 values)." in text

    def test_categorical_ties_keep_first_seen_order(self):
        rows = [{"s": "b"}, {"s": "a"}, {"s": "c"}, {"s": "a"}, {"s": "b"}, {"s": "d"}, {"s": ""}]
        text = insight_digest(rows)
        assert "s: top values → b (2), a (2), c (1)." in text

    def test_columns_are_union_in_first_seen_order(self):
        text = insight_digest([{"a": "x"}, {"b": "y", "a": "z"}])
        assert "Columns: a, b." in text
        assert "Example row: a=x | b=N/A" in text

    def test_limits_numeric_columns_and_example_width(self):
        row = {f"c{i}": i for i in range(8)}
        text = insight_digest([row])
        assert "c2: avg" in text
        assert "c3: avg" not in text
        assert "c5=5" in text
        assert "c6=6" not in text

    def test_sample_is_first_hundred_rows(self):
        rows = [{"v": 1}] * 100 + [{"v": 1000}]
        text = insight_digest(rows)
        assert "Results: 101 rows." in text
        assert "max 1.000 (based on 100 values)" in text

    def test_never_raises(self):
        with patch("floatchat.summaries._column_order", side_effect=RuntimeError("boom")):
            assert insight_digest([{"a": 1}]) == SUMMARY_FAILED_MESSAGE
