"""Property-based tests for loss-threshold scanning.

**Feature: average-down**
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from avgdown.engine.positions import (
    filter_beyond_threshold,
    parse_position,
    scan_positions,
)
from avgdown.models import Failure, Position, ScanReport, parse_percent


tickers = st.text(
    alphabet=st.characters(whitelist_categories=("Lu",)),
    min_size=1,
    max_size=5,
)

percents = st.floats(min_value=-99.0, max_value=500.0, allow_nan=False, allow_infinity=False)


def position_strategy():
    """Generate valid Position objects."""
    return st.builds(
        Position,
        ticker=tickers,
        share_count=st.floats(min_value=0, max_value=10000, allow_nan=False, allow_infinity=False),
        percent_change=percents,
    )


class TestKnownScenarios:
    """Worked examples for the threshold filter."""

    def test_filter_keeps_losses_beyond_threshold_in_order(self):
        positions = [
            {"ticker": "A", "share_count": 10, "percent_change": -25.0},
            {"ticker": "B", "share_count": 5, "percent_change": -10.0},
            {"ticker": "C", "share_count": 2, "percent_change": -30.5},
        ]

        result = filter_beyond_threshold(positions, 20)

        assert [p.ticker for p in result] == ["A", "C"]

    def test_string_percentages_from_page(self):
        positions = [
            {"ticker": "TSLA", "shares": 3, "percentChange": "-21.40"},
            {"ticker": "AAPL", "shares": 10, "percentChange": "+4.12"},
            {"ticker": "NVDA", "shares": 1, "percentChange": "-1,204.50"},
        ]

        result = filter_beyond_threshold(positions, 20)

        assert [p.ticker for p in result] == ["TSLA", "NVDA"]
        assert result[0].percent_change == pytest.approx(-21.4)
        assert result[0].share_count == 3

    def test_empty_input(self):
        assert filter_beyond_threshold([], 10) == []


class TestFilterStrictness:
    """
    **Feature: average-down, Property 5: Filter Strictness**

    *For any* threshold, a position exactly at the negative threshold is
    excluded and one below it by any margin is included.
    """

    @given(threshold=st.floats(min_value=0.0, max_value=100.0))
    @settings(max_examples=100)
    def test_exact_threshold_excluded(self, threshold: float):
        position = Position(ticker="EDGE", percent_change=-threshold)

        assert filter_beyond_threshold([position], threshold) == []

    @given(
        threshold=st.floats(min_value=0.0, max_value=100.0),
        margin=st.floats(min_value=1e-9, max_value=100.0),
    )
    @settings(max_examples=100)
    def test_below_threshold_included(self, threshold: float, margin: float):
        change = -threshold - margin
        position = Position(ticker="DOWN", percent_change=change)

        result = filter_beyond_threshold([position], threshold)

        assert result == [position]

    @given(
        positions=st.lists(position_strategy(), max_size=30),
        threshold=st.floats(min_value=0.0, max_value=100.0),
    )
    @settings(max_examples=100)
    def test_every_result_is_beyond_threshold(self, positions: list[Position], threshold: float):
        result = filter_beyond_threshold(positions, threshold)

        assert all(p.percent_change < -threshold for p in result)
        assert len(result) == sum(1 for p in positions if p.percent_change < -threshold)


class TestOrderPreservation:
    """
    **Feature: average-down, Property 6: Order Preservation**

    *For any* list of positions, the output is a subsequence of the input
    in the same relative order.
    """

    @given(
        positions=st.lists(position_strategy(), max_size=30),
        threshold=st.floats(min_value=0.0, max_value=100.0),
    )
    @settings(max_examples=100)
    def test_output_is_ordered_subsequence(self, positions: list[Position], threshold: float):
        result = filter_beyond_threshold(positions, threshold)

        remaining = iter(positions)
        assert all(any(p is q for q in remaining) for p in result), (
            "Filter output is not an ordered subsequence of the input"
        )

    @given(positions=st.lists(position_strategy(), max_size=30))
    @settings(max_examples=50)
    def test_input_not_mutated(self, positions: list[Position]):
        snapshot = list(positions)

        result = filter_beyond_threshold(positions, 10)

        assert positions == snapshot
        assert result is not positions


class TestMalformedEntries:
    """A bad entry is skipped without failing the scan."""

    @pytest.mark.parametrize(
        "entry",
        [
            {"ticker": "BAD", "percent_change": "n/a"},
            {"ticker": "BAD", "percent_change": None},
            {"ticker": "BAD"},
            {"ticker": "", "percent_change": -50},
            {"percent_change": -50},
            {"ticker": "BAD", "percent_change": float("nan")},
            {"ticker": "BAD", "share_count": -1, "percent_change": -50},
            "not a mapping",
        ],
    )
    def test_malformed_entry_is_skipped(self, entry):
        entries = [
            {"ticker": "A", "percent_change": -40},
            entry,
            {"ticker": "C", "percent_change": -60},
        ]

        result = filter_beyond_threshold(entries, 20)

        assert [p.ticker for p in result] == ["A", "C"]

    def test_parse_position_reports_malformed(self):
        failure = parse_position({"ticker": "XYZ", "percent_change": "abc"})

        assert isinstance(failure, Failure)
        assert failure.kind == "MalformedEntry"
        assert "XYZ" in failure.message

    def test_missing_shares_default_to_zero(self):
        position = parse_position({"ticker": "XYZ", "percent_change": "-5.00"})

        assert isinstance(position, Position)
        assert position.share_count == 0


class TestScanPositions:
    """scan_positions reports matches and skipped entries."""

    def test_report_counts(self):
        entries = [
            {"ticker": "A", "percent_change": "-25.00"},
            {"ticker": "B", "percent_change": "oops"},
            {"ticker": "C", "percent_change": "-30.50"},
            {"ticker": "D", "percent_change": "+2.00"},
        ]

        report = scan_positions(entries, 20)

        assert isinstance(report, ScanReport)
        assert report.total == 4
        assert [p.ticker for p in report.matches] == ["A", "C"]
        assert len(report.skipped) == 1
        assert report.skipped[0].kind == "MalformedEntry"

    @pytest.mark.parametrize("threshold", [-1, 101, float("nan")])
    def test_invalid_threshold(self, threshold):
        result = scan_positions([{"ticker": "A", "percent_change": -50}], threshold)

        assert isinstance(result, Failure)
        assert result.kind == "InvalidTarget"

    def test_accepts_generators(self):
        entries = ({"ticker": t, "percent_change": -50} for t in ("A", "B"))

        report = scan_positions(entries, 10)

        assert [p.ticker for p in report.matches] == ["A", "B"]
        assert report.total == 2


class TestParsePercent:
    """Percent strings are normalised to signed floats."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("-25.00", -25.0),
            ("+3.10%", 3.1),
            ("-1,234.50%", -1234.5),
            ("−4.2%", -4.2),
            (" -7.5 % ", -7.5),
            (-12, -12.0),
            (3.5, 3.5),
        ],
    )
    def test_parses(self, raw, expected):
        assert parse_percent(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "%", "abc", "--5", True, float("inf"), [1]])
    def test_rejects(self, raw):
        assert parse_percent(raw) is None
