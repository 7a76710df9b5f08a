"""Tests for the call analytics and purchase aggregations."""

from __future__ import annotations

from datetime import datetime

import pytest

NOW = datetime(2026, 10, 19, 12, 0)


def _call(day: str, status: str = "answered", **fields) -> dict:
    row = {"Date": day, "call_status": status}
    row.update(fields)
    return row


# ── cell parsing ─────────────────────────────────────────────────────────

class TestParsing:
    @pytest.mark.parametrize("value, expected", [("7", 7.0), ("7/10", 7.0), (" 8.5 ", 8.5), ("n/a", 0.0), ("", 0.0), (None, 0.0)])
    def test_parse_number(self, app_home, value, expected):
        from automation_console.app.services.analytics_service import parse_number

        assert parse_number(value) == expected

    @pytest.mark.parametrize("value, expected", [("$1,250.50", 1250.5), ("49", 49.0), ("", 0.0), ("free", 0.0)])
    def test_parse_amount(self, app_home, value, expected):
        from automation_console.app.services.analytics_service import parse_amount

        assert parse_amount(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2026-10-03", datetime(2026, 10, 3)),
            ("2026-10-03T14:30:00Z", datetime(2026, 10, 3, 14, 30)),
            ("10/03/2026", datetime(2026, 10, 3)),
            ("Oct 3, 2026", datetime(2026, 10, 3)),
            ("yesterday", None),
            ("", None),
        ],
    )
    def test_parse_date(self, app_home, value, expected):
        from automation_console.app.services.analytics_service import parse_date

        assert parse_date(value) == expected

    def test_row_date_falls_back_to_call_date(self, app_home):
        from automation_console.app.services.analytics_service import row_date

        assert row_date({"call_date": "2026-10-05"}) == datetime(2026, 10, 5)

    @pytest.mark.parametrize("value, expected", [("49.99", True), ("yes", False), ("no", False), ("0", False), ("", False)])
    def test_post_call_purchase(self, app_home, value, expected):
        from automation_console.app.services.analytics_service import is_post_call_purchase

        assert is_post_call_purchase({"purchase_post_call": value}) is expected


# ── aggregate_calls ──────────────────────────────────────────────────────

class TestAggregateCalls:
    def test_answer_rate_rounds_half_up(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [_call("2026-10-01")] + [_call("2026-10-02", status="no_answer")] * 7
        analytics = aggregate_calls(rows, now=NOW)

        assert analytics.total_customers == 8
        assert analytics.calls_answered == 1
        # 12.5% -> 13
        assert analytics.answer_rate == 13

    @pytest.mark.parametrize("time_range", ["this_month", "last_3_months", "all_time"])
    def test_no_rows(self, app_home, time_range):
        from automation_console.app.models.analytics import TimeRange
        from automation_console.app.services.analytics_service import aggregate_calls

        analytics = aggregate_calls([], TimeRange(time_range), now=NOW)

        assert analytics.total_customers == 0
        assert analytics.answer_rate == 0
        assert analytics.avg_purchase_intent == 0
        assert analytics.top_objections == []

    def test_intent_ignores_unparseable_scores(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [
            _call("2026-10-01", purchase_intent_score="8"),
            _call("2026-10-02", purchase_intent_score="7"),
            _call("2026-10-03", purchase_intent_score="unknown"),
            _call("2026-10-04", purchase_intent_score=""),
        ]
        assert aggregate_calls(rows, now=NOW).avg_purchase_intent == 7.5

    def test_intent_without_valid_scores(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [_call("2026-10-01", purchase_intent_score="n/a")]
        assert aggregate_calls(rows, now=NOW).avg_purchase_intent == 0

    def test_top_objections(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [
            {"Date": "2026-10-01", "primary_objection": "price_too_high"},
            {"Date": "2026-10-02", "primary_objection": "price_too_high"},
            {"Date": "2026-10-03", "primary_objection": "none"},
        ]
        objections = aggregate_calls(rows, now=NOW).model_dump(by_alias=True)["topObjections"]
        assert objections == [{"label": "Price Too High", "count": 2}]

    def test_top_objections_limit_and_tie_order(self, app_home):
        from automation_console.app.services.analytics_service import top_objections

        rows = [{"primary_objection": name} for name in ["b", "a", "c", "d", "e", "f", "a"]]
        labels = [o.label for o in top_objections(rows)]
        assert labels == ["A", "B", "C", "D", "E"]

    def test_breakdowns_count_answered_calls_only(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [
            _call("2026-10-01", interest_level="hot", sentiment="positive", call_outcome="interested"),
            _call("2026-10-01", interest_level="HOT", sentiment="neutral", call_outcome="needs_more_info"),
            _call("2026-10-02", interest_level="not_interested", sentiment="negative", call_outcome="not_interested"),
            _call("2026-10-02", status="voicemail", interest_level="hot", sentiment="positive", call_outcome="interested"),
        ]
        analytics = aggregate_calls(rows, now=NOW)
        dumped = analytics.model_dump(by_alias=True)

        assert dumped["interestBreakdown"] == {"hot": 2, "warm": 0, "cold": 0, "not_interested": 1}
        assert dumped["sentimentBreakdown"] == {"positive": 1, "neutral": 1, "negative": 1}
        assert dumped["callOutcomes"] == {"interested": 1, "not_interested": 1, "needs_more_info": 1, "no_decision": 0}
        assert analytics.interested_pct == 33

    def test_this_month_excludes_older_and_undated_rows(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [
            _call("2026-10-01"),
            _call("2026-09-30"),
            _call("sometime"),
            {"call_status": "answered"},
        ]
        analytics = aggregate_calls(rows, now=NOW)

        assert analytics.total_customers == 1
        assert analytics.range_label == "October 2026"
        assert analytics.previous_period.total_customers == 1

    def test_last_3_months_and_previous_period(self, app_home):
        from automation_console.app.models.analytics import TimeRange
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [
            _call("2026-10-10"),
            _call("2026-08-01"),
            _call("2026-07-31", status="no_answer"),
            _call("2026-05-01"),
            _call("2026-04-30"),
        ]
        analytics = aggregate_calls(rows, TimeRange.LAST_3_MONTHS, now=NOW)

        assert analytics.total_customers == 2
        assert analytics.range_label == "Aug 2026 – Oct 2026"
        assert analytics.previous_period.total_customers == 2
        assert analytics.previous_period.answer_rate == 50

    def test_all_time_includes_undated_rows(self, app_home):
        from automation_console.app.models.analytics import TimeRange
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [_call("2020-01-01"), _call("whenever"), _call("2026-10-01")]
        analytics = aggregate_calls(rows, TimeRange.ALL_TIME, now=NOW)

        assert analytics.total_customers == 3
        assert analytics.range_label == "All Time"
        assert analytics.previous_period is None

    def test_daily_series(self, app_home):
        from automation_console.app.services.analytics_service import aggregate_calls

        rows = [
            _call("2026-10-02", purchase_intent_score="6", interest_level="hot", purchase_post_call="59.00"),
            _call("2026-10-02", purchase_intent_score="8", interest_level="warm"),
            _call("2026-10-05", purchase_intent_score="9", interest_level="hot"),
            _call("2026-09-14", purchase_intent_score="4"),
        ]
        analytics = aggregate_calls(rows, now=NOW)
        dumped = analytics.model_dump(by_alias=True)

        assert dumped["dailyIntent"] == [
            {"date": "Oct 2", "current": 7.0, "previous": 4.0},
            {"date": "Oct 5", "current": 9.0, "previous": 0},
        ]
        assert dumped["dailyHotLeads"] == [
            {"date": "Oct 2", "hotLeads": 1, "purchases": 1},
            {"date": "Oct 5", "hotLeads": 1, "purchases": 0},
        ]
        assert analytics.total_purchases_post_call == 1


# ── purchases ────────────────────────────────────────────────────────────

class TestPurchases:
    ROWS = [
        {"Date": "2026-10-03", "Purchases": "$100.10"},
        {"Date": "2026-09-15", "Purchases": "50"},
        {"Date": "2026-08-01", "Purchases": "25.01"},
        {"Date": "2026-01-20", "Purchases": "10"},
        {"Date": "", "Purchases": "5"},
        {"Date": "2026-10-04", "Purchases": ""},
    ]

    def test_purchase_stats(self, app_home):
        from automation_console.app.services.analytics_service import purchase_stats

        stats = purchase_stats(self.ROWS, now=NOW).model_dump(by_alias=True)

        assert stats == {
            "thisMonth": 100.1,
            "last3Months": 175.11,
            "allTime": 190.11,
            "thisMonthCount": 1,
            "last3MonthsCount": 3,
            "allTimeCount": 5,
        }

    def test_purchase_history(self, app_home):
        from automation_console.app.services.analytics_service import purchase_history

        history = purchase_history(self.ROWS, now=NOW)

        assert [h.month for h in history] == ["May 2026", "Jun 2026", "Jul 2026", "Aug 2026", "Sep 2026", "Oct 2026"]
        assert history[-1].total == 100.1
        assert history[-1].count == 1
        assert history[0].count == 0
