"""Call-center and sales analytics.

Pure functions over raw sheet rows (``{header: cell}``). Cells are parsed
defensively: a number that cannot be read counts as 0 and is left out of
averages, a date that cannot be read drops the row from every dated view.

Column conventions of the customer sheet:
    Date / call_date          when the customer was called
    call_status               "answered" for reached customers
    interest_level            hot | warm | cold | not_interested
    sentiment                 positive | neutral | negative
    purchase_intent_score     0-10
    primary_objection         snake_case label or "none"
    call_outcome              interested | not_interested | needs_more_info | no_decision
    purchase_post_call        amount or yes/no flag
    Purchases                 lifetime revenue from the customer
"""

import re
from collections import Counter
from datetime import date, datetime, timedelta

from automation_console.app.models.analytics import (
    CallAnalytics,
    CallOutcomes,
    DailyHotLeads,
    DailyIntent,
    InterestBreakdown,
    MonthlyPurchase,
    ObjectionCount,
    PeriodSummary,
    PurchaseStats,
    SentimentBreakdown,
    TimeRange,
)
from automation_console.app.utils.numbers import percent, round_half_up

SheetRow = dict[str, str]

TOP_OBJECTIONS = 5
HISTORY_MONTHS = 6

_NUMBER_PREFIX_RE = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")
_NEGATIVE_PURCHASE_FLAGS = {"no", "false", "0"}

_DATE_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


# ---------------------------------------------------------------------------
# Cell parsing
# ---------------------------------------------------------------------------

def parse_number(value: str | None) -> float:
    """Leading numeric value of a cell ("7/10" -> 7), 0 when there is none."""
    match = _NUMBER_PREFIX_RE.match(value or "")
    return float(match.group(0)) if match else 0.0


def parse_amount(value: str | None) -> float:
    """Money cell with currency symbols and separators stripped ("$1,250.50" -> 1250.5)."""
    digits = re.sub(r"[^0-9.]", "", value or "")
    try:
        return float(digits)
    except ValueError:
        return 0.0


def parse_date(value: str | None) -> datetime | None:
    """Parse the date formats that show up in the sheets; None when unreadable."""
    text = (value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed.replace(tzinfo=None)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def row_date(row: SheetRow) -> datetime | None:
    return parse_date(row.get("Date") or row.get("call_date") or "")


def _lower(row: SheetRow, column: str) -> str:
    return (row.get(column) or "").strip().lower()


def is_answered(row: SheetRow) -> bool:
    return _lower(row, "call_status") == "answered"


def is_post_call_purchase(row: SheetRow) -> bool:
    """Purchase flag present, not a negative sentinel, and numerically positive."""
    value = (row.get("purchase_post_call") or "").strip()
    if not value or value.lower() in _NEGATIVE_PURCHASE_FLAGS:
        return False
    return parse_amount(value) > 0


def objection_label(raw: str) -> str:
    """``price_too_high`` -> ``Price Too High``."""
    return " ".join(word.capitalize() for word in raw.strip().lower().replace("_", " ").split())


def average_intent(rows: list[SheetRow]) -> float:
    """Mean of the positive intent scores, one decimal; 0 without any."""
    scores = [s for s in (parse_number(r.get("purchase_intent_score")) for r in rows) if s > 0]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores), 1)


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

def month_start(now: datetime, months_back: int) -> datetime:
    """First day of the month ``months_back`` months before ``now``'s month."""
    index = now.year * 12 + (now.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1)


def period_bounds(time_range: TimeRange, now: datetime) -> tuple[datetime, datetime, datetime]:
    """(current start, previous start, previous end) for a ranged view.

    The previous period covers as many calendar months as the current one
    and ends just before it starts.
    """
    months_back = 2 if time_range == TimeRange.LAST_3_MONTHS else 0
    current_start = month_start(now, months_back)
    previous_start = month_start(now, (months_back + 1) * 2 - 1)
    previous_end = current_start - timedelta(microseconds=1)
    return current_start, previous_start, previous_end


def range_label(time_range: TimeRange, now: datetime) -> str:
    if time_range == TimeRange.ALL_TIME:
        return "All Time"
    if time_range == TimeRange.LAST_3_MONTHS:
        start = month_start(now, 2)
        return f"{start:%b %Y} – {now:%b %Y}"
    return f"{now:%B %Y}"


def _short_date(day: date) -> str:
    return f"{day:%b} {day.day}"


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def summarize_period(rows: list[SheetRow]) -> PeriodSummary:
    """Headline numbers of one period."""
    answered = [r for r in rows if is_answered(r)]
    interested = sum(1 for r in answered if _lower(r, "call_outcome") == "interested")
    objections = sum(1 for r in rows if _lower(r, "primary_objection") not in ("", "none"))
    purchases = sum(1 for r in answered if is_post_call_purchase(r))
    return PeriodSummary(
        total_customers=len(rows),
        calls_answered=len(answered),
        answer_rate=percent(len(answered), len(rows)),
        avg_purchase_intent=average_intent(answered),
        interested_pct=percent(interested, len(answered)),
        objection_count=objections,
        total_purchases_post_call=purchases,
    )


def top_objections(rows: list[SheetRow], limit: int = TOP_OBJECTIONS) -> list[ObjectionCount]:
    """Most frequent recorded objections (any row that carries one)."""
    counts: Counter[str] = Counter()
    for row in rows:
        raw = _lower(row, "primary_objection")
        if raw and raw != "none":
            counts[objection_label(raw)] += 1
    # Counter.most_common keeps first-seen order among equal counts
    return [ObjectionCount(label=label, count=count) for label, count in counts.most_common(limit)]


def _group_by_day(rows: list[SheetRow]) -> dict[date, list[SheetRow]]:
    groups: dict[date, list[SheetRow]] = {}
    for row in rows:
        when = row_date(row)
        if when is None:
            continue
        groups.setdefault(when.date(), []).append(row)
    return dict(sorted(groups.items()))


def daily_intent(current: list[SheetRow], previous: list[SheetRow]) -> list[DailyIntent]:
    """Per-day intent averages, day *i* of the current period next to day *i* of the previous one.

    Days are the dates that have answered calls, so the pairing is by
    position, not by calendar day.
    """
    current_days = _group_by_day(current)
    previous_days = _group_by_day(previous)
    current_keys = list(current_days)
    previous_keys = list(previous_days)

    series = []
    for i in range(max(len(current_keys), len(previous_keys))):
        current_key = current_keys[i] if i < len(current_keys) else None
        previous_key = previous_keys[i] if i < len(previous_keys) else None
        label_day = current_key or previous_key
        series.append(
            DailyIntent(
                date=_short_date(label_day) if label_day else f"Day {i + 1}",
                current=average_intent(current_days[current_key]) if current_key else 0,
                previous=average_intent(previous_days[previous_key]) if previous_key else 0,
            )
        )
    return series


def daily_hot_leads(current: list[SheetRow]) -> list[DailyHotLeads]:
    return [
        DailyHotLeads(
            date=_short_date(day),
            hot_leads=sum(1 for r in rows if _lower(r, "interest_level") == "hot"),
            purchases=sum(1 for r in rows if is_post_call_purchase(r)),
        )
        for day, rows in _group_by_day(current).items()
    ]


def aggregate_calls(
    rows: list[SheetRow],
    time_range: TimeRange = TimeRange.THIS_MONTH,
    now: datetime | None = None,
) -> CallAnalytics:
    """KPI summary of the call records for a time range."""
    now = now or datetime.now()

    if time_range == TimeRange.ALL_TIME:
        current_rows = list(rows)
        previous_rows: list[SheetRow] = []
    else:
        current_start, previous_start, previous_end = period_bounds(time_range, now)
        dated = [(row, row_date(row)) for row in rows]
        current_rows = [row for row, when in dated if when is not None and when >= current_start]
        previous_rows = [
            row for row, when in dated
            if when is not None and previous_start <= when <= previous_end
        ]

    answered = [r for r in current_rows if is_answered(r)]
    previous_answered = [r for r in previous_rows if is_answered(r)]

    interest = InterestBreakdown()
    sentiment = SentimentBreakdown()
    outcomes = CallOutcomes()
    for row in answered:
        level = _lower(row, "interest_level")
        if level in InterestBreakdown.model_fields:
            setattr(interest, level, getattr(interest, level) + 1)
        mood = _lower(row, "sentiment")
        if mood in SentimentBreakdown.model_fields:
            setattr(sentiment, mood, getattr(sentiment, mood) + 1)
        outcome = _lower(row, "call_outcome")
        if outcome in CallOutcomes.model_fields:
            setattr(outcomes, outcome, getattr(outcomes, outcome) + 1)

    current_summary = summarize_period(current_rows)

    return CallAnalytics(
        total_customers=current_summary.total_customers,
        calls_answered=current_summary.calls_answered,
        answer_rate=current_summary.answer_rate,
        avg_purchase_intent=current_summary.avg_purchase_intent,
        interest_breakdown=interest,
        sentiment_breakdown=sentiment,
        top_objections=top_objections(current_rows),
        call_outcomes=outcomes,
        range_label=range_label(time_range, now),
        daily_intent=daily_intent(answered, previous_answered),
        daily_hot_leads=daily_hot_leads(answered),
        total_purchases_post_call=current_summary.total_purchases_post_call,
        interested_pct=current_summary.interested_pct,
        objection_count=current_summary.objection_count,
        previous_period=None if time_range == TimeRange.ALL_TIME else summarize_period(previous_rows),
    )


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

def purchase_stats(rows: list[SheetRow], now: datetime | None = None) -> PurchaseStats:
    """Revenue and order counts for this month, the last 3 months and all time.

    All-time totals include rows without a readable date.
    """
    now = now or datetime.now()
    this_month_start = month_start(now, 0)
    three_month_start = month_start(now, 2)

    totals = {"this_month": 0.0, "last_3_months": 0.0, "all_time": 0.0}
    counts = {"this_month": 0, "last_3_months": 0, "all_time": 0}

    for row in rows:
        amount = parse_amount(row.get("Purchases"))
        if amount <= 0:
            continue
        totals["all_time"] += amount
        counts["all_time"] += 1

        when = row_date(row)
        if when is None:
            continue
        if when >= three_month_start:
            totals["last_3_months"] += amount
            counts["last_3_months"] += 1
        if when >= this_month_start:
            totals["this_month"] += amount
            counts["this_month"] += 1

    return PurchaseStats(
        this_month=round_half_up(totals["this_month"], 2),
        last_3_months=round_half_up(totals["last_3_months"], 2),
        all_time=round_half_up(totals["all_time"], 2),
        this_month_count=counts["this_month"],
        last_3_months_count=counts["last_3_months"],
        all_time_count=counts["all_time"],
    )


def purchase_history(
    rows: list[SheetRow],
    now: datetime | None = None,
    months: int = HISTORY_MONTHS,
) -> list[MonthlyPurchase]:
    """Monthly revenue buckets for the last ``months`` months, oldest first."""
    now = now or datetime.now()
    starts = [month_start(now, back) for back in range(months - 1, -1, -1)]
    buckets = {(s.year, s.month): {"total": 0.0, "count": 0} for s in starts}

    for row in rows:
        amount = parse_amount(row.get("Purchases"))
        if amount <= 0:
            continue
        when = row_date(row)
        if when is None:
            continue
        bucket = buckets.get((when.year, when.month))
        if bucket is not None:
            bucket["total"] += amount
            bucket["count"] += 1

    return [
        MonthlyPurchase(
            month=f"{s:%b %Y}",
            total=round_half_up(buckets[(s.year, s.month)]["total"], 2),
            count=buckets[(s.year, s.month)]["count"],
        )
        for s in starts
    ]
