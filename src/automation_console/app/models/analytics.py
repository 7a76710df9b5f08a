"""Call-center and sales analytics models."""

from enum import Enum

from pydantic import BaseModel, Field

from automation_console.app.models.base import CamelModel


class TimeRange(str, Enum):
    THIS_MONTH = "this_month"
    LAST_3_MONTHS = "last_3_months"
    ALL_TIME = "all_time"


class InterestBreakdown(BaseModel):
    """Keys are the sheet's own interest values."""
    hot: int = 0
    warm: int = 0
    cold: int = 0
    not_interested: int = 0


class SentimentBreakdown(CamelModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0


class CallOutcomes(BaseModel):
    """Keys are the sheet's own outcome values."""
    interested: int = 0
    not_interested: int = 0
    needs_more_info: int = 0
    no_decision: int = 0


class ObjectionCount(CamelModel):
    label: str
    count: int


class DailyIntent(CamelModel):
    """Average purchase intent of day *i* of the current and previous period."""
    date: str
    current: float
    previous: float


class DailyHotLeads(CamelModel):
    date: str
    hot_leads: int
    purchases: int


class PeriodSummary(CamelModel):
    """Headline numbers of one period, used for the period-over-period badges."""
    total_customers: int = 0
    calls_answered: int = 0
    answer_rate: int = 0
    avg_purchase_intent: float = 0
    interested_pct: int = 0
    objection_count: int = 0
    total_purchases_post_call: int = 0


class CallAnalytics(CamelModel):
    total_customers: int
    calls_answered: int
    answer_rate: int
    avg_purchase_intent: float
    interest_breakdown: InterestBreakdown
    sentiment_breakdown: SentimentBreakdown
    top_objections: list[ObjectionCount]
    call_outcomes: CallOutcomes
    range_label: str
    daily_intent: list[DailyIntent] = Field(default_factory=list)
    daily_hot_leads: list[DailyHotLeads] = Field(default_factory=list)
    total_purchases_post_call: int = 0
    interested_pct: int = 0
    objection_count: int = 0
    previous_period: PeriodSummary | None = None


class PurchaseStats(CamelModel):
    this_month: float = 0
    last_3_months: float = Field(default=0, alias="last3Months")
    all_time: float = 0
    this_month_count: int = 0
    last_3_months_count: int = Field(default=0, alias="last3MonthsCount")
    all_time_count: int = 0


class MonthlyPurchase(CamelModel):
    month: str = Field(..., description='Month label, e.g. "Jan 2026"')
    total: float
    count: int
