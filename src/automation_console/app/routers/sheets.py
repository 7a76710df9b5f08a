"""Spreadsheet data and call analytics routes.

Endpoints:
  GET /api/sheets?sheet=customers|content   — raw rows
  GET /api/sheets/analytics?range=...       — voice-agent call analytics
  GET /api/sheets/purchase-stats            — revenue totals
  GET /api/sheets/purchase-history          — revenue per month, last six months
"""

from typing import Optional

from fastapi import APIRouter, Query

from automation_console.app.errors import InvalidRequestError
from automation_console.app.models.analytics import TimeRange
from automation_console.app.services.analytics_service import (
    aggregate_calls,
    purchase_history,
    purchase_stats,
)
from automation_console.app.services.sheets_client import sheets_client
from automation_console.app.utils.envelope import ok

router = APIRouter(prefix="/sheets", tags=["sheets"])


@router.get("")
async def get_sheet(
    sheet: Optional[str] = Query(default=None, description="Which sheet to read: customers or content")
) -> dict:
    """Get every row of one of the tracking sheets."""
    if sheet == "customers":
        return ok(data=await sheets_client.get_customer_data())
    if sheet == "content":
        return ok(data=await sheets_client.get_content_data())
    raise InvalidRequestError("Invalid sheet parameter. Use ?sheet=customers or ?sheet=content")


@router.get("/analytics")
async def get_call_analytics(
    time_range: str = Query(default=TimeRange.THIS_MONTH.value, alias="range")
) -> dict:
    """Get call analytics for the selected period."""
    try:
        selected = TimeRange(time_range)
    except ValueError:
        options = ", ".join(r.value for r in TimeRange)
        raise InvalidRequestError(f"Invalid range '{time_range}'. Use one of: {options}") from None
    rows = await sheets_client.get_customer_data()
    return ok(data=aggregate_calls(rows, selected))


@router.get("/purchase-stats")
async def get_purchase_stats() -> dict:
    rows = await sheets_client.get_customer_data()
    return ok(data=purchase_stats(rows))


@router.get("/purchase-history")
async def get_purchase_history() -> dict:
    rows = await sheets_client.get_customer_data()
    return ok(data=purchase_history(rows))
