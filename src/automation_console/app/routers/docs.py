"""Insights report route."""

from fastapi import APIRouter

from automation_console.app.services.report_client import report_client

router = APIRouter(tags=["docs"])


@router.get("/docs")
async def get_report() -> dict:
    """Get the monthly insights report split into sections."""
    report = await report_client.get_report()
    return {"success": True, **report.model_dump(by_alias=True, mode="json")}
