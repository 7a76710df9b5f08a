"""Workflow dashboard routes.

Endpoints:
  GET /api/workflows                — live state and run stats of the managed workflows
  GET /api/workflow-detail/{id}     — plain-language step timeline of one workflow
"""

from fastapi import APIRouter

from automation_console.app.services.timeline_service import build_timeline
from automation_console.app.services.workflow_client import workflow_client
from automation_console.app.utils.envelope import ok

router = APIRouter(tags=["workflows"])


@router.get("/workflows")
async def list_workflows() -> dict:
    """List the managed workflows with their recent runs."""
    workflows = await workflow_client.list_workflows()
    return ok(data=workflows)


@router.get("/workflow-detail/{workflow_id}")
async def get_workflow_timeline(workflow_id: str) -> dict:
    """Get a workflow's steps in the order they run."""
    workflow = await workflow_client.get_workflow_detail(workflow_id)
    return ok(timeline=build_timeline(workflow))
