"""Workflow engine client (n8n public REST API).

Thin async wrapper over the engine endpoints the console uses:

  GET  /workflows                      — list workflows
  GET  /workflows/{id}                 — full configuration (nodes/connections)
  POST /workflows/{id}/activate        — turn on
  POST /workflows/{id}/deactivate      — turn off
  POST /workflows                      — create (allow-listed body fields only)
  GET  /executions?workflowId=&limit=  — recent runs

The engine is the only holder of workflow state; nothing is cached here.
``create_safe_copy`` and ``restore_original`` implement the edit-safety rule:
an original workflow is never modified, it is turned off and replaced by an
edited copy that can be rolled back.
"""

import asyncio
from datetime import datetime

import httpx

from automation_console.app.config import (
    EXECUTIONS_LIMIT,
    HTTP_TIMEOUT_SECONDS,
    N8N_API_KEY,
    N8N_API_URL,
)
from automation_console.app.errors import (
    ConsoleError,
    InvalidRequestError,
    NotConfiguredError,
    WorkflowEngineError,
)
from automation_console.app.models.workflow import (
    Execution,
    ExecutionStatus,
    SafeCopyResult,
    WorkflowInfo,
    WorkflowStats,
    WorkflowSummary,
)
from automation_console.app.services.logging_service import get_logger
from automation_console.app.utils.numbers import percent
from automation_console.app.workflow_config import WorkflowRegistry, load_registry

logger = get_logger(__name__)

# The engine rejects a create request carrying any other top-level field
CREATE_ALLOWED_FIELDS = ("name", "nodes", "connections", "settings", "staticData")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an engine ISO-8601 timestamp (``Z`` suffix allowed)."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def build_stats(executions: list[Execution], now: datetime | None = None) -> WorkflowStats:
    """Derive run stats from the most recent executions (newest first)."""
    now = now or datetime.now()
    total = len(executions)
    success = sum(1 for e in executions if e.status == ExecutionStatus.SUCCESS.value)
    error = sum(1 for e in executions if e.status == ExecutionStatus.ERROR.value)

    monthly_runs = 0
    monthly_success = 0
    for execution in executions:
        started = parse_timestamp(execution.started_at)
        if started and started.year == now.year and started.month == now.month:
            monthly_runs += 1
            if execution.status == ExecutionStatus.SUCCESS.value:
                monthly_success += 1

    last_run = None
    if executions:
        last_run = executions[0].stopped_at or executions[0].started_at

    return WorkflowStats(
        total=total,
        success=success,
        error=error,
        success_rate=percent(success, total),
        last_run=last_run,
        monthly_runs=monthly_runs,
        monthly_success=monthly_success,
    )


def filter_create_body(workflow: dict) -> dict:
    """Keep only the fields the engine accepts when creating a workflow."""
    return {key: workflow[key] for key in CREATE_ALLOWED_FIELDS if key in workflow}


class WorkflowRegistryClient:
    """Client for the managed workflows in the external engine."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        registry: WorkflowRegistry | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (N8N_API_URL if base_url is None else base_url).rstrip("/")
        self.api_key = N8N_API_KEY if api_key is None else api_key
        self.timeout = timeout
        self._registry = registry
        self._transport = transport

    @property
    def registry(self) -> WorkflowRegistry:
        if self._registry is None:
            self._registry = load_registry()
        return self._registry

    def display_name(self, workflow_id: str) -> str:
        meta = self.registry.get(workflow_id)
        return meta.name if meta else workflow_id

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> dict:
        if not self.base_url or not self.api_key:
            raise NotConfiguredError("Workflow engine is not configured (N8N_API_URL / N8N_API_KEY)")

        url = f"{self.base_url}/api/v1{path}"
        headers = {"X-N8N-API-KEY": self.api_key, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, url, headers=headers, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"Workflow engine request failed: {method} {path}: {type(e).__name__}: {e}")
            raise WorkflowEngineError(f"Workflow engine unreachable: {type(e).__name__}") from e

        if resp.is_error:
            logger.warning(f"Workflow engine answered {resp.status_code} for {method} {path}")
            raise WorkflowEngineError(f"Workflow engine error: {resp.status_code}", status=resp.status_code)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise WorkflowEngineError("Workflow engine returned an unreadable answer") from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_executions(self, workflow_id: str, limit: int = EXECUTIONS_LIMIT) -> list[Execution]:
        """Recent runs of a workflow, newest first."""
        data = await self._request(
            "GET", "/executions", params={"workflowId": workflow_id, "limit": limit}
        )
        return [
            Execution(
                id=str(item.get("id", "")),
                status=str(item.get("status") or ""),
                started_at=item.get("startedAt"),
                stopped_at=item.get("stoppedAt"),
            )
            for item in data.get("data") or []
        ]

    async def _executions_or_empty(self, workflow_id: str) -> list[Execution]:
        # A failing executions call must not hide the workflow itself
        try:
            return await self.list_executions(workflow_id)
        except ConsoleError as e:
            logger.warning(f"Executions unavailable for {workflow_id}: {e.message}")
            return []

    async def list_workflows(self) -> list[WorkflowInfo]:
        """Live state of every registry workflow the engine knows about."""
        data = await self._request("GET", "/workflows", params={"limit": 250})
        by_id = {str(wf.get("id")): wf for wf in data.get("data") or []}

        present = [workflow_id for workflow_id in self.registry if workflow_id in by_id]
        missing = [workflow_id for workflow_id in self.registry if workflow_id not in by_id]
        if missing:
            logger.warning(f"Registry workflows not found in engine: {missing}")

        execution_lists = await asyncio.gather(
            *(self._executions_or_empty(workflow_id) for workflow_id in present)
        )

        results = []
        for workflow_id, executions in zip(present, execution_lists):
            meta = self.registry[workflow_id]
            engine_wf = by_id[workflow_id]
            results.append(
                WorkflowInfo(
                    id=workflow_id,
                    name=meta.name,
                    description=meta.description,
                    icon=meta.icon,
                    active=bool(engine_wf.get("active")),
                    updated_at=engine_wf.get("updatedAt"),
                    executions=executions,
                    stats=build_stats(executions),
                )
            )
        return results

    async def list_summaries(self) -> list[WorkflowSummary]:
        """Compact per-workflow view used by the assistant."""
        return [
            WorkflowSummary(
                id=wf.id,
                name=wf.name,
                description=wf.description,
                active=wf.active,
                total_runs=wf.stats.total,
                success_rate=wf.stats.success_rate,
                errors=wf.stats.error,
                last_run=wf.stats.last_run,
            )
            for wf in await self.list_workflows()
        ]

    async def get_workflow_detail(self, workflow_id: str) -> dict:
        """Full workflow configuration (nodes, connections, settings, ...)."""
        return await self._request("GET", f"/workflows/{workflow_id}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def activate(self, workflow_id: str) -> dict:
        logger.info(f"Activating workflow {workflow_id}")
        return await self._request("POST", f"/workflows/{workflow_id}/activate")

    async def deactivate(self, workflow_id: str) -> dict:
        logger.info(f"Deactivating workflow {workflow_id}")
        return await self._request("POST", f"/workflows/{workflow_id}/deactivate")

    async def toggle(self, workflow_id: str, activate: bool) -> dict:
        """Turn a workflow on or off. Repeating the same action is harmless."""
        if activate:
            return await self.activate(workflow_id)
        return await self.deactivate(workflow_id)

    async def create_workflow(self, workflow: dict) -> dict:
        """Create a workflow from the allow-listed fields of ``workflow``."""
        body = filter_create_body(workflow)
        logger.info(f"Creating workflow '{body.get('name', '')}'")
        return await self._request("POST", "/workflows", json=body)

    async def _reactivate_after_failure(self, workflow_id: str) -> None:
        try:
            await self.activate(workflow_id)
        except ConsoleError as e:
            logger.error(f"Could not turn {workflow_id} back on after a failed change: {e.message}")

    async def create_safe_copy(
        self,
        original_id: str,
        modified_workflow: dict,
        change_summary: str,
    ) -> SafeCopyResult:
        """Replace a managed workflow with an edited copy.

        ``original_id`` is the version currently turned on: the registry
        workflow for a first edit, the latest copy once it has been edited.
        Edits chain this way, so only one version of an automation is on.

        Order: deactivate original -> create copy -> activate copy. If the copy
        cannot be created or turned on, the original is turned back on before
        the error propagates, so the automation is never left without an
        active version and never has two.
        """
        if "nodes" not in modified_workflow or "connections" not in modified_workflow:
            raise InvalidRequestError("The edited workflow must include its nodes and connections")

        original_name = self.display_name(original_id)
        body = dict(modified_workflow)
        if not body.get("name") or body.get("name") == original_name:
            body["name"] = f"{original_name} (edited)"
        body.setdefault("settings", {})

        await self.deactivate(original_id)
        try:
            created = await self.create_workflow(body)
            new_id = str(created.get("id") or "")
            if not new_id:
                raise WorkflowEngineError("Workflow engine did not return an id for the copy")
            await self.activate(new_id)
        except ConsoleError:
            logger.warning(f"Safe copy of {original_id} failed, turning the original back on")
            await self._reactivate_after_failure(original_id)
            raise

        logger.info(f"Safe copy {new_id} replaces {original_id}: {change_summary}")
        return SafeCopyResult(original_id=original_id, new_id=new_id, change_summary=change_summary)

    async def restore_original(self, original_id: str, modified_copy_id: str) -> None:
        """Undo one ``create_safe_copy``: copy off, original on."""
        if modified_copy_id == original_id:
            raise InvalidRequestError("The edited copy and the original must be different workflows")

        await self.deactivate(modified_copy_id)
        try:
            await self.activate(original_id)
        except ConsoleError:
            logger.warning(f"Restoring {original_id} failed, turning copy {modified_copy_id} back on")
            await self._reactivate_after_failure(modified_copy_id)
            raise
        logger.info(f"Restored {original_id}, copy {modified_copy_id} turned off")


# Global client instance
workflow_client = WorkflowRegistryClient()
