"""Assistant tools.

Five tools let the assistant read and change the managed workflows. Inputs
are validated into their typed variant before anything runs, and every
outcome, including failures, comes back as a JSON string so the model can
explain it to the user instead of the chat turn failing.
"""

import asyncio
import json

from pydantic import ValidationError

from automation_console.app.errors import ConsoleError, ToolInputError
from automation_console.app.models.chat import ToolCall, ToolResult, ToolSpec
from automation_console.app.models.tools import (
    TOOL_NAMES,
    CreateSafeCopyInput,
    GetWorkflowDetailInput,
    GetWorkflowsInput,
    RestoreOriginalInput,
    ToggleWorkflowInput,
    ToolInput,
    tool_input_adapter,
)
from automation_console.app.services.logging_service import get_logger
from automation_console.app.services.workflow_client import WorkflowRegistryClient

logger = get_logger(__name__)

TOOL_SPECS: list[ToolSpec] = [
    ToolSpec(
        name="get_workflows",
        description="Get the current status and recent performance of all 4 managed workflows.",
        parameters={"type": "object", "properties": {}, "required": []},
    ),
    ToolSpec(
        name="get_workflow_detail",
        description="Get the full technical details of a specific workflow. Needed before making any changes.",
        parameters={
            "type": "object",
            "properties": {"workflow_id": {"type": "string", "description": "The workflow ID"}},
            "required": ["workflow_id"],
        },
    ),
    ToolSpec(
        name="toggle_workflow",
        description="Turn a workflow on (running) or off.",
        parameters={
            "type": "object",
            "properties": {
                "workflow_id": {"type": "string"},
                "action": {"type": "string", "enum": ["activate", "deactivate"]},
            },
            "required": ["workflow_id", "action"],
        },
    ),
    ToolSpec(
        name="create_safe_copy",
        description=(
            "Safely edit a workflow: deactivates the original (kept as backup), creates a "
            "modified copy, and turns the copy on. Use for ALL edits."
        ),
        parameters={
            "type": "object",
            "properties": {
                "original_id": {"type": "string"},
                "modified_workflow": {
                    "type": "object",
                    "description": "The complete edited workflow (name, nodes, connections, settings)",
                },
                "change_summary": {
                    "type": "string",
                    "description": "Plain English description of what changed",
                },
            },
            "required": ["original_id", "modified_workflow", "change_summary"],
        },
    ),
    ToolSpec(
        name="restore_original",
        description="Roll back an edit by turning off the modified copy and turning the original back on.",
        parameters={
            "type": "object",
            "properties": {
                "original_id": {"type": "string"},
                "modified_copy_id": {"type": "string"},
            },
            "required": ["original_id", "modified_copy_id"],
        },
    ),
]


def _validation_summary(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        # First location element is the tool tag itself
        field = ".".join(str(part) for part in item["loc"][1:]) or "input"
        problems.append(f"{field}: {item['msg']}")
    return "; ".join(problems)


def parse_tool_input(call: ToolCall) -> ToolInput:
    """Validate a model-issued call into its typed input.

    Raises:
        ToolInputError: unknown tool, unparseable arguments or a schema mismatch.
    """
    if call.name not in TOOL_NAMES:
        raise ToolInputError(f"Unknown tool: {call.name}")
    if call.input is None:
        raise ToolInputError(f"The arguments for {call.name} were not valid JSON")
    try:
        return tool_input_adapter.validate_python({**call.input, "tool": call.name})
    except ValidationError as e:
        raise ToolInputError(f"Invalid input for {call.name}: {_validation_summary(e)}") from e


class ToolExecutor:
    """Runs validated tool calls against the workflow engine."""

    def __init__(self, client: WorkflowRegistryClient):
        self.client = client

    async def _dispatch(self, tool_input: ToolInput):
        if isinstance(tool_input, GetWorkflowsInput):
            summaries = await self.client.list_summaries()
            return [s.model_dump(by_alias=True) for s in summaries]

        if isinstance(tool_input, GetWorkflowDetailInput):
            return await self.client.get_workflow_detail(tool_input.workflow_id)

        if isinstance(tool_input, ToggleWorkflowInput):
            await self.client.toggle(tool_input.workflow_id, tool_input.activate)
            name = self.client.display_name(tool_input.workflow_id)
            state = "on" if tool_input.activate else "off"
            return {"success": True, "message": f"{name} has been turned {state}."}

        if isinstance(tool_input, CreateSafeCopyInput):
            result = await self.client.create_safe_copy(
                tool_input.original_id,
                tool_input.modified_workflow,
                tool_input.change_summary,
            )
            return {"success": True, **result.model_dump(by_alias=True)}

        if isinstance(tool_input, RestoreOriginalInput):
            await self.client.restore_original(tool_input.original_id, tool_input.modified_copy_id)
            return {"success": True, "message": "Original workflow restored."}

        raise ToolInputError(f"Unknown tool: {tool_input.tool}")

    async def execute(self, call: ToolCall) -> ToolResult:
        """Run one call; failures become ``{"error": ...}`` results."""
        logger.info(f"Tool call {call.id}: {call.name}")
        try:
            payload = await self._dispatch(parse_tool_input(call))
        except ToolInputError as e:
            logger.warning(f"Tool call {call.id} rejected: {e}")
            return ToolResult(call_id=call.id, content=json.dumps({"error": str(e)}), is_error=True)
        except ConsoleError as e:
            logger.warning(f"Tool call {call.id} ({call.name}) failed: {e.message}")
            return ToolResult(call_id=call.id, content=json.dumps({"error": e.message}), is_error=True)
        except Exception as e:
            logger.exception(f"Tool call {call.id} ({call.name}) crashed")
            return ToolResult(
                call_id=call.id,
                content=json.dumps({"error": f"Tool failed: {type(e).__name__}"}),
                is_error=True,
            )
        return ToolResult(call_id=call.id, content=json.dumps(payload, default=str))

    async def execute_all(self, calls: list[ToolCall]) -> list[ToolResult]:
        """Run independent calls concurrently; results keep their call ids."""
        return list(await asyncio.gather(*(self.execute(call) for call in calls)))
