"""Tests for assistant tool input validation and execution."""

from __future__ import annotations

import asyncio
import json

import pytest

from conftest import BLOG_CREATOR_ID, PURCHASES_ID


def _call(name: str, input: dict | None, call_id: str = "call-1"):
    from automation_console.app.models.chat import ToolCall

    return ToolCall(id=call_id, name=name, input=input)


# ── input validation ─────────────────────────────────────────────────────

class TestParseToolInput:
    def test_toggle(self, app_home):
        from automation_console.app.models.tools import ToggleWorkflowInput
        from automation_console.app.services.tool_service import parse_tool_input

        parsed = parse_tool_input(_call("toggle_workflow", {"workflow_id": BLOG_CREATOR_ID, "action": "deactivate"}))
        assert isinstance(parsed, ToggleWorkflowInput)
        assert parsed.activate is False

    def test_no_arguments_tool(self, app_home):
        from automation_console.app.models.tools import GetWorkflowsInput
        from automation_console.app.services.tool_service import parse_tool_input

        assert isinstance(parse_tool_input(_call("get_workflows", {})), GetWorkflowsInput)

    def test_unknown_tool(self, app_home):
        from automation_console.app.errors import ToolInputError
        from automation_console.app.services.tool_service import parse_tool_input

        with pytest.raises(ToolInputError, match="Unknown tool"):
            parse_tool_input(_call("delete_everything", {}))

    def test_bad_action(self, app_home):
        from automation_console.app.errors import ToolInputError
        from automation_console.app.services.tool_service import parse_tool_input

        with pytest.raises(ToolInputError, match="action"):
            parse_tool_input(_call("toggle_workflow", {"workflow_id": BLOG_CREATOR_ID, "action": "pause"}))

    def test_missing_field(self, app_home):
        from automation_console.app.errors import ToolInputError
        from automation_console.app.services.tool_service import parse_tool_input

        with pytest.raises(ToolInputError, match="workflow_id"):
            parse_tool_input(_call("get_workflow_detail", {}))

    def test_unparseable_arguments(self, app_home):
        from automation_console.app.errors import ToolInputError
        from automation_console.app.services.tool_service import parse_tool_input

        with pytest.raises(ToolInputError, match="not valid JSON"):
            parse_tool_input(_call("get_workflows", None))

    def test_modified_workflow_must_be_object(self, app_home):
        from automation_console.app.errors import ToolInputError
        from automation_console.app.services.tool_service import parse_tool_input

        with pytest.raises(ToolInputError, match="modified_workflow"):
            parse_tool_input(_call("create_safe_copy", {
                "original_id": BLOG_CREATOR_ID,
                "modified_workflow": "the same but nicer",
                "change_summary": "x",
            }))


def test_tool_specs_match_tool_names(app_home):
    from automation_console.app.models.tools import TOOL_NAMES
    from automation_console.app.services.tool_service import TOOL_SPECS

    assert [spec.name for spec in TOOL_SPECS] == list(TOOL_NAMES)
    for spec in TOOL_SPECS:
        assert spec.parameters["type"] == "object"


# ── execution ────────────────────────────────────────────────────────────

class TestToolExecutor:
    def test_get_workflows(self, engine_client):
        from automation_console.app.services.tool_service import ToolExecutor

        result = asyncio.run(ToolExecutor(engine_client).execute(_call("get_workflows", {})))

        assert result.call_id == "call-1"
        assert result.is_error is False
        payload = json.loads(result.content)
        assert [item["name"] for item in payload] == ["New Customer", "AI Voice Agent", "Purchases", "Blog Creator"]
        assert "successRate" in payload[0]

    def test_toggle_message(self, engine, engine_client):
        from automation_console.app.services.tool_service import ToolExecutor

        result = asyncio.run(ToolExecutor(engine_client).execute(
            _call("toggle_workflow", {"workflow_id": BLOG_CREATOR_ID, "action": "deactivate"})
        ))

        assert json.loads(result.content) == {"success": True, "message": "Blog Creator has been turned off."}
        assert BLOG_CREATOR_ID not in engine.active_ids()

    def test_safe_copy_and_restore(self, engine, engine_client):
        from automation_console.app.services.tool_service import ToolExecutor

        executor = ToolExecutor(engine_client)
        edited = dict(engine.workflows[BLOG_CREATOR_ID])
        copy = asyncio.run(executor.execute(_call("create_safe_copy", {
            "original_id": BLOG_CREATOR_ID,
            "modified_workflow": edited,
            "change_summary": "Publishes at 9am instead of 7am",
        })))
        payload = json.loads(copy.content)
        assert payload == {
            "success": True,
            "originalId": BLOG_CREATOR_ID,
            "newId": "copy-1",
            "changeSummary": "Publishes at 9am instead of 7am",
        }

        restored = asyncio.run(executor.execute(_call("restore_original", {
            "original_id": BLOG_CREATOR_ID,
            "modified_copy_id": "copy-1",
        })))
        assert json.loads(restored.content) == {"success": True, "message": "Original workflow restored."}
        assert BLOG_CREATOR_ID in engine.active_ids()
        assert "copy-1" not in engine.active_ids()

    def test_invalid_input_becomes_error_result(self, engine, engine_client):
        from automation_console.app.services.tool_service import ToolExecutor

        result = asyncio.run(ToolExecutor(engine_client).execute(
            _call("toggle_workflow", {"workflow_id": BLOG_CREATOR_ID, "action": "pause"})
        ))

        assert result.is_error is True
        assert "error" in json.loads(result.content)
        assert engine.calls == []

    def test_engine_failure_becomes_error_result(self, engine, engine_client):
        from automation_console.app.services.tool_service import ToolExecutor

        engine.failures.add(("POST", f"/workflows/{PURCHASES_ID}/activate"))
        result = asyncio.run(ToolExecutor(engine_client).execute(
            _call("toggle_workflow", {"workflow_id": PURCHASES_ID, "action": "activate"})
        ))

        assert result.is_error is True
        assert json.loads(result.content) == {"error": "Workflow engine error: 500"}

    def test_execute_all_keeps_call_ids(self, engine_client):
        from automation_console.app.services.tool_service import ToolExecutor

        calls = [
            _call("get_workflow_detail", {"workflow_id": BLOG_CREATOR_ID}, call_id="a"),
            _call("get_workflows", {}, call_id="b"),
            _call("nope", {}, call_id="c"),
        ]
        results = asyncio.run(ToolExecutor(engine_client).execute_all(calls))

        assert [r.call_id for r in results] == ["a", "b", "c"]
        assert json.loads(results[0].content)["name"] == "Blog Creator"
        assert isinstance(json.loads(results[1].content), list)
        assert results[2].is_error is True
