"""Typed inputs of the assistant's tools.

Each tool has one input model tagged by its name. Raw model-produced
arguments are validated through ``ToolInput`` before anything is executed.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _ToolInputBase(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class GetWorkflowsInput(_ToolInputBase):
    tool: Literal["get_workflows"] = "get_workflows"


class GetWorkflowDetailInput(_ToolInputBase):
    tool: Literal["get_workflow_detail"] = "get_workflow_detail"
    workflow_id: str = Field(..., min_length=1)


class ToggleWorkflowInput(_ToolInputBase):
    tool: Literal["toggle_workflow"] = "toggle_workflow"
    workflow_id: str = Field(..., min_length=1)
    action: Literal["activate", "deactivate"]

    @property
    def activate(self) -> bool:
        return self.action == "activate"


class CreateSafeCopyInput(_ToolInputBase):
    tool: Literal["create_safe_copy"] = "create_safe_copy"
    original_id: str = Field(..., min_length=1)
    modified_workflow: dict
    change_summary: str = Field(..., min_length=1)


class RestoreOriginalInput(_ToolInputBase):
    tool: Literal["restore_original"] = "restore_original"
    original_id: str = Field(..., min_length=1)
    modified_copy_id: str = Field(..., min_length=1)


ToolInput = Annotated[
    Union[
        GetWorkflowsInput,
        GetWorkflowDetailInput,
        ToggleWorkflowInput,
        CreateSafeCopyInput,
        RestoreOriginalInput,
    ],
    Field(discriminator="tool"),
]

tool_input_adapter: TypeAdapter[ToolInput] = TypeAdapter(ToolInput)

TOOL_NAMES = (
    "get_workflows",
    "get_workflow_detail",
    "toggle_workflow",
    "create_safe_copy",
    "restore_original",
)
