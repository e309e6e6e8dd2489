"""Argument and result schemas for the tool layer.

Each tool validates its arguments with one of the models below before any
session work happens. Arguments are accepted in snake_case or camelCase
(``session_id`` or ``sessionId``); unknown arguments are rejected.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..capture.query import ALL_LEVELS
from ..models.capture import SessionOptions


class ToolArguments(BaseModel):
    """Base class for tool argument models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class NoArguments(ToolArguments):
    pass


class SessionArguments(ToolArguments):
    session_id: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Identifier of the target session"
    )


class StartSessionArguments(SessionArguments):
    options: SessionOptions = Field(
        default_factory=SessionOptions,
        description="Advisory session options"
    )


class NavigateArguments(SessionArguments):
    url: str = Field(..., min_length=1, description="URL to load")


class ConsoleLogArguments(SessionArguments):
    log_level: str = Field(
        default=ALL_LEVELS,
        description="Level to keep (LOG, INFO, WARNING, ERROR, DEBUG, ...) or ALL; console.warn is reported as WARNING"
    )
    text_filter: Optional[str] = Field(
        default=None,
        description="Substring the message must contain"
    )
    ignore_case: bool = Field(default=False, description="Match text_filter case-insensitively")

    @field_validator('log_level')
    @classmethod
    def normalize_level(cls, v):
        v = v.strip().upper()
        if not v:
            raise ValueError("log_level must not be empty")
        return v


class ExecuteScriptArguments(SessionArguments):
    script: str = Field(..., min_length=1, description="Function body to evaluate in the page")
    args: List[Any] = Field(default_factory=list, description="Positional arguments for the script")


class InspectElementArguments(SessionArguments):
    selector: str = Field(..., min_length=1, description="Selector of the element to inspect")


class ToolError(BaseModel):
    """Structured failure reported by a tool."""

    kind: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Human-readable error message")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    model_config = ConfigDict(populate_by_name=True)


class ToolResult(BaseModel):
    """Outcome of a tool call: either data or an error."""

    success: bool
    data: Any = None
    error: Optional[ToolError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ToolResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: str, message: str, session_id: Optional[str] = None) -> "ToolResult":
        return cls(success=False, error=ToolError(kind=kind, message=message, session_id=session_id))

    def to_dict(self) -> Dict[str, Any]:
        result = self.model_dump(by_alias=True, mode="json")
        result.pop("error" if self.success else "data", None)
        return result
