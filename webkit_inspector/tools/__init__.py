"""Tool layer: validated, named operations returning structured results."""

from .dispatcher import ToolDispatcher
from .schemas import ToolError, ToolResult

__all__ = [
    "ToolDispatcher",
    "ToolError",
    "ToolResult",
]
