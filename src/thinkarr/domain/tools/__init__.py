"""Tools the chat model can call, and the gate for external callers."""

from thinkarr.domain.tools.bootstrap import initialize_tools
from thinkarr.domain.tools.permissions import (
    PermissionLevel,
    can_execute,
    filter_schemas,
)
from thinkarr.domain.tools.registry import ToolDefinition, ToolRegistry

__all__ = [
    "PermissionLevel",
    "ToolDefinition",
    "ToolRegistry",
    "can_execute",
    "filter_schemas",
    "initialize_tools",
]
