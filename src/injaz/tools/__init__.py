"""Tools the assistant can call, and the executor that runs them."""

from injaz.tools.definitions import ALL_TOOLS, TOOL_NAMES
from injaz.tools.executor import ExecutionContext, ToolExecutionError, ToolExecutor

__all__ = [
    "ALL_TOOLS",
    "TOOL_NAMES",
    "ExecutionContext",
    "ToolExecutionError",
    "ToolExecutor",
]
