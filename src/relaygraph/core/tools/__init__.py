"""Tools module for relaygraph."""

from relaygraph.core.tools.registry import ToolRegistry, normalize_tool_name

__all__ = [
    'ToolRegistry',
    'normalize_tool_name'
]
