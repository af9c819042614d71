"""
Tool Result Validation Gate

Every tool output passes through validate_tool_result() before it is
returned to a caller.
"""

from .tool_result import validate_tool_result, validate_tool_result_or_throw

__all__ = [
    "validate_tool_result",
    "validate_tool_result_or_throw",
]
