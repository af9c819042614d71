"""
Tool Result Validation

Validates a tool's output against its declared pydantic schema before the
output crosses the tool boundary.

Usage:
    outcome = validate_tool_result(result, PolicySummaryOutput, "get_policy_summary")
    if not outcome.ok:
        return {"success": False, "error": outcome.error.model_dump_json()}
    return outcome.data

Callers must use ``outcome.data``: defaults and coercions are applied there,
not to the original object.
"""

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from policy_digest.errors import ErrorInfo, ToolResultValidationError
from policy_digest.models import ValidationOutcome

logger = logging.getLogger(__name__)


def _adapter_for(schema: Any) -> TypeAdapter:
    # TypeAdapter also accepts BaseModel subclasses
    if isinstance(schema, TypeAdapter):
        return schema
    return TypeAdapter(schema)


def validate_tool_result(result: Any, schema: Any, tool_name: str) -> ValidationOutcome:
    """
    Validate a tool result against a schema.

    Args:
        result: The tool output to validate
        schema: pydantic model class, TypeAdapter, or any type TypeAdapter accepts
        tool_name: Name of the tool (for logs and error details)

    Returns:
        ValidationOutcome; never raises
    """
    try:
        adapter = _adapter_for(schema)
        data = adapter.validate_python(result)
    except ValidationError as e:
        errors = [
            {
                "path": ".".join(str(part) for part in err.get("loc", ())),
                "message": err.get("msg", ""),
                "code": err.get("type", ""),
            }
            for err in e.errors()
        ]
        logger.warning(
            f"Tool result validation failed: tool={tool_name}, "
            f"error_count={len(errors)}, paths={[err['path'] for err in errors]}, "
            f"received_type={type(result).__name__}"
        )
        return ValidationOutcome.failure(ErrorInfo.validation(
            f"Tool result validation failed for {tool_name}",
            details={
                "tool_name": tool_name,
                "errors": errors,
                "received_type": type(result).__name__,
                "received_keys": sorted(str(k) for k in result) if isinstance(result, dict) else None,
            },
        ))
    except Exception as e:
        logger.error(
            f"Unexpected error during tool result validation: tool={tool_name}, "
            f"error={type(e).__name__}: {e}",
            exc_info=True,
        )
        return ValidationOutcome.failure(ErrorInfo.internal(
            f"Unexpected error during validation for {tool_name}: {e}",
            details={
                "tool_name": tool_name,
                "original_error": str(e),
                "error_type": type(e).__name__,
            },
        ))

    logger.debug(f"Tool result validation passed: tool={tool_name}")
    return ValidationOutcome.success(data)


def validate_tool_result_or_throw(result: Any, schema: Any, tool_name: str) -> Any:
    """
    Validate and return the validated data.

    Raises:
        ToolResultValidationError: If validation fails
    """
    outcome = validate_tool_result(result, schema, tool_name)
    if not outcome.ok:
        raise ToolResultValidationError(outcome.error)
    return outcome.data


__all__ = [
    "validate_tool_result",
    "validate_tool_result_or_throw",
]
