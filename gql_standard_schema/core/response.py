"""Validation and JSON schema for a full GraphQL response envelope.

The envelope is ``{"data": ..., "errors": [...], "extensions": {...}}``. The
``data`` member is checked by the data validator of the operation, with its
issue paths prefixed by ``"data"``.
"""

from collections.abc import Mapping
from typing import Any, Callable

from graphql import OperationDefinitionNode

from .json_schema import NULL_SCHEMA, JSONSchema, JSONSchemaOptions, nullable, schema_base
from .parser import operation_title
from .results import Issue, ValidationResult

DATA_KEY = "data"
ENVELOPE_KEYS = (DATA_KEY, "errors", "extensions")

ERROR_LOCATION_SCHEMA: JSONSchema = {
    "type": "object",
    "properties": {
        "line": {"type": "number"},
        "column": {"type": "number"},
    },
    "required": ["line", "column"],
    "additionalProperties": False,
}

ERROR_SCHEMA: JSONSchema = {
    "type": "object",
    "properties": {
        "message": {"type": "string"},
        "locations": nullable({"type": "array", "items": ERROR_LOCATION_SCHEMA}),
        "path": nullable(
            {"type": "array", "items": {"anyOf": [{"type": "string"}, {"type": "number"}]}}
        ),
    },
    "required": ["message"],
}


def validate_envelope(value: Any) -> list[Issue]:
    """Check the members of the envelope other than ``data``."""
    if not isinstance(value, Mapping):
        return [Issue(f"Expected object for GraphQL response, got {type(value).__name__}")]
    issues = []
    for key in value:
        if key not in ENVELOPE_KEYS:
            issues.append(Issue(f"Unexpected key '{key}' in GraphQL response", [key]))
    errors = value.get("errors")
    if errors is not None:
        if isinstance(errors, (list, tuple)):
            for index, error in enumerate(errors):
                issues.extend(validate_error(error, ["errors", index]))
        else:
            issues.append(
                Issue(
                    f"Expected 'errors' to be an array or null, got {type(errors).__name__}",
                    ["errors"],
                )
            )
    extensions = value.get("extensions")
    if extensions is not None and not isinstance(extensions, Mapping):
        issues.append(
            Issue(
                f"Expected 'extensions' to be an object or null, got {type(extensions).__name__}",
                ["extensions"],
            )
        )
    return issues


def validate_error(error: Any, path: list) -> list[Issue]:
    """Check one item of ``errors`` against ``ERROR_SCHEMA``."""
    if not isinstance(error, Mapping):
        return [Issue(f"Expected error to be an object, got {type(error).__name__}", path)]
    issues = []
    if not isinstance(error.get("message"), str):
        issues.append(Issue("Expected error 'message' to be a string", [*path, "message"]))
    locations = error.get("locations")
    if locations is not None:
        if not isinstance(locations, (list, tuple)):
            issues.append(
                Issue("Expected error 'locations' to be an array or null", [*path, "locations"])
            )
        else:
            for index, location in enumerate(locations):
                if not is_location(location):
                    issues.append(
                        Issue(
                            "Expected location to be an object with numeric 'line' and 'column'",
                            [*path, "locations", index],
                        )
                    )
    error_path = error.get("path")
    if error_path is not None:
        if not isinstance(error_path, (list, tuple)) or not all(
            isinstance(segment, str) or is_number(segment) for segment in error_path
        ):
            issues.append(
                Issue(
                    "Expected error 'path' to be an array of strings and numbers or null",
                    [*path, "path"],
                )
            )
    return issues


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_location(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and set(value) == {"line", "column"}
        and is_number(value["line"])
        and is_number(value["column"])
    )


def validate_response(value: Any, validate_data: Callable[[Any], ValidationResult]) -> ValidationResult:
    """Validate an envelope, delegating ``data`` to ``validate_data``.

    A missing or ``None`` data member is accepted as ``None``.
    """
    issues = validate_envelope(value)
    if not isinstance(value, Mapping):
        return ValidationResult.failure(issues)
    result = dict(value)
    data = value.get(DATA_KEY)
    if data is None:
        result[DATA_KEY] = None
    else:
        data_result = validate_data(data)
        if data_result.is_valid:
            result[DATA_KEY] = data_result.value
        else:
            issues.extend(
                Issue(issue.message, [DATA_KEY, *issue.path]) for issue in data_result.issues
            )
    if issues:
        return ValidationResult.failure(issues)
    return ValidationResult.success(result)


def build_response_schema(
    operation: OperationDefinitionNode,
    data_schema: JSONSchema,
    options: JSONSchemaOptions,
    *,
    target: str | None = None,
) -> JSONSchema:
    """Wrap the JSON schema of an operation's data into the response envelope.

    The data schema's ``$defs`` move to the envelope root; its references are
    root-relative and stay valid. Every member may be left out, as in the
    validator, except with ``additional_properties=False`` (the ``openai``
    preset), which needs every property listed in ``required``.
    """
    data_node = {
        key: value for key, value in data_schema.items() if key not in ("$schema", "$defs")
    }
    result = schema_base(target)
    result["title"] = f"Full response for {operation_title(operation)}"
    result["type"] = "object"
    result["properties"] = {
        DATA_KEY: nullable(data_node),
        "errors": nullable({"type": "array", "items": ERROR_SCHEMA}),
        "extensions": {"anyOf": [dict(NULL_SCHEMA), {"type": "object"}]},
    }
    result["required"] = (
        list(result["properties"]) if options.additional_properties is False else []
    )
    result["additionalProperties"] = False
    if "$defs" in data_schema:
        result["$defs"] = data_schema["$defs"]
    return result
