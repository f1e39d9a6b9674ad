"""Operation variables: placeholder values and strict parsing.

Placeholder ("fake") variables are used when a schema is requested without
variables, so that ``@skip``/``@include`` conditions can still be evaluated.
"""

import logging
from collections.abc import Mapping
from typing import Any, Sequence

from graphql import (
    GraphQLBoolean,
    GraphQLFloat,
    GraphQLID,
    GraphQLInputType,
    GraphQLInt,
    GraphQLSchema,
    GraphQLString,
    OperationDefinitionNode,
    VariableDefinitionNode,
    is_enum_type,
    is_input_object_type,
    is_leaf_type,
    is_list_type,
    is_non_null_type,
    is_scalar_type,
    type_from_ast,
    value_from_ast,
)

from .errors import InvalidDocument
from .results import Direction, Issue, ValidationResult
from .scalars import ScalarRegistry
from .validator import CONVERSION_ERRORS, STRATEGIES, ScalarStrategy, issue_message

logger = logging.getLogger(__name__)

BUILTIN_PLACEHOLDERS: dict[str, Any] = {
    GraphQLString.name: "",
    GraphQLInt.name: 0,
    GraphQLFloat.name: 0.0,
    GraphQLBoolean.name: False,
    GraphQLID.name: "0",
}

_MISSING = object()


def variable_type(schema: GraphQLSchema, definition: VariableDefinitionNode) -> GraphQLInputType:
    type_ = type_from_ast(schema, definition.type)
    if type_ is None:
        raise InvalidDocument(
            f"Type of variable ${definition.variable.name.value} not found in schema"
        )
    return type_


def fake_variables(
    definitions: Sequence[VariableDefinitionNode],
    schema: GraphQLSchema,
    scalars: ScalarRegistry,
) -> dict[str, Any]:
    """Build a placeholder value for every variable definition.

    Defaults declared in the document win. Nullable variables are ``None``,
    non-null lists are empty and non-null named types get a zero value (first
    enum value, a scalar handler's ``default_value``, recursively built input
    objects).
    """
    values = {}
    for definition in definitions:
        type_ = variable_type(schema, definition)
        if definition.default_value is not None:
            values[definition.variable.name.value] = value_from_ast(
                definition.default_value, type_
            )
        else:
            values[definition.variable.name.value] = fake_input_value(type_, scalars)
    return values


def fake_input_value(type_: GraphQLInputType, scalars: ScalarRegistry) -> Any:
    if not is_non_null_type(type_):
        return None
    type_ = type_.of_type
    if is_list_type(type_):
        return []
    if is_enum_type(type_):
        return next(iter(type_.values.values())).value
    if type_.name in BUILTIN_PLACEHOLDERS:
        return BUILTIN_PLACEHOLDERS[type_.name]
    if is_scalar_type(type_):
        default_value = getattr(scalars.require(type_.name), "default_value", None)
        if default_value is None:
            raise InvalidDocument(
                f"Scalar type {type_.name} is used in a non-nullable variable, "
                "but its handler provides no default_value"
            )
        return default_value
    if is_input_object_type(type_):
        return {
            name: fake_input_value(field.type, scalars) for name, field in type_.fields.items()
        }
    raise InvalidDocument(f"Cannot build a placeholder value for type {type_}")


class _VariablesPass:
    def __init__(self, strategy: ScalarStrategy):
        self.strategy = strategy
        self.issues: list[Issue] = []

    def coerce(self, type_: GraphQLInputType, value: Any, path: list[str | int]) -> Any:
        if is_non_null_type(type_):
            if value is None or value is _MISSING:
                self.issues.append(Issue("Expected value to be non-null.", list(path)))
                return _MISSING
            type_ = type_.of_type
        if value is None or value is _MISSING:
            return value
        if is_list_type(type_):
            if not self.strategy.is_list(value):
                self.issues.append(Issue("Expected value to be an array.", list(path)))
                return _MISSING
            return [
                self.coerce(type_.of_type, item, [*path, index])
                for index, item in enumerate(value)
            ]
        if is_leaf_type(type_):
            try:
                return self.strategy.resolve_leaf(type_, value)
            except CONVERSION_ERRORS as exc:
                self.issues.append(Issue(issue_message(exc), list(path)))
                return _MISSING
        if not self.strategy.is_object(value):
            self.issues.append(Issue("Expected input object to be an object.", list(path)))
            return _MISSING
        result = {}
        for name, field in type_.fields.items():
            if isinstance(value, Mapping):
                field_value = value.get(name, _MISSING)
            else:
                field_value = self.strategy.get_field(value, name)
            coerced = self.coerce(field.type, field_value, [*path, name])
            if coerced is not _MISSING:
                result[name] = coerced
        return result


def parse_variables(
    value: Any,
    operation: OperationDefinitionNode,
    schema: GraphQLSchema,
    scalars: ScalarRegistry,
    direction: Direction = Direction.NORMALIZE,
) -> ValidationResult:
    """Validate the variables of an operation in one direction.

    Variables that are absent and nullable stay absent; explicit ``None`` is
    kept. Keys that are not declared variables are dropped.
    """
    strategy = STRATEGIES[direction](scalars)
    if not isinstance(value, Mapping):
        return ValidationResult.failure(
            [Issue(f"Expected variables to be an object, got {type(value).__name__}")]
        )
    logger.debug("Parsing variables (%s)", direction.value)
    variables_pass = _VariablesPass(strategy)
    result = {}
    for definition in operation.variable_definitions or ():
        name = definition.variable.name.value
        coerced = variables_pass.coerce(
            variable_type(schema, definition), value.get(name, _MISSING), [name]
        )
        if coerced is not _MISSING:
            result[name] = coerced
    if variables_pass.issues:
        return ValidationResult.failure(variables_pass.issues)
    return ValidationResult.success(result)
