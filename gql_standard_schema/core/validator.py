"""Strict validation of values against an operation's or fragment's selections.

The validator walks a candidate value the way an executor would resolve it,
but every leaf goes through a direction strategy instead of a resolver:

- normalize: the value must already be in wire form; it is returned in wire form
- deserialize: wire values are converted to their internal representation
- serialize: internal values are converted to their wire representation

Problems are accumulated as issues with the path of the offending field;
siblings of a failing field are still checked.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Sequence

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLBoolean,
    GraphQLEnumType,
    GraphQLError,
    GraphQLFloat,
    GraphQLID,
    GraphQLInt,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLString,
    OperationDefinitionNode,
    SelectionNode,
    is_abstract_type,
    is_enum_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_specified_scalar_type,
)
from pydantic import BaseModel

from .errors import InvalidDocument, MissingSelection
from .hooks import TYPENAME
from .parser import get_fragments, get_root_type, operation_title
from .results import Direction, Issue, ValidationResult
from .scalars import ScalarRegistry
from .selections import FieldCollector, merge_sub_selections, selection_list

logger = logging.getLogger(__name__)

# Wire representation of the built-in scalars for strict normalization.
_WIRE_TYPES: dict[str, tuple[tuple[type, ...], str]] = {
    GraphQLString.name: ((str,), "a non string value"),
    GraphQLID.name: ((str,), "a non-string value"),
    GraphQLInt.name: ((int,), "non-integer value"),
    GraphQLFloat.name: ((int, float), "non numeric value"),
    GraphQLBoolean.name: ((bool,), "a non boolean value"),
}

CONVERSION_ERRORS = (GraphQLError, TypeError, ValueError)


def issue_message(exc: Exception) -> str:
    if isinstance(exc, GraphQLError):
        return exc.message
    return str(exc)


class ScalarStrategy:
    """Converts leaf values for one validation direction.

    Subclasses implement ``resolve_scalar`` and ``resolve_enum``; the
    strategy is chosen once per validation call.
    """

    direction: Direction

    def __init__(self, scalars: ScalarRegistry):
        self.scalars = scalars

    def resolve_leaf(self, type_: GraphQLScalarType | GraphQLEnumType, value: Any) -> Any:
        if is_enum_type(type_):
            return self.resolve_enum(type_, value)
        return self.resolve_scalar(type_, value)

    def resolve_scalar(self, scalar: GraphQLScalarType, value: Any) -> Any:
        raise NotImplementedError

    def resolve_enum(self, enum: GraphQLEnumType, value: Any) -> Any:
        raise NotImplementedError

    def is_object(self, value: Any) -> bool:
        return isinstance(value, Mapping)

    def is_list(self, value: Any) -> bool:
        return isinstance(value, (list, tuple))

    def get_field(self, source: Any, key: str) -> Any:
        if isinstance(source, Mapping):
            return source.get(key)
        return getattr(source, key, None)


class NormalizeStrategy(ScalarStrategy):
    """Wire to wire. Values are never coerced from another JSON type."""

    direction = Direction.NORMALIZE

    def resolve_scalar(self, scalar: GraphQLScalarType, value: Any) -> Any:
        if is_specified_scalar_type(scalar):
            accepted, label = _WIRE_TYPES[scalar.name]
            if isinstance(value, bool) and bool not in accepted or not isinstance(value, accepted):
                raise TypeError(f"{scalar.name} cannot represent {label}: {value!r}")
            return scalar.serialize(scalar.parse_value(value))
        handler = self.scalars.require(scalar.name)
        return handler.serialize(handler.deserialize(value))

    def resolve_enum(self, enum: GraphQLEnumType, value: Any) -> Any:
        return enum.serialize(enum.parse_value(value))


class DeserializeStrategy(ScalarStrategy):
    """Wire to internal."""

    direction = Direction.DESERIALIZE

    def resolve_scalar(self, scalar: GraphQLScalarType, value: Any) -> Any:
        if is_specified_scalar_type(scalar):
            return scalar.parse_value(value)
        return self.scalars.require(scalar.name).deserialize(value)

    def resolve_enum(self, enum: GraphQLEnumType, value: Any) -> Any:
        return enum.parse_value(value)


class SerializeStrategy(ScalarStrategy):
    """Internal to wire.

    Internal values may be arbitrary objects (read by attribute, pydantic
    models by field alias) and lists may be any non-string iterable.
    """

    direction = Direction.SERIALIZE

    def resolve_scalar(self, scalar: GraphQLScalarType, value: Any) -> Any:
        if is_specified_scalar_type(scalar):
            return scalar.serialize(value)
        return self.scalars.require(scalar.name).serialize(value)

    def resolve_enum(self, enum: GraphQLEnumType, value: Any) -> Any:
        return enum.serialize(value)

    def is_object(self, value: Any) -> bool:
        if isinstance(value, (str, bytes, int, float, bool)):
            return False
        return isinstance(value, (Mapping, BaseModel)) or not isinstance(value, Iterable)

    def is_list(self, value: Any) -> bool:
        return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping, BaseModel))

    def get_field(self, source: Any, key: str) -> Any:
        if isinstance(source, BaseModel):
            for name, field_info in type(source).model_fields.items():
                if key in (name, field_info.alias):
                    return getattr(source, name)
            return None
        return super().get_field(source, key)


STRATEGIES: dict[Direction, type[ScalarStrategy]] = {
    Direction.NORMALIZE: NormalizeStrategy,
    Direction.DESERIALIZE: DeserializeStrategy,
    Direction.SERIALIZE: SerializeStrategy,
}


class _ValidationPass:
    """State of one validation call: the issues found so far."""

    def __init__(self, schema: GraphQLSchema, collector: FieldCollector, strategy: ScalarStrategy):
        self.schema = schema
        self.collector = collector
        self.strategy = strategy
        self.issues: list[Issue] = []

    def report(self, message: str, path: list[str | int]):
        self.issues.append(Issue(message=message, path=list(path)))

    def result(self, value: Any) -> ValidationResult:
        if self.issues:
            return ValidationResult.failure(self.issues)
        return ValidationResult.success(value)

    def complete_object(
        self,
        object_type: GraphQLObjectType,
        selections: Sequence[SelectionNode],
        source: Any,
        path: list[str | int],
        discriminate: bool = False,
    ) -> dict[str, Any]:
        collected = self.collector.collect(object_type, selections)
        result: dict[str, Any] = {}
        if discriminate and TYPENAME not in collected.fields:
            result[TYPENAME] = object_type.name
        for key, field_nodes in collected.fields.items():
            field_name = field_nodes[0].name.value
            if field_name == TYPENAME:
                result[key] = object_type.name
                continue
            field_def = object_type.fields.get(field_name)
            if field_def is None:
                raise InvalidDocument(f"Field {field_name} not found on type {object_type.name}")
            result[key] = self.complete_value(
                field_def.type,
                merge_sub_selections(field_nodes) or [],
                self.strategy.get_field(source, key),
                [*path, key],
                f"{object_type.name}.{field_name}",
            )
        return result

    def complete_value(
        self,
        type_: GraphQLOutputType,
        selections: Sequence[SelectionNode],
        value: Any,
        path: list[str | int],
        field_label: str,
    ) -> Any:
        if is_non_null_type(type_):
            inner = type_.of_type
            while is_non_null_type(inner):
                inner = inner.of_type
            if value is None:
                self.report(f"Cannot return null for non-nullable field {field_label}.", path)
                return None
            return self._complete(inner, selections, value, path, field_label)
        if value is None:
            return None
        return self._complete(type_, selections, value, path, field_label)

    def _complete(self, type_, selections, value, path, field_label) -> Any:
        if is_list_type(type_):
            if not self.strategy.is_list(value):
                self.report(
                    f"Expected Iterable, but did not find one for field '{field_label}'.", path
                )
                return None
            return [
                self.complete_value(type_.of_type, selections, item, [*path, index], field_label)
                for index, item in enumerate(value)
            ]
        if is_abstract_type(type_) or is_object_type(type_):
            if not selections:
                raise MissingSelection(f"Selections are required for type {type_.name}")
            if is_abstract_type(type_):
                runtime_type = self.resolve_abstract(type_, value, path, field_label)
                if runtime_type is None:
                    return None
                return self.complete_object_value(runtime_type, selections, value, path, True)
            return self.complete_object_value(type_, selections, value, path)
        try:
            return self.strategy.resolve_leaf(type_, value)
        except CONVERSION_ERRORS as exc:
            self.report(issue_message(exc), path)
            return None

    def complete_object_value(self, object_type, selections, value, path, discriminate=False):
        if not self.strategy.is_object(value):
            self.report(
                f"Expected value of type '{object_type.name}' to be an object, "
                f"got {type(value).__name__}.",
                path,
            )
            return None
        return self.complete_object(object_type, selections, value, path, discriminate)

    def resolve_abstract(self, abstract_type, value, path, field_label) -> GraphQLObjectType | None:
        """Pick the concrete type named by the value's ``__typename``."""
        typename = self.typename_of(value)
        if not isinstance(typename, str):
            possible = ", ".join(
                f"'{t.name}'" for t in self.schema.get_possible_types(abstract_type)
            )
            self.report(
                f"Abstract type '{abstract_type.name}' must resolve to an Object type at runtime "
                f"for field '{field_label}'. Expected '{TYPENAME}' to be one of: {possible}.",
                path,
            )
            return None
        runtime_type = self.schema.get_type(typename)
        if not is_object_type(runtime_type) or not self.schema.is_sub_type(
            abstract_type, runtime_type
        ):
            self.report(
                f"Runtime Object type '{typename}' is not a possible type "
                f"for '{abstract_type.name}'.",
                path,
            )
            return None
        return runtime_type

    def typename_of(self, value: Any) -> Any:
        if not self.strategy.is_object(value):
            return None
        typename = self.strategy.get_field(value, TYPENAME)
        if typename is None and not isinstance(value, Mapping):
            # Internal objects may be instances of a class named like their type.
            typename = type(value).__name__
        return typename


class DataValidator:
    """Validates values against the selections of one document.

    The direction strategy is fixed at construction; every ``validate_*``
    call runs a fresh pass with its own issue list.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        document: DocumentNode,
        scalars: ScalarRegistry,
        direction: Direction = Direction.NORMALIZE,
        variable_values: dict[str, Any] | None = None,
    ):
        self.schema = schema
        self.direction = direction
        self.strategy = STRATEGIES[direction](scalars)
        self.collector = FieldCollector(schema, get_fragments(document), variable_values)

    def _new_pass(self) -> _ValidationPass:
        return _ValidationPass(self.schema, self.collector, self.strategy)

    def validate_operation(self, value: Any, operation: OperationDefinitionNode) -> ValidationResult:
        """Validate the data of an operation."""
        logger.debug("Validating %s data (%s)", operation_title(operation), self.direction.value)
        validation = self._new_pass()
        if not validation.strategy.is_object(value):
            validation.report(
                f"Expected object for {operation_title(operation)} data, got {type(value).__name__}",
                [],
            )
            return validation.result(None)
        root_type = get_root_type(self.schema, operation)
        data = validation.complete_object(
            root_type, selection_list(operation.selection_set), value, []
        )
        return validation.result(data)

    def validate_fragment(self, value: Any, fragment: FragmentDefinitionNode) -> ValidationResult:
        """Validate data shaped by a fragment.

        Fragments on interfaces and unions need a ``__typename`` to pick the
        concrete type the value is checked against.
        """
        validation = self._new_pass()
        condition_type = self.schema.get_type(fragment.type_condition.name.value)
        selections = selection_list(fragment.selection_set)
        if is_object_type(condition_type):
            data = validation.complete_object_value(condition_type, selections, value, [])
            return validation.result(data)
        if not is_abstract_type(condition_type):
            raise InvalidDocument(
                "Fragment type condition must be an object, union or interface, "
                f"got: {fragment.type_condition.name.value}"
            )
        if not isinstance(validation.typename_of(value), str):
            validation.report("Expected __typename field in fragment data", [])
            return validation.result(None)
        label = f"fragment {fragment.name.value}"
        runtime_type = validation.resolve_abstract(condition_type, value, [], label)
        if runtime_type is None:
            return validation.result(None)
        data = validation.complete_object_value(runtime_type, selections, value, [], True)
        return validation.result(data)
