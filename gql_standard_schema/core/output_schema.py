"""Builds JSON schemas for the data returned by an operation or fragment.

The builder walks the type graph and the selection tree together. Every
concrete object type is expanded inline against the selections that apply
to it; named types with documentation, enums, custom scalars and applied
named fragments are registered once in the pass's ``$defs`` and referenced.
"""

import logging
from typing import Any, Sequence

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLBoolean,
    GraphQLEnumType,
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
    SelectionSetNode,
    is_abstract_type,
    is_enum_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
)

from .errors import InvalidDocument, MissingSelection
from .hooks import TYPENAME
from .json_schema import (
    Definitions,
    JSONSchema,
    JSONSchemaOptions,
    nullable,
    schema_base,
    with_defs,
)
from .parser import get_fragments, get_root_type, operation_title
from .results import SchemaDirection
from .scalars import ScalarRegistry
from .selections import FieldCollector, merge_sub_selections, selection_list

logger = logging.getLogger(__name__)

BUILTIN_SCALAR_SCHEMAS: dict[str, JSONSchema] = {
    GraphQLString.name: {"type": "string"},
    GraphQLInt.name: {"type": "integer"},
    GraphQLFloat.name: {"type": "number"},
    GraphQLBoolean.name: {"type": "boolean"},
    GraphQLID.name: {"type": "string"},
}


def fragment_title(fragment: FragmentDefinitionNode) -> str:
    return f"fragment {fragment.name.value} on {fragment.type_condition.name.value}"


def description_of(node: Any) -> str | None:
    description = getattr(node, "description", None)
    if description is None:
        return None
    return getattr(description, "value", description)


def scalar_schema(
    scalar: GraphQLScalarType,
    scalars: ScalarRegistry,
    direction: SchemaDirection,
    definitions: Definitions,
) -> JSONSchema:
    """Return the node for a scalar.

    Built-in scalars are inlined. Custom scalars are registered once as
    ``scalar/Name`` with the fragment of their handler for the given direction.
    """
    builtin = BUILTIN_SCALAR_SCHEMAS.get(scalar.name)
    if builtin is not None:
        return dict(builtin)
    handler = scalars.require(scalar.name)
    if direction is SchemaDirection.SERIALIZED:
        fragment = handler.serialized_json_schema
    else:
        fragment = handler.deserialized_json_schema
    definition: JSONSchema = {"title": scalar.name}
    description = getattr(handler, "description", None) or scalar.description
    if description:
        definition["description"] = description
    definition.update(fragment)
    return {"$ref": definitions.register("scalar", scalar.name, definition)}


def enum_schema(enum: GraphQLEnumType, definitions: Definitions) -> JSONSchema:
    definition: JSONSchema = {"title": enum.name}
    if enum.description:
        definition["description"] = enum.description
    definition["enum"] = list(enum.values)
    return {"$ref": definitions.register("enum", enum.name, definition)}


class OutputSchemaBuilder:
    """Generates JSON schema nodes for output types against selections.

    One builder serves one generation pass: its ``definitions`` registry
    collects the shared ``$defs`` of the schema being built.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        document: DocumentNode,
        scalars: ScalarRegistry,
        direction: SchemaDirection = SchemaDirection.SERIALIZED,
        options: JSONSchemaOptions | None = None,
        definitions: Definitions | None = None,
        variable_values: dict[str, Any] | None = None,
    ):
        self.schema = schema
        self.scalars = scalars
        self.direction = direction
        self.options = options or JSONSchemaOptions()
        self.definitions = definitions or Definitions()
        self.collector = FieldCollector(schema, get_fragments(document), variable_values)

    def generate(
        self,
        type_: GraphQLOutputType,
        selections: SelectionSetNode | Sequence[SelectionNode] | None = None,
    ) -> JSONSchema:
        """Return the node for a (possibly wrapped) output type."""
        selections = selection_list(selections)
        if is_non_null_type(type_):
            inner = type_.of_type
            while is_non_null_type(inner):
                inner = inner.of_type
            return self._generate(inner, selections)
        return nullable(self._generate(type_, selections))

    def _generate(self, type_: GraphQLOutputType, selections: list[SelectionNode]) -> JSONSchema:
        if is_list_type(type_):
            return {"type": "array", "items": self.generate(type_.of_type, selections)}
        if is_scalar_type(type_):
            return self.scalar_schema(type_)
        if is_enum_type(type_):
            return self.enum_schema(type_)
        if is_abstract_type(type_):
            if not selections:
                raise MissingSelection(
                    f"Selections are required for interface and union types ({type_.name})"
                )
            return self.abstract_schema(type_, selections)
        if is_object_type(type_):
            if not selections:
                raise MissingSelection(f"Selections are required for object type {type_.name}")
            return self.object_schema(type_, selections)
        raise InvalidDocument(f"{type_} is not an output type")

    def scalar_schema(self, scalar: GraphQLScalarType) -> JSONSchema:
        return scalar_schema(scalar, self.scalars, self.direction, self.definitions)

    def enum_schema(self, enum: GraphQLEnumType) -> JSONSchema:
        return enum_schema(enum, self.definitions)

    def abstract_schema(self, abstract_type, selections: list[SelectionNode]) -> JSONSchema:
        branches = [
            self.object_schema(possible_type, selections, discriminate=True)
            for possible_type in self.schema.get_possible_types(abstract_type)
        ]
        # anyOf must not be empty; an abstract type without members matches nothing.
        node: JSONSchema = {"anyOf": branches} if branches else {"not": {}}
        return self.document_type(abstract_type, node)

    def object_schema(
        self,
        object_type: GraphQLObjectType,
        selections: list[SelectionNode],
        discriminate: bool = False,
    ) -> JSONSchema:
        """Expand a concrete object type against the selections that apply to it.

        With ``discriminate`` the ``__typename`` constant is always present so
        every branch of an abstract type can be told apart.
        """
        collected = self.collector.collect(object_type, selections)
        properties: dict[str, JSONSchema] = {}
        required: list[str] = []
        if discriminate and TYPENAME not in collected.fields:
            properties[TYPENAME] = {"const": object_type.name}
            required.append(TYPENAME)

        for key, field_nodes in collected.fields.items():
            field_name = field_nodes[0].name.value
            if field_name == TYPENAME:
                properties[key] = {"const": object_type.name}
                required.append(key)
                continue
            field_def = object_type.fields.get(field_name)
            if field_def is None:
                raise InvalidDocument(f"Field {field_name} not found on type {object_type.name}")
            node: JSONSchema = dict(self.generate(field_def.type, merge_sub_selections(field_nodes)))
            node["title"] = f"{object_type.name}.{field_name}: {field_def.type}"
            if field_def.description:
                node["description"] = field_def.description
            properties[key] = node
            if is_non_null_type(field_def.type) or not self.options.optional_nullable_properties:
                required.append(key)

        result: JSONSchema = {"type": "object", "title": object_type.name}
        if self.options.additional_properties is not None:
            result["additionalProperties"] = self.options.additional_properties
        result["properties"] = properties
        result["required"] = required

        refs = []
        if object_type.description:
            refs.append(
                self.definitions.register(
                    "type", object_type.name, {"description": object_type.description}
                )
            )
        for fragment in collected.fragments:
            documentation: JSONSchema = {"title": fragment_title(fragment)}
            if description_of(fragment):
                documentation["description"] = description_of(fragment)
            refs.append(self.definitions.register("fragment", fragment.name.value, documentation))
        return self.definitions.reference(refs, result)

    def document_type(self, named_type, node: JSONSchema) -> JSONSchema:
        if not named_type.description:
            return node
        ref = self.definitions.register(
            "type", named_type.name, {"description": named_type.description}
        )
        return self.definitions.reference([ref], node)


def build_operation_schema(
    schema: GraphQLSchema,
    document: DocumentNode,
    operation: OperationDefinitionNode,
    scalars: ScalarRegistry,
    direction: SchemaDirection,
    options: JSONSchemaOptions,
    *,
    target: str | None = None,
    variable_values: dict[str, Any] | None = None,
) -> JSONSchema:
    """Return the complete JSON schema for the data of one operation."""
    logger.debug("Building %s schema for %s", direction.value, operation_title(operation))
    result = schema_base(target)
    definitions = Definitions(target)
    builder = OutputSchemaBuilder(
        schema, document, scalars, direction, options, definitions, variable_values
    )
    root_type = get_root_type(schema, operation)
    result.update(builder.object_schema(root_type, selection_list(operation.selection_set)))
    result["title"] = operation_title(operation)
    if description_of(operation):
        result["description"] = description_of(operation)
    return with_defs(result, definitions)


def build_fragment_schema(
    schema: GraphQLSchema,
    document: DocumentNode,
    fragment: FragmentDefinitionNode,
    scalars: ScalarRegistry,
    direction: SchemaDirection,
    options: JSONSchemaOptions,
    *,
    target: str | None = None,
    variable_values: dict[str, Any] | None = None,
) -> JSONSchema:
    """Return the complete JSON schema for data shaped by one fragment."""
    logger.debug("Building %s schema for %s", direction.value, fragment_title(fragment))
    result = schema_base(target)
    definitions = Definitions(target)
    builder = OutputSchemaBuilder(
        schema, document, scalars, direction, options, definitions, variable_values
    )
    parent_type = schema.get_type(fragment.type_condition.name.value)
    selections = selection_list(fragment.selection_set)
    if is_object_type(parent_type):
        result.update(builder.object_schema(parent_type, selections))
    elif is_abstract_type(parent_type):
        result.update(builder.abstract_schema(parent_type, selections))
    else:
        raise InvalidDocument(
            "Fragment type condition must be an object, union or interface, "
            f"got: {fragment.type_condition.name.value}"
        )
    result["title"] = fragment_title(fragment)
    if description_of(fragment):
        result["description"] = description_of(fragment)
    return with_defs(result, definitions)
