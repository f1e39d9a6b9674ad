"""Builds the JSON schema for the variables of an operation."""

import logging

from graphql import (
    GraphQLInputObjectType,
    GraphQLInputType,
    GraphQLSchema,
    OperationDefinitionNode,
    is_enum_type,
    is_input_object_type,
    is_list_type,
    is_non_null_type,
    is_scalar_type,
)

from .errors import InvalidDocument
from .json_schema import Definitions, JSONSchema, JSONSchemaOptions, nullable, schema_base, with_defs
from .output_schema import description_of, enum_schema, scalar_schema
from .parser import operation_title
from .results import SchemaDirection
from .scalars import ScalarRegistry
from .variables import variable_type

logger = logging.getLogger(__name__)


class InputSchemaBuilder:
    """Generates JSON schema nodes for input types.

    Input object types are always registered as ``input/Name`` and referenced,
    so self-referencing input types produce a finite schema.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        scalars: ScalarRegistry,
        direction: SchemaDirection = SchemaDirection.SERIALIZED,
        options: JSONSchemaOptions | None = None,
        definitions: Definitions | None = None,
    ):
        self.schema = schema
        self.scalars = scalars
        self.direction = direction
        self.options = options or JSONSchemaOptions()
        self.definitions = definitions or Definitions()

    def generate(self, type_: GraphQLInputType) -> JSONSchema:
        if is_non_null_type(type_):
            inner = type_.of_type
            while is_non_null_type(inner):
                inner = inner.of_type
            return self._generate(inner)
        return nullable(self._generate(type_))

    def _generate(self, type_: GraphQLInputType) -> JSONSchema:
        if is_list_type(type_):
            return {"type": "array", "items": self.generate(type_.of_type)}
        if is_scalar_type(type_):
            return scalar_schema(type_, self.scalars, self.direction, self.definitions)
        if is_enum_type(type_):
            return enum_schema(type_, self.definitions)
        if is_input_object_type(type_):
            return self.input_object_schema(type_)
        raise InvalidDocument(f"{type_} is not an input type")

    def input_object_schema(self, input_type: GraphQLInputObjectType) -> JSONSchema:
        if ("input", input_type.name) in self.definitions:
            return {"$ref": Definitions.ref("input", input_type.name)}
        ref = self.definitions.reserve("input", input_type.name)
        node: JSONSchema = {"type": "object", "title": input_type.name}
        if input_type.description:
            node["description"] = input_type.description
        if self.options.additional_properties is not None:
            node["additionalProperties"] = self.options.additional_properties
        properties = {}
        required = []
        for name, field in input_type.fields.items():
            properties[name] = self.generate(field.type)
            if field.description:
                properties[name] = {**properties[name], "description": field.description}
            if is_non_null_type(field.type) or not self.options.optional_nullable_properties:
                required.append(name)
        node["properties"] = properties
        node["required"] = required
        self.definitions.replace("input", input_type.name, node)
        return {"$ref": ref}


def build_variables_schema(
    schema: GraphQLSchema,
    operation: OperationDefinitionNode,
    scalars: ScalarRegistry,
    direction: SchemaDirection,
    options: JSONSchemaOptions,
    *,
    target: str | None = None,
) -> JSONSchema:
    """Return the JSON schema of the variables object of an operation."""
    logger.debug("Building %s variables schema for %s", direction.value, operation_title(operation))
    result = schema_base(target)
    definitions = Definitions(target)
    builder = InputSchemaBuilder(schema, scalars, direction, options, definitions)
    result["title"] = f"Variables for {operation_title(operation)}"
    if description_of(operation):
        result["description"] = description_of(operation)
    result["type"] = "object"
    if options.additional_properties is not None:
        result["additionalProperties"] = options.additional_properties
    properties = {}
    required = []
    for definition in operation.variable_definitions or ():
        name = definition.variable.name.value
        type_ = variable_type(schema, definition)
        properties[name] = builder.generate(type_)
        if is_non_null_type(type_) or not options.optional_nullable_properties:
            required.append(name)
    result["properties"] = properties
    result["required"] = required
    return with_defs(result, definitions)
