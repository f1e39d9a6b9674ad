"""Generates JSON schemas and strict validators for GraphQL documents.

Example usage:
    from gql_standard_schema.core import StandardSchemaGenerator

    generator = StandardSchemaGenerator(SDL)
    data_schema = generator.get_data_schema("query Hello { hello }")

    result = data_schema({"hello": "world"})
    if result.is_valid:
        print(result.value)

    json_schema = data_schema.json_schema(target="draft-07")
"""

import logging
from functools import partial
from pathlib import Path
from typing import Any, Literal, Sequence

from graphql import DocumentNode, GraphQLSchema, OperationDefinitionNode, VariableDefinitionNode

from .hooks import DocumentTransform, TransformRunner, default_transforms
from .input_schema import build_variables_schema
from .json_schema import JSONSchemaOptions
from .output_schema import build_fragment_schema, build_operation_schema
from .parser import get_fragment, get_named_operation, get_operation, load_schema, parse_document
from .response import build_response_schema, validate_response
from .results import Direction, SchemaDirection
from .scalars import ScalarHandler, ScalarRegistry
from .standard_schema import BidirectionalValidationSchema
from .validator import DataValidator
from .variables import fake_variables, parse_variables

logger = logging.getLogger(__name__)


class StandardSchemaGenerator:
    """Builds validation schemas for operations, fragments, variables and responses.

    Every ``get_*`` call parses and transforms its document and returns a
    ``BidirectionalValidationSchema``. Nothing is cached between calls.

    The schema and the scalar registry are captured when a validation schema
    is created. ``replace_schema`` and ``replace_scalars`` are the only ways
    to change them and only affect validation schemas created afterwards.
    There is no internal locking: callers must not replace configuration
    while a ``get_*`` call is running.
    """

    def __init__(
        self,
        schema: GraphQLSchema | DocumentNode | str | Path,
        scalars: ScalarRegistry | dict[str, ScalarHandler] | None = None,
        *,
        json_schema_options: JSONSchemaOptions | dict[str, Any] | Literal["openai"] | None = None,
        document_transforms: Sequence[DocumentTransform] | None = None,
    ):
        self.replace_schema(schema)
        self.replace_scalars(scalars)
        self.json_schema_options = JSONSchemaOptions.coerce(json_schema_options)
        if document_transforms is None:
            document_transforms = default_transforms()
        self.transforms = TransformRunner(list(document_transforms))

    def replace_schema(self, schema: GraphQLSchema | DocumentNode | str | Path):
        """Use another schema for validation schemas created from now on."""
        self.schema = load_schema(schema)

    def replace_scalars(self, scalars: ScalarRegistry | dict[str, ScalarHandler] | None):
        """Use other scalar handlers for validation schemas created from now on."""
        self.scalars = ScalarRegistry.coerce(scalars)

    def _prepare(self, document: DocumentNode | str) -> DocumentNode:
        return self.transforms.run(parse_document(document))

    def _variable_values(
        self,
        definitions: Sequence[VariableDefinitionNode] | None,
        variables: dict[str, Any] | None,
        schema: GraphQLSchema,
        scalars: ScalarRegistry,
    ) -> dict[str, Any]:
        if variables is not None:
            return dict(variables)
        return fake_variables(definitions or (), schema, scalars)

    def get_data_schema(
        self, document: DocumentNode | str, variables: dict[str, Any] | None = None
    ) -> BidirectionalValidationSchema:
        """Validation schema for the data of the document's single operation.

        ``variables`` decide ``@skip``/``@include``; without them placeholder
        values are used.
        """
        document = self._prepare(document)
        return self._data_schema(document, get_operation(document), variables)

    def _data_schema(
        self,
        document: DocumentNode,
        operation: OperationDefinitionNode,
        variables: dict[str, Any] | None,
    ) -> BidirectionalValidationSchema:
        schema, scalars = self.schema, self.scalars
        variable_values = self._variable_values(
            operation.variable_definitions, variables, schema, scalars
        )

        def validate_for(direction: Direction):
            validator = DataValidator(schema, document, scalars, direction, variable_values)
            return partial(validator.validate_operation, operation=operation)

        def build_schema(direction: SchemaDirection, options: JSONSchemaOptions, target=None):
            return build_operation_schema(
                schema,
                document,
                operation,
                scalars,
                direction,
                options,
                target=target,
                variable_values=variable_values,
            )

        return BidirectionalValidationSchema(validate_for, build_schema, self.json_schema_options)

    def get_fragment_schema(
        self,
        document: DocumentNode | str,
        fragment_name: str | None = None,
        variables: dict[str, Any] | None = None,
    ) -> BidirectionalValidationSchema:
        """Validation schema for data shaped by a fragment.

        The document must only contain fragments; ``fragment_name`` picks one
        when there are several. Values for fragments on interfaces and unions
        must carry a ``__typename``.
        """
        document = parse_document(document)
        # Checks the document shape before transforms run.
        get_fragment(document, fragment_name)
        document = self.transforms.run(document)
        fragment = get_fragment(document, fragment_name)
        schema, scalars = self.schema, self.scalars
        variable_values = self._variable_values(
            fragment.variable_definitions, variables, schema, scalars
        )

        def validate_for(direction: Direction):
            validator = DataValidator(schema, document, scalars, direction, variable_values)
            return partial(validator.validate_fragment, fragment=fragment)

        def build_schema(direction: SchemaDirection, options: JSONSchemaOptions, target=None):
            return build_fragment_schema(
                schema,
                document,
                fragment,
                scalars,
                direction,
                options,
                target=target,
                variable_values=variable_values,
            )

        return BidirectionalValidationSchema(validate_for, build_schema, self.json_schema_options)

    def get_variables_schema(self, document: DocumentNode | str) -> BidirectionalValidationSchema:
        """Validation schema for the variables of the document's single operation."""
        document = self._prepare(document)
        operation = get_operation(document)
        schema, scalars = self.schema, self.scalars

        def validate_for(direction: Direction):
            return partial(
                parse_variables,
                operation=operation,
                schema=schema,
                scalars=scalars,
                direction=direction,
            )

        def build_schema(direction: SchemaDirection, options: JSONSchemaOptions, target=None):
            return build_variables_schema(
                schema, operation, scalars, direction, options, target=target
            )

        return BidirectionalValidationSchema(validate_for, build_schema, self.json_schema_options)

    def get_response_schema(self, document: DocumentNode | str) -> BidirectionalValidationSchema:
        """Validation schema for a full ``{data, errors, extensions}`` response.

        The document must contain exactly one named operation.
        """
        document = self._prepare(document)
        operation = get_named_operation(document)
        data_schema = self._data_schema(document, operation, None)
        data_validators = {
            Direction.NORMALIZE: data_schema.normalize,
            Direction.DESERIALIZE: data_schema.deserialize,
            Direction.SERIALIZE: data_schema.serialize,
        }

        def validate_for(direction: Direction):
            return partial(validate_response, validate_data=data_validators[direction])

        def build_schema(direction: SchemaDirection, options: JSONSchemaOptions, target=None):
            data_json_schema = data_schema.build_schema(direction, options, target)
            return build_response_schema(operation, data_json_schema, options, target=target)

        return BidirectionalValidationSchema(validate_for, build_schema, self.json_schema_options)
