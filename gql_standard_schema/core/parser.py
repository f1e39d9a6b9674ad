"""Schema and document loading using graphql-core.

Turns the supported schema inputs into a ``GraphQLSchema`` and picks the
operation or fragment a validator is built for.
"""

import logging
import os
from pathlib import Path

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLError,
    GraphQLObjectType,
    GraphQLSchema,
    OperationDefinitionNode,
    OperationType,
    build_ast_schema,
    concat_ast,
    parse,
)

from .errors import InvalidDocument, SchemaTypeError

logger = logging.getLogger(__name__)

SCHEMA_FILE_SUFFIXES = (".graphql", ".graphqls")


class SchemaParser:
    """Builds a GraphQLSchema from any supported schema input.

    Accepted inputs:
        - a ``GraphQLSchema`` (used as is)
        - a ``DocumentNode`` holding type definitions
        - an SDL string
        - a ``Path`` to a schema file or a directory of ``.graphql``/``.graphqls`` files
    """

    def __init__(self, source: GraphQLSchema | DocumentNode | str | Path):
        self.source = source

    def parse(self) -> GraphQLSchema:
        """Return the schema described by the source."""
        source = self.source
        if isinstance(source, GraphQLSchema):
            return source
        if isinstance(source, DocumentNode):
            return self._build(source)
        if isinstance(source, Path):
            return self._build(self._parse_files(self._collect_schema_files(source)))
        if isinstance(source, str):
            return self._build(self._parse_sdl(source))
        raise SchemaTypeError(
            "Schema needs to be of type GraphQLSchema, DocumentNode, an SDL string "
            f"or a path to schema files, got {type(source).__name__}"
        )

    @staticmethod
    def _build(document: DocumentNode) -> GraphQLSchema:
        try:
            return build_ast_schema(document)
        except (GraphQLError, TypeError) as exc:
            raise SchemaTypeError(f"Could not build schema: {exc}") from exc

    @staticmethod
    def _parse_sdl(sdl: str) -> DocumentNode:
        try:
            return parse(sdl)
        except GraphQLError as exc:
            raise SchemaTypeError(f"Could not parse schema: {exc.message}") from exc

    @staticmethod
    def _collect_schema_files(path: Path) -> list[str]:
        """Collect all schema files from a file or directory path."""
        files = []
        if path.is_file():
            files.append(str(path))
        elif path.is_dir():
            for root, _, filenames in os.walk(path):
                for filename in filenames:
                    if filename.endswith(SCHEMA_FILE_SUFFIXES):
                        files.append(os.path.join(root, filename))
        if not files:
            raise SchemaTypeError(f"No schema files found at {path}")
        return sorted(files)

    def _parse_files(self, schema_files: list[str]) -> DocumentNode:
        documents = []
        for file_path in schema_files:
            logger.debug("Parsing schema file %s", file_path)
            with open(file_path) as f:
                documents.append(self._parse_sdl(f.read()))
        return concat_ast(documents)


def load_schema(source: GraphQLSchema | DocumentNode | str | Path) -> GraphQLSchema:
    """Shortcut for ``SchemaParser(source).parse()``."""
    return SchemaParser(source).parse()


def parse_document(document: DocumentNode | str) -> DocumentNode:
    """Accept a parsed document or parse a source string."""
    if isinstance(document, DocumentNode):
        return document
    if isinstance(document, str):
        try:
            return parse(document)
        except GraphQLError as exc:
            raise InvalidDocument(f"Could not parse document: {exc.message}") from exc
    raise InvalidDocument(f"Expected a DocumentNode or a string, got {type(document).__name__}")


def get_operation(document: DocumentNode) -> OperationDefinitionNode:
    """Return the single operation of a document."""
    operations = [
        definition
        for definition in document.definitions
        if isinstance(definition, OperationDefinitionNode)
    ]
    if not operations:
        raise InvalidDocument("No operation definitions found in document")
    if len(operations) > 1:
        raise InvalidDocument("Multiple operation definitions found in document")
    return operations[0]


def get_named_operation(document: DocumentNode) -> OperationDefinitionNode:
    """Return the single named operation of a document."""
    operations = [
        definition
        for definition in document.definitions
        if isinstance(definition, OperationDefinitionNode) and definition.name
    ]
    if len(operations) != 1:
        raise InvalidDocument("Document must contain exactly one named operation")
    return operations[0]


def get_fragment(
    document: DocumentNode, fragment_name: str | None = None
) -> FragmentDefinitionNode:
    """Return the fragment of a fragment-only document.

    A name is needed to pick one when the document holds several fragments.
    """
    if not all(isinstance(d, FragmentDefinitionNode) for d in document.definitions):
        raise InvalidDocument("Document must only contain fragment definitions")
    fragments: list[FragmentDefinitionNode] = list(document.definitions)
    if not fragments:
        raise InvalidDocument("No fragments found in document")
    if fragment_name is None:
        if len(fragments) > 1:
            raise InvalidDocument("Multiple fragments found, please specify a fragment_name")
        return fragments[0]
    for fragment in fragments:
        if fragment.name.value == fragment_name:
            return fragment
    raise InvalidDocument(f"Fragment with name {fragment_name} not found in document")


def get_fragments(document: DocumentNode) -> dict[str, FragmentDefinitionNode]:
    """Map fragment names to their definitions."""
    return {
        definition.name.value: definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }


def get_root_type(schema: GraphQLSchema, operation: OperationDefinitionNode) -> GraphQLObjectType:
    """Return the root object type an operation starts from."""
    root_types = {
        OperationType.QUERY: schema.query_type,
        OperationType.MUTATION: schema.mutation_type,
        OperationType.SUBSCRIPTION: schema.subscription_type,
    }
    root_type = root_types.get(operation.operation)
    if root_type is None:
        raise InvalidDocument(
            f"Schema does not have a root type for {operation.operation.value} operations"
        )
    return root_type


def operation_title(operation: OperationDefinitionNode) -> str:
    name = operation.name.value if operation.name else "Anonymous"
    return f"{operation.operation.value} {name}"
