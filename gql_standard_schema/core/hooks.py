"""Document transforms applied before schemas and validators are built.

Provides a protocol for transforms that rewrite a parsed GraphQL document,
plus the built-in transform that selects ``__typename`` everywhere.

Example usage:
    from gql_standard_schema.core.hooks import DocumentTransform

    class StripDeprecatedField(DocumentTransform):
        def transform(self, document):
            ...
            return document
"""

from typing import Protocol, runtime_checkable

from graphql import (
    DocumentNode,
    FieldNode,
    NameNode,
    OperationDefinitionNode,
    SelectionSetNode,
    Visitor,
    visit,
)

TYPENAME = "__typename"


@runtime_checkable
class DocumentTransform(Protocol):
    """Protocol for document transforms.

    A transform receives the parsed document and returns the document that
    schemas and validators are built from. It must not mutate its input.
    """

    def transform(self, document: DocumentNode) -> DocumentNode:
        """Return the (possibly rewritten) document."""
        ...


class _AddTypenameVisitor(Visitor):
    def enter_selection_set(self, node: SelectionSetNode, _key, parent, _path, _ancestors):
        # The root selection set of an operation has no runtime type to report.
        if isinstance(parent, OperationDefinitionNode):
            return None
        if not node.selections:
            return None
        for selection in node.selections:
            if isinstance(selection, FieldNode) and selection.name.value.startswith("__"):
                return None
        typename = FieldNode(
            name=NameNode(value=TYPENAME),
            arguments=(),
            directives=(),
        )
        return SelectionSetNode(selections=(typename, *node.selections), loc=node.loc)


class AddTypenameTransform:
    """Built-in transform that selects ``__typename`` in every nested selection set.

    Selection sets that already select ``__typename`` (or any introspection
    field) are left alone, as is the root selection set of an operation.
    """

    def transform(self, document: DocumentNode) -> DocumentNode:
        return visit(document, _AddTypenameVisitor())


class TransformRunner:
    """Runs a collection of transforms in order."""

    def __init__(self, transforms: list[DocumentTransform] | None = None):
        self.transforms: list[DocumentTransform] = list(transforms or [])

    def add_transform(self, transform: DocumentTransform):
        """Add a document transform."""
        self.transforms.append(transform)

    def run(self, document: DocumentNode) -> DocumentNode:
        """Run all transforms in order."""
        for transform in self.transforms:
            document = transform.transform(document)
        return document


def default_transforms() -> list[DocumentTransform]:
    return [AddTypenameTransform()]
