"""Exceptions raised when a schema or validator cannot be built.

These are fatal: they abort the call that raised them. Problems with a
validated *value* are never raised, they are reported as ``Issue`` records.
"""


class StandardSchemaError(Exception):
    """Base class for configuration and document errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SchemaTypeError(StandardSchemaError):
    """The schema input is neither a GraphQLSchema nor a parseable SDL document."""


class UnknownScalar(StandardSchemaError):
    """A custom scalar was reached that has no registered handler."""

    def __init__(self, scalar_name: str):
        self.scalar_name = scalar_name
        super().__init__(
            f"Scalar type {scalar_name} not found in scalar registry. "
            f"Register a handler for it with ScalarRegistry.register()."
        )


class MissingSelection(StandardSchemaError):
    """An object, interface or union field was selected without sub-selections."""


class UnsupportedDialect(StandardSchemaError):
    """A JSON schema dialect other than draft-07 or draft-2020-12 was requested."""


class InvalidDocument(StandardSchemaError):
    """The query or fragment document has the wrong number or kind of definitions."""
