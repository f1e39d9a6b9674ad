"""Core modules for GraphQL JSON schema generation and strict validation."""

from .errors import (
    InvalidDocument,
    MissingSelection,
    SchemaTypeError,
    StandardSchemaError,
    UnknownScalar,
    UnsupportedDialect,
)
from .generator import StandardSchemaGenerator
from .hooks import AddTypenameTransform, DocumentTransform, TransformRunner
from .json_schema import DRAFT_07, DRAFT_2020_12, JSONSchemaOptions
from .parser import SchemaParser, load_schema
from .results import Direction, Issue, SchemaDirection, ValidationResult
from .scalars import (
    DateHandler,
    DateTimeHandler,
    JSONHandler,
    JSONObjectHandler,
    ScalarHandler,
    ScalarRegistry,
    UUIDHandler,
)
from .standard_schema import BidirectionalValidationSchema, ValidationSchema
from .validator import DataValidator
from .variables import fake_variables, parse_variables

__all__ = [
    # Generator
    "StandardSchemaGenerator",
    "BidirectionalValidationSchema",
    "ValidationSchema",
    # Results
    "Direction",
    "Issue",
    "SchemaDirection",
    "ValidationResult",
    # Errors
    "StandardSchemaError",
    "SchemaTypeError",
    "UnknownScalar",
    "MissingSelection",
    "UnsupportedDialect",
    "InvalidDocument",
    # Scalars
    "ScalarHandler",
    "ScalarRegistry",
    "DateTimeHandler",
    "DateHandler",
    "UUIDHandler",
    "JSONHandler",
    "JSONObjectHandler",
    # Transforms
    "DocumentTransform",
    "AddTypenameTransform",
    "TransformRunner",
    # JSON schema options
    "JSONSchemaOptions",
    "DRAFT_07",
    "DRAFT_2020_12",
    # Parser
    "SchemaParser",
    "load_schema",
    # Validation
    "DataValidator",
    "fake_variables",
    "parse_variables",
]
