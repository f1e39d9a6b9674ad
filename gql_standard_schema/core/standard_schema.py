"""Callable validation schemas returned by the generator.

A ``ValidationSchema`` couples one validation direction with the JSON schemas
of what it accepts (``io="input"``) and what it returns (``io="output"``).
A ``BidirectionalValidationSchema`` groups the three directions and behaves
like its ``normalize`` schema when called.
"""

from typing import Any, Callable, Literal

from .json_schema import JSONSchema, JSONSchemaOptions
from .results import Direction, SchemaDirection, ValidationResult

Validate = Callable[[Any], ValidationResult]
BuildSchema = Callable[[SchemaDirection, JSONSchemaOptions, "str | None"], JSONSchema]

# (input, output) representation of each direction.
IO_DIRECTIONS: dict[Direction, tuple[SchemaDirection, SchemaDirection]] = {
    Direction.NORMALIZE: (SchemaDirection.SERIALIZED, SchemaDirection.SERIALIZED),
    Direction.DESERIALIZE: (SchemaDirection.SERIALIZED, SchemaDirection.DESERIALIZED),
    Direction.SERIALIZE: (SchemaDirection.DESERIALIZED, SchemaDirection.SERIALIZED),
}


class ValidationSchema:
    """A validator for one direction plus its input and output JSON schemas."""

    def __init__(
        self,
        direction: Direction,
        validate: Validate,
        build_schema: BuildSchema,
        options: JSONSchemaOptions | None = None,
    ):
        self.direction = direction
        self._validate = validate
        self.build_schema = build_schema
        self.options = options or JSONSchemaOptions()

    def validate(self, value: Any) -> ValidationResult:
        return self._validate(value)

    def __call__(self, value: Any) -> ValidationResult:
        return self._validate(value)

    def json_schema(
        self,
        io: Literal["input", "output"] = "input",
        target: str | None = None,
        **options: Any,
    ) -> JSONSchema:
        """Build the JSON schema of this direction's input or output.

        Keyword options (``optional_nullable_properties``,
        ``additional_properties``) override the generator's defaults for this
        call only.
        """
        input_direction, output_direction = IO_DIRECTIONS[self.direction]
        if io == "input":
            schema_direction = input_direction
        elif io == "output":
            schema_direction = output_direction
        else:
            raise ValueError(f"io must be 'input' or 'output', got {io!r}")
        return self.build_schema(schema_direction, self.options.merged(**options), target)

    def __repr__(self):
        return f"<{type(self).__name__} {self.direction.value}>"


class BidirectionalValidationSchema(ValidationSchema):
    """The ``normalize``, ``deserialize`` and ``serialize`` schemas of one document.

    Calling the object (or ``validate``/``json_schema``) uses ``normalize``.
    """

    def __init__(
        self,
        validate_for: Callable[[Direction], Validate],
        build_schema: BuildSchema,
        options: JSONSchemaOptions | None = None,
    ):
        super().__init__(Direction.NORMALIZE, validate_for(Direction.NORMALIZE), build_schema, options)
        self.normalize = ValidationSchema(
            Direction.NORMALIZE, self._validate, build_schema, options
        )
        self.deserialize = ValidationSchema(
            Direction.DESERIALIZE, validate_for(Direction.DESERIALIZE), build_schema, options
        )
        self.serialize = ValidationSchema(
            Direction.SERIALIZE, validate_for(Direction.SERIALIZE), build_schema, options
        )
