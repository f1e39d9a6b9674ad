"""Tests for StandardSchemaGenerator configuration and the validation schema objects."""

import pytest
from graphql import parse

from gql_standard_schema.core.errors import InvalidDocument, SchemaTypeError
from gql_standard_schema.core.generator import StandardSchemaGenerator
from gql_standard_schema.core.json_schema import JSONSchemaOptions
from gql_standard_schema.core.results import Direction
from gql_standard_schema.core.scalars import DateHandler, ScalarRegistry
from gql_standard_schema.core.standard_schema import ValidationSchema


class TestConfiguration:
    """Tests for constructing and reconfiguring a generator."""

    def test_accepts_document(self):
        generator = StandardSchemaGenerator(parse("type Query { hello: String! }"))
        assert generator.get_data_schema("{ hello }")({"hello": "x"}).is_valid

    def test_rejects_invalid_schema(self):
        with pytest.raises(SchemaTypeError):
            StandardSchemaGenerator(42)

    def test_replace_schema_keeps_existing_validators(self):
        generator = StandardSchemaGenerator("type Query { value: String! }")
        before = generator.get_data_schema("{ value }")
        generator.replace_schema("type Query { value: Int! }")
        after = generator.get_data_schema("{ value }")
        assert before({"value": "x"}).is_valid
        assert not after({"value": "x"}).is_valid
        assert after({"value": 1}).is_valid
        assert before.json_schema()["properties"]["value"]["type"] == "string"
        assert after.json_schema()["properties"]["value"]["type"] == "integer"

    def test_replace_scalars_keeps_existing_validators(self):
        class DayHandler(DateHandler):
            serialized_json_schema = {"type": "string", "pattern": "^[0-9-]+$"}

        generator = StandardSchemaGenerator("scalar Day type Query { day: Day }", {"Day": DateHandler()})
        before = generator.get_data_schema("{ day }")
        generator.replace_scalars(ScalarRegistry({"Day": DayHandler()}, include_defaults=False))
        after = generator.get_data_schema("{ day }")
        assert "pattern" not in before.json_schema()["$defs"]["scalar"]["Day"]
        assert after.json_schema()["$defs"]["scalar"]["Day"]["pattern"] == "^[0-9-]+$"

    def test_document_must_parse(self, generator):
        with pytest.raises(InvalidDocument):
            generator.get_data_schema("{ hello")

    def test_data_schema_needs_an_operation(self, generator):
        with pytest.raises(InvalidDocument):
            generator.get_data_schema("fragment F on Query { hello }")

    def test_custom_transforms(self, schema):
        class UppercaseAlias:
            def transform(self, document):
                return parse("{ HELLO: hello }")

        generator = StandardSchemaGenerator(schema, document_transforms=[UppercaseAlias()])
        assert generator.get_data_schema("{ hello }")({"HELLO": "x"}).value == {"HELLO": "x"}

    def test_without_transforms(self, schema):
        generator = StandardSchemaGenerator(schema, document_transforms=[])
        data_schema = generator.get_data_schema("{ person(id: 1) { name } }")
        assert data_schema({"person": {"name": "Ann"}}).value == {"person": {"name": "Ann"}}


class TestJSONSchemaOptions:
    """Tests for JSONSchemaOptions."""

    def test_defaults(self):
        options = JSONSchemaOptions()
        assert options.optional_nullable_properties is False
        assert options.additional_properties is None

    def test_openai(self):
        assert JSONSchemaOptions.coerce("openai") == JSONSchemaOptions(
            additional_properties=False, optional_nullable_properties=False
        )

    def test_coerce(self):
        options = JSONSchemaOptions(additional_properties=True)
        assert JSONSchemaOptions.coerce(options) is options
        assert JSONSchemaOptions.coerce({"additional_properties": True}) == options
        assert JSONSchemaOptions.coerce(None) == JSONSchemaOptions()
        with pytest.raises(ValueError):
            JSONSchemaOptions.coerce("strict")

    def test_merged(self):
        options = JSONSchemaOptions.openai()
        assert options.merged() is options
        assert options.merged(additional_properties=None) is options
        assert options.merged(additional_properties=True).additional_properties is True

    def test_unknown_option(self, generator):
        with pytest.raises(ValueError):
            generator.get_data_schema("{ hello }").json_schema(strict=True)

    def test_per_call_override(self, schema):
        generator = StandardSchemaGenerator(
            schema, json_schema_options={"additional_properties": False}
        )
        data_schema = generator.get_data_schema("{ hello }")
        assert data_schema.json_schema()["additionalProperties"] is False
        assert data_schema.json_schema(additional_properties=True)["additionalProperties"] is True


class TestValidationSchema:
    """Tests for the returned validation schema objects."""

    def test_directions(self, generator):
        data_schema = generator.get_data_schema("{ hello }")
        assert isinstance(data_schema.normalize, ValidationSchema)
        assert data_schema.normalize.direction is Direction.NORMALIZE
        assert data_schema.deserialize.direction is Direction.DESERIALIZE
        assert data_schema.serialize.direction is Direction.SERIALIZE

    def test_call_is_normalize(self, generator):
        data_schema = generator.get_data_schema("{ hello }")
        value = {"hello": "x"}
        assert data_schema(value) == data_schema.normalize(value)
        assert data_schema.validate(value) == data_schema.normalize.validate(value)
        assert data_schema.json_schema() == data_schema.normalize.json_schema(io="output")

    def test_invalid_io(self, generator):
        with pytest.raises(ValueError):
            generator.get_data_schema("{ hello }").json_schema(io="both")

    def test_result_to_dict(self, generator):
        data_schema = generator.get_data_schema("{ hello }")
        assert data_schema({"hello": None}).to_dict() == {
            "issues": [
                {"message": "Cannot return null for non-nullable field Query.hello.", "path": ["hello"]}
            ]
        }
