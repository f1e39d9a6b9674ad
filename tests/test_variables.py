"""Tests for variables: placeholders, parsing and JSON schema."""

from datetime import date

import pytest
from graphql import parse
from jsonschema import Draft202012Validator

from gql_standard_schema.core.errors import InvalidDocument
from gql_standard_schema.core.generator import StandardSchemaGenerator
from gql_standard_schema.core.parser import get_operation
from gql_standard_schema.core.scalars import ScalarRegistry
from gql_standard_schema.core.variables import fake_variables

QUERY = """
query People($filter: PersonFilter, $first: Int!, $ids: [ID!], $since: Date) {
  people(filter: $filter, first: $first) { id }
}
"""


class TestFakeVariables:
    """Tests for placeholder variable values."""

    def test_placeholders(self, schema):
        operation = get_operation(
            parse(
                """
                query Q(
                  $id: ID!
                  $first: Int! = 5
                  $name: String
                  $ids: [ID!]!
                  $mood: Mood!
                  $since: Date!
                  $ratio: Float!
                  $flag: Boolean!
                  $text: String!
                  $filter: PersonFilter!
                ) { hello }
                """
            )
        )
        assert fake_variables(operation.variable_definitions, schema, ScalarRegistry()) == {
            "id": "0",
            "first": 5,
            "name": None,
            "ids": [],
            "mood": "HAPPY",
            "since": "1970-01-01",
            "ratio": 0.0,
            "flag": False,
            "text": "",
            "filter": {"name": None, "mood": None, "bornAfter": None, "and": None},
        }

    def test_scalar_without_default_value(self):
        class MoneyHandler:
            serialized_json_schema = {"type": "string"}
            deserialized_json_schema = {"type": "string"}

            def serialize(self, value):
                return value

            def deserialize(self, value):
                return value

        generator = StandardSchemaGenerator(
            "scalar Money type Query { price(min: Money): Money }",
            {"Money": MoneyHandler()},
        )
        with pytest.raises(InvalidDocument, match="default_value"):
            generator.get_data_schema("query Q($min: Money!) { price(min: $min) }")
        assert generator.get_data_schema("query Q($min: Money) { price(min: $min) }")


class TestParseVariables:
    """Tests for variables validation."""

    def test_normalize(self, generator):
        variables_schema = generator.get_variables_schema(QUERY)
        result = variables_schema({"first": 10, "ids": ["1", "2"], "since": "2020-01-01"})
        assert result.value == {"first": 10, "ids": ["1", "2"], "since": "2020-01-01"}

    def test_explicit_null_is_kept(self, generator):
        result = generator.get_variables_schema(QUERY)({"first": 1, "filter": None})
        assert result.value == {"first": 1, "filter": None}

    def test_missing_non_null(self, generator):
        result = generator.get_variables_schema(QUERY)({})
        assert [issue.to_dict() for issue in result.issues] == [
            {"message": "Expected value to be non-null.", "path": ["first"]}
        ]

    def test_list_items(self, generator):
        result = generator.get_variables_schema(QUERY)({"first": 1, "ids": ["1", None, 3]})
        assert [issue.path for issue in result.issues] == [["ids", 1], ["ids", 2]]

    def test_list_must_be_a_list(self, generator):
        result = generator.get_variables_schema(QUERY)({"first": 1, "ids": "1"})
        assert [issue.path for issue in result.issues] == [["ids"]]

    def test_input_objects(self, generator):
        variables_schema = generator.get_variables_schema(QUERY)
        result = variables_schema(
            {"first": 1, "filter": {"name": "Ann", "and": [{"mood": "SAD"}, {"mood": "ANGRY"}]}}
        )
        assert [issue.path for issue in result.issues] == [["filter", "and", 1, "mood"]]

        result = variables_schema({"first": 1, "filter": {"name": "Ann", "unknown": 1}})
        assert result.value == {"first": 1, "filter": {"name": "Ann"}}

    def test_input_object_must_be_a_mapping(self, generator):
        result = generator.get_variables_schema(QUERY)({"first": 1, "filter": ["Ann"]})
        assert [issue.path for issue in result.issues] == [["filter"]]

    def test_variables_must_be_a_mapping(self, generator):
        result = generator.get_variables_schema(QUERY)(None)
        assert [issue.path for issue in result.issues] == [[]]

    def test_deserialize(self, generator):
        variables_schema = generator.get_variables_schema(QUERY)
        result = variables_schema.deserialize(
            {"first": 1, "since": "2020-01-01", "filter": {"bornAfter": "1990-05-01"}}
        )
        assert result.value["since"] == date(2020, 1, 1)
        assert result.value["filter"]["bornAfter"] == date(1990, 5, 1)

    def test_serialize(self, generator):
        variables_schema = generator.get_variables_schema(QUERY)
        result = variables_schema.serialize({"first": 1, "since": date(2020, 1, 1)})
        assert result.value == {"first": 1, "since": "2020-01-01"}
        assert not variables_schema.serialize({"first": 1, "since": "2020-01-01"}).is_valid


class TestVariablesJSONSchema:
    """Tests for the variables JSON schema."""

    def test_structure(self, generator):
        json_schema = generator.get_variables_schema(QUERY).json_schema()
        assert json_schema["title"] == "Variables for query People"
        assert json_schema["type"] == "object"
        assert json_schema["required"] == ["filter", "first", "ids", "since"]
        assert json_schema["properties"]["first"] == {"type": "integer"}
        assert json_schema["properties"]["ids"] == {
            "anyOf": [{"type": "null"}, {"type": "array", "items": {"type": "string"}}]
        }

    def test_optional_nullable_properties(self, generator):
        json_schema = generator.get_variables_schema(QUERY).json_schema(
            optional_nullable_properties=True
        )
        assert json_schema["required"] == ["first"]

    def test_recursive_input_type(self, generator):
        json_schema = generator.get_variables_schema(QUERY).json_schema()
        person_filter = json_schema["$defs"]["input"]["PersonFilter"]
        assert person_filter["title"] == "PersonFilter"
        assert person_filter["properties"]["and"] == {
            "anyOf": [
                {"type": "null"},
                {"type": "array", "items": {"$ref": "#/$defs/input/PersonFilter"}},
            ]
        }
        assert json_schema["properties"]["filter"] == {
            "anyOf": [{"type": "null"}, {"$ref": "#/$defs/input/PersonFilter"}]
        }

    def test_validates_with_jsonschema(self, generator):
        json_schema = generator.get_variables_schema(QUERY).json_schema()
        Draft202012Validator.check_schema(json_schema)
        validator = Draft202012Validator(json_schema)
        filter_value = {"name": None, "mood": "SAD", "bornAfter": None, "and": None}
        assert validator.is_valid(
            {
                "filter": {**filter_value, "and": [filter_value]},
                "first": 1,
                "ids": None,
                "since": "2020-01-01",
            }
        )
        assert not validator.is_valid({"filter": None, "first": "1", "ids": None, "since": None})

    def test_deserialized_output(self, generator):
        json_schema = generator.get_variables_schema(QUERY).deserialize.json_schema(io="output")
        assert json_schema["$defs"]["scalar"]["Date"]["description"] == "A datetime.date instance"
