"""Tests for full response validation schemas."""

from datetime import date

import pytest
from jsonschema import Draft7Validator, Draft202012Validator

from gql_standard_schema.core.errors import InvalidDocument
from gql_standard_schema.core.generator import StandardSchemaGenerator
from gql_standard_schema.core.json_schema import DRAFT_07

QUERY = "query Q { hello person(id: 1) { mood birthday } }"


class TestResponseValidation:
    """Tests for validating response envelopes."""

    def test_valid(self, generator):
        response_schema = generator.get_response_schema(QUERY)
        result = response_schema({"data": {"hello": "hi", "person": None}})
        assert result.value == {"data": {"hello": "hi", "person": None}}

    def test_errors_and_extensions_are_kept(self, generator):
        response = {
            "data": None,
            "errors": [{"message": "Boom", "path": ["hello"]}],
            "extensions": {"cost": 1},
        }
        assert generator.get_response_schema(QUERY)(response).value == response

    def test_missing_data(self, generator):
        result = generator.get_response_schema(QUERY)({"errors": []})
        assert result.value == {"errors": [], "data": None}

    def test_data_issues_are_prefixed(self, generator):
        result = generator.get_response_schema(QUERY)({"data": {"hello": 42, "person": None}})
        assert [issue.path for issue in result.issues] == [["data", "hello"]]

    def test_envelope_issues(self, generator):
        result = generator.get_response_schema(QUERY)(
            {"data": {"hello": None}, "errors": "Boom", "extensions": []}
        )
        assert [issue.path for issue in result.issues] == [
            ["errors"],
            ["extensions"],
            ["data", "hello"],
        ]

    def test_not_an_object(self, generator):
        result = generator.get_response_schema(QUERY)("Boom")
        assert [issue.path for issue in result.issues] == [[]]

    def test_deserialize_and_serialize(self, generator):
        response_schema = generator.get_response_schema(QUERY)
        wire = {"data": {"hello": "hi", "person": {"mood": "SAD", "birthday": "2000-01-01"}}}
        internal = response_schema.deserialize(wire).value
        assert internal["data"]["person"]["birthday"] == date(2000, 1, 1)
        assert response_schema.serialize(internal).value == response_schema.normalize(wire).value

    def test_requires_named_operation(self, generator):
        with pytest.raises(InvalidDocument):
            generator.get_response_schema("{ hello }")


class TestResponseJSONSchema:
    """Tests for the response JSON schema."""

    def test_structure(self, generator):
        json_schema = generator.get_response_schema(QUERY).json_schema()
        assert json_schema["title"] == "Full response for query Q"
        assert set(json_schema["properties"]) == {"data", "errors", "extensions"}
        assert json_schema["required"] == []
        data = json_schema["properties"]["data"]
        assert data["anyOf"][0] == {"type": "null"}
        assert data["anyOf"][1]["title"] == "query Q"
        assert "$schema" not in data["anyOf"][1]
        assert set(json_schema["$defs"]) == {"enum", "scalar"}

    def test_validates_with_jsonschema(self, generator):
        json_schema = generator.get_response_schema(QUERY).json_schema()
        Draft202012Validator.check_schema(json_schema)
        validator = Draft202012Validator(json_schema)
        response = {
            "data": {
                "hello": "hi",
                "person": {"__typename": "Person", "mood": "HAPPY", "birthday": None},
            },
            "errors": None,
            "extensions": None,
        }
        assert validator.is_valid(response)
        assert validator.is_valid({"data": None, "errors": [{"message": "Boom"}], "extensions": None})
        assert not validator.is_valid({**response, "errors": [{"path": ["hello"]}]})
        assert not validator.is_valid({**response, "data": {"hello": 1, "person": None}})

    def test_draft_07(self, generator):
        json_schema = generator.get_response_schema(QUERY).json_schema(target=DRAFT_07)
        Draft7Validator.check_schema(json_schema)
        assert Draft7Validator(json_schema).is_valid(
            {"data": {"hello": "hi", "person": None}, "errors": None, "extensions": None}
        )

    def test_openai_requires_every_member(self, schema):
        generator = StandardSchemaGenerator(schema, json_schema_options="openai")
        json_schema = generator.get_response_schema(QUERY).json_schema()
        assert json_schema["required"] == ["data", "errors", "extensions"]


ENVELOPES = [
    {"data": {"hello": "hi", "person": None}},
    {},
    {"data": None, "errors": None, "extensions": None},
    {"errors": [{"message": "Boom", "locations": [{"line": 1, "column": 2}], "path": ["hello", 0]}]},
    {"errors": [{"message": "Boom", "extensions": {"code": "BAD"}}]},
    {"errors": [{"nope": 1}]},
    {"errors": ["Boom"]},
    {"errors": [{"message": "Boom", "locations": [{"line": 1}]}]},
    {"errors": [{"message": "Boom", "path": [True]}]},
    {"errors": "Boom"},
    {"extensions": []},
    {"data": None, "extra": 1},
    {"data": {"hello": 1, "person": None}},
]


class TestResponseConsistency:
    """The validator and the JSON schema accept the same envelopes."""

    @pytest.mark.parametrize("envelope", ENVELOPES)
    def test_agree(self, generator, envelope):
        response_schema = generator.get_response_schema(QUERY)
        validator = Draft202012Validator(response_schema.json_schema())
        assert response_schema(envelope).is_valid == validator.is_valid(envelope)

    def test_error_item_issues(self, generator):
        result = generator.get_response_schema(QUERY)(
            {"errors": [{"message": "Boom"}, {"nope": 1}, "Boom"], "other": 1}
        )
        assert [issue.path for issue in result.issues] == [
            ["other"],
            ["errors", 1, "message"],
            ["errors", 2],
        ]
