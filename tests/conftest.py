"""Shared schemas and fixtures."""

import pytest

from gql_standard_schema.core.generator import StandardSchemaGenerator
from gql_standard_schema.core.parser import load_schema

SCHEMA_SDL = '''
scalar Date

"Something that can be looked up by id"
interface Node {
  id: ID!
}

enum Mood {
  HAPPY
  SAD
}

"A color somebody likes"
type Color {
  name: String!
  hex: String!
}

type Book {
  title: String!
  author: String!
  published: Date
}

union Favourite = Color | Book

type Person implements Node {
  id: ID!
  "Full name"
  name: String!
  bestFriend: Person
  friends: [Person]
  nicknames: [String!]
  tags: [String]
  mood: Mood
  birthday: Date
  favourite: Favourite
  age: Int
  height: Float
  active: Boolean
}

type Robot implements Node {
  id: ID!
  model: String!
}

input PersonFilter {
  name: String
  mood: Mood
  bornAfter: Date
  and: [PersonFilter!]
}

type Query {
  hello: String!
  count: Int
  person(id: ID!): Person
  node(id: ID!): Node
  people(filter: PersonFilter, first: Int!): [Person!]!
}

type Mutation {
  rename(id: ID!, name: String!): Person
}
'''


@pytest.fixture
def schema():
    return load_schema(SCHEMA_SDL)


@pytest.fixture
def generator(schema):
    return StandardSchemaGenerator(schema)
