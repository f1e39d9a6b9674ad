"""JSON schema building blocks: dialects, options and the definitions registry."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from .errors import UnsupportedDialect

DRAFT_2020_12 = "draft-2020-12"
DRAFT_07 = "draft-07"

DIALECTS = {
    DRAFT_2020_12: "https://json-schema.org/draft/2020-12/schema",
    DRAFT_07: "http://json-schema.org/draft-07/schema#",
}

NULL_SCHEMA = {"type": "null"}

JSONSchema = dict[str, Any]


def dialect_uri(target: str | None) -> str:
    """Return the ``$schema`` URI for a dialect name."""
    if target is None:
        target = DRAFT_2020_12
    try:
        return DIALECTS[target]
    except KeyError:
        raise UnsupportedDialect(
            f"Only {DRAFT_07} and {DRAFT_2020_12} are supported, got {target!r}"
        ) from None


def schema_base(target: str | None = None) -> JSONSchema:
    return {"$schema": dialect_uri(target)}


class JSONSchemaOptions(BaseModel):
    """Options that shape generated JSON schemas.

    Attributes:
        optional_nullable_properties: Leave nullable fields out of ``required``
        additional_properties: When set, added to every object node
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    optional_nullable_properties: bool = False
    additional_properties: bool | None = None

    @classmethod
    def openai(cls) -> "JSONSchemaOptions":
        """Strict preset accepted by OpenAI structured outputs."""
        return cls(additional_properties=False, optional_nullable_properties=False)

    @classmethod
    def coerce(
        cls, options: "JSONSchemaOptions | dict[str, Any] | Literal['openai'] | None"
    ) -> "JSONSchemaOptions":
        if options is None:
            return cls()
        if isinstance(options, JSONSchemaOptions):
            return options
        if isinstance(options, str):
            if options.lower() == "openai":
                return cls.openai()
            raise ValueError(f"Unknown JSON schema options preset: {options!r}")
        return cls.model_validate(options)

    def merged(self, **overrides: Any) -> "JSONSchemaOptions":
        """Return a copy with the non-None overrides applied."""
        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        return self.model_validate({**self.model_dump(), **update})


class Definitions:
    """The ``$defs`` registry of one generation pass.

    Keys are ``kind/name`` (``type/Book``, ``enum/Color``, ``scalar/Date``,
    ``input/Filter``, ``fragment/BookParts``). The registry is created per
    generated schema and never shared between passes.
    """

    def __init__(self, target: str | None = None):
        self.target = target or DRAFT_2020_12
        self._entries: dict[str, dict[str, JSONSchema]] = {}

    def __contains__(self, key: tuple[str, str]) -> bool:
        kind, name = key
        return name in self._entries.get(kind, {})

    def register(self, kind: str, name: str, node: JSONSchema) -> str:
        """Store a node unless one is already registered; return its ``$ref``."""
        self._entries.setdefault(kind, {}).setdefault(name, node)
        return self.ref(kind, name)

    def reserve(self, kind: str, name: str) -> str:
        """Claim a key before its node is known (recursive input types)."""
        return self.register(kind, name, {})

    def replace(self, kind: str, name: str, node: JSONSchema):
        self._entries.setdefault(kind, {})[name] = node

    @staticmethod
    def ref(kind: str, name: str) -> str:
        return f"#/$defs/{kind}/{name}"

    def reference(self, refs: list[str], node: JSONSchema | None = None) -> JSONSchema:
        """Attach registry references to a node.

        draft-2020-12 keeps the first reference beside the node's own keywords;
        draft-07 ignores keywords next to ``$ref``, so references go into ``allOf``.
        """
        node = dict(node or {})
        if not refs:
            return node
        if self.target == DRAFT_2020_12 and "$ref" not in node:
            first, *rest = refs
            result = {"$ref": first, **node}
        else:
            rest = refs
            result = node
        if rest:
            result["allOf"] = [*result.get("allOf", []), *({"$ref": ref} for ref in rest)]
        return result

    def to_json(self) -> dict[str, dict[str, JSONSchema]]:
        return {kind: dict(entries) for kind, entries in self._entries.items() if entries}

    def merge(self, other: "Definitions"):
        for kind, entries in other._entries.items():
            for name, node in entries.items():
                self._entries.setdefault(kind, {}).setdefault(name, node)


def nullable(node: JSONSchema) -> JSONSchema:
    """Return a node that additionally accepts ``null``.

    The node itself is left untouched and becomes one alternative of an
    ``anyOf``; a node that already is such an alternative is returned as is.
    """
    if node.get("anyOf") and NULL_SCHEMA in node["anyOf"] and len(node) == 1:
        return node
    return {"anyOf": [dict(NULL_SCHEMA), node]}


def with_defs(schema: JSONSchema, definitions: Definitions) -> JSONSchema:
    defs = definitions.to_json()
    if defs:
        schema["$defs"] = defs
    return schema
