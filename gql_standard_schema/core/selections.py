"""Field collection shared by the schema builders and the validator.

Flattens a selection set against one concrete object type: applicable inline
fragments and fragment spreads are inlined, ``@skip``/``@include`` are
honoured, and fields are grouped by response key in document order.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from graphql import (
    BooleanValueNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLDirective,
    GraphQLIncludeDirective,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLSkipDirective,
    InlineFragmentNode,
    SelectionNode,
    SelectionSetNode,
    VariableNode,
    is_abstract_type,
)

from .errors import InvalidDocument


@dataclass
class CollectedFields:
    """Fields by response key, plus the named fragments that were applied."""
    fields: dict[str, list[FieldNode]] = field(default_factory=dict)
    fragments: list[FragmentDefinitionNode] = field(default_factory=list)


def selection_list(
    selections: SelectionSetNode | Sequence[SelectionNode] | None,
) -> list[SelectionNode]:
    if selections is None:
        return []
    if isinstance(selections, SelectionSetNode):
        return list(selections.selections or ())
    return list(selections)


def response_key(node: FieldNode) -> str:
    return node.alias.value if node.alias else node.name.value


def merge_sub_selections(field_nodes: list[FieldNode]) -> list[SelectionNode] | None:
    """Concatenate the sub-selections of every node sharing one response key.

    Returns None for leaf fields. Mixing leaf and object selections for one
    key, or two different fields under one alias, is rejected.
    """
    first = field_nodes[0]
    with_selections = [node for node in field_nodes if node.selection_set]
    for node in field_nodes[1:]:
        if node.name.value != first.name.value:
            raise InvalidDocument(
                f"Fields {first.name.value} and {node.name.value} conflict "
                f"on response key {response_key(first)}"
            )
    if not with_selections:
        return None
    if len(with_selections) != len(field_nodes):
        raise InvalidDocument(
            f"Incorrect selection for field {first.name.value} "
            f"cannot be a mix of field and sub-selections"
        )
    merged: list[SelectionNode] = []
    for node in with_selections:
        merged.extend(node.selection_set.selections)
    return merged


class FieldCollector:
    """Collects the fields a selection set requests from one object type."""

    def __init__(
        self,
        schema: GraphQLSchema,
        fragments: dict[str, FragmentDefinitionNode],
        variable_values: dict[str, Any] | None = None,
    ):
        self.schema = schema
        self.fragments = fragments
        self.variable_values = variable_values or {}

    def collect(
        self, runtime_type: GraphQLObjectType, selections: Iterable[SelectionNode]
    ) -> CollectedFields:
        collected = CollectedFields()
        self._collect(runtime_type, selections, collected, set())
        return collected

    def _collect(
        self,
        runtime_type: GraphQLObjectType,
        selections: Iterable[SelectionNode],
        collected: CollectedFields,
        visited_fragments: set[str],
    ):
        for selection in selections:
            if not self.should_include_node(selection):
                continue
            if isinstance(selection, FieldNode):
                collected.fields.setdefault(response_key(selection), []).append(selection)
            elif isinstance(selection, InlineFragmentNode):
                if not self.does_fragment_condition_match(selection, runtime_type):
                    continue
                self._collect(
                    runtime_type, selection.selection_set.selections, collected, visited_fragments
                )
            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                if name in visited_fragments:
                    continue
                fragment = self.fragments.get(name)
                if fragment is None:
                    raise InvalidDocument(f"Fragment {name} not found in document")
                visited_fragments.add(name)
                if not self.does_fragment_condition_match(fragment, runtime_type):
                    continue
                collected.fragments.append(fragment)
                self._collect(
                    runtime_type, fragment.selection_set.selections, collected, visited_fragments
                )

    def should_include_node(self, node: SelectionNode) -> bool:
        """Apply ``@skip`` and ``@include``; ``@skip`` wins."""
        if self.directive_condition(GraphQLSkipDirective, node) is True:
            return False
        if self.directive_condition(GraphQLIncludeDirective, node) is False:
            return False
        return True

    def directive_condition(self, directive: GraphQLDirective, node: SelectionNode) -> Any:
        """The ``if`` argument of ``directive`` on ``node``.

        Returns None when the directive is absent or its variable has no value.
        """
        for directive_node in node.directives or ():
            if directive_node.name.value != directive.name:
                continue
            for argument in directive_node.arguments or ():
                if argument.name.value != "if":
                    continue
                if isinstance(argument.value, VariableNode):
                    return self.variable_values.get(argument.value.name.value)
                if isinstance(argument.value, BooleanValueNode):
                    return argument.value.value
                raise InvalidDocument(
                    f"Argument \"if\" of @{directive.name} must be a Boolean or a variable"
                )
        return None

    def does_fragment_condition_match(
        self,
        fragment: InlineFragmentNode | FragmentDefinitionNode,
        runtime_type: GraphQLObjectType,
    ) -> bool:
        """A fragment applies on its exact type or on a supertype of the runtime type."""
        type_condition = fragment.type_condition
        if not type_condition:
            return True
        condition_type = self.schema.get_type(type_condition.name.value)
        if condition_type is None:
            raise InvalidDocument(f"Type {type_condition.name.value} not found in schema")
        if condition_type is runtime_type or condition_type.name == runtime_type.name:
            return True
        if is_abstract_type(condition_type):
            return self.schema.is_sub_type(condition_type, runtime_type)
        return False
