from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from opschema.schema.model import (
    ArrayConstraints,
    Kind,
    NumberConstraints,
    ObjectConstraints,
    Presence,
    SchemaNode,
    StringConstraints,
    as_node,
)


@dataclass(frozen=True)
class ValidationInfo:
    required: bool
    optional: bool
    has_default: bool = False
    default: Any = None
    constraints: dict[str, Any] = field(default_factory=dict)


def validation_info(schema: Any) -> ValidationInfo:
    """Report presence and accumulated constraints of a node.

    An unfinalized node reports as required, matching how the engine treats
    unfinalized children. Constraint keys are JSON-Schema keywords.
    """
    node = as_node(schema)
    optional = node.presence is Presence.OPTIONAL
    return ValidationInfo(
        required=not optional,
        optional=optional,
        has_default=node.has_default,
        default=node.default,
        constraints=_constraint_values(node),
    )


def _constraint_values(node: SchemaNode) -> dict[str, Any]:
    constraints = node.constraints
    values: dict[str, Any] = {}
    if isinstance(constraints, StringConstraints):
        _put(values, "minLength", constraints.min_length)
        _put(values, "maxLength", constraints.max_length)
        _put(values, "pattern", constraints.pattern_source)
        if constraints.format is not None:
            values["format"] = constraints.format.value
        _put(values, "const", constraints.const)
    elif isinstance(constraints, NumberConstraints):
        _put(values, "minimum", constraints.minimum)
        _put(values, "maximum", constraints.maximum)
        _put(values, "exclusiveMinimum", constraints.exclusive_minimum)
        _put(values, "exclusiveMaximum", constraints.exclusive_maximum)
        _put(values, "multipleOf", constraints.multiple_of)
        if constraints.integer:
            values["integer"] = True
        if constraints.positive:
            values["positive"] = True
        if constraints.negative:
            values["negative"] = True
    elif isinstance(constraints, ArrayConstraints):
        _put(values, "minItems", constraints.min_items)
        _put(values, "maxItems", constraints.max_items)
        if constraints.has_contains:
            values["contains"] = constraints.contains
        if constraints.unique_items:
            values["uniqueItems"] = True
    elif isinstance(constraints, ObjectConstraints):
        if constraints.strict:
            values["strict"] = True
        if constraints.partial:
            values["partial"] = True
        _put(values, "minProperties", constraints.min_properties)
        _put(values, "maxProperties", constraints.max_properties)
    if node.kind is Kind.COMPOSITION and node.combinator is not None:
        values["combinator"] = node.combinator.value
    if node.custom is not None:
        values["custom"] = True
    return values


def _put(values: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        values[key] = value
