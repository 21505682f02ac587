"""Projection of schema nodes onto OpenAPI 3.1 / JSON Schema 2020-12.

Emission reads the schema only and builds keys in a fixed order, so the same
schema always yields the same fragment.
"""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from opschema.core.info import validation_info
from opschema.errors import SchemaDefinitionError
from opschema.schema.model import (
    ArrayConstraints,
    Combinator,
    Kind,
    NumberConstraints,
    ObjectConstraints,
    Presence,
    SchemaNode,
    StringConstraints,
    as_node,
)

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

VENDOR_EXAMPLES = "x-examples"
VENDOR_CUSTOM = "x-custom-validation"
VENDOR_MESSAGES = "x-error-messages"


def to_openapi(schema: Any, *, vendor_extensions: bool = True) -> dict[str, Any]:
    return _emit(as_node(schema), vendor_extensions)


def to_json_schema(schema: Any, *, vendor_extensions: bool = True) -> dict[str, Any]:
    fragment = to_openapi(schema, vendor_extensions=vendor_extensions)
    return {"$schema": JSON_SCHEMA_DIALECT, **fragment}


def check_fragment(fragment: dict[str, Any]) -> None:
    try:
        Draft202012Validator.check_schema(fragment)
    except SchemaError as exc:
        raise SchemaDefinitionError(f"Emitted schema is not valid JSON Schema: {exc.message}") from exc


def _emit(node: SchemaNode, vendor_extensions: bool) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if node.kind is Kind.STRING:
        out["type"] = "string"
    elif node.kind is Kind.NUMBER:
        integer = isinstance(node.constraints, NumberConstraints) and node.constraints.integer
        out["type"] = "integer" if integer else "number"
    elif node.kind is Kind.BOOLEAN:
        out["type"] = "boolean"
    elif node.kind is Kind.ARRAY:
        out["type"] = "array"
    elif node.kind is Kind.OBJECT:
        out["type"] = "object"

    if node.docs.description is not None:
        out["description"] = node.docs.description

    constraints = node.constraints
    if isinstance(constraints, StringConstraints):
        _emit_string(out, constraints)
    elif isinstance(constraints, NumberConstraints):
        _emit_number(out, constraints)
    elif isinstance(constraints, ArrayConstraints):
        _emit_array(out, node, constraints, vendor_extensions)
    elif isinstance(constraints, ObjectConstraints):
        _emit_object(out, node, constraints, vendor_extensions)

    if node.kind is Kind.COMPOSITION and node.combinator is not None:
        children = [_emit(child, vendor_extensions) for child in node.children]
        if node.combinator is Combinator.NOT:
            out["not"] = children[0]
        else:
            out[node.combinator.value] = children

    if node.presence is Presence.OPTIONAL and node.has_default:
        out["default"] = node.default
    if node.docs.has_example:
        out["example"] = node.docs.example

    if vendor_extensions:
        if node.docs.examples:
            out[VENDOR_EXAMPLES] = {
                name: example.to_dict() for name, example in node.docs.examples.items()
            }
        if node.custom is not None:
            out[VENDOR_CUSTOM] = True
        if node.messages:
            out[VENDOR_MESSAGES] = {rule: node.messages[rule] for rule in sorted(node.messages)}
    return out


def _emit_string(out: dict[str, Any], constraints: StringConstraints) -> None:
    if constraints.format is not None:
        out["format"] = constraints.format.value
    if constraints.const is not None:
        out["const"] = constraints.const
    if constraints.min_length is not None:
        out["minLength"] = constraints.min_length
    if constraints.max_length is not None:
        out["maxLength"] = constraints.max_length
    if constraints.pattern_source is not None:
        out["pattern"] = constraints.pattern_source


def _emit_number(out: dict[str, Any], constraints: NumberConstraints) -> None:
    minimum = constraints.minimum
    maximum = constraints.maximum
    if minimum is None and constraints.positive and constraints.exclusive_minimum is None:
        minimum = 0
    if maximum is None and constraints.negative and constraints.exclusive_maximum is None:
        maximum = 0
    if minimum is not None:
        out["minimum"] = minimum
    if maximum is not None:
        out["maximum"] = maximum
    if constraints.exclusive_minimum is not None:
        out["exclusiveMinimum"] = constraints.exclusive_minimum
    if constraints.exclusive_maximum is not None:
        out["exclusiveMaximum"] = constraints.exclusive_maximum
    if constraints.multiple_of is not None:
        out["multipleOf"] = constraints.multiple_of


def _emit_array(
    out: dict[str, Any],
    node: SchemaNode,
    constraints: ArrayConstraints,
    vendor_extensions: bool,
) -> None:
    if node.element is not None:
        out["items"] = _emit(node.element, vendor_extensions)
    if constraints.min_items is not None:
        out["minItems"] = constraints.min_items
    if constraints.max_items is not None:
        out["maxItems"] = constraints.max_items
    if constraints.unique_items:
        out["uniqueItems"] = True
    if constraints.has_contains:
        out["contains"] = {"const": constraints.contains}


def _emit_object(
    out: dict[str, Any],
    node: SchemaNode,
    constraints: ObjectConstraints,
    vendor_extensions: bool,
) -> None:
    if node.fields:
        out["properties"] = {
            name: _emit(field_node, vendor_extensions) for name, field_node in node.fields.items()
        }
    if not constraints.partial:
        required = [
            name
            for name, field_node in node.fields.items()
            if validation_info(field_node).required
        ]
        if required:
            out["required"] = required
    if constraints.strict:
        out["additionalProperties"] = False
    if constraints.min_properties is not None:
        out["minProperties"] = constraints.min_properties
    if constraints.max_properties is not None:
        out["maxProperties"] = constraints.max_properties
