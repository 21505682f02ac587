"""Validation engine.

Each node is checked in the order type -> constraints -> children -> custom.
Constraint checks stop at the first violation; child checks of arrays and
objects collect every failure into one nested error. The engine never writes
to a node: unfinalized children are promoted to required through a per-call
copy, so one schema can be validated from many threads at once.

Custom predicates run on those threads as well and must be thread-safe.
"""

from __future__ import annotations

import math
import numbers
import re
from collections.abc import Mapping, Sequence
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable
from urllib.parse import urlparse

from opschema.errors import (
    SchemaDefinitionError,
    ValidationError,
    new_nested_validation_error,
    new_validation_error,
)
from opschema.rules import (
    ERR_CONST,
    ERR_CONTAINS,
    ERR_CUSTOM,
    ERR_EMAIL,
    ERR_EXCLUSIVE_MAX,
    ERR_EXCLUSIVE_MIN,
    ERR_INTEGER,
    ERR_INVALID_BOOLEAN,
    ERR_INVALID_SHAPE,
    ERR_MAX,
    ERR_MAX_ITEMS,
    ERR_MAX_LENGTH,
    ERR_MAX_PROPERTIES,
    ERR_MIN,
    ERR_MIN_ITEMS,
    ERR_MIN_LENGTH,
    ERR_MIN_PROPERTIES,
    ERR_MISSING_KEY,
    ERR_MULTIPLE_OF,
    ERR_NEGATIVE,
    ERR_PATTERN,
    ERR_POSITIVE,
    ERR_REQUIRED,
    ERR_TYPE,
    ERR_UNIQUE_ITEMS,
    ERR_UNKNOWN_KEY,
    ERR_URL,
)
from opschema.schema.model import (
    Combinator,
    Kind,
    Presence,
    SchemaNode,
    StringFormat,
    as_node,
)

MULTIPLE_OF_EPSILON = 1e-10
MAX_EMAIL_LENGTH = 254

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_URL_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_BOOLEAN_LOOKALIKES = {"true", "false", "True", "False", "TRUE", "FALSE", "0", "1"}

_Handler = Callable[[SchemaNode, Any], "ValidationError | None"]


def validate(schema: Any, value: Any) -> ValidationError | None:
    node = as_node(schema)
    if not node.is_finalized:
        raise SchemaDefinitionError(
            "schema must be finalized with required() or optional() before validation."
        )
    return validate_node(node, value)


def validate_node(node: SchemaNode, value: Any) -> ValidationError | None:
    if node.presence is Presence.UNFINALIZED:
        node = replace(node, presence=Presence.REQUIRED)
    handler = _HANDLERS.get(node.kind)
    if handler is None:
        raise SchemaDefinitionError(f"Unsupported schema kind: {node.kind!r}")
    return handler(node, value)


def is_valid(schema: Any, value: Any) -> bool:
    return validate(schema, value) is None


def _validate_string(node: SchemaNode, value: Any) -> ValidationError | None:
    constraints = node.constraints
    if constraints.pattern_error is not None:
        return _error(node, ERR_PATTERN, constraints.pattern_error, value)
    if value is None:
        return _absent(node, value, _validate_string)
    if not isinstance(value, str):
        return _error(node, ERR_TYPE, "invalid type, expected string", value)
    if value == "" and node.is_optional:
        return _absent(node, value, _validate_string)

    length = len(value)
    if constraints.min_length is not None and length < constraints.min_length:
        return _error(
            node,
            ERR_MIN_LENGTH,
            f"string is too short, minimum length is {constraints.min_length}",
            value,
        )
    if constraints.max_length is not None and length > constraints.max_length:
        return _error(
            node,
            ERR_MAX_LENGTH,
            f"string is too long, maximum length is {constraints.max_length}",
            value,
        )
    if constraints.pattern is not None and constraints.pattern.fullmatch(value) is None:
        return _error(node, ERR_PATTERN, "string does not match required pattern", value)
    if constraints.format is StringFormat.EMAIL and not is_valid_email(value):
        return _error(node, ERR_EMAIL, "invalid email format", value)
    if constraints.format is StringFormat.URI and not is_valid_url(value):
        return _error(node, ERR_URL, "invalid URL format", value)
    if constraints.const is not None and value != constraints.const:
        return _error(node, ERR_CONST, f"string must be exactly {constraints.const!r}", value)
    return _run_custom(node, value, value)


def _validate_number(node: SchemaNode, value: Any) -> ValidationError | None:
    if value is None:
        return _absent(node, value, _validate_number)
    num = to_float(value)
    if num is None:
        return _error(node, ERR_TYPE, "invalid type, expected number", value)

    constraints = node.constraints
    if constraints.integer and not _is_integral(num):
        return _error(node, ERR_INTEGER, "value must be an integer", value)
    # Written as negated comparisons so that NaN fails every bound.
    if constraints.minimum is not None and not num >= constraints.minimum:
        return _error(
            node, ERR_MIN, f"value is too small, minimum is {constraints.minimum:g}", value
        )
    if constraints.maximum is not None and not num <= constraints.maximum:
        return _error(
            node, ERR_MAX, f"value is too large, maximum is {constraints.maximum:g}", value
        )
    if constraints.exclusive_minimum is not None and not num > constraints.exclusive_minimum:
        return _error(
            node,
            ERR_EXCLUSIVE_MIN,
            f"value must be greater than {constraints.exclusive_minimum:g}",
            value,
        )
    if constraints.exclusive_maximum is not None and not num < constraints.exclusive_maximum:
        return _error(
            node,
            ERR_EXCLUSIVE_MAX,
            f"value must be less than {constraints.exclusive_maximum:g}",
            value,
        )
    if constraints.multiple_of is not None and not _is_multiple_of(num, constraints.multiple_of):
        return _error(
            node,
            ERR_MULTIPLE_OF,
            f"value must be a multiple of {constraints.multiple_of:g}",
            value,
        )
    if constraints.positive and not num > 0:
        return _error(node, ERR_POSITIVE, "value must be positive", value)
    if constraints.negative and not num < 0:
        return _error(node, ERR_NEGATIVE, "value must be negative", value)
    return _run_custom(node, num, value)


def _validate_boolean(node: SchemaNode, value: Any) -> ValidationError | None:
    if value is None:
        return _absent(node, value, _validate_boolean)
    if not isinstance(value, bool):
        if _looks_boolean(value):
            return _error(
                node,
                ERR_INVALID_BOOLEAN,
                "invalid boolean, expected true or false without coercion",
                value,
            )
        return _error(node, ERR_TYPE, "invalid type, expected boolean", value)
    return _run_custom(node, value, value)


def _validate_array(node: SchemaNode, value: Any) -> ValidationError | None:
    if value is None:
        return _absent(node, value, _validate_array)
    if not is_sequence(value):
        return _error(node, ERR_TYPE, "invalid type, expected array", value)

    items = list(value)
    constraints = node.constraints
    if constraints.min_items is not None and len(items) < constraints.min_items:
        return _error(
            node,
            ERR_MIN_ITEMS,
            f"array has too few items, minimum is {constraints.min_items}",
            items,
        )
    if constraints.max_items is not None and len(items) > constraints.max_items:
        return _error(
            node,
            ERR_MAX_ITEMS,
            f"array has too many items, maximum is {constraints.max_items}",
            items,
        )

    if node.element is not None:
        details: list[ValidationError] = []
        for index, item in enumerate(items):
            error = validate_node(node.element, item)
            if error is not None:
                details.append(error.at(f"[{index}]"))
        if details:
            return new_nested_validation_error(
                "",
                items,
                node.message(ERR_INVALID_SHAPE, "array contains invalid items"),
                details,
            )

    if constraints.has_contains and not any(deep_equal(item, constraints.contains) for item in items):
        return _error(
            node,
            ERR_CONTAINS,
            f"array must contain value: {constraints.contains!r}",
            items,
        )
    if constraints.unique_items:
        seen: set[str] = set()
        for index, item in enumerate(items):
            key = unique_key(item)
            if key in seen:
                return new_validation_error(
                    f"[{index}]",
                    item,
                    node.message(
                        ERR_UNIQUE_ITEMS,
                        f"array items must be unique, duplicate found at index {index}",
                    ),
                    rule=ERR_UNIQUE_ITEMS,
                )
            seen.add(key)
    return _run_custom(node, items, items)


def _validate_object(node: SchemaNode, value: Any) -> ValidationError | None:
    if value is None:
        return _absent(node, value, _validate_object)
    if not isinstance(value, Mapping):
        return _error(node, ERR_TYPE, "invalid type, expected object", value)

    constraints = node.constraints
    count = len(value)
    if constraints.min_properties is not None and count < constraints.min_properties:
        return _error(
            node,
            ERR_MIN_PROPERTIES,
            f"object has too few properties, minimum is {constraints.min_properties}",
            value,
        )
    if constraints.max_properties is not None and count > constraints.max_properties:
        return _error(
            node,
            ERR_MAX_PROPERTIES,
            f"object has too many properties, maximum is {constraints.max_properties}",
            value,
        )
    if constraints.strict:
        for key in value:
            if key not in node.fields:
                return new_validation_error(
                    str(key),
                    value[key],
                    node.message(ERR_UNKNOWN_KEY, f"unknown key: {key}"),
                    rule=ERR_UNKNOWN_KEY,
                )

    details: list[ValidationError] = []
    for name, field_node in node.fields.items():
        present = name in value
        field_value = value[name] if present else None
        if constraints.partial and field_value is None:
            continue
        if not present and field_node.presence is not Presence.OPTIONAL:
            details.append(
                new_validation_error(
                    name,
                    None,
                    node.message(ERR_MISSING_KEY, f"missing required field: {name}"),
                    rule=ERR_MISSING_KEY,
                )
            )
            continue
        error = validate_node(field_node, field_value)
        if error is not None:
            details.append(error.at(name))
    if details:
        return new_nested_validation_error(
            "",
            value,
            node.message(ERR_INVALID_SHAPE, "object validation failed"),
            details,
        )
    return _run_custom(node, dict(value), value)


def _validate_composition(node: SchemaNode, value: Any) -> ValidationError | None:
    if value is None:
        return _absent(node, value, _validate_composition)

    combinator = node.combinator
    if combinator is Combinator.NOT:
        if len(node.children) != 1:
            raise SchemaDefinitionError("not schema must have exactly one schema.")
        if validate_node(node.children[0], value) is None:
            return _error(
                node,
                ERR_INVALID_SHAPE,
                "data matches the not schema (should not match)",
                value,
            )
    elif combinator is Combinator.ANY_OF:
        if not any(validate_node(child, value) is None for child in node.children):
            return _error(node, ERR_INVALID_SHAPE, "data does not match any schema", value)
    elif combinator is Combinator.ONE_OF:
        matches = sum(1 for child in node.children if validate_node(child, value) is None)
        if matches == 0:
            return _error(node, ERR_INVALID_SHAPE, "data does not match any schema", value)
        if matches > 1:
            return _error(
                node,
                ERR_INVALID_SHAPE,
                f"data matches {matches} schemas, expected exactly 1",
                value,
            )
    elif combinator is Combinator.ALL_OF:
        failures = [
            error
            for error in (validate_node(child, value) for child in node.children)
            if error is not None
        ]
        if failures:
            return new_nested_validation_error(
                "",
                value,
                node.message(
                    ERR_INVALID_SHAPE,
                    f"data does not match all schemas ({len(failures)} failures)",
                ),
                failures,
            )
    else:
        raise SchemaDefinitionError(f"unknown composition type: {combinator!r}")
    return _run_custom(node, value, value)


_HANDLERS: dict[Kind, _Handler] = {
    Kind.STRING: _validate_string,
    Kind.NUMBER: _validate_number,
    Kind.BOOLEAN: _validate_boolean,
    Kind.ARRAY: _validate_array,
    Kind.OBJECT: _validate_object,
    Kind.COMPOSITION: _validate_composition,
}


def _absent(node: SchemaNode, value: Any, handler: _Handler) -> ValidationError | None:
    if node.is_required:
        return _error(node, ERR_REQUIRED, "field is required", value)
    if node.has_default:
        # The default is checked against a copy without a default, so an
        # absent-looking default cannot recurse.
        return handler(replace(node, default=None, has_default=False), node.default)
    return None


def _error(node: SchemaNode, rule: str, message: str, value: Any) -> ValidationError:
    return new_validation_error("", value, node.message(rule, message), rule=rule)


def _run_custom(node: SchemaNode, typed: Any, value: Any) -> ValidationError | None:
    if node.custom is None:
        return None
    try:
        outcome = node.custom(typed)
    except Exception as exc:  # noqa: BLE001
        message = str(exc) or type(exc).__name__
        return _error(node, ERR_CUSTOM, message, value)
    if outcome is None or outcome is True:
        return None
    if isinstance(outcome, ValidationError):
        return outcome
    if outcome is False:
        return _error(node, ERR_CUSTOM, "custom validation failed", value)
    message = str(outcome) or "custom validation failed"
    return _error(node, ERR_CUSTOM, message, value)


def to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (numbers.Real, Decimal)):
        return None
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return None


def _is_integral(num: float) -> bool:
    if math.isinf(num):
        return True
    if math.isnan(num):
        return False
    return num == math.trunc(num)


def _is_multiple_of(num: float, divisor: float) -> bool:
    if not math.isfinite(num):
        return False
    remainder = abs(math.fmod(num, divisor))
    return remainder <= MULTIPLE_OF_EPSILON or abs(divisor) - remainder <= MULTIPLE_OF_EPSILON


def _looks_boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value in _BOOLEAN_LOOKALIKES
    if isinstance(value, int):
        return value in (0, 1)
    return False


def is_valid_email(text: str) -> bool:
    return len(text) <= MAX_EMAIL_LENGTH and _EMAIL_RE.fullmatch(text) is not None


def is_valid_url(text: str) -> bool:
    # urlparse silently strips tabs and newlines, so control characters are
    # rejected before parsing.
    if _URL_CONTROL_RE.search(text):
        return False
    try:
        parsed = urlparse(text)
        host = parsed.hostname
    except ValueError:
        return False
    if any(ch.isspace() for ch in parsed.netloc):
        return False
    return bool(parsed.scheme) and bool(host)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def deep_equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, Mapping) or isinstance(right, Mapping):
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return False
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)
    if is_sequence(left) or is_sequence(right):
        if not (is_sequence(left) and is_sequence(right)):
            return False
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))
    return left == right


def unique_key(item: Any) -> str:
    return f"{_type_tag(item)}:{_canonical_text(item)}"


def _type_tag(item: Any) -> str:
    if item is None:
        return "null"
    if isinstance(item, bool):
        return "boolean"
    if isinstance(item, int):
        return "integer"
    if isinstance(item, (numbers.Real, Decimal)):
        return "number"
    if isinstance(item, str):
        return "string"
    if isinstance(item, Mapping):
        return "object"
    if is_sequence(item):
        return "array"
    return type(item).__name__


def _canonical_text(item: Any) -> str:
    # Keys are compared by their own tagged key, so mixed key types order fine.
    if isinstance(item, Mapping):
        pairs = sorted((unique_key(key), unique_key(value)) for key, value in item.items())
        return "{" + ",".join(f"{key}={value}" for key, value in pairs) + "}"
    if is_sequence(item):
        return "[" + ",".join(unique_key(element) for element in item) + "]"
    return repr(item)
