"""Fluent type-state builders.

Every kind comes in three classes: the unfinalized entry point (``String``),
its required form (``RequiredString``) and its optional form
(``OptionalString``). Only the unfinalized form offers ``required()`` and
``optional()``, only the optional form offers ``default()``, and only the two
finalized forms offer ``validate()``. Builders are immutable values: every
setter returns a new builder of the same state carrying the accumulated
configuration, so a builder may be reused and shared between threads.
"""

from __future__ import annotations

import math
import re
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

from opschema.core import engine, info
from opschema.errors import SchemaDefinitionError, ValidationError
from opschema.openapi import emitter
from opschema.rules import (
    ERR_CONTAINS,
    ERR_EMAIL,
    ERR_INTEGER,
    ERR_MAX,
    ERR_MAX_ITEMS,
    ERR_MAX_LENGTH,
    ERR_MIN,
    ERR_MIN_ITEMS,
    ERR_MIN_LENGTH,
    ERR_NEGATIVE,
    ERR_PATTERN,
    ERR_POSITIVE,
    ERR_REQUIRED,
    ERR_URL,
)
from opschema.schema.model import (
    ArrayConstraints,
    Combinator,
    CustomPredicate,
    ExampleObject,
    Kind,
    NumberConstraints,
    ObjectConstraints,
    Presence,
    SchemaNode,
    StringConstraints,
    StringFormat,
    as_node,
)

_B = TypeVar("_B", bound="SchemaBuilder")


class SchemaBuilder:
    __slots__ = ("_node",)

    _node: SchemaNode

    @classmethod
    def _from_node(cls: type[_B], node: SchemaNode) -> _B:
        builder = cls.__new__(cls)
        builder._node = node
        return builder

    @property
    def node(self) -> SchemaNode:
        return self._node

    @property
    def presence(self) -> Presence:
        return self._node.presence

    def _evolve(self: _B, **changes: Any) -> _B:
        return type(self)._from_node(replace(self._node, **changes))

    def _constrain(self: _B, **changes: Any) -> _B:
        return self._evolve(constraints=replace(self._node.constraints, **changes))

    def custom(self: _B, fn: CustomPredicate) -> _B:
        if not callable(fn):
            raise SchemaDefinitionError("custom validator must be callable.")
        return self._evolve(custom=fn)

    def with_message(self: _B, rule: str, message: str) -> _B:
        messages = dict(self._node.messages)
        messages[rule] = message
        return self._evolve(messages=MappingProxyType(messages))

    def description(self: _B, text: str) -> _B:
        if not isinstance(text, str):
            raise SchemaDefinitionError("description must be a string.")
        return self._evolve(docs=replace(self._node.docs, description=text))

    def example(self: _B, value: Any) -> _B:
        return self._evolve(docs=replace(self._node.docs, example=value, has_example=True))

    def examples(self: _B, examples: Mapping[str, ExampleObject | Mapping[str, Any]]) -> _B:
        if not isinstance(examples, Mapping):
            raise SchemaDefinitionError("examples must be a mapping of name to example.")
        merged = dict(self._node.docs.examples)
        for name, item in examples.items():
            merged[name] = _coerce_example(name, item)
        return self._evolve(docs=replace(self._node.docs, examples=MappingProxyType(merged)))

    def example_from_file(self: _B, path: str) -> _B:
        if not isinstance(path, str) or not path.strip():
            raise SchemaDefinitionError("example file path must be a non-empty string.")
        return self.examples({"external": ExampleObject(external_value=path.strip())})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self._node.kind.value}, presence={self._node.presence.value})"


class _Unfinalized(SchemaBuilder):
    __slots__ = ()

    _required_cls: type[SchemaBuilder]
    _optional_cls: type[SchemaBuilder]

    def required(self) -> Any:
        return self._required_cls._from_node(replace(self._node, presence=Presence.REQUIRED))

    def optional(self) -> Any:
        return self._optional_cls._from_node(replace(self._node, presence=Presence.OPTIONAL))


class _Finalized(SchemaBuilder):
    __slots__ = ()

    def validate(self, value: Any) -> ValidationError | None:
        return engine.validate(self._node, value)

    def is_valid(self, value: Any) -> bool:
        return engine.validate(self._node, value) is None

    def to_openapi(self) -> dict[str, Any]:
        return emitter.to_openapi(self._node)

    def validation_info(self) -> info.ValidationInfo:
        return info.validation_info(self._node)


class _RequiredState(_Finalized):
    __slots__ = ()

    def with_required_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_REQUIRED, message)


class _OptionalState(_Finalized):
    __slots__ = ()

    def default(self: _B, value: Any) -> _B:
        if self._node.has_default:
            raise SchemaDefinitionError("default value is already set for this schema.")
        if value is None:
            raise SchemaDefinitionError("default value must not be None.")
        return self._evolve(default=value, has_default=True)


# string


class _StringOps(SchemaBuilder):
    __slots__ = ()

    def min(self: _B, length: int) -> _B:
        return self._constrain(min_length=_non_negative_int(length, "min length"))

    def max(self: _B, length: int) -> _B:
        return self._constrain(max_length=_non_negative_int(length, "max length"))

    def pattern(self: _B, pattern: str) -> _B:
        if not isinstance(pattern, str):
            raise SchemaDefinitionError("pattern must be a string.")
        try:
            compiled = re.compile(pattern)
        except re.error as exc:
            return self._constrain(
                pattern_source=pattern,
                pattern=None,
                pattern_error=f"invalid regex pattern: {exc}",
            )
        return self._constrain(pattern_source=pattern, pattern=compiled, pattern_error=None)

    def email(self: _B) -> _B:
        return self._constrain(format=StringFormat.EMAIL)

    def url(self: _B) -> _B:
        return self._constrain(format=StringFormat.URI)

    def const(self: _B, value: str) -> _B:
        if not isinstance(value, str):
            raise SchemaDefinitionError("const value must be a string.")
        return self._constrain(const=value)

    def with_min_length_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_MIN_LENGTH, message)

    def with_max_length_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_MAX_LENGTH, message)

    def with_pattern_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_PATTERN, message)

    def with_email_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_EMAIL, message)

    def with_url_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_URL, message)


class String(_StringOps, _Unfinalized):
    __slots__ = ()

    def __init__(self) -> None:
        self._node = SchemaNode(kind=Kind.STRING, constraints=StringConstraints())

    def required(self) -> RequiredString:
        return super().required()

    def optional(self) -> OptionalString:
        return super().optional()


class RequiredString(_StringOps, _RequiredState):
    __slots__ = ()


class OptionalString(_StringOps, _OptionalState):
    __slots__ = ()


String._required_cls = RequiredString
String._optional_cls = OptionalString


# number


class _NumberOps(SchemaBuilder):
    __slots__ = ()

    def min(self: _B, value: float) -> _B:
        return self._constrain(minimum=_number(value, "min"))

    def max(self: _B, value: float) -> _B:
        return self._constrain(maximum=_number(value, "max"))

    def exclusive_min(self: _B, value: float) -> _B:
        return self._constrain(exclusive_minimum=_number(value, "exclusive min"))

    def exclusive_max(self: _B, value: float) -> _B:
        return self._constrain(exclusive_maximum=_number(value, "exclusive max"))

    def multiple_of(self: _B, value: float) -> _B:
        value = _number(value, "multiple of")
        if not value > 0 or math.isinf(value):
            raise SchemaDefinitionError("multiple of must be a finite number greater than zero.")
        return self._constrain(multiple_of=value)

    def integer(self: _B) -> _B:
        return self._constrain(integer=True)

    def positive(self: _B) -> _B:
        return self._constrain(positive=True)

    def negative(self: _B) -> _B:
        return self._constrain(negative=True)

    def with_min_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_MIN, message)

    def with_max_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_MAX, message)

    def with_integer_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_INTEGER, message)

    def with_positive_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_POSITIVE, message)

    def with_negative_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_NEGATIVE, message)


class Number(_NumberOps, _Unfinalized):
    __slots__ = ()

    def __init__(self) -> None:
        self._node = SchemaNode(kind=Kind.NUMBER, constraints=NumberConstraints())

    def required(self) -> RequiredNumber:
        return super().required()

    def optional(self) -> OptionalNumber:
        return super().optional()


class RequiredNumber(_NumberOps, _RequiredState):
    __slots__ = ()


class OptionalNumber(_NumberOps, _OptionalState):
    __slots__ = ()


Number._required_cls = RequiredNumber
Number._optional_cls = OptionalNumber


# boolean


class Bool(_Unfinalized):
    __slots__ = ()

    def __init__(self) -> None:
        self._node = SchemaNode(kind=Kind.BOOLEAN)

    def required(self) -> RequiredBool:
        return super().required()

    def optional(self) -> OptionalBool:
        return super().optional()


class RequiredBool(_RequiredState):
    __slots__ = ()


class OptionalBool(_OptionalState):
    __slots__ = ()


Bool._required_cls = RequiredBool
Bool._optional_cls = OptionalBool


# array


class _ArrayOps(SchemaBuilder):
    __slots__ = ()

    def min_items(self: _B, count: int) -> _B:
        return self._constrain(min_items=_non_negative_int(count, "min items"))

    def max_items(self: _B, count: int) -> _B:
        return self._constrain(max_items=_non_negative_int(count, "max items"))

    def contains(self: _B, value: Any) -> _B:
        return self._constrain(contains=value, has_contains=True)

    def unique_items(self: _B) -> _B:
        return self._constrain(unique_items=True)

    def with_min_items_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_MIN_ITEMS, message)

    def with_max_items_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_MAX_ITEMS, message)

    def with_contains_message(self: _B, message: str) -> _B:
        return self.with_message(ERR_CONTAINS, message)


class Array(_ArrayOps, _Unfinalized):
    __slots__ = ()

    def __init__(self, element: Any = None) -> None:
        element_node = None
        if element is not None:
            element_node = _child_node(element, "array element")
        self._node = SchemaNode(
            kind=Kind.ARRAY,
            constraints=ArrayConstraints(),
            element=element_node,
        )

    def required(self) -> RequiredArray:
        return super().required()

    def optional(self) -> OptionalArray:
        return super().optional()


class RequiredArray(_ArrayOps, _RequiredState):
    __slots__ = ()


class OptionalArray(_ArrayOps, _OptionalState):
    __slots__ = ()


Array._required_cls = RequiredArray
Array._optional_cls = OptionalArray


# object


class _ObjectOps(SchemaBuilder):
    __slots__ = ()

    def strict(self: _B) -> _B:
        return self._constrain(strict=True)

    def partial(self: _B) -> _B:
        return self._constrain(partial=True)

    def min_properties(self: _B, count: int) -> _B:
        return self._constrain(min_properties=_non_negative_int(count, "min properties"))

    def max_properties(self: _B, count: int) -> _B:
        return self._constrain(max_properties=_non_negative_int(count, "max properties"))


class Object(_ObjectOps, _Unfinalized):
    __slots__ = ()

    def __init__(self, fields: Mapping[str, Any] | None = None) -> None:
        if fields is None:
            fields = {}
        if not isinstance(fields, Mapping):
            raise SchemaDefinitionError("object fields must be a mapping of name to schema.")
        nodes: dict[str, SchemaNode] = {}
        for name, schema in fields.items():
            if not isinstance(name, str) or not name:
                raise SchemaDefinitionError("object field names must be non-empty strings.")
            nodes[name] = _child_node(schema, f"field '{name}'")
        self._node = SchemaNode(
            kind=Kind.OBJECT,
            constraints=ObjectConstraints(),
            fields=MappingProxyType(nodes),
        )

    def required(self) -> RequiredObject:
        return super().required()

    def optional(self) -> OptionalObject:
        return super().optional()


class RequiredObject(_ObjectOps, _RequiredState):
    __slots__ = ()


class OptionalObject(_ObjectOps, _OptionalState):
    __slots__ = ()


Object._required_cls = RequiredObject
Object._optional_cls = OptionalObject


# composition


class Composition(_Unfinalized):
    __slots__ = ()

    def __init__(self, combinator: Combinator, *schemas: Any) -> None:
        if combinator is Combinator.NOT and len(schemas) != 1:
            raise SchemaDefinitionError("not schema must have exactly one schema.")
        if not schemas:
            raise SchemaDefinitionError(f"{combinator.value} requires at least one schema.")
        children: list[SchemaNode] = []
        for index, schema in enumerate(schemas):
            try:
                node = as_node(schema)
            except SchemaDefinitionError as exc:
                raise SchemaDefinitionError(
                    f"{combinator.value}: schema at index {index} is not a schema."
                ) from exc
            if not node.is_finalized:
                raise SchemaDefinitionError(
                    f"{combinator.value}: schema at index {index} must be finalized "
                    "with required() or optional()."
                )
            children.append(node)
        self._node = SchemaNode(
            kind=Kind.COMPOSITION,
            combinator=combinator,
            children=tuple(children),
        )

    def required(self) -> RequiredComposition:
        return super().required()

    def optional(self) -> OptionalComposition:
        return super().optional()


class OneOf(Composition):
    __slots__ = ()

    def __init__(self, *schemas: Any) -> None:
        super().__init__(Combinator.ONE_OF, *schemas)


class AllOf(Composition):
    __slots__ = ()

    def __init__(self, *schemas: Any) -> None:
        super().__init__(Combinator.ALL_OF, *schemas)


class AnyOf(Composition):
    __slots__ = ()

    def __init__(self, *schemas: Any) -> None:
        super().__init__(Combinator.ANY_OF, *schemas)


class Not(Composition):
    __slots__ = ()

    def __init__(self, schema: Any) -> None:
        super().__init__(Combinator.NOT, schema)


class RequiredComposition(_RequiredState):
    __slots__ = ()


class OptionalComposition(_OptionalState):
    __slots__ = ()


Composition._required_cls = RequiredComposition
Composition._optional_cls = OptionalComposition


def _child_node(schema: Any, label: str) -> SchemaNode:
    try:
        return as_node(schema)
    except SchemaDefinitionError as exc:
        raise SchemaDefinitionError(f"{label} does not implement a schema.") from exc


def _coerce_example(name: str, item: ExampleObject | Mapping[str, Any]) -> ExampleObject:
    if isinstance(item, ExampleObject):
        return item
    if not isinstance(item, Mapping):
        raise SchemaDefinitionError(f"example '{name}' must be an ExampleObject or a mapping.")
    unknown = sorted(set(item) - {"summary", "description", "value", "externalValue", "external_value"})
    if unknown:
        joined = ", ".join(unknown)
        raise SchemaDefinitionError(f"example '{name}' has unknown keys: {joined}")
    return ExampleObject(
        summary=item.get("summary"),
        description=item.get("description"),
        value=item.get("value"),
        external_value=item.get("externalValue", item.get("external_value")),
    )


def _non_negative_int(value: Any, label: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise SchemaDefinitionError(f"{label} must be a non-negative integer.")
    return value


def _number(value: Any, label: str) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise SchemaDefinitionError(f"{label} must be numeric.")
    if isinstance(value, float) and math.isnan(value):
        raise SchemaDefinitionError(f"{label} must not be NaN.")
    return value


__all__ = [
    "AllOf",
    "AnyOf",
    "Array",
    "Bool",
    "Composition",
    "Not",
    "Number",
    "Object",
    "OneOf",
    "OptionalArray",
    "OptionalBool",
    "OptionalComposition",
    "OptionalNumber",
    "OptionalObject",
    "OptionalString",
    "RequiredArray",
    "RequiredBool",
    "RequiredComposition",
    "RequiredNumber",
    "RequiredObject",
    "RequiredString",
    "SchemaBuilder",
    "String",
]
