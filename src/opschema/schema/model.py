from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping

from opschema.errors import SchemaDefinitionError

CustomPredicate = Callable[[Any], Any]

_EMPTY_MESSAGES: Mapping[str, str] = MappingProxyType({})


class Kind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    COMPOSITION = "composition"


class Presence(str, Enum):
    UNFINALIZED = "unfinalized"
    REQUIRED = "required"
    OPTIONAL = "optional"


class Combinator(str, Enum):
    ONE_OF = "oneOf"
    ALL_OF = "allOf"
    ANY_OF = "anyOf"
    NOT = "not"


class StringFormat(str, Enum):
    EMAIL = "email"
    URI = "uri"


@dataclass(frozen=True)
class StringConstraints:
    min_length: int | None = None
    max_length: int | None = None
    pattern_source: str | None = None
    pattern: re.Pattern[str] | None = None
    pattern_error: str | None = None
    format: StringFormat | None = None
    const: str | None = None

    @property
    def pattern_poisoned(self) -> bool:
        return self.pattern_error is not None


@dataclass(frozen=True)
class NumberConstraints:
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | None = None
    exclusive_maximum: float | None = None
    multiple_of: float | None = None
    integer: bool = False
    positive: bool = False
    negative: bool = False


@dataclass(frozen=True)
class ArrayConstraints:
    min_items: int | None = None
    max_items: int | None = None
    contains: Any = None
    has_contains: bool = False
    unique_items: bool = False


@dataclass(frozen=True)
class ObjectConstraints:
    strict: bool = False
    partial: bool = False
    min_properties: int | None = None
    max_properties: int | None = None


Constraints = StringConstraints | NumberConstraints | ArrayConstraints | ObjectConstraints


@dataclass(frozen=True)
class ExampleObject:
    summary: str | None = None
    description: str | None = None
    value: Any = None
    external_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.summary is not None:
            payload["summary"] = self.summary
        if self.description is not None:
            payload["description"] = self.description
        if self.value is not None:
            payload["value"] = self.value
        if self.external_value is not None:
            payload["externalValue"] = self.external_value
        return payload


@dataclass(frozen=True)
class Documentation:
    example: Any = None
    has_example: bool = False
    examples: Mapping[str, ExampleObject] = field(default_factory=lambda: MappingProxyType({}))
    description: str | None = None


@dataclass(frozen=True)
class SchemaNode:
    """Immutable description of one schema node.

    Only the builders create nodes. Validation and emission read them and
    never write back, so one node may be shared freely across threads.
    """

    kind: Kind
    presence: Presence = Presence.UNFINALIZED
    default: Any = None
    has_default: bool = False
    constraints: Constraints | None = None
    custom: CustomPredicate | None = None
    messages: Mapping[str, str] = field(default_factory=lambda: _EMPTY_MESSAGES)
    docs: Documentation = field(default_factory=Documentation)
    fields: Mapping[str, SchemaNode] = field(default_factory=lambda: MappingProxyType({}))
    element: SchemaNode | None = None
    combinator: Combinator | None = None
    children: tuple[SchemaNode, ...] = ()

    @property
    def is_finalized(self) -> bool:
        return self.presence is not Presence.UNFINALIZED

    @property
    def is_required(self) -> bool:
        return self.presence is Presence.REQUIRED

    @property
    def is_optional(self) -> bool:
        return self.presence is Presence.OPTIONAL

    def message(self, rule: str, default: str) -> str:
        return self.messages.get(rule, default)


def as_node(schema: Any) -> SchemaNode:
    if isinstance(schema, SchemaNode):
        return schema
    node = getattr(schema, "node", None)
    if isinstance(node, SchemaNode):
        return node
    raise SchemaDefinitionError(f"Not a schema: {type(schema).__name__}")
