from __future__ import annotations

ERR_REQUIRED = "required"
ERR_TYPE = "type"
ERR_CUSTOM = "custom"

ERR_MIN_LENGTH = "minLength"
ERR_MAX_LENGTH = "maxLength"
ERR_PATTERN = "pattern"
ERR_EMAIL = "email"
ERR_URL = "url"
ERR_CONST = "const"

ERR_MIN = "min"
ERR_MAX = "max"
ERR_EXCLUSIVE_MIN = "exclusiveMin"
ERR_EXCLUSIVE_MAX = "exclusiveMax"
ERR_MULTIPLE_OF = "multipleOf"
ERR_INTEGER = "integer"
ERR_POSITIVE = "positive"
ERR_NEGATIVE = "negative"

ERR_MIN_ITEMS = "minItems"
ERR_MAX_ITEMS = "maxItems"
ERR_CONTAINS = "contains"
ERR_UNIQUE_ITEMS = "uniqueItems"

ERR_UNKNOWN_KEY = "unknownKey"
ERR_MISSING_KEY = "missingKey"
ERR_INVALID_SHAPE = "invalidShape"
ERR_MIN_PROPERTIES = "minProperties"
ERR_MAX_PROPERTIES = "maxProperties"

ERR_INVALID_BOOLEAN = "invalidBoolean"

ALL_RULES = frozenset(
    {
        ERR_REQUIRED,
        ERR_TYPE,
        ERR_CUSTOM,
        ERR_MIN_LENGTH,
        ERR_MAX_LENGTH,
        ERR_PATTERN,
        ERR_EMAIL,
        ERR_URL,
        ERR_CONST,
        ERR_MIN,
        ERR_MAX,
        ERR_EXCLUSIVE_MIN,
        ERR_EXCLUSIVE_MAX,
        ERR_MULTIPLE_OF,
        ERR_INTEGER,
        ERR_POSITIVE,
        ERR_NEGATIVE,
        ERR_MIN_ITEMS,
        ERR_MAX_ITEMS,
        ERR_CONTAINS,
        ERR_UNIQUE_ITEMS,
        ERR_UNKNOWN_KEY,
        ERR_MISSING_KEY,
        ERR_INVALID_SHAPE,
        ERR_MIN_PROPERTIES,
        ERR_MAX_PROPERTIES,
        ERR_INVALID_BOOLEAN,
    }
)


def is_known_rule(name: str) -> bool:
    return name in ALL_RULES


class ErrorKeys:
    """Accessor form of the rule identifiers, e.g. ``Errors.min_length()``."""

    __slots__ = ()

    def required(self) -> str:
        return ERR_REQUIRED

    def type(self) -> str:
        return ERR_TYPE

    def custom(self) -> str:
        return ERR_CUSTOM

    def min_length(self) -> str:
        return ERR_MIN_LENGTH

    def max_length(self) -> str:
        return ERR_MAX_LENGTH

    def pattern(self) -> str:
        return ERR_PATTERN

    def email(self) -> str:
        return ERR_EMAIL

    def url(self) -> str:
        return ERR_URL

    def const(self) -> str:
        return ERR_CONST

    def min(self) -> str:
        return ERR_MIN

    def max(self) -> str:
        return ERR_MAX

    def exclusive_min(self) -> str:
        return ERR_EXCLUSIVE_MIN

    def exclusive_max(self) -> str:
        return ERR_EXCLUSIVE_MAX

    def multiple_of(self) -> str:
        return ERR_MULTIPLE_OF

    def integer(self) -> str:
        return ERR_INTEGER

    def positive(self) -> str:
        return ERR_POSITIVE

    def negative(self) -> str:
        return ERR_NEGATIVE

    def min_items(self) -> str:
        return ERR_MIN_ITEMS

    def max_items(self) -> str:
        return ERR_MAX_ITEMS

    def contains(self) -> str:
        return ERR_CONTAINS

    def unique_items(self) -> str:
        return ERR_UNIQUE_ITEMS

    def unknown_key(self) -> str:
        return ERR_UNKNOWN_KEY

    def missing_key(self) -> str:
        return ERR_MISSING_KEY

    def invalid_shape(self) -> str:
        return ERR_INVALID_SHAPE

    def min_properties(self) -> str:
        return ERR_MIN_PROPERTIES

    def max_properties(self) -> str:
        return ERR_MAX_PROPERTIES

    def invalid_boolean(self) -> str:
        return ERR_INVALID_BOOLEAN


Errors = ErrorKeys()
