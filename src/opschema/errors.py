from __future__ import annotations

import json
from dataclasses import dataclass, replace
from dataclasses import field as dc_field
from typing import Any, Iterator

from opschema.rules import ERR_INVALID_SHAPE

_MAX_INLINE_ITEMS = 5


class OpschemaError(RuntimeError):
    pass


class SchemaDefinitionError(OpschemaError):
    pass


class ValidationFailed(OpschemaError):
    def __init__(self, error: "ValidationError"):
        super().__init__(str(error))
        self.error = error


@dataclass(frozen=True)
class ValidationError:
    """A validation failure, either a leaf or an aggregate with ``details``.

    ``field`` is the error's own path segment (a property name, ``[i]`` or
    empty at the root); ``path`` is the full path from the validated root,
    composed by the engine while it unwinds.
    """

    rule: str
    message: str
    field: str = ""
    path: str = ""
    value: Any = None
    details: tuple[ValidationError, ...] = dc_field(default_factory=tuple)

    @property
    def is_nested(self) -> bool:
        return bool(self.details)

    def at(self, segment: str) -> ValidationError:
        """Return a copy re-rooted under ``segment``; descendants are prefixed too."""
        return replace(
            self,
            field=segment,
            path=join_path(segment, self.path),
            details=tuple(detail._prefixed(segment) for detail in self.details),
        )

    def _prefixed(self, segment: str) -> ValidationError:
        return replace(
            self,
            path=join_path(segment, self.path),
            details=tuple(detail._prefixed(segment) for detail in self.details),
        )

    def walk(self) -> Iterator[ValidationError]:
        yield self
        for detail in self.details:
            yield from detail.walk()

    def leaves(self) -> Iterator[ValidationError]:
        for node in self.walk():
            if not node.details:
                yield node

    def flatten(self) -> list[dict[str, str]]:
        return [
            {"field": leaf.path, "rule": leaf.rule, "message": leaf.message}
            for leaf in self.leaves()
        ]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "rule": self.rule,
            "field": self.field,
            "path": self.path,
            "message": self.message,
            "value": self.value,
        }
        if self.details:
            payload["details"] = [detail.to_dict() for detail in self.details]
        return payload

    def error_json(self) -> str:
        if not self.details:
            return json.dumps({"field": self.path, "message": self.message})
        return json.dumps(self.flatten())

    def __str__(self) -> str:
        if not self.details:
            return f"Field: {self.path}, Error: {self.message}"
        return "\n".join(f"Field: {leaf.path}, Error: {leaf.message}" for leaf in self.leaves())


def new_validation_error(
    field: str,
    value: Any,
    message: str,
    *,
    rule: str,
) -> ValidationError:
    return ValidationError(
        rule=rule,
        message=message,
        field=field,
        path=field,
        value=sanitize_value(value),
    )


def new_nested_validation_error(
    field: str,
    value: Any,
    message: str,
    details: list[ValidationError] | tuple[ValidationError, ...],
    *,
    rule: str = ERR_INVALID_SHAPE,
) -> ValidationError:
    return ValidationError(
        rule=rule,
        message=message,
        field=field,
        path=field,
        value=sanitize_value(value),
        details=tuple(detail._prefixed(field) for detail in details),
    )


def join_path(segment: str, rest: str) -> str:
    if not segment:
        return rest
    if not rest:
        return segment
    if rest.startswith("["):
        return f"{segment}{rest}"
    return f"{segment}.{rest}"


def sanitize_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        if len(value) <= _MAX_INLINE_ITEMS:
            return value
        return f"<dict with {len(value)} items>"
    if isinstance(value, (list, tuple)):
        if len(value) <= _MAX_INLINE_ITEMS:
            return value
        return f"<{type(value).__name__} with {len(value)} items>"
    return f"<{type(value).__name__}>"
