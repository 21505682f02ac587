from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from opschema.core.batch import DEFAULT_WORKERS, validate_concurrently
from opschema.core.engine import validate
from opschema.errors import SchemaDefinitionError, ValidationError


@dataclass(frozen=True)
class OpschemaEvent:
    ts: float = field(default_factory=time.perf_counter)
    level: str = "INFO"
    label: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))


@dataclass(frozen=True)
class ValidationStarted(OpschemaEvent):
    type: str = "ValidationStarted"
    kind: str = ""
    presence: str = ""


@dataclass(frozen=True)
class ValidationPassed(OpschemaEvent):
    type: str = "ValidationPassed"
    index: int | None = None


@dataclass(frozen=True)
class ValidationRejected(OpschemaEvent):
    type: str = "ValidationRejected"
    level: str = "ERROR"
    index: int | None = None
    rule: str = ""
    message: str = ""
    errors: list[dict[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class SchemaInvalid(OpschemaEvent):
    type: str = "SchemaInvalid"
    level: str = "ERROR"
    message: str = ""


@dataclass(frozen=True)
class ValidationCompleted(OpschemaEvent):
    type: str = "ValidationCompleted"
    ok: bool = True
    count: int = 0
    duration_ms: float = 0.0


@dataclass(frozen=True)
class BatchStarted(OpschemaEvent):
    type: str = "BatchStarted"
    total: int = 0
    workers: int = 0


@dataclass(frozen=True)
class BatchCompleted(OpschemaEvent):
    type: str = "BatchCompleted"
    total: int = 0
    passed: int = 0
    failed: int = 0
    duration_ms: float = 0.0


def validate_events(
    schema: Any,
    value: Any,
    *,
    label: str = "value",
) -> Iterable[OpschemaEvent]:
    started = time.perf_counter()
    node = getattr(schema, "node", schema)
    kind = getattr(getattr(node, "kind", None), "value", "")
    presence = getattr(getattr(node, "presence", None), "value", "")
    yield ValidationStarted(label=label, kind=kind, presence=presence)
    try:
        error = validate(schema, value)
    except SchemaDefinitionError as exc:
        yield SchemaInvalid(label=label, message=str(exc))
        yield ValidationCompleted(label=label, ok=False, count=0, duration_ms=_elapsed_ms(started))
        return
    if error is None:
        yield ValidationPassed(label=label)
    else:
        yield failed_event(error, label=label)
    yield ValidationCompleted(
        label=label,
        ok=error is None,
        count=1,
        duration_ms=_elapsed_ms(started),
    )


def validate_batch_events(
    schema: Any,
    values: Iterable[Any],
    *,
    workers: int = DEFAULT_WORKERS,
    label: str = "batch",
) -> Iterable[OpschemaEvent]:
    started = time.perf_counter()
    items = list(values)
    yield BatchStarted(label=label, total=len(items), workers=workers)
    try:
        results = validate_concurrently(schema, items, workers=workers)
    except SchemaDefinitionError as exc:
        yield SchemaInvalid(label=label, message=str(exc))
        yield ValidationCompleted(label=label, ok=False, count=0, duration_ms=_elapsed_ms(started))
        return

    failed = 0
    for result in results:
        if result.error is None:
            yield ValidationPassed(label=label, index=result.index)
        else:
            failed += 1
            yield failed_event(result.error, label=label, index=result.index)
    duration_ms = _elapsed_ms(started)
    yield BatchCompleted(
        label=label,
        total=len(results),
        passed=len(results) - failed,
        failed=failed,
        duration_ms=duration_ms,
    )
    yield ValidationCompleted(
        label=label,
        ok=failed == 0,
        count=len(results),
        duration_ms=duration_ms,
    )


def failed_event(
    error: ValidationError,
    *,
    label: str = "",
    index: int | None = None,
) -> ValidationRejected:
    return ValidationRejected(
        label=label,
        index=index,
        rule=error.rule,
        message=error.message,
        errors=error.flatten(),
    )


def _serialize(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    return value


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
