from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable

from opschema.core.engine import validate
from opschema.errors import SchemaDefinitionError, ValidationError
from opschema.schema.model import as_node

DEFAULT_WORKERS = 4


@dataclass(frozen=True)
class BatchResult:
    index: int
    value: Any
    error: ValidationError | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


def validate_concurrently(
    schema: Any,
    values: Iterable[Any],
    *,
    workers: int = DEFAULT_WORKERS,
) -> list[BatchResult]:
    """Validate many values against one schema on a thread pool.

    Results come back in input order. The schema is shared by every worker;
    any custom predicate it carries must be thread-safe.
    """
    if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
        raise SchemaDefinitionError("workers must be a positive integer.")
    node = as_node(schema)
    if not node.is_finalized:
        raise SchemaDefinitionError(
            "schema must be finalized with required() or optional() before validation."
        )
    items = list(values)
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as pool:
        errors = list(pool.map(lambda value: validate(node, value), items))
    return [
        BatchResult(index=index, value=value, error=error)
        for index, (value, error) in enumerate(zip(items, errors))
    ]
