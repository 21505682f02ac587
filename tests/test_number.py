from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction

import pytest

from opschema.errors import SchemaDefinitionError
from opschema.schema import Number


def test_integer_range_scenario() -> None:
    schema = Number().min(0).max(100).integer().required()

    assert schema.validate(42) is None
    assert schema.validate(42.5).rule == "integer"
    assert schema.validate(-1).rule == "min"
    assert schema.validate(101).rule == "max"


def test_bound_messages() -> None:
    schema = Number().min(1.5).max(10).required()
    assert schema.validate(0).message == "value is too small, minimum is 1.5"
    assert schema.validate(11).message == "value is too large, maximum is 10"


@pytest.mark.parametrize(("value", "ok"), [(-0.1, False), (0, True), (0.0, True)])
def test_minimum_boundary(value: float, ok: bool) -> None:
    assert Number().min(0).required().is_valid(value) is ok


@pytest.mark.parametrize(("value", "ok"), [(0, False), (1e-9, True), (5, True)])
def test_exclusive_minimum_boundary(value: float, ok: bool) -> None:
    error = Number().exclusive_min(0).required().validate(value)
    assert (error is None) is ok
    if not ok:
        assert error.rule == "exclusiveMin"


def test_exclusive_maximum() -> None:
    schema = Number().exclusive_max(10).required()
    assert schema.is_valid(9.999)
    assert schema.validate(10).rule == "exclusiveMax"


def test_nan_passes_type_check_and_fails_bounds() -> None:
    nan = float("nan")
    assert Number().required().validate(nan) is None
    assert Number().min(0).required().validate(nan).rule == "min"
    assert Number().max(0).required().validate(nan).rule == "max"
    assert Number().integer().min(0).required().validate(nan).rule == "integer"


def test_infinity_counts_as_integral() -> None:
    assert Number().integer().required().validate(math.inf) is None
    assert Number().integer().max(10).required().validate(math.inf).rule == "max"


def test_accepts_host_numeric_types() -> None:
    schema = Number().min(0).required()
    for value in (1, 2.5, Decimal("3.25"), Fraction(1, 3), 10**400):
        assert schema.validate(value) is None


@pytest.mark.parametrize("value", ["1", True, False, [1], {"n": 1}])
def test_rejects_non_numbers(value: object) -> None:
    error = Number().required().validate(value)
    assert error.rule == "type"
    assert error.message == "invalid type, expected number"


def test_zero_is_not_absent() -> None:
    assert Number().positive().required().validate(0).rule == "positive"
    assert Number().negative().required().validate(0).rule == "negative"
    assert Number().optional().validate(0) is None


def test_multiple_of_tolerates_float_error() -> None:
    schema = Number().multiple_of(0.1).required()
    assert schema.validate(0.3) is None
    assert schema.validate(1.2) is None
    assert schema.validate(0.35).rule == "multipleOf"
    assert Number().multiple_of(3).required().validate(9) is None
    assert Number().multiple_of(3).required().validate(-7).rule == "multipleOf"


def test_multiple_of_must_be_positive() -> None:
    with pytest.raises(SchemaDefinitionError):
        Number().multiple_of(0)
    with pytest.raises(SchemaDefinitionError):
        Number().multiple_of(-2)


def test_non_numeric_bounds_are_rejected() -> None:
    with pytest.raises(SchemaDefinitionError, match="must be numeric"):
        Number().min("1")  # type: ignore[arg-type]


def test_check_order_integer_before_bounds() -> None:
    schema = Number().integer().min(10).positive().required()
    assert schema.validate(-0.5).rule == "integer"
    assert schema.validate(-1).rule == "min"


def test_optional_default_applies_constraints() -> None:
    schema = Number().min(10).optional().default(5)
    assert schema.validate(None).rule == "min"
    assert Number().min(0).optional().default(5).validate(None) is None


def test_custom_receives_widened_float() -> None:
    seen: list[float] = []

    def record(value: float):
        seen.append(value)
        return None

    Number().custom(record).required().validate(3)
    assert seen == [3.0]
    assert isinstance(seen[0], float)


def test_message_overrides() -> None:
    schema = Number().integer().with_integer_message("whole numbers only").required()
    assert schema.validate(1.5).message == "whole numbers only"
