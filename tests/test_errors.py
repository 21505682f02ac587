from __future__ import annotations

import json

from opschema.errors import (
    ValidationError,
    ValidationFailed,
    join_path,
    new_nested_validation_error,
    new_validation_error,
    sanitize_value,
)
from opschema.rules import ALL_RULES, ERR_MIN_LENGTH, ERR_REQUIRED, Errors, is_known_rule


def test_rule_set_is_closed_and_accessors_match() -> None:
    assert len(ALL_RULES) == 27
    assert Errors.min_length() == "minLength"
    assert Errors.unknown_key() == "unknownKey"
    assert Errors.invalid_shape() == "invalidShape"
    assert is_known_rule("multipleOf")
    assert not is_known_rule("minlength")


def test_leaf_error_renders_field_and_message() -> None:
    error = new_validation_error("name", "", "string is too short", rule=ERR_MIN_LENGTH)

    assert str(error) == "Field: name, Error: string is too short"
    assert error.error_json() == json.dumps({"field": "name", "message": "string is too short"})
    assert not error.is_nested


def test_at_prefixes_paths_through_nested_details() -> None:
    leaf = new_validation_error("", "", "field is required", rule=ERR_REQUIRED).at("city")
    inner = new_nested_validation_error("", {}, "object validation failed", [leaf])
    outer = inner.at("address").at("[2]")

    assert outer.field == "[2]"
    assert outer.path == "[2].address"
    assert [item.path for item in outer.leaves()] == ["[2].address.city"]


def test_flatten_lists_every_leaf() -> None:
    first = new_validation_error("", "", "too short", rule=ERR_MIN_LENGTH).at("name")
    second = new_validation_error("", None, "field is required", rule=ERR_REQUIRED).at("[0]")
    tags = new_nested_validation_error("", [None], "array contains invalid items", [second]).at("tags")
    root = new_nested_validation_error("", {}, "object validation failed", [first, tags])

    assert root.flatten() == [
        {"field": "name", "rule": "minLength", "message": "too short"},
        {"field": "tags[0]", "rule": "required", "message": "field is required"},
    ]
    assert str(root) == "Field: name, Error: too short\nField: tags[0], Error: field is required"


def test_to_dict_includes_details_only_when_nested() -> None:
    leaf = new_validation_error("x", 1, "bad", rule="custom")
    assert "details" not in leaf.to_dict()
    nested = new_nested_validation_error("", {"x": 1}, "object validation failed", [leaf])
    assert nested.to_dict()["details"][0]["path"] == "x"


def test_join_path_handles_index_segments() -> None:
    assert join_path("items", "[0]") == "items[0]"
    assert join_path("items", "name") == "items.name"
    assert join_path("", "name") == "name"
    assert join_path("name", "") == "name"


def test_sanitize_value_summarizes_large_containers() -> None:
    assert sanitize_value([1, 2]) == [1, 2]
    assert sanitize_value(list(range(10))) == "<list with 10 items>"
    assert sanitize_value({str(i): i for i in range(6)}) == "<dict with 6 items>"
    assert sanitize_value(object()) == "<object>"


def test_validation_failed_carries_error() -> None:
    error = ValidationError(rule="type", message="invalid type, expected string")
    exc = ValidationFailed(error)
    assert exc.error is error
    assert "invalid type" in str(exc)
