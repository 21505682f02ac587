from __future__ import annotations

from collections import OrderedDict

from opschema.schema import Bool, Number, Object, String


def test_three_invalid_fields_are_all_reported(user_schema) -> None:
    error = user_schema.validate({"name": "", "email": "x", "age": -1})

    assert error.rule == "invalidShape"
    assert error.message == "object validation failed"
    rules = {detail.field: detail.rule for detail in error.details}
    assert rules == {"name": "minLength", "email": "email", "age": "min"}


def test_valid_object_passes(user_schema) -> None:
    assert user_schema.validate({"name": "Ada", "email": "ada@example.com"}) is None
    assert user_schema.validate(OrderedDict(name="Ada", email="ada@example.com", age=36)) is None


def test_missing_required_fields_use_missing_key() -> None:
    schema = Object({"id": Number().required(), "tag": String()}).required()

    error = schema.validate({})

    assert [(detail.field, detail.rule) for detail in error.details] == [
        ("id", "missingKey"),
        ("tag", "missingKey"),
    ]
    assert error.details[0].message == "missing required field: id"


def test_present_none_for_required_field_reports_required() -> None:
    schema = Object({"id": Number().required()}).required()
    error = schema.validate({"id": None})
    assert error.details[0].rule == "required"
    assert error.details[0].path == "id"


def test_missing_optional_field_with_default_validates_default() -> None:
    schema = Object({"retries": Number().max(3).optional().default(10)}).required()
    error = schema.validate({})
    assert error.details[0].rule == "max"
    assert error.details[0].path == "retries"


def test_strict_rejects_unknown_keys() -> None:
    schema = Object({"name": String()}).strict().required()
    error = schema.validate({"name": "a", "extra": 1})
    assert error.rule == "unknownKey"
    assert error.field == "extra"
    assert error.message == "unknown key: extra"


def test_non_strict_ignores_unknown_keys() -> None:
    assert Object({"name": String()}).required().is_valid({"name": "a", "extra": 1})


def test_partial_relaxes_required_fields() -> None:
    schema = Object({"name": String().min(2), "age": Number().required()}).partial().required()
    assert schema.validate({}) is None
    assert schema.validate({"name": None}) is None
    assert schema.validate({"name": "a"}).details[0].rule == "minLength"


def test_partial_does_not_change_field_schema() -> None:
    name = String().required()
    Object({"name": name}).partial().required().validate({})
    assert name.node.is_required


def test_property_count_bounds() -> None:
    schema = Object().min_properties(1).max_properties(2).required()
    assert schema.validate({}).rule == "minProperties"
    assert schema.validate({"a": 1, "b": 2, "c": 3}).rule == "maxProperties"
    assert schema.is_valid({"a": 1})


def test_type_mismatch() -> None:
    error = Object().required().validate(["a"])
    assert error.rule == "type"
    assert error.message == "invalid type, expected object"


def test_nested_objects_compose_paths() -> None:
    schema = Object(
        {"address": Object({"city": String().min(1), "zip": String().pattern("[0-9]{5}")})}
    ).required()

    error = schema.validate({"address": {"city": "", "zip": "abc"}})

    assert [item["field"] for item in error.flatten()] == ["address.city", "address.zip"]


def test_custom_runs_only_after_fields_pass() -> None:
    def passwords_match(value: dict):
        if value["password"] != value["confirm"]:
            return "passwords do not match"
        return None

    schema = (
        Object({"password": String().min(8), "confirm": String()})
        .custom(passwords_match)
        .required()
    )
    assert schema.validate({"password": "short", "confirm": "x"}).rule == "invalidShape"
    error = schema.validate({"password": "longenough", "confirm": "different"})
    assert error.rule == "custom"
    assert error.message == "passwords do not match"


def test_boolean_field_false_is_present() -> None:
    schema = Object({"active": Bool().required()}).required()
    assert schema.validate({"active": False}) is None


def test_shared_unfinalized_child_is_not_mutated() -> None:
    child = String().min(1)
    first = Object({"a": child}).required()
    second = Object({"a": child}).optional()

    assert first.validate({}).details[0].rule == "missingKey"
    assert second.validate(None) is None
    assert not child.node.is_finalized
