from __future__ import annotations

import pytest

from opschema import validate
from opschema.errors import SchemaDefinitionError
from opschema.schema import (
    Array,
    ExampleObject,
    Number,
    Object,
    OptionalNumber,
    OptionalString,
    Presence,
    RequiredNumber,
    RequiredString,
    String,
    email,
    integer_number,
    optional_string,
    positive_number,
    required_string,
    url,
)


def test_state_transitions_return_state_specific_builders() -> None:
    unfinalized = String().min(1)
    assert isinstance(unfinalized, String)
    assert isinstance(unfinalized.required(), RequiredString)
    assert isinstance(unfinalized.optional(), OptionalString)
    assert isinstance(Number().required().min(3), RequiredNumber)
    assert isinstance(Number().optional().max(3), OptionalNumber)


def test_state_exclusive_operations() -> None:
    required = String().required()
    optional = String().optional()

    assert not hasattr(required, "required")
    assert not hasattr(required, "optional")
    assert not hasattr(required, "default")
    assert not hasattr(optional, "required")
    assert not hasattr(optional, "optional")
    assert not hasattr(String(), "validate")
    assert not hasattr(String(), "default")


def test_transition_carries_accumulated_configuration() -> None:
    schema = String().min(2).max(4).pattern("[a-z]+").required()
    constraints = schema.node.constraints
    assert (constraints.min_length, constraints.max_length, constraints.pattern_source) == (
        2,
        4,
        "[a-z]+",
    )


def test_builders_are_immutable_values() -> None:
    base = String().min(2)
    longer = base.max(5)
    assert base.node.constraints.max_length is None
    assert longer.node.constraints.max_length == 5

    required = base.required()
    assert required.presence is Presence.REQUIRED
    assert base.presence is Presence.UNFINALIZED


def test_default_only_once_and_never_none() -> None:
    schema = Number().optional().default(3)
    with pytest.raises(SchemaDefinitionError, match="already set"):
        schema.default(4)
    with pytest.raises(SchemaDefinitionError, match="must not be None"):
        Number().optional().default(None)


def test_required_nodes_never_carry_default() -> None:
    for schema in (String().required(), Number().min(1).required(), Array().required()):
        assert schema.node.is_required
        assert not schema.node.has_default


def test_validating_unfinalized_root_raises() -> None:
    with pytest.raises(SchemaDefinitionError, match="must be finalized"):
        validate(String().min(1), "x")
    with pytest.raises(SchemaDefinitionError, match="Not a schema"):
        validate("not a schema", "x")


def test_object_rejects_non_schema_fields() -> None:
    with pytest.raises(SchemaDefinitionError, match="field 'name'"):
        Object({"name": 3})
    with pytest.raises(SchemaDefinitionError, match="non-empty strings"):
        Object({"": String()})


def test_negative_lengths_are_rejected() -> None:
    with pytest.raises(SchemaDefinitionError, match="non-negative integer"):
        String().min(-1)
    with pytest.raises(SchemaDefinitionError):
        Array().max_items(1.5)  # type: ignore[arg-type]


def test_validation_info_reports_presence_and_constraints() -> None:
    info = String().min(3).email().optional().default("a@b.co").validation_info()
    assert info.optional and not info.required
    assert info.has_default and info.default == "a@b.co"
    assert info.constraints == {"minLength": 3, "format": "email"}

    number_info = Number().integer().positive().required().validation_info()
    assert number_info.required
    assert number_info.constraints == {"integer": True, "positive": True}


def test_examples_are_coerced_and_merged() -> None:
    schema = (
        String()
        .examples({"basic": {"summary": "A name", "value": "ada"}})
        .example_from_file("examples/name.json")
        .required()
    )
    examples = schema.node.docs.examples
    assert examples["basic"] == ExampleObject(summary="A name", value="ada")
    assert examples["external"].external_value == "examples/name.json"

    with pytest.raises(SchemaDefinitionError, match="unknown keys"):
        String().examples({"bad": {"summary": "x", "valu": 1}})


def test_presets() -> None:
    assert email().validate("bad").rule == "email"
    assert url().validate("bad").rule == "url"
    assert required_string().validate(None).rule == "required"
    assert optional_string().validate(None) is None
    assert positive_number().validate(0).rule == "positive"
    assert integer_number().validate(1.5).rule == "integer"
