from __future__ import annotations

from opschema.schema.builders import (
    Number,
    OptionalString,
    RequiredNumber,
    RequiredString,
    String,
)


def email() -> RequiredString:
    return String().email().required()


def url() -> RequiredString:
    return String().url().required()


def required_string() -> RequiredString:
    return String().required()


def optional_string() -> OptionalString:
    return String().optional()


def positive_number() -> RequiredNumber:
    return Number().positive().required()


def integer_number() -> RequiredNumber:
    return Number().integer().required()
