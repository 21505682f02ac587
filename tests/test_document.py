from __future__ import annotations

import json
from pathlib import Path

import pytest
from ruamel.yaml import YAML

from opschema.config.load import load_emitter_config
from opschema.config.model import EmitterConfig
from opschema.errors import SchemaDefinitionError
from opschema.openapi.document import build_components_document, dump_json, dump_yaml
from opschema.openapi.emitter import JSON_SCHEMA_DIALECT
from opschema.schema import Number, Object, String


def _schemas():
    return {
        "User": Object({"name": String().required()}).required(),
        "Age": Number().integer().min(0).with_min_message("no negatives").required(),
    }


def test_components_document_defaults() -> None:
    document = build_components_document(_schemas())

    assert document["openapi"] == "3.1.0"
    assert document["info"] == {"title": "API", "version": "1.0.0"}
    assert list(document["components"]["schemas"]) == ["Age", "User"]
    assert document["components"]["schemas"]["Age"]["x-error-messages"] == {"min": "no negatives"}


def test_components_document_honours_config(emitter_config_file: Path) -> None:
    config = load_emitter_config(emitter_config_file)
    document = build_components_document(_schemas(), config)

    assert document["info"]["description"] == "Schemas for the users service"
    assert "x-error-messages" not in document["components"]["schemas"]["Age"]


def test_schema_dialect_option() -> None:
    config = EmitterConfig(include_schema_dialect=True)
    document = build_components_document({"Name": String().required()}, config)
    assert document["components"]["schemas"]["Name"]["$schema"] == JSON_SCHEMA_DIALECT


def test_rejects_non_schema_component() -> None:
    with pytest.raises(SchemaDefinitionError):
        build_components_document({"Bad": 1})


def test_dump_json_is_stable() -> None:
    document = build_components_document(_schemas())
    text = dump_json(document)
    assert text.endswith("\n")
    assert json.loads(text) == document
    assert text == dump_json(build_components_document(_schemas()))


def test_dump_yaml_round_trips() -> None:
    document = build_components_document(_schemas())
    text = dump_yaml(document)
    assert json.loads(json.dumps(YAML(typ="safe").load(text))) == document
