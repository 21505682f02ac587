from __future__ import annotations

import io
import json
from typing import Any, Mapping

from ruamel.yaml import YAML

from opschema.config.model import EmitterConfig
from opschema.errors import SchemaDefinitionError
from opschema.openapi.emitter import check_fragment, to_json_schema, to_openapi
from opschema.schema.model import as_node


def build_components_document(
    schemas: Mapping[str, Any],
    config: EmitterConfig | None = None,
) -> dict[str, Any]:
    """Wrap named schemas in an OpenAPI 3.1 document under ``components.schemas``.

    Every schema is emitted inline; no ``$ref`` is generated.
    """
    config = config or EmitterConfig()
    components: dict[str, Any] = {}
    for name in sorted(schemas):
        if not isinstance(name, str) or not name:
            raise SchemaDefinitionError("component names must be non-empty strings.")
        node = as_node(schemas[name])
        if config.include_schema_dialect:
            fragment = to_json_schema(node, vendor_extensions=config.include_vendor_extensions)
        else:
            fragment = to_openapi(node, vendor_extensions=config.include_vendor_extensions)
        if config.check_fragments:
            check_fragment(fragment)
        components[name] = fragment

    info: dict[str, Any] = {"title": config.title, "version": config.version}
    if config.description:
        info["description"] = config.description
    return {
        "openapi": config.openapi_version,
        "info": info,
        "components": {"schemas": components},
    }


def dump_json(document: Mapping[str, Any]) -> str:
    return json.dumps(document, indent=2, sort_keys=True) + "\n"


def dump_yaml(document: Mapping[str, Any]) -> str:
    yaml = YAML()
    yaml.default_flow_style = False
    buffer = io.StringIO()
    yaml.dump(_plain(document), buffer)
    return buffer.getvalue()


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
