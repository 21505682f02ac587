"""Binding between schemas and pydantic models.

Data travels through a JSON-shaped dict: a model instance is dumped with its
aliases, the dict is validated, and the model is rebuilt from it.
"""

from __future__ import annotations

from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from opschema.core.engine import validate
from opschema.errors import (
    SchemaDefinitionError,
    ValidationError,
    ValidationFailed,
    new_nested_validation_error,
    new_validation_error,
)
from opschema.rules import ERR_CUSTOM, ERR_REQUIRED, ERR_TYPE
from opschema.schema.builders import Object, OptionalObject, RequiredObject
from opschema.schema.model import as_node

M = TypeVar("M", bound=BaseModel)


def validate_model(schema: Any, model_cls: type[M], data: Any) -> M:
    payload = _to_payload(data)
    error = validate(schema, payload)
    if error is not None:
        raise ValidationFailed(error)
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationFailed(_from_pydantic(exc, payload)) from exc


class TypedValidator(Generic[M]):
    def __init__(self, schema: Any, model_cls: type[M]):
        node = as_node(schema)
        if not node.is_finalized:
            raise SchemaDefinitionError(
                "schema must be finalized with required() or optional() before binding."
            )
        _require_model(model_cls)
        self.schema = schema
        self.model_cls = model_cls

    def __call__(self, data: Any) -> M:
        return validate_model(self.schema, self.model_cls, data)

    def validate(self, data: Any) -> ValidationError | None:
        return validate(self.schema, _to_payload(data))


def typed_validator(schema: Any, model_cls: type[M]) -> TypedValidator[M]:
    return TypedValidator(schema, model_cls)


class ModelSchemaBuilder(Generic[M]):
    """Assemble an object schema field by field against a pydantic model.

    Field names may be given as attribute names or aliases; the schema is
    keyed by the name the model dumps, i.e. the alias when one is set.
    """

    def __init__(self, model_cls: type[M]):
        _require_model(model_cls)
        self.model_cls = model_cls
        self._fields: dict[str, Any] = {}
        self._strict = False
        self._messages: dict[str, str] = {}

    def field(self, name: str, schema: Any) -> "ModelSchemaBuilder[M]":
        as_node(schema)
        self._fields[self._json_key(name)] = schema
        return self

    def fields(self, schemas: Mapping[str, Any]) -> "ModelSchemaBuilder[M]":
        for name, schema in schemas.items():
            self.field(name, schema)
        return self

    def strict(self) -> "ModelSchemaBuilder[M]":
        self._strict = True
        return self

    def with_message(self, rule: str, message: str) -> "ModelSchemaBuilder[M]":
        self._messages[rule] = message
        return self

    def required(self) -> RequiredObject:
        return self._object().required()

    def optional(self) -> OptionalObject:
        return self._object().optional()

    def build(self) -> TypedValidator[M]:
        return TypedValidator(self.required(), self.model_cls)

    def _object(self) -> Object:
        builder = Object(self._fields)
        if self._strict:
            builder = builder.strict()
        for rule, message in self._messages.items():
            builder = builder.with_message(rule, message)
        return builder

    def _json_key(self, name: str) -> str:
        model_fields = self.model_cls.model_fields
        if name in model_fields:
            alias = model_fields[name].alias
            return alias or name
        for info in model_fields.values():
            if info.alias == name:
                return name
        raise SchemaDefinitionError(
            f"{self.model_cls.__name__} has no field named '{name}'."
        )


def for_model(model_cls: type[M]) -> ModelSchemaBuilder[M]:
    return ModelSchemaBuilder(model_cls)


def _require_model(model_cls: Any) -> None:
    if not (isinstance(model_cls, type) and issubclass(model_cls, BaseModel)):
        raise SchemaDefinitionError("model class must be a pydantic BaseModel subclass.")


def _to_payload(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, Mapping):
        return dict(data)
    raise SchemaDefinitionError(
        f"expected a pydantic model or a mapping, got {type(data).__name__}."
    )


def _from_pydantic(exc: PydanticValidationError, payload: Any) -> ValidationError:
    details: list[ValidationError] = []
    for item in exc.errors():
        path = ".".join(str(part) for part in item.get("loc", ()))
        kind = item.get("type", "")
        if kind == "missing":
            rule = ERR_REQUIRED
        elif kind.endswith("_type") or kind.endswith("_parsing"):
            rule = ERR_TYPE
        else:
            rule = ERR_CUSTOM
        details.append(new_validation_error(path, item.get("input"), item.get("msg", ""), rule=rule))
    return new_nested_validation_error("", payload, "model binding failed", details)
