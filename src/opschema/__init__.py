from .core.engine import is_valid, validate
from .core.info import ValidationInfo, validation_info
from .errors import (
    OpschemaError,
    SchemaDefinitionError,
    ValidationError,
    ValidationFailed,
    new_nested_validation_error,
    new_validation_error,
)
from .openapi.emitter import check_fragment, to_json_schema, to_openapi
from .rules import Errors
from .schema import (
    AllOf,
    AnyOf,
    Array,
    Bool,
    ExampleObject,
    Not,
    Number,
    Object,
    OneOf,
    String,
    email,
    integer_number,
    optional_string,
    positive_number,
    required_string,
    url,
)

__version__ = "0.1.0"

__all__ = [
    "AllOf",
    "AnyOf",
    "Array",
    "Bool",
    "Errors",
    "ExampleObject",
    "Not",
    "Number",
    "Object",
    "OneOf",
    "OpschemaError",
    "SchemaDefinitionError",
    "String",
    "ValidationError",
    "ValidationFailed",
    "ValidationInfo",
    "check_fragment",
    "email",
    "integer_number",
    "is_valid",
    "new_nested_validation_error",
    "new_validation_error",
    "optional_string",
    "positive_number",
    "required_string",
    "to_json_schema",
    "to_openapi",
    "url",
    "validate",
    "validation_info",
    "__version__",
]
