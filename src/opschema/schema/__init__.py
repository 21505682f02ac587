from .builders import (
    AllOf,
    AnyOf,
    Array,
    Bool,
    Composition,
    Not,
    Number,
    Object,
    OneOf,
    OptionalArray,
    OptionalBool,
    OptionalComposition,
    OptionalNumber,
    OptionalObject,
    OptionalString,
    RequiredArray,
    RequiredBool,
    RequiredComposition,
    RequiredNumber,
    RequiredObject,
    RequiredString,
    SchemaBuilder,
    String,
)
from .model import (
    Combinator,
    Documentation,
    ExampleObject,
    Kind,
    Presence,
    SchemaNode,
    as_node,
)
from .presets import (
    email,
    integer_number,
    optional_string,
    positive_number,
    required_string,
    url,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "Array",
    "Bool",
    "Combinator",
    "Composition",
    "Documentation",
    "ExampleObject",
    "Kind",
    "Not",
    "Number",
    "Object",
    "OneOf",
    "OptionalArray",
    "OptionalBool",
    "OptionalComposition",
    "OptionalNumber",
    "OptionalObject",
    "OptionalString",
    "Presence",
    "RequiredArray",
    "RequiredBool",
    "RequiredComposition",
    "RequiredNumber",
    "RequiredObject",
    "RequiredString",
    "SchemaBuilder",
    "SchemaNode",
    "String",
    "as_node",
    "email",
    "integer_number",
    "optional_string",
    "positive_number",
    "required_string",
    "url",
]
