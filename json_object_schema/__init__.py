"""JSON Object Schema

Compiles declarative record type descriptors into a JSON-object parser,
a JSON-object serializer and an OpenAPI-style schema, keeping field
renaming, defaults, access modes, flattening and generic instantiations
consistent across all three.
"""

__version__ = "1.0.0"

from .compiler import (
    ConcreteObjectType,
    ConcreteType,
    DefaultValue,
    FieldDescriptor,
    GenericObject,
    ObjectType,
    TypeDescriptor,
    compile_object,
)
from .config import CompilerConfig
from .errors import (
    ConfigurationError,
    ExpectedType,
    FieldError,
    ItemError,
    ParseError,
    ReadOnlyViolation,
    UnknownField,
    ValidatorError,
)
from .loader import DescriptorLoader
from .registry import ExternalDocument, MetaSchema, MetaSchemaRef, Registry
from .types import (
    ANY,
    BOOLEAN,
    INTEGER,
    NUMBER,
    STRING,
    ArrayType,
    MapType,
    OptionalType,
    SchemaType,
    TypeParam,
)
from .utils import RenameRule
from .validators import ValidatorSet

__all__ = [
    "compile_object",
    "TypeDescriptor",
    "FieldDescriptor",
    "ConcreteType",
    "DefaultValue",
    "ObjectType",
    "ConcreteObjectType",
    "GenericObject",
    "CompilerConfig",
    "ConfigurationError",
    "ParseError",
    "ExpectedType",
    "ReadOnlyViolation",
    "UnknownField",
    "FieldError",
    "ItemError",
    "ValidatorError",
    "DescriptorLoader",
    "Registry",
    "MetaSchema",
    "MetaSchemaRef",
    "ExternalDocument",
    "SchemaType",
    "ArrayType",
    "MapType",
    "OptionalType",
    "TypeParam",
    "INTEGER",
    "NUMBER",
    "STRING",
    "BOOLEAN",
    "ANY",
    "RenameRule",
    "ValidatorSet",
]
