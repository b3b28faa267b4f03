"""
The capability interface implemented by every field type.

The object compiler never inspects a field's concrete type: it only calls
``parse``, ``serialize``, ``schema_ref``, ``register``, ``is_required`` and
``zero_value`` on the ``SchemaType`` a field declares.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping

from .errors import ConfigurationError, ExpectedType, FieldError, ItemError, ParseError
from .registry import MetaSchema, MetaSchemaRef

if TYPE_CHECKING:
    from .registry import Registry


class SchemaType(ABC):
    """A type that can be parsed from JSON, serialized to JSON and described by a schema."""

    # Whether a property of this type must be present in its parent object
    is_required: bool = True

    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def schema_ref(self) -> MetaSchemaRef:
        pass

    def register(self, registry: Registry) -> None:
        """Register every named schema this type depends on."""
        pass

    @abstractmethod
    def parse(self, value: Any) -> Any:
        """Parse a JSON value; ``None`` means the value is absent or null."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> Any:
        """Serialize a value to JSON; ``None`` means the value is absent."""
        pass

    @abstractmethod
    def zero_value(self) -> Any:
        pass

    def resolve(self, bindings: Mapping[str, SchemaType]) -> SchemaType:
        """Substitute bound type parameters."""
        return self

    @abstractmethod
    def python_type(self) -> str:
        """The annotation used for this type in generated source."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()}>"


class PrimitiveType(SchemaType):
    """Scalar JSON types."""

    type_name: str = ""
    format: str | None = None

    def name(self) -> str:
        if self.format is not None:
            return f"{self.type_name}_{self.format}"
        return self.type_name

    def schema_ref(self) -> MetaSchemaRef:
        return MetaSchemaRef.inline(MetaSchema(type=self.type_name, format=self.format))

    def parse(self, value: Any) -> Any:
        if not self.accepts(value):
            raise ExpectedType(self.name(), value)
        return self.convert(value)

    def serialize(self, value: Any) -> Any:
        return value

    @abstractmethod
    def accepts(self, value: Any) -> bool:
        pass

    def convert(self, value: Any) -> Any:
        return value


class IntegerType(PrimitiveType):
    type_name = "integer"
    format = "int64"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    def zero_value(self) -> int:
        return 0

    def python_type(self) -> str:
        return "int"


class NumberType(PrimitiveType):
    type_name = "number"
    format = "double"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    def convert(self, value: Any) -> float:
        return float(value)

    def zero_value(self) -> float:
        return 0.0

    def python_type(self) -> str:
        return "float"


class StringType(PrimitiveType):
    type_name = "string"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str)

    def zero_value(self) -> str:
        return ""

    def python_type(self) -> str:
        return "str"


class BooleanType(PrimitiveType):
    type_name = "boolean"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, bool)

    def zero_value(self) -> bool:
        return False

    def python_type(self) -> str:
        return "bool"


class AnyType(SchemaType):
    """An arbitrary JSON value, passed through unchanged."""

    is_required = False

    def name(self) -> str:
        return "any"

    def schema_ref(self) -> MetaSchemaRef:
        return MetaSchemaRef.inline(MetaSchema.any())

    def parse(self, value: Any) -> Any:
        return value

    def serialize(self, value: Any) -> Any:
        return value

    def zero_value(self) -> Any:
        return None

    def python_type(self) -> str:
        return "Any"


class ArrayType(SchemaType):
    def __init__(self, item: SchemaType):
        self.item = item

    def name(self) -> str:
        return f"[{self.item.name()}]"

    def schema_ref(self) -> MetaSchemaRef:
        return MetaSchemaRef.inline(MetaSchema(type="array", items=self.item.schema_ref()))

    def register(self, registry: Registry) -> None:
        self.item.register(registry)

    def parse(self, value: Any) -> list:
        if not isinstance(value, list):
            raise ExpectedType(self.name(), value)
        out = []
        for index, item in enumerate(value):
            try:
                out.append(self.item.parse(item))
            except ParseError as e:
                raise ItemError(index, e) from e
        return out

    def serialize(self, value: Any) -> list:
        return [self.item.serialize(item) for item in value]

    def zero_value(self) -> list:
        return []

    def resolve(self, bindings: Mapping[str, SchemaType]) -> SchemaType:
        return ArrayType(self.item.resolve(bindings))

    def python_type(self) -> str:
        return f"list[{self.item.python_type()}]"


class MapType(SchemaType):
    """A JSON object with arbitrary keys and values of one type."""

    def __init__(self, value: SchemaType):
        self.value = value

    def name(self) -> str:
        return f"map<string, {self.value.name()}>"

    def schema_ref(self) -> MetaSchemaRef:
        return MetaSchemaRef.inline(MetaSchema(type="object", additional_properties=self.value.schema_ref()))

    def register(self, registry: Registry) -> None:
        self.value.register(registry)

    def parse(self, value: Any) -> dict:
        if not isinstance(value, dict):
            raise ExpectedType(self.name(), value)
        out = {}
        for key, item in value.items():
            try:
                out[key] = self.value.parse(item)
            except ParseError as e:
                raise FieldError(key, e) from e
        return out

    def serialize(self, value: Any) -> dict:
        return {key: self.value.serialize(item) for key, item in value.items()}

    def zero_value(self) -> dict:
        return {}

    def resolve(self, bindings: Mapping[str, SchemaType]) -> SchemaType:
        return MapType(self.value.resolve(bindings))

    def python_type(self) -> str:
        return f"dict[str, {self.value.python_type()}]"


class OptionalType(SchemaType):
    """A value that may be absent. Absent values are omitted when serializing."""

    is_required = False

    def __init__(self, inner: SchemaType):
        self.inner = inner

    def name(self) -> str:
        return self.inner.name()

    def schema_ref(self) -> MetaSchemaRef:
        return self.inner.schema_ref()

    def register(self, registry: Registry) -> None:
        self.inner.register(registry)

    def parse(self, value: Any) -> Any:
        if value is None:
            return None
        return self.inner.parse(value)

    def serialize(self, value: Any) -> Any:
        if value is None:
            return None
        return self.inner.serialize(value)

    def zero_value(self) -> Any:
        return None

    def resolve(self, bindings: Mapping[str, SchemaType]) -> SchemaType:
        return OptionalType(self.inner.resolve(bindings))

    def python_type(self) -> str:
        return f"{self.inner.python_type()} | None"


class TypeParam(SchemaType):
    """A generic type parameter, replaced by a concrete type for each instantiation."""

    def __init__(self, param: str):
        self.param = param

    def name(self) -> str:
        return self.param

    def _unbound(self):
        return TypeError(f"type parameter `{self.param}` is not bound")

    def schema_ref(self) -> MetaSchemaRef:
        raise self._unbound()

    def parse(self, value: Any) -> Any:
        raise self._unbound()

    def serialize(self, value: Any) -> Any:
        raise self._unbound()

    def zero_value(self) -> Any:
        raise self._unbound()

    def resolve(self, bindings: Mapping[str, SchemaType]) -> SchemaType:
        if self.param not in bindings:
            raise ConfigurationError(f"type parameter `{self.param}` has no binding")
        return bindings[self.param]

    def python_type(self) -> str:
        return self.param


def type_params(schema_type: SchemaType) -> set[str]:
    """Collect the names of the type parameters used in ``schema_type``."""
    if isinstance(schema_type, TypeParam):
        return {schema_type.param}
    for attr in ("item", "value", "inner"):
        nested = getattr(schema_type, attr, None)
        if isinstance(nested, SchemaType):
            return type_params(nested)
    return set()


INTEGER = IntegerType()
NUMBER = NumberType()
STRING = StringType()
BOOLEAN = BooleanType()
ANY = AnyType()
