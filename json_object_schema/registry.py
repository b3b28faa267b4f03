"""
Schema metadata and the schema registry.

``MetaSchema`` is the OpenAPI-style schema body advertised for a type,
``MetaSchemaRef`` is either an inline body or a reference to a named body,
and ``Registry`` is the table of named bodies shared by every ``register``
call of a process (or of one export run).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from .types import SchemaType

logger = logging.getLogger(__name__)

DEFAULT_REF_PREFIX = "#/components/schemas/"

# Placeholder type stored while a schema body is being computed
PLACEHOLDER_TYPE = "fake"


@dataclass
class ExternalDocument:
    """Link to documentation hosted outside the schema."""

    url: str
    description: str | None = None

    def to_dict(self) -> dict:
        out = {"url": self.url}
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass
class MetaSchema:
    """A schema body: the subset of JSON Schema an object type advertises."""

    type: str | None = None
    format: str | None = None
    description: str | None = None
    external_docs: ExternalDocument | None = None
    required: list[str] = field(default_factory=list)
    properties: list[tuple[str, MetaSchemaRef]] = field(default_factory=list)
    items: MetaSchemaRef | None = None
    additional_properties: MetaSchemaRef | None = None
    all_of: list[MetaSchemaRef] = field(default_factory=list)
    deprecated: bool = False
    default: Any = None
    read_only: bool = False
    write_only: bool = False
    example: Any = None

    # Validator constraints
    multiple_of: float | None = None
    maximum: float | None = None
    exclusive_maximum: bool = False
    minimum: float | None = None
    exclusive_minimum: bool = False
    max_length: int | None = None
    min_length: int | None = None
    pattern: str | None = None
    max_items: int | None = None
    min_items: int | None = None
    unique_items: bool = False
    max_properties: int | None = None
    min_properties: int | None = None
    enum: list[Any] | None = None

    @staticmethod
    def any() -> MetaSchema:
        """An empty schema, used as the starting point of schema patches."""
        return MetaSchema()

    def is_empty(self) -> bool:
        return self == MetaSchema.any()

    def merge(self, other: MetaSchema) -> MetaSchema:
        """Return a copy of this schema with every value set in ``other`` applied."""
        merged = replace(self)
        for f in fields(self):
            value = getattr(other, f.name)
            if f.type == "bool":
                setattr(merged, f.name, getattr(self, f.name) or value)
            elif f.type.startswith("list["):
                if value:
                    setattr(merged, f.name, list(value))
            elif value is not None:
                setattr(merged, f.name, value)
        return merged

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict:
        """Render the schema as a JSON-compatible dictionary."""
        out: dict[str, Any] = {}
        if self.type is not None:
            out["type"] = self.type
        if self.format is not None:
            out["format"] = self.format
        if self.description is not None:
            out["description"] = self.description
        if self.external_docs is not None:
            out["externalDocs"] = self.external_docs.to_dict()
        if self.required:
            out["required"] = list(self.required)
        if self.properties:
            out["properties"] = {name: ref.to_dict(ref_prefix) for name, ref in self.properties}
        if self.items is not None:
            out["items"] = self.items.to_dict(ref_prefix)
        if self.additional_properties is not None:
            out["additionalProperties"] = self.additional_properties.to_dict(ref_prefix)
        if self.all_of:
            out["allOf"] = [ref.to_dict(ref_prefix) for ref in self.all_of]
        if self.deprecated:
            out["deprecated"] = True
        if self.default is not None:
            out["default"] = self.default
        if self.read_only:
            out["readOnly"] = True
        if self.write_only:
            out["writeOnly"] = True
        if self.example is not None:
            out["example"] = self.example
        if self.multiple_of is not None:
            out["multipleOf"] = self.multiple_of
        if self.maximum is not None:
            out["maximum"] = self.maximum
            if self.exclusive_maximum:
                out["exclusiveMaximum"] = True
        if self.minimum is not None:
            out["minimum"] = self.minimum
            if self.exclusive_minimum:
                out["exclusiveMinimum"] = True
        if self.max_length is not None:
            out["maxLength"] = self.max_length
        if self.min_length is not None:
            out["minLength"] = self.min_length
        if self.pattern is not None:
            out["pattern"] = self.pattern
        if self.max_items is not None:
            out["maxItems"] = self.max_items
        if self.min_items is not None:
            out["minItems"] = self.min_items
        if self.unique_items:
            out["uniqueItems"] = True
        if self.max_properties is not None:
            out["maxProperties"] = self.max_properties
        if self.min_properties is not None:
            out["minProperties"] = self.min_properties
        if self.enum is not None:
            out["enum"] = list(self.enum)
        return out


@dataclass
class MetaSchemaRef:
    """Either an inline schema body or a reference to a registered one."""

    schema: MetaSchema | None = None
    name: str | None = None

    @staticmethod
    def inline(schema: MetaSchema) -> MetaSchemaRef:
        return MetaSchemaRef(schema=schema)

    @staticmethod
    def reference(name: str) -> MetaSchemaRef:
        return MetaSchemaRef(name=name)

    @property
    def is_inline(self) -> bool:
        return self.schema is not None

    def unwrap_inline(self) -> MetaSchema:
        if self.schema is None:
            raise ValueError(f"schema `{self.name}` is a reference, not an inline schema")
        return self.schema

    def unwrap_reference(self) -> str:
        if self.name is None:
            raise ValueError("schema is inline, not a reference")
        return self.name

    def merge(self, patch: MetaSchema) -> MetaSchemaRef:
        """
        Apply a schema patch.

        Inline bodies absorb the patch. A reference cannot carry extra keywords
        next to ``$ref``, so a non-empty patch wraps it in ``allOf``.
        """
        if self.schema is not None:
            return MetaSchemaRef.inline(self.schema.merge(patch))
        if patch.is_empty():
            return self
        return MetaSchemaRef.inline(MetaSchema(all_of=[self, MetaSchemaRef.inline(patch)]))

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict:
        if self.schema is not None:
            return self.schema.to_dict(ref_prefix)
        return {"$ref": f"{ref_prefix}{self.name}"}


class Registry:
    """
    Table of named schema bodies.

    Bodies are inserted at most once per name. ``create_schema`` stores a
    placeholder before computing the body so that recursive types terminate,
    and holds a re-entrant lock around the whole check-then-insert sequence.
    """

    def __init__(self, ref_prefix: str = DEFAULT_REF_PREFIX):
        self.ref_prefix = ref_prefix
        self.schemas: dict[str, MetaSchema] = {}
        self._lock = threading.RLock()

    def __contains__(self, name: str) -> bool:
        return name in self.schemas

    def __len__(self) -> int:
        return len(self.schemas)

    def get(self, name: str) -> MetaSchema | None:
        return self.schemas.get(name)

    def create_schema(self, name: str, builder: Callable[[Registry], MetaSchema]) -> None:
        """Compute and store the body for ``name`` unless it is already registered."""
        with self._lock:
            if name in self.schemas:
                return
            logger.debug("Registering schema %s", name)
            self.schemas[name] = MetaSchema(type=PLACEHOLDER_TYPE)
            try:
                meta = builder(self)
            except Exception:
                del self.schemas[name]
                raise
            self.schemas[name] = meta

    def create_fake_schema(self, schema_type: SchemaType) -> MetaSchema:
        """Return the full body of ``schema_type``, registering it when it is named."""
        schema_ref = schema_type.schema_ref()
        schema_type.register(self)
        if schema_ref.is_inline:
            return schema_ref.unwrap_inline()
        name = schema_ref.unwrap_reference()
        meta = self.schemas.get(name)
        if meta is None or meta.type == PLACEHOLDER_TYPE:
            raise ValueError(f"schema `{name}` is not available; flattened types cannot be recursive")
        return meta

    def export(self) -> dict[str, dict]:
        """Render every registered body, sorted by name."""
        with self._lock:
            return {name: self.schemas[name].to_dict(self.ref_prefix) for name in sorted(self.schemas)}
