"""
Descriptor nodes: the compiler's input.

A ``TypeDescriptor`` is the normalized description of a record type as
produced by a declaration front end (the JSON document loader, or Python
code building descriptors directly). All modifiers are plain values; the
compiler resolves and checks them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from ..registry import ExternalDocument
from ..types import SchemaType, type_params
from ..utils import RenameRule
from ..validators import ValidatorSet


class DefaultValue(Enum):
    """Marker for a field defaulting to its type's zero value."""

    ZERO = "zero"


@dataclass
class FieldDescriptor:
    """A field definition in a record type."""

    name: str = ""  # Python identifier, used as the constructor keyword
    type: SchemaType | None = None
    rename: str | None = None  # Explicit serialized name

    # None, DefaultValue.ZERO, or a zero-argument factory
    default: DefaultValue | Callable[[], Any] | None = None

    read_only: bool = False
    write_only: bool = False
    flatten: bool = False
    skip: bool = False
    validators: ValidatorSet = field(default_factory=ValidatorSet)
    description: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def serialized_name(self, rename_all: RenameRule | None) -> str:
        if self.rename is not None:
            return self.rename
        if rename_all is not None:
            return rename_all.apply(self.name)
        return self.name


@dataclass
class ConcreteType:
    """A named instantiation of a generic record type."""

    name: str = ""
    params: Mapping[str, SchemaType] = field(default_factory=dict)
    example: Callable[[], Any] | None = None


@dataclass
class TypeDescriptor:
    """A record type: ordered fields plus type-level modifiers."""

    name: str = ""
    fields: list[FieldDescriptor] = field(default_factory=list)

    # Schema name override (defaults to ``name``)
    rename: str | None = None
    # Rule used for fields without an explicit rename
    rename_all: RenameRule | str | None = None

    read_only_all: bool = False
    write_only_all: bool = False
    deprecated: bool = False
    description: str | None = None
    external_docs: ExternalDocument | None = None

    # Zero-argument callable returning an example instance
    example: Callable[[], Any] | None = None

    # None means "use the compiler configuration"
    deny_unknown_fields: bool | None = None

    inline: bool = False
    concretes: list[ConcreteType] = field(default_factory=list)

    # Class used to build instances; a dataclass is generated when None
    cls: type | None = None

    @property
    def schema_name(self) -> str:
        return self.rename if self.rename is not None else self.name

    @property
    def type_params(self) -> set[str]:
        """Type parameters referenced by the declared field types."""
        params: set[str] = set()
        for f in self.fields:
            if f.type is not None:
                params |= type_params(f.type)
        return params
