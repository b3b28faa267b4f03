"""
Generic specialization.

A generic template is compiled once. Every named instantiation binds the
template's type parameters and gets its own public identity (schema name,
example, registry entry) while delegating to the shared compiled logic.
"""

from __future__ import annotations

import logging
from typing import Iterator

from ..errors import ConfigurationError
from ..registry import MetaSchemaRef
from .descriptor import ConcreteType
from .object_compiler import CompiledObject, ObjectType

logger = logging.getLogger(__name__)


class ConcreteObjectType(ObjectType):
    """One instantiation of a generic template. Always emitted as a reference."""

    def __init__(self, compiled: CompiledObject, concrete: ConcreteType):
        unknown = set(concrete.params) - compiled.descriptor.type_params
        if unknown:
            raise ConfigurationError(
                f"{concrete.name}: unknown type parameters {sorted(unknown)} for {compiled.descriptor.name}"
            )
        super().__init__(
            compiled,
            compiled.bind(concrete.params),
            name=concrete.name,
            example=concrete.example,
            inline=False,
        )
        self.concrete = concrete

    def schema_ref(self) -> MetaSchemaRef:
        return MetaSchemaRef.reference(self._name)

    def python_type(self) -> str:
        args = ", ".join(self.concrete.params[param].python_type() for param in sorted(self.concrete.params))
        return f"{super().python_type()}[{args}]"


class GenericObject:
    """A compiled generic template and its named instantiations."""

    def __init__(self, compiled: CompiledObject, concretes: list[ConcreteType]):
        self.compiled = compiled
        self.concretes: dict[str, ConcreteObjectType] = {}
        for concrete in concretes:
            if concrete.name in self.concretes:
                raise ConfigurationError(f"{compiled.descriptor.name}: duplicate concrete name `{concrete.name}`")
            self.concretes[concrete.name] = ConcreteObjectType(compiled, concrete)
            logger.debug("Specialized %s as %s", compiled.descriptor.name, concrete.name)

    @property
    def cls(self) -> type:
        return self.compiled.cls

    def __getitem__(self, name: str) -> ConcreteObjectType:
        return self.concretes[name]

    def __iter__(self) -> Iterator[ConcreteObjectType]:
        return iter(self.concretes.values())

    def __len__(self) -> int:
        return len(self.concretes)

    def names(self) -> list[str]:
        return list(self.concretes)
