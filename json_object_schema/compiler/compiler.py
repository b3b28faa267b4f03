"""
Entry point of the object compiler.
"""

from __future__ import annotations

from ..config import CompilerConfig
from ..errors import ConfigurationError
from .descriptor import TypeDescriptor
from .object_compiler import CompiledObject, ObjectType
from .specialization import GenericObject


def compile_object(descriptor: TypeDescriptor, config: CompilerConfig | None = None) -> ObjectType | GenericObject:
    """
    Compile a type descriptor into its parser, serializer and schema builder.

    Args:
        descriptor: The record type to compile
        config: Compiler configuration (defaults apply when None)

    Returns:
        An ObjectType for plain types, or a GenericObject holding one
        ConcreteObjectType per declared instantiation

    Raises:
        ConfigurationError: If the descriptor's modifiers are inconsistent
    """
    if descriptor.inline and descriptor.concretes:
        raise ConfigurationError(f"{descriptor.name}: Inline objects cannot have the `concretes` attribute.")

    if descriptor.example is not None and descriptor.concretes:
        raise ConfigurationError(
            f"{descriptor.name}: The example should be specified with the `concretes.example` attribute."
        )

    if descriptor.type_params and not descriptor.concretes:
        raise ConfigurationError(
            f"{descriptor.name}: type parameters {sorted(descriptor.type_params)} require at least one concrete"
        )

    compiled = CompiledObject(descriptor, config)
    if descriptor.concretes:
        return GenericObject(compiled, descriptor.concretes)

    return ObjectType(
        compiled,
        compiled.fields,
        name=descriptor.schema_name,
        example=descriptor.example,
        inline=descriptor.inline,
    )
