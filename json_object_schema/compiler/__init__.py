"""
Object compiler module.

Contains the descriptor model, the object compiler and the generic
specialization layer.
"""

from __future__ import annotations

from .compiler import compile_object
from .descriptor import ConcreteType, DefaultValue, FieldDescriptor, TypeDescriptor
from .object_compiler import CompiledObject, FieldPlan, ObjectType
from .specialization import ConcreteObjectType, GenericObject

__all__ = [
    "compile_object",
    "TypeDescriptor",
    "FieldDescriptor",
    "ConcreteType",
    "DefaultValue",
    "CompiledObject",
    "FieldPlan",
    "ObjectType",
    "ConcreteObjectType",
    "GenericObject",
]
