"""
Descriptor document loader.

Reads a JSON document declaring record types and turns it into compiled
types. References between types (``{"ref": "Name"}``) are resolved by
compiling the referenced type first.

Document layout::

    {
      "types": {
        "Pet": {
          "description": "A pet",
          "rename_all": "camelCase",
          "fields": [
            {"name": "pet_name", "type": "string", "validators": {"max_length": 32}},
            {"name": "tags", "type": {"array": "string"}, "default": true}
          ]
        }
      }
    }
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from .compiler import (
    ConcreteType,
    DefaultValue,
    FieldDescriptor,
    GenericObject,
    ObjectType,
    TypeDescriptor,
    compile_object,
)
from .config import CompilerConfig
from .errors import ConfigurationError, ParseError
from .registry import ExternalDocument, Registry
from .types import ANY, BOOLEAN, INTEGER, NUMBER, STRING, ArrayType, MapType, OptionalType, SchemaType, TypeParam, type_params
from .validators import ValidatorSet

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES: dict[str, SchemaType] = {
    "integer": INTEGER,
    "number": NUMBER,
    "string": STRING,
    "boolean": BOOLEAN,
    "any": ANY,
}

TYPE_KEYS = {
    "fields",
    "rename",
    "rename_all",
    "description",
    "deprecated",
    "read_only_all",
    "write_only_all",
    "deny_unknown_fields",
    "inline",
    "external_docs",
    "example",
    "concretes",
}

FIELD_KEYS = {
    "name",
    "type",
    "rename",
    "default",
    "read_only",
    "write_only",
    "flatten",
    "skip",
    "description",
    "validators",
}


class DescriptorLoader:
    """Loads and compiles the record types declared in a descriptor document."""

    def __init__(self, document: dict[str, Any], config: CompilerConfig | None = None):
        if not isinstance(document, dict) or not isinstance(document.get("types"), dict):
            raise ConfigurationError('descriptor document must contain a "types" object')
        self.config = config or CompilerConfig()
        self.definitions: dict[str, dict[str, Any]] = document["types"]
        self.descriptors: dict[str, TypeDescriptor] = {}
        self.compiled: dict[str, ObjectType | GenericObject] = {}
        self._in_progress: set[str] = set()
        self._public_names = self._build_public_names()

    @staticmethod
    def from_file(path: str | Path, config: CompilerConfig | None = None) -> DescriptorLoader:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
        return DescriptorLoader(document, config)

    def _build_public_names(self) -> dict[str, tuple[str, str | None]]:
        """Map every public type name to (definition key, concrete name)."""
        names: dict[str, tuple[str, str | None]] = {}

        def add(public_name: str, target: tuple[str, str | None]) -> None:
            if public_name in names:
                raise ConfigurationError(f"type name `{public_name}` is declared twice")
            names[public_name] = target

        for key, definition in self.definitions.items():
            if not isinstance(definition, dict):
                raise ConfigurationError(f"types.{key}: definition must be an object")
            concretes = definition.get("concretes") or []
            if concretes:
                for i, concrete in enumerate(concretes):
                    if not isinstance(concrete, dict) or "name" not in concrete:
                        raise ConfigurationError(f"types.{key}.concretes[{i}]: concrete has no name")
                    add(concrete["name"], (key, concrete["name"]))
            else:
                add(definition.get("rename") or key, (key, None))
        return names

    def load(self) -> dict[str, ObjectType | GenericObject]:
        """Compile every declared type, keyed by definition name."""
        for key in self.definitions:
            self._compile(key)
        return self.compiled

    def schema_types(self) -> dict[str, ObjectType]:
        """Every public type (plain types and concrete instantiations) by public name."""
        self.load()
        return {public_name: self.resolve_public_name(public_name) for public_name in self._public_names}

    def resolve_public_name(self, public_name: str) -> ObjectType:
        if public_name not in self._public_names:
            raise ConfigurationError(f"unknown type `{public_name}`")
        key, concrete = self._public_names[public_name]
        compiled = self._compile(key)
        if concrete is not None:
            return compiled[concrete]
        return compiled

    def register_all(self, registry: Registry) -> Registry:
        for schema_type in self.schema_types().values():
            schema_type.register(registry)
        return registry

    def _compile(self, key: str) -> ObjectType | GenericObject:
        if key in self.compiled:
            return self.compiled[key]
        if key in self._in_progress:
            raise ConfigurationError(f"types.{key}: circular reference between descriptor types")

        self._in_progress.add(key)
        try:
            holder: dict[str, Any] = {}
            descriptor = self._parse_type(key, self.definitions[key], holder)
            compiled = compile_object(descriptor, self.config)
            holder["type"] = compiled
            self._check_examples(key, descriptor)
        finally:
            self._in_progress.discard(key)

        logger.debug("Loaded type %s", key)
        self.descriptors[key] = descriptor
        self.compiled[key] = compiled
        return compiled

    @staticmethod
    def _check_examples(key: str, descriptor: TypeDescriptor) -> None:
        examples = [(f"types.{key}.example", descriptor.example)]
        examples += [(f"types.{key}.concretes.{c.name}.example", c.example) for c in descriptor.concretes]
        for path, example in examples:
            if example is None:
                continue
            try:
                example()
            except ParseError as e:
                raise ConfigurationError(f"{path}: {e}") from e

    def _parse_type(self, key: str, definition: dict[str, Any], holder: dict[str, Any]) -> TypeDescriptor:
        path = f"types.{key}"
        self._check_keys(definition, TYPE_KEYS, path)

        fields = [
            self._parse_field(field_def, f"{path}.fields[{i}]") for i, field_def in enumerate(definition.get("fields", []))
        ]

        external_docs = None
        if "external_docs" in definition:
            docs = definition["external_docs"]
            external_docs = ExternalDocument(url=docs["url"], description=docs.get("description"))

        example = None
        if "example" in definition:
            example_json = definition["example"]

            def example():
                return holder["type"].parse(copy.deepcopy(example_json))

        concretes = [
            self._parse_concrete(concrete, holder, f"{path}.concretes[{i}]")
            for i, concrete in enumerate(definition.get("concretes", []))
        ]

        return TypeDescriptor(
            name=key,
            fields=fields,
            rename=definition.get("rename"),
            rename_all=definition.get("rename_all"),
            read_only_all=definition.get("read_only_all", False),
            write_only_all=definition.get("write_only_all", False),
            deprecated=definition.get("deprecated", False),
            description=definition.get("description"),
            external_docs=external_docs,
            example=example,
            deny_unknown_fields=definition.get("deny_unknown_fields"),
            inline=definition.get("inline", False),
            concretes=concretes,
        )

    def _parse_concrete(self, concrete: dict[str, Any], holder: dict[str, Any], path: str) -> ConcreteType:
        self._check_keys(concrete, {"name", "params", "example"}, path)
        name = concrete["name"]
        params = {param: self._parse_type_expr(expr, f"{path}.params.{param}") for param, expr in concrete.get("params", {}).items()}

        example = None
        if "example" in concrete:
            example_json = concrete["example"]

            def example():
                return holder["type"][name].parse(copy.deepcopy(example_json))

        return ConcreteType(name=name, params=params, example=example)

    def _parse_field(self, field_def: dict[str, Any], path: str) -> FieldDescriptor:
        self._check_keys(field_def, FIELD_KEYS, path)
        if "name" not in field_def:
            raise ConfigurationError(f"{path}: field has no name")

        field_type = None
        if "type" in field_def:
            field_type = self._parse_type_expr(field_def["type"], f"{path}.type")
        validators = ValidatorSet.from_dict(field_def.get("validators", {}))

        return FieldDescriptor(
            name=field_def["name"],
            type=field_type,
            rename=field_def.get("rename"),
            default=self._parse_default(field_def.get("default"), field_type, validators, path),
            read_only=field_def.get("read_only", False),
            write_only=field_def.get("write_only", False),
            flatten=field_def.get("flatten", False),
            skip=field_def.get("skip", False),
            validators=validators,
            description=field_def.get("description"),
        )

    def _parse_default(self, default: Any, field_type: SchemaType | None, validators: ValidatorSet, path: str):
        if default is None or default is False:
            return None
        if default is True:
            return DefaultValue.ZERO
        if isinstance(default, dict) and set(default) == {"value"}:
            if field_type is None or type_params(field_type):
                raise ConfigurationError(f"{path}: a default value requires a concrete field type")
            try:
                value = field_type.parse(copy.deepcopy(default["value"]))
                # Mismatched validators are reported by the compiler
                if validators.mismatched(field_type) is None:
                    validators.check(value)
            except ParseError as e:
                raise ConfigurationError(f"{path}.default: {e}") from e

            def factory():
                return copy.deepcopy(value)

            return factory
        raise ConfigurationError(f'{path}: default must be true or {{"value": ...}}')

    def _parse_type_expr(self, expr: Any, path: str) -> SchemaType:
        if isinstance(expr, str):
            if expr not in PRIMITIVE_TYPES:
                raise ConfigurationError(f"{path}: unknown type `{expr}`")
            return PRIMITIVE_TYPES[expr]

        if isinstance(expr, dict) and len(expr) == 1:
            kind, argument = next(iter(expr.items()))
            if kind == "array":
                return ArrayType(self._parse_type_expr(argument, f"{path}.array"))
            if kind == "optional":
                return OptionalType(self._parse_type_expr(argument, f"{path}.optional"))
            if kind == "map":
                return MapType(self._parse_type_expr(argument, f"{path}.map"))
            if kind == "param":
                return TypeParam(argument)
            if kind == "ref":
                return self._resolve_ref(argument, path)

        raise ConfigurationError(f"{path}: invalid type expression {expr!r}")

    def _resolve_ref(self, name: str, path: str) -> SchemaType:
        if name not in self._public_names:
            if name in self.definitions:
                raise ConfigurationError(f"{path}: generic type `{name}` must be referenced through one of its concretes")
            raise ConfigurationError(f"{path}: unknown type `{name}`")
        return self.resolve_public_name(name)

    @staticmethod
    def _check_keys(definition: dict[str, Any], allowed: set[str], path: str) -> None:
        unknown = set(definition) - allowed
        if unknown:
            raise ConfigurationError(f"{path}: unknown keys {sorted(unknown)}")
