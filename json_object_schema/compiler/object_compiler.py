"""
The object compiler.

``CompiledObject`` turns a ``TypeDescriptor`` into a field plan (serialized
names, effective access modes, defaults, validators) and implements the
parse, serialize and schema-building operations over that plan. The
operations take the field plan as an argument so that generic templates can
share them across instantiations; ``ObjectType`` binds them to one plan and
exposes the ``SchemaType`` interface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, make_dataclass, replace
from typing import Any, Callable, Mapping

from ..config import CompilerConfig
from ..errors import (
    ConfigurationError,
    ExpectedType,
    FieldError,
    ParseError,
    ReadOnlyViolation,
    UnknownField,
)
from ..registry import MetaSchema, MetaSchemaRef, Registry
from ..types import SchemaType
from ..utils import RenameRule, snake_to_pascal_case
from ..validators import ValidatorSet
from .descriptor import DefaultValue, FieldDescriptor, TypeDescriptor

logger = logging.getLogger(__name__)


@dataclass
class FieldPlan:
    """A field with its modifiers resolved against the type-level modifiers."""

    descriptor: FieldDescriptor
    key: str  # Serialized property name
    type: SchemaType | None
    read_only: bool = False
    write_only: bool = False

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def skip(self) -> bool:
        return self.descriptor.skip

    @property
    def flatten(self) -> bool:
        return self.descriptor.flatten

    @property
    def has_default(self) -> bool:
        return self.descriptor.has_default

    @property
    def validators(self) -> ValidatorSet:
        return self.descriptor.validators

    def default_value(self) -> Any:
        """The declared default, or the type's zero value when none is declared."""
        default = self.descriptor.default
        if callable(default):
            return default()
        if self.type is None:
            return None
        return self.type.zero_value()

    def resolve(self, bindings: Mapping[str, SchemaType]) -> FieldPlan:
        if self.type is None:
            return self
        return replace(self, type=self.type.resolve(bindings))


class CompiledObject:
    """Parse, serialize and schema logic shared by every binding of one descriptor."""

    def __init__(self, descriptor: TypeDescriptor, config: CompilerConfig | None = None):
        config = config or CompilerConfig()
        self.descriptor = descriptor

        rename_all = descriptor.rename_all if descriptor.rename_all is not None else config.default_rename_all
        self.rename_all = RenameRule.parse(rename_all) if rename_all is not None else None

        if descriptor.deny_unknown_fields is None:
            self.deny_unknown_fields = config.deny_unknown_fields
        else:
            self.deny_unknown_fields = descriptor.deny_unknown_fields

        self.fields = self._plan_fields()
        self.cls = descriptor.cls or self._make_record_class()
        logger.debug("Compiled %s with %d fields", descriptor.name, len(self.fields))

    def _plan_fields(self) -> list[FieldPlan]:
        descriptor = self.descriptor
        plans = []
        keys: set[str] = set()
        for f in descriptor.fields:
            if not f.name.isidentifier():
                raise ConfigurationError(f"{descriptor.name}: field name `{f.name}` is not an identifier")

            if f.default is not None and f.default is not DefaultValue.ZERO and not callable(f.default):
                raise ConfigurationError(f"{descriptor.name}.{f.name}: default must be DefaultValue.ZERO or a callable")

            if f.skip:
                plans.append(FieldPlan(descriptor=f, key=f.name, type=f.type))
                continue

            if f.type is None:
                raise ConfigurationError(f"{descriptor.name}.{f.name}: field has no type")

            read_only = descriptor.read_only_all or f.read_only
            write_only = descriptor.write_only_all or f.write_only
            if read_only and write_only:
                raise ConfigurationError(
                    f"{descriptor.name}.{f.name}: the `write_only` and `read_only` attributes cannot be enabled both."
                )
            if f.flatten and (read_only or write_only):
                raise ConfigurationError(
                    f"{descriptor.name}.{f.name}: flattened fields cannot be read only or write only."
                )
            self._check_validators(f.name, f.type, f.validators)

            key = f.serialized_name(self.rename_all)
            if not f.flatten:
                if key in keys:
                    raise ConfigurationError(f"{descriptor.name}: duplicate property name `{key}`")
                keys.add(key)

            plans.append(FieldPlan(descriptor=f, key=key, type=f.type, read_only=read_only, write_only=write_only))
        return plans

    def _check_validators(self, field_name: str, field_type: SchemaType, validators: ValidatorSet) -> None:
        validator = validators.mismatched(field_type)
        if validator is not None:
            raise ConfigurationError(
                f"{self.descriptor.name}.{field_name}: validator `{validator.keyword}` "
                f"cannot be applied to type `{field_type.name()}`"
            )

    def _make_record_class(self) -> type:
        name = self.descriptor.name
        if not name.isidentifier():
            name = snake_to_pascal_case(name)
        try:
            return make_dataclass(name, [(f.name, Any) for f in self.descriptor.fields])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"cannot build a record class for {self.descriptor.name}: {e}") from e

    def bind(self, bindings: Mapping[str, SchemaType]) -> list[FieldPlan]:
        """Field plans with every type parameter replaced by its binding."""
        plans = [plan.resolve(bindings) for plan in self.fields]
        for plan in plans:
            if not plan.skip:
                self._check_validators(plan.name, plan.type, plan.validators)
        return plans

    def parse_object(self, value: Any, fields: list[FieldPlan], flattened_keys: set[str]) -> Any:
        """Parse a JSON object into an instance.

        ``None`` is treated as an empty object. Fields are read in declaration
        order from a working copy of the object; ``flattened_keys`` lists the
        keys owned by flattened fields, which are never reported as unknown.
        """
        if value is None:
            value = {}
        if not isinstance(value, dict):
            raise ExpectedType("object", value)

        obj = dict(value)
        kwargs = {}
        for plan in fields:
            kwargs[plan.name] = self._parse_field(plan, obj)

        if self.deny_unknown_fields:
            for key in obj:
                if key not in flattened_keys:
                    raise UnknownField(key)

        return self.cls(**kwargs)

    def _parse_field(self, plan: FieldPlan, obj: dict) -> Any:
        if plan.skip:
            return plan.default_value()

        if plan.flatten:
            # The flattened type reads a copy of the remaining object; nothing is consumed
            return plan.type.parse(dict(obj))

        if plan.read_only:
            if plan.key in obj:
                raise ReadOnlyViolation(plan.key)
            return plan.default_value()

        raw = obj.pop(plan.key, None)
        if raw is None and plan.has_default:
            return plan.default_value()

        try:
            value = plan.type.parse(raw)
            plan.validators.check(value)
        except ParseError as e:
            raise FieldError(plan.key, e) from e
        return value

    def to_json(self, instance: Any, fields: list[FieldPlan]) -> dict:
        """Serialize an instance. Later fields overwrite keys merged by earlier flattened fields."""
        out: dict[str, Any] = {}
        for plan in fields:
            if plan.skip or plan.write_only:
                continue
            value = plan.type.serialize(getattr(instance, plan.name))
            if plan.flatten:
                if isinstance(value, dict):
                    out.update(value)
            elif value is not None:
                out[plan.key] = value
        return out

    def register_fields(self, registry: Registry, fields: list[FieldPlan]) -> None:
        for plan in fields:
            if plan.skip:
                continue
            if plan.flatten:
                registry.create_fake_schema(plan.type)
            else:
                plan.type.register(registry)

    def create_schema(self, registry: Registry, fields: list[FieldPlan]) -> MetaSchema:
        """Build the object schema body.

        Colliding property names follow the serializer: the later field in
        declaration order provides the property schema.
        """
        required: list[str] = []
        properties: dict[str, MetaSchemaRef] = {}

        for plan in fields:
            if plan.skip:
                continue

            if plan.flatten:
                inner = registry.create_fake_schema(plan.type)
                for name, schema_ref in inner.properties:
                    properties[name] = schema_ref
                    if name in inner.required:
                        if name not in required:
                            required.append(name)
                    elif name in required:
                        required.remove(name)
                continue

            patch = MetaSchema.any()
            if plan.has_default:
                patch.default = plan.type.serialize(plan.default_value())
            patch.read_only = plan.read_only
            patch.write_only = plan.write_only
            patch.description = plan.descriptor.description
            plan.validators.update_meta(patch)

            properties[plan.key] = plan.type.schema_ref().merge(patch)
            if plan.type.is_required and not plan.has_default:
                if plan.key not in required:
                    required.append(plan.key)
            elif plan.key in required:
                required.remove(plan.key)

        return MetaSchema(
            type="object",
            description=self.descriptor.description,
            external_docs=self.descriptor.external_docs,
            required=required,
            properties=list(properties.items()),
            deprecated=self.descriptor.deprecated,
        )

    def flattened_keys(self, fields: list[FieldPlan]) -> set[str]:
        """Property names contributed by flattened fields."""
        keys: set[str] = set()
        flattened = [plan for plan in fields if plan.flatten and not plan.skip]
        if flattened:
            registry = Registry()
            for plan in flattened:
                keys.update(name for name, _ in registry.create_fake_schema(plan.type).properties)
        return keys


class ObjectType(SchemaType):
    """A compiled record type bound to one field plan."""

    def __init__(
        self,
        compiled: CompiledObject,
        fields: list[FieldPlan],
        name: str,
        example: Callable[[], Any] | None = None,
        inline: bool = False,
    ):
        self.compiled = compiled
        self.fields = fields
        self._name = name
        self._example = example
        self.inline = inline
        self._flattened_keys: set[str] | None = None

    @property
    def cls(self) -> type:
        return self.compiled.cls

    @property
    def descriptor(self) -> TypeDescriptor:
        return self.compiled.descriptor

    def name(self) -> str:
        return self._name

    def example(self) -> Any:
        """The serialized example, or None."""
        if self._example is None:
            return None
        return self.serialize(self._example())

    def build_schema(self, registry: Registry) -> MetaSchema:
        self.compiled.register_fields(registry, self.fields)
        meta = self.compiled.create_schema(registry, self.fields)
        meta.example = self.example()
        return meta

    def schema_ref(self) -> MetaSchemaRef:
        if self.inline:
            return MetaSchemaRef.inline(self.build_schema(Registry()))
        return MetaSchemaRef.reference(self._name)

    def register(self, registry: Registry) -> None:
        if self.inline:
            self.compiled.register_fields(registry, self.fields)
        else:
            registry.create_schema(self._name, self.build_schema)

    def parse(self, value: Any) -> Any:
        if self._flattened_keys is None:
            self._flattened_keys = self.compiled.flattened_keys(self.fields)
        return self.compiled.parse_object(value, self.fields, self._flattened_keys)

    def serialize(self, value: Any) -> dict:
        return self.compiled.to_json(value, self.fields)

    def zero_value(self) -> Any:
        return self.cls(**{plan.name: plan.default_value() for plan in self.fields})

    def python_type(self) -> str:
        return snake_to_pascal_case(self.descriptor.name)
