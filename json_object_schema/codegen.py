"""
Source generation for compiled record types.

Renders a Python module declaring one dataclass per descriptor, with fields
in declaration order. The generated classes can be passed back as
``TypeDescriptor.cls`` so that parsing produces instances of them.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import jinja2

from .compiler import GenericObject, ObjectType, TypeDescriptor
from .config import CompilerConfig
from .utils import snake_to_pascal_case

logger = logging.getLogger(__name__)

CURRENT_DIR = Path(__file__).parent

_TYPING_NAMES = ("Any",)


class RecordCodeGenerator:
    """Generate dataclass declarations from compiled types."""

    def __init__(
        self,
        compiled: dict[str, ObjectType | GenericObject],
        config: CompilerConfig | None = None,
        generation_comment: str | None = None,
    ):
        self.compiled = compiled
        self.config = config or CompilerConfig()
        self.generation_comment = generation_comment
        self.jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True)
        self.jinja_env.filters["snake_to_pascal"] = snake_to_pascal_case
        self.prefix = self.jinja_env.from_string((CURRENT_DIR / "templates/python/prefix.py.jinja2").read_text())
        self.class_model = self.jinja_env.from_string((CURRENT_DIR / "templates/python/class.py.jinja2").read_text())

    def generate(self) -> str:
        classes = []
        type_vars: set[str] = set()
        for compiled in self.compiled.values():
            params = sorted(compiled.compiled.descriptor.type_params) if isinstance(compiled, GenericObject) else []
            type_vars.update(params)
            classes.append(self._render_class(compiled.compiled.descriptor, compiled, params))

        body = "".join(classes)
        typing_imports = [name for name in _TYPING_NAMES if re.search(rf"\b{name}\b", body)]
        if type_vars:
            typing_imports.extend(["Generic", "TypeVar"])

        comment = self.generation_comment if self.config.add_generation_comment else None
        prefix = self.prefix.render(
            generation_comment=comment,
            typing_imports=typing_imports,
            type_vars=sorted(type_vars),
        )
        logger.debug("Generated %d classes", len(classes))
        return prefix + body

    def _render_class(self, descriptor: TypeDescriptor, compiled: ObjectType | GenericObject, params: list[str]) -> str:
        # Generic templates share one field plan; annotations use the template's unbound types
        plans = compiled.compiled.fields
        fields = []
        for plan in plans:
            annotation = plan.type.python_type() if plan.type is not None else "Any"
            fields.append(
                {
                    "name": plan.name,
                    "annotation": annotation,
                    "comment": self._field_comment(plan),
                }
            )
        return self.class_model.render(
            class_name=descriptor.name,
            description=descriptor.description,
            type_params=params,
            fields=fields,
        )

    @staticmethod
    def _field_comment(plan) -> str | None:
        notes = []
        if plan.skip:
            notes.append("skipped")
        else:
            if plan.key != plan.name:
                notes.append(f'serialized as "{plan.key}"')
            if plan.flatten:
                notes.append("flattened")
            if plan.read_only:
                notes.append("read only")
            if plan.write_only:
                notes.append("write only")
        description = plan.descriptor.description
        if description:
            notes.insert(0, description.splitlines()[0])
        return ", ".join(notes) if notes else None
