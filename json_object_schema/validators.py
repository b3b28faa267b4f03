"""
Validator objects attached to object fields.

Each validator represents one declared constraint. The same constructor
argument drives both the runtime check performed while parsing and the
schema patch advertised for the field.
"""

import json
import math
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import ConfigurationError, ValidatorError
from .registry import MetaSchema
from .types import ArrayType, IntegerType, MapType, NumberType, OptionalType, SchemaType, StringType, TypeParam

NUMERIC_TYPES = (IntegerType, NumberType)


class Validator(ABC):
    """Base class for all validators"""

    # Key used for this validator in descriptor documents
    keyword: str = ""

    # Field types the constraint can check (empty = every type)
    applicable_types: Tuple[type, ...] = ()

    # Class-level cache for loaded message templates
    _message_templates: Optional[Dict[str, str]] = None

    def applies_to(self, schema_type: SchemaType) -> bool:
        """Whether this validator can check values of ``schema_type``. Unbound type parameters are accepted."""
        while isinstance(schema_type, OptionalType):
            schema_type = schema_type.inner
        if not self.applicable_types or isinstance(schema_type, TypeParam):
            return True
        return isinstance(schema_type, self.applicable_types)

    @classmethod
    def _load_message_templates(cls) -> Dict[str, str]:
        """
        Load error message templates from the JSON file shipped with the package.
        Results are cached to avoid repeated file I/O.
        """
        if Validator._message_templates is None:
            template_file = Path(__file__).parent / "validator_messages.json"
            with open(template_file, "r", encoding="utf-8") as f:
                Validator._message_templates = json.load(f)
        return Validator._message_templates

    def error_message(self) -> str:
        """Format the failure reason for this validator."""
        templates = self._load_message_templates()
        class_name = self.__class__.__name__
        if class_name not in templates:
            raise KeyError(f"No message template found for {class_name}")
        return templates[class_name].format(**self.get_template_params())

    @abstractmethod
    def get_template_params(self) -> Dict[str, Any]:
        """Parameters formatted into the message template."""
        pass

    @abstractmethod
    def check(self, value: Any) -> bool:
        """Return True when ``value`` satisfies the constraint."""
        pass

    @abstractmethod
    def update_meta(self, meta: MetaSchema) -> None:
        """Write the constraint into a schema patch."""
        pass

    def validate(self, value: Any) -> Optional[str]:
        """Return the failure reason, or None if the value is accepted. Absent values are accepted."""
        if value is None or self.check(value):
            return None
        return self.error_message()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.get_template_params()})"


class MultipleOfValidator(Validator):
    """Validates that a number is a multiple of ``multiple``"""

    keyword = "multiple_of"
    applicable_types = NUMERIC_TYPES

    def __init__(self, multiple: float):
        if multiple <= 0:
            raise ConfigurationError("multiple_of must be greater than 0")
        self.multiple = multiple

    def get_template_params(self) -> Dict[str, Any]:
        return {"multiple": self.multiple}

    def check(self, value: Any) -> bool:
        quotient = value / self.multiple
        return math.isclose(quotient, round(quotient), rel_tol=0.0, abs_tol=1e-9)

    def update_meta(self, meta: MetaSchema) -> None:
        meta.multiple_of = self.multiple


class MaximumValidator(Validator):
    """Validates maximum numeric value"""

    keyword = "maximum"
    applicable_types = NUMERIC_TYPES

    def __init__(self, maximum: float, exclusive: bool = False):
        self.maximum = maximum
        self.exclusive = exclusive

    def get_template_params(self) -> Dict[str, Any]:
        return {"operator": "<" if self.exclusive else "<=", "maximum": self.maximum}

    def check(self, value: Any) -> bool:
        if self.exclusive:
            return value < self.maximum
        return value <= self.maximum

    def update_meta(self, meta: MetaSchema) -> None:
        meta.maximum = self.maximum
        meta.exclusive_maximum = self.exclusive


class MinimumValidator(Validator):
    """Validates minimum numeric value"""

    keyword = "minimum"
    applicable_types = NUMERIC_TYPES

    def __init__(self, minimum: float, exclusive: bool = False):
        self.minimum = minimum
        self.exclusive = exclusive

    def get_template_params(self) -> Dict[str, Any]:
        return {"operator": ">" if self.exclusive else ">=", "minimum": self.minimum}

    def check(self, value: Any) -> bool:
        if self.exclusive:
            return value > self.minimum
        return value >= self.minimum

    def update_meta(self, meta: MetaSchema) -> None:
        meta.minimum = self.minimum
        meta.exclusive_minimum = self.exclusive


class MaxLengthValidator(Validator):
    """Validates maximum string length"""

    keyword = "max_length"
    applicable_types = (StringType,)

    def __init__(self, max_length: int):
        self.max_length = max_length

    def get_template_params(self) -> Dict[str, Any]:
        return {"max_length": self.max_length}

    def check(self, value: Any) -> bool:
        return len(value) <= self.max_length

    def update_meta(self, meta: MetaSchema) -> None:
        meta.max_length = self.max_length


class MinLengthValidator(Validator):
    """Validates minimum string length"""

    keyword = "min_length"
    applicable_types = (StringType,)

    def __init__(self, min_length: int):
        self.min_length = min_length

    def get_template_params(self) -> Dict[str, Any]:
        return {"min_length": self.min_length}

    def check(self, value: Any) -> bool:
        return len(value) >= self.min_length

    def update_meta(self, meta: MetaSchema) -> None:
        meta.min_length = self.min_length


class PatternValidator(Validator):
    """Validates that a string matches a regex pattern"""

    keyword = "pattern"
    applicable_types = (StringType,)

    def __init__(self, pattern: str):
        try:
            self.regex = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"invalid pattern {pattern!r}: {e}") from e
        self.pattern = pattern

    def get_template_params(self) -> Dict[str, Any]:
        return {"pattern": self.pattern}

    def check(self, value: Any) -> bool:
        return self.regex.search(value) is not None

    def update_meta(self, meta: MetaSchema) -> None:
        meta.pattern = self.pattern


class MaxItemsValidator(Validator):
    """Validates maximum array length"""

    keyword = "max_items"
    applicable_types = (ArrayType,)

    def __init__(self, max_items: int):
        self.max_items = max_items

    def get_template_params(self) -> Dict[str, Any]:
        return {"max_items": self.max_items}

    def check(self, value: Any) -> bool:
        return len(value) <= self.max_items

    def update_meta(self, meta: MetaSchema) -> None:
        meta.max_items = self.max_items


class MinItemsValidator(Validator):
    """Validates minimum array length"""

    keyword = "min_items"
    applicable_types = (ArrayType,)

    def __init__(self, min_items: int):
        self.min_items = min_items

    def get_template_params(self) -> Dict[str, Any]:
        return {"min_items": self.min_items}

    def check(self, value: Any) -> bool:
        return len(value) >= self.min_items

    def update_meta(self, meta: MetaSchema) -> None:
        meta.min_items = self.min_items


class UniqueItemsValidator(Validator):
    """Validates that array items are pairwise distinct"""

    keyword = "unique_items"
    applicable_types = (ArrayType,)

    def get_template_params(self) -> Dict[str, Any]:
        return {}

    def check(self, value: Any) -> bool:
        seen: List[Any] = []
        for item in value:
            if item in seen:
                return False
            seen.append(item)
        return True

    def update_meta(self, meta: MetaSchema) -> None:
        meta.unique_items = True


class MaxPropertiesValidator(Validator):
    """Validates the maximum number of object properties"""

    keyword = "max_properties"
    applicable_types = (MapType,)

    def __init__(self, max_properties: int):
        self.max_properties = max_properties

    def get_template_params(self) -> Dict[str, Any]:
        return {"max_properties": self.max_properties}

    def check(self, value: Any) -> bool:
        return len(value) <= self.max_properties

    def update_meta(self, meta: MetaSchema) -> None:
        meta.max_properties = self.max_properties


class MinPropertiesValidator(Validator):
    """Validates the minimum number of object properties"""

    keyword = "min_properties"
    applicable_types = (MapType,)

    def __init__(self, min_properties: int):
        self.min_properties = min_properties

    def get_template_params(self) -> Dict[str, Any]:
        return {"min_properties": self.min_properties}

    def check(self, value: Any) -> bool:
        return len(value) >= self.min_properties

    def update_meta(self, meta: MetaSchema) -> None:
        meta.min_properties = self.min_properties


class EnumValidator(Validator):
    """Validates that a value is one of ``values``"""

    keyword = "enum"

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)
        if not self.values:
            raise ConfigurationError("enum must list at least one value")

    def get_template_params(self) -> Dict[str, Any]:
        return {"values": ", ".join(repr(v) for v in self.values)}

    def check(self, value: Any) -> bool:
        return value in self.values

    def update_meta(self, meta: MetaSchema) -> None:
        meta.enum = list(self.values)


VALIDATORS_BY_KEYWORD = {
    cls.keyword: cls
    for cls in (
        MultipleOfValidator,
        MaximumValidator,
        MinimumValidator,
        MaxLengthValidator,
        MinLengthValidator,
        PatternValidator,
        MaxItemsValidator,
        MinItemsValidator,
        UniqueItemsValidator,
        MaxPropertiesValidator,
        MinPropertiesValidator,
        EnumValidator,
    )
}


class ValidatorSet:
    """Ordered validators of one field"""

    def __init__(self, validators: Optional[Iterable[Validator]] = None):
        self.validators: List[Validator] = list(validators or [])

    @staticmethod
    def from_dict(declarations: Dict[str, Any]) -> "ValidatorSet":
        """
        Build a validator set from ``{keyword: argument}`` declarations.

        Declaration order is kept. ``maximum`` and ``minimum`` accept either a
        number or ``{"value": n, "exclusive": bool}``; ``unique_items`` is
        enabled with ``true``.

        Raises:
            ConfigurationError: If a keyword is unknown or its argument is invalid
        """
        validators: List[Validator] = []
        for keyword, argument in declarations.items():
            cls = VALIDATORS_BY_KEYWORD.get(keyword)
            if cls is None:
                raise ConfigurationError(f"unknown validator `{keyword}`")
            if cls is UniqueItemsValidator:
                if argument:
                    validators.append(UniqueItemsValidator())
            elif cls in (MaximumValidator, MinimumValidator) and isinstance(argument, dict):
                validators.append(cls(argument["value"], exclusive=argument.get("exclusive", False)))
            else:
                validators.append(cls(argument))
        return ValidatorSet(validators)

    def __iter__(self):
        return iter(self.validators)

    def __len__(self) -> int:
        return len(self.validators)

    def mismatched(self, schema_type: SchemaType) -> Optional[Validator]:
        """The first validator that cannot check values of ``schema_type``, or None."""
        for validator in self.validators:
            if not validator.applies_to(schema_type):
                return validator
        return None

    def check(self, value: Any) -> None:
        """
        Run every validator in declaration order.

        Raises:
            ValidatorError: For the first validator that rejects ``value``
        """
        for validator in self.validators:
            reason = validator.validate(value)
            if reason is not None:
                raise ValidatorError(reason)

    def update_meta(self, meta: MetaSchema) -> None:
        for validator in self.validators:
            validator.update_meta(meta)
