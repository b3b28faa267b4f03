"""
Error types raised by the object compiler and the compiled codecs.

Configuration errors are programmer errors detected while a descriptor is
compiled. Parse errors are raised by ``parse`` for bad input and carry the
location of the failure so callers can report a dotted/bracketed path.
"""

from __future__ import annotations

from typing import Any


class ConfigurationError(ValueError):
    """Raised when a type descriptor cannot be compiled."""

    pass


class ParseError(Exception):
    """Base class for all errors raised while parsing a JSON value."""

    @property
    def path(self) -> list[str | int]:
        """Segments leading to the failing value (field names and item indexes)."""
        return []

    @property
    def path_str(self) -> str:
        """Render ``path`` as ``address.lines[2]``."""
        out = ""
        for segment in self.path:
            if isinstance(segment, int):
                out += f"[{segment}]"
            elif out:
                out += f".{segment}"
            else:
                out = segment
        return out

    @property
    def leaf(self) -> ParseError:
        """The innermost error, without field/item wrappers."""
        return self


class ExpectedType(ParseError):
    """The JSON value does not have the expected type."""

    def __init__(self, expected: str, value: Any):
        self.expected = expected
        self.value = value
        super().__init__(f'Expected input type "{expected}", found {_describe(value)}.')


class ReadOnlyViolation(ParseError):
    """A read-only property was supplied in the input."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"properties `{name}` is read only.")


class UnknownField(ParseError):
    """An unexpected property was supplied while unknown fields are denied."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown field `{name}`.")


class ValidatorError(ParseError):
    """A field validator rejected a parsed value."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class _NestedError(ParseError):
    segment: str | int

    def __init__(self, inner: ParseError):
        self.inner = inner
        super().__init__(str(inner))

    @property
    def path(self) -> list[str | int]:
        return [self.segment] + self.inner.path

    @property
    def leaf(self) -> ParseError:
        return self.inner.leaf

    def __str__(self) -> str:
        return f"failed to parse `{self.path_str}`: {self.leaf}"


class FieldError(_NestedError):
    """Wraps an error raised while parsing the property ``name``."""

    def __init__(self, name: str, inner: ParseError):
        self.name = name
        self.segment = name
        super().__init__(inner)


class ItemError(_NestedError):
    """Wraps an error raised while parsing the array item at ``index``."""

    def __init__(self, index: int, inner: ParseError):
        self.index = index
        self.segment = index
        super().__init__(inner)


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
