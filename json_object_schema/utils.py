"""
Utility functions for naming properties and generated classes.
"""

import re
from enum import Enum

from .errors import ConfigurationError

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens) to spaces."""
    return text.replace("_", " ").replace("-", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "IntWrapper" -> "IntWrapper"
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


class RenameRule(str, Enum):
    """Rule deriving a serialized property name from a snake_case field identifier."""

    LOWERCASE = "lowercase"
    UPPERCASE = "UPPERCASE"
    PASCAL_CASE = "PascalCase"
    CAMEL_CASE = "camelCase"
    SNAKE_CASE = "snake_case"
    SCREAMING_SNAKE_CASE = "SCREAMING_SNAKE_CASE"
    KEBAB_CASE = "kebab-case"
    SCREAMING_KEBAB_CASE = "SCREAMING-KEBAB-CASE"

    @staticmethod
    def parse(value: "str | RenameRule") -> "RenameRule":
        try:
            return RenameRule(value)
        except ValueError:
            raise ConfigurationError(f"unknown rename rule `{value}`") from None

    def apply(self, identifier: str) -> str:
        """Rename a field identifier.

        Examples (for "first_name"):
            PascalCase -> "FirstName"
            camelCase -> "firstName"
            SCREAMING-KEBAB-CASE -> "FIRST-NAME"
        """
        if self is RenameRule.LOWERCASE:
            return identifier.lower()
        if self is RenameRule.UPPERCASE:
            return identifier.upper()
        if self in (RenameRule.PASCAL_CASE, RenameRule.CAMEL_CASE):
            pascal = "".join(part[:1].upper() + part[1:] for part in identifier.split("_") if part)
            if self is RenameRule.CAMEL_CASE:
                return pascal[:1].lower() + pascal[1:]
            return pascal
        if self is RenameRule.SNAKE_CASE:
            return identifier
        if self is RenameRule.SCREAMING_SNAKE_CASE:
            return identifier.upper()
        if self is RenameRule.KEBAB_CASE:
            return identifier.replace("_", "-")
        return identifier.upper().replace("_", "-")
