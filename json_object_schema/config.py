"""
Configuration for the object compiler and the command line tools.
"""

from __future__ import annotations

from dataclasses import dataclass

from .registry import DEFAULT_REF_PREFIX


@dataclass
class CompilerConfig:
    """Configuration options for compilation and schema export."""

    # Prefix of "$ref" values in exported schemas
    ref_prefix: str = DEFAULT_REF_PREFIX

    # Rename rule applied when a descriptor does not declare one (None = keep identifiers)
    default_rename_all: str | None = None

    # Reject unknown properties for descriptors that do not set deny_unknown_fields
    deny_unknown_fields: bool = False

    # JSON indentation used by the CLI when writing output
    output_indent: int = 2

    # Add generation comment at top of generated source
    add_generation_comment: bool = True

    @staticmethod
    def from_dict(d: dict) -> CompilerConfig:
        """Create a config from a dictionary."""
        config = CompilerConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "ref_prefix": self.ref_prefix,
            "default_rename_all": self.default_rename_all,
            "deny_unknown_fields": self.deny_unknown_fields,
            "output_indent": self.output_indent,
            "add_generation_comment": self.add_generation_comment,
        }
