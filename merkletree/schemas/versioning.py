"""
Schemas & Errors
File: versioning.py

Purpose: Centralize persisted document format constants.
This file must remain tiny and have no imports from other schema files
to avoid circular dependencies.
"""

from typing import Literal

# Current native document format
FORMAT_VERSION: int = 1

# Format tag written by the JavaScript StandardMerkleTree
STANDARD_V1_FORMAT: str = "standard-v1"

# Type alias for the native format version
FormatVersion = Literal[1]

SUPPORTED_FORMAT_VERSIONS: frozenset[int] = frozenset({1})
SUPPORTED_FOREIGN_FORMATS: frozenset[str] = frozenset({STANDARD_V1_FORMAT})


def is_supported_format_version(version: object) -> bool:
    """Check if a native format version is supported without raising."""
    # bool is an int subclass; True must not pass as version 1
    return (
        isinstance(version, int)
        and not isinstance(version, bool)
        and version in SUPPORTED_FORMAT_VERSIONS
    )


def is_supported_foreign_format(fmt: object) -> bool:
    """Check if a foreign format tag is supported without raising."""
    return isinstance(fmt, str) and fmt in SUPPORTED_FOREIGN_FORMATS
