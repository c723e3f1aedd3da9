"""
Schemas & Errors

Purpose: Export the public API for the schemas module.
"""

from .versioning import (
    FORMAT_VERSION,
    STANDARD_V1_FORMAT,
    SUPPORTED_FOREIGN_FORMATS,
    SUPPORTED_FORMAT_VERSIONS,
    FormatVersion,
    is_supported_foreign_format,
    is_supported_format_version,
)

from .errors import (
    AmbiguousLeafError,
    CorruptDataError,
    EmptyInputError,
    EncodingError,
    ErrorCodes,
    FormatVersionError,
    IndexOutOfRangeError,
    InvalidHashError,
    InvalidProofError,
    MerkleTreeError,
    MerkleTreeException,
    NotFoundError,
    UnsupportedHashError,
)

from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

from .dump import (
    StandardV1Dump,
    StandardV1Value,
    TreeDump,
)

from .proof import LeafProof


__all__ = [
    # Versioning
    "FORMAT_VERSION",
    "STANDARD_V1_FORMAT",
    "SUPPORTED_FOREIGN_FORMATS",
    "SUPPORTED_FORMAT_VERSIONS",
    "FormatVersion",
    "is_supported_foreign_format",
    "is_supported_format_version",
    # Errors
    "AmbiguousLeafError",
    "CorruptDataError",
    "EmptyInputError",
    "EncodingError",
    "ErrorCodes",
    "FormatVersionError",
    "IndexOutOfRangeError",
    "InvalidHashError",
    "InvalidProofError",
    "MerkleTreeError",
    "MerkleTreeException",
    "NotFoundError",
    "UnsupportedHashError",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
    # Documents
    "StandardV1Dump",
    "StandardV1Value",
    "TreeDump",
    "LeafProof",
]
