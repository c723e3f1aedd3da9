"""
Schemas & Errors
File: errors.py

Purpose: Standard error taxonomy for the Merkle tree engine.
Defines both a Pydantic model for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Leaf encoding
    ENCODING_ERROR = "ENCODING_ERROR"

    # Construction
    EMPTY_INPUT = "EMPTY_INPUT"
    UNSUPPORTED_HASH = "UNSUPPORTED_HASH"

    # Proofs & lookup
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"
    LEAF_AMBIGUOUS = "LEAF_AMBIGUOUS"
    INVALID_HASH = "INVALID_HASH"
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"

    # Persistence
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    CORRUPT_DATA = "CORRUPT_DATA"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class MerkleTreeError(BaseModel):
    """
    Error model for structured error communication.

    Used when an error has to travel as data (JSON output, verification
    reports) rather than as a raised exception.
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ENCODING_ERROR],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleTreeException(Exception):
    """
    Base exception for all Merkle tree engine errors.

    Carries a stable code and structured details so the CLI can render
    either a one-line message or a JSON error object.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_TREE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> MerkleTreeError:
        """Convert this exception to a MerkleTreeError model."""
        return MerkleTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EncodingError(MerkleTreeException):
    """Raised when a leaf value does not encode under its declared types."""

    def __init__(
        self,
        message: str,
        field_index: int | None = None,
        abi_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_index is not None:
            full_details["field_index"] = field_index
        if abi_type:
            full_details["type"] = abi_type
        super().__init__(
            message=message,
            code=ErrorCodes.ENCODING_ERROR,
            details=full_details,
        )


class EmptyInputError(MerkleTreeException):
    """Raised when a tree is requested over zero leaves."""

    def __init__(self, message: str = "Expected non-zero number of leaves") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_INPUT)


class UnsupportedHashError(MerkleTreeException):
    """Raised when a hash algorithm name is not registered."""

    def __init__(self, name: str, supported: list[str]) -> None:
        super().__init__(
            message=f"Unsupported hash algorithm: '{name}'. Supported: {supported}",
            code=ErrorCodes.UNSUPPORTED_HASH,
            details={"hash_algorithm": name, "supported": supported},
        )


class IndexOutOfRangeError(MerkleTreeException, IndexError):
    """Raised when a proof is requested for a leaf index the tree does not have."""

    def __init__(self, index: int, length: int, message: str | None = None) -> None:
        super().__init__(
            message=message or f"Leaf index {index} out of range for {length} leaves",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details={"index": index, "length": length},
        )


class NotFoundError(MerkleTreeException, LookupError):
    """Raised when a value lookup finds no leaf."""

    def __init__(
        self,
        message: str = "Leaf value not found in tree",
        code: str = ErrorCodes.LEAF_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class AmbiguousLeafError(NotFoundError):
    """Raised when a value lookup matches more than one leaf."""

    def __init__(self, indices: list[int]) -> None:
        super().__init__(
            message=f"Leaf value is ambiguous: matches indices {indices}",
            code=ErrorCodes.LEAF_AMBIGUOUS,
            details={"indices": indices},
        )


class InvalidHashError(MerkleTreeException):
    """Raised when a node hash is not a well-formed 32-byte value."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_HASH,
            details=details,
        )


class InvalidProofError(MerkleTreeException):
    """Raised when a freshly generated proof does not reproduce the root."""

    def __init__(self, leaf_index: int | None = None) -> None:
        details = {}
        if leaf_index is not None:
            details["leaf_index"] = leaf_index
        super().__init__(
            message="Unable to prove value",
            code=ErrorCodes.MERKLE_PROOF_INVALID,
            details=details,
        )


class FormatVersionError(MerkleTreeException):
    """Raised when a persisted tree document has an unknown format."""

    def __init__(self, version: Any, supported: list[Any]) -> None:
        super().__init__(
            message=f"Unknown tree format: {version!r}. Supported: {supported}",
            code=ErrorCodes.UNSUPPORTED_FORMAT,
            details={"format": version, "supported": supported},
        )


class CorruptDataError(MerkleTreeException):
    """Raised when a persisted tree document is internally inconsistent."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CORRUPT_DATA,
            details=details,
        )
