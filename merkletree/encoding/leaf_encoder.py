"""
Encoding - Leaf Encoder
Canonical ABI encoding of typed leaf tuples.

A tree declares its leaf encoding once, as an ordered list of ABI type
strings (e.g. ["address", "uint256"]). Every leaf value is a tuple of the
same arity. Loosely typed input (CSV cells, JSON values) is coerced per
type, then encoded with the standard ABI tuple encoding so the result is
bit-for-bit what Solidity's abi.encode produces.

Coercion rules:
- address: 20-byte hex, 0x optional. All-lower or all-upper case accepted,
  mixed case must be a valid EIP-55 checksum. Held in checksum form.
- uintN/intN: int, or a string of decimal or 0x-hex digits with an
  optional leading minus. bool rejected.
- bool: bool, or "true"/"false"/"1"/"0" (case-insensitive), or 0/1.
- bytes/bytesN: bytes or 0x-hex string. bytesN must be exactly N bytes.
- string: str.
- T[] / T[k] / (T1,T2): list, tuple, or a JSON array string.

Leaf hash rule: leaf = H(H(abi_encode(types, values)))
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Sequence

from eth_abi import encode, is_encodable, is_encodable_type
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_abi.exceptions import ParseError
from eth_abi.grammar import ABIType, BasicType, TupleType, normalize, parse
from eth_utils import (
    is_checksum_address,
    is_checksum_formatted_address,
    is_hex_address,
    to_checksum_address,
)

from merkletree.crypto.hashing import HashFunction, keccak256, to_hex
from merkletree.schemas.errors import EncodingError


logger = logging.getLogger(__name__)

# ABI bases that Solidity verifiers cannot consume
UNSUPPORTED_BASES = frozenset({"fixed", "ufixed", "function"})

_TRUE_STRINGS = frozenset({"true", "1"})
_FALSE_STRINGS = frozenset({"false", "0"})

# Optional minus, then 0x-hex or decimal digits
_INTEGER_RE = re.compile(r"^(-)?(?:0[xX]([0-9a-fA-F]+)|([0-9]+))$")


# =============================================================================
# Type Signature
# =============================================================================

def _check_supported(abi_type: ABIType, type_str: str) -> None:
    if isinstance(abi_type, TupleType):
        for component in abi_type.components:
            _check_supported(component, type_str)
    elif isinstance(abi_type, BasicType) and abi_type.base in UNSUPPORTED_BASES:
        raise EncodingError(
            f"Unsupported leaf type: {type_str}",
            abi_type=type_str,
        )


def validate_type_signature(types: Sequence[str]) -> tuple[str, ...]:
    """
    Validate and normalize a leaf type signature.

    Aliases are expanded (uint -> uint256, int -> int256, byte -> bytes1).

    Args:
        types: Ordered ABI type strings, one per leaf field

    Returns:
        Normalized type strings

    Raises:
        EncodingError: If the signature is empty or a type is not a valid
            ABI type supported for leaves
    """
    if isinstance(types, str):
        raise EncodingError(
            "Leaf type signature must be a list of type strings, not a string",
            abi_type=types,
        )
    if len(types) == 0:
        raise EncodingError("Leaf type signature must declare at least one type")

    normalized: list[str] = []
    for i, type_str in enumerate(types):
        if not isinstance(type_str, str):
            raise EncodingError(
                f"Leaf type at position {i} is not a string: {type_str!r}",
                field_index=i,
            )
        try:
            canonical = normalize(type_str.strip())
            abi_type = parse(canonical)
        except ParseError as e:
            raise EncodingError(
                f"Invalid ABI type: {type_str}",
                field_index=i,
                abi_type=type_str,
            ) from e
        _check_supported(abi_type, type_str)
        if not is_encodable_type(canonical):
            raise EncodingError(
                f"Invalid ABI type: {type_str}",
                field_index=i,
                abi_type=type_str,
            )
        normalized.append(canonical)

    return tuple(normalized)


# =============================================================================
# Value Coercion
# =============================================================================

def _as_sequence(value: Any, type_str: str) -> Sequence[Any]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"expected a JSON array for {type_str}") from e
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list for {type_str}, got {type(value).__name__}")
    return value


def _coerce_address(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"address must be a string, got {type(value).__name__}")
    candidate = value.strip()
    if not candidate.startswith(("0x", "0X")):
        candidate = "0x" + candidate
    candidate = "0x" + candidate[2:]
    if not is_hex_address(candidate):
        raise ValueError(f"malformed address {value!r}")
    if is_checksum_formatted_address(candidate) and not is_checksum_address(candidate):
        raise ValueError(f"bad address checksum {value!r}")
    return to_checksum_address(candidate)


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = _INTEGER_RE.match(value.strip())
        if match is None:
            raise ValueError(f"non-numeric integer {value!r}")
        sign, hex_digits, dec_digits = match.groups()
        number = int(hex_digits, 16) if hex_digits is not None else int(dec_digits, 10)
        return -number if sign else number
    raise ValueError(f"expected an integer, got {type(value).__name__}")


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _coerce_bytes(value: Any, size: int | None) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.startswith(("0x", "0X")):
            raise ValueError(f"bytes must be 0x-prefixed hex, got {value!r}")
        try:
            data = bytes.fromhex(text[2:])
        except ValueError as e:
            raise ValueError(f"invalid hex for bytes: {value!r}") from e
    else:
        raise ValueError(f"expected bytes, got {type(value).__name__}")
    if size is not None and len(data) != size:
        raise ValueError(f"expected {size} bytes, got {len(data)}")
    return data


def _coerce(abi_type: ABIType, value: Any) -> Any:
    type_str = abi_type.to_type_str()

    if abi_type.is_array:
        items = _as_sequence(value, type_str)
        dimension = abi_type.arrlist[-1]
        if dimension and len(items) != dimension[0]:
            raise ValueError(
                f"expected {dimension[0]} items for {type_str}, got {len(items)}"
            )
        return [_coerce(abi_type.item_type, item) for item in items]

    if isinstance(abi_type, TupleType):
        items = _as_sequence(value, type_str)
        if len(items) != len(abi_type.components):
            raise ValueError(
                f"expected {len(abi_type.components)} components for {type_str}, "
                f"got {len(items)}"
            )
        return tuple(
            _coerce(component, item)
            for component, item in zip(abi_type.components, items)
        )

    base = abi_type.base
    if base == "address":
        return _coerce_address(value)
    if base in ("uint", "int"):
        return _coerce_int(value)
    if base == "bool":
        return _coerce_bool(value)
    if base == "bytes":
        return _coerce_bytes(value, abi_type.sub)
    if base == "string":
        if not isinstance(value, str):
            raise ValueError(f"expected a string, got {type(value).__name__}")
        return value

    raise ValueError(f"unsupported type {type_str}")


def _to_json_safe(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    if isinstance(value, (list, tuple)):
        return [_to_json_safe(item) for item in value]
    return value


def coerce_leaf(types: Sequence[str], values: Sequence[Any]) -> list[Any]:
    """
    Coerce a raw leaf tuple into the Python values eth_abi encodes.

    Args:
        types: Normalized ABI types (see validate_type_signature)
        values: Raw leaf values, one per type

    Returns:
        Coerced values in field order

    Raises:
        EncodingError: On arity mismatch or a value that fails its type
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise EncodingError(
            f"Leaf value must be a list of {len(types)} field(s), "
            f"got {type(values).__name__}"
        )
    if len(values) != len(types):
        raise EncodingError(
            f"Leaf arity mismatch: expected {len(types)} field(s), got {len(values)}",
            details={"expected": len(types), "actual": len(values)},
        )

    coerced: list[Any] = []
    for i, (type_str, value) in enumerate(zip(types, values)):
        try:
            item = _coerce(parse(type_str), value)
        except ValueError as e:
            raise EncodingError(
                f"Field {i} ({type_str}): {e}",
                field_index=i,
                abi_type=type_str,
            ) from e
        if not is_encodable(type_str, item):
            raise EncodingError(
                f"Field {i} ({type_str}): value {value!r} is out of range",
                field_index=i,
                abi_type=type_str,
            )
        coerced.append(item)
    return coerced


def normalize_leaf(types: Sequence[str], values: Sequence[Any]) -> list[Any]:
    """
    Return the JSON-safe stored form of a leaf value.

    Addresses come back in checksum form, bytes as 0x hex, tuples as lists.
    """
    return [_to_json_safe(item) for item in coerce_leaf(types, values)]


def encode_leaf(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """
    ABI-encode a leaf tuple.

    Equivalent to Solidity's abi.encode(values...) for the given types.

    Raises:
        EncodingError: If the value does not encode under the types
    """
    coerced = coerce_leaf(types, values)
    try:
        return encode(list(types), coerced)
    except AbiEncodingError as e:
        raise EncodingError(f"ABI encoding failed: {e}") from e


def standard_leaf_hash(
    types: Sequence[str],
    values: Sequence[Any],
    hasher: HashFunction = keccak256,
) -> bytes:
    """
    Compute the leaf hash: H(H(abi_encode(types, values))).

    The double hash keeps leaf preimages from ever having the 64-byte
    shape of an internal node preimage.
    """
    return hasher(hasher(encode_leaf(types, values)))


@dataclass(frozen=True)
class LeafEncoding:
    """
    A validated leaf type signature bound to its encoding operations.

    Example:
        >>> encoding = LeafEncoding.of(["address", "uint"])
        >>> encoding.types
        ('address', 'uint256')
    """

    types: tuple[str, ...]

    @classmethod
    def of(cls, types: Sequence[str]) -> "LeafEncoding":
        return cls(types=validate_type_signature(types))

    @property
    def arity(self) -> int:
        return len(self.types)

    def normalize(self, values: Sequence[Any]) -> list[Any]:
        return normalize_leaf(self.types, values)

    def encode(self, values: Sequence[Any]) -> bytes:
        return encode_leaf(self.types, values)

    def leaf_hash(self, values: Sequence[Any], hasher: HashFunction = keccak256) -> bytes:
        return standard_leaf_hash(self.types, values, hasher)


__all__ = [
    "UNSUPPORTED_BASES",
    "LeafEncoding",
    "validate_type_signature",
    "coerce_leaf",
    "normalize_leaf",
    "encode_leaf",
    "standard_leaf_hash",
]
