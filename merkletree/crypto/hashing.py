"""
Crypto - Hashing Utilities
Hash primitives and node combination rules for the Merkle tree.

This module provides:
- keccak256 (default) and sha256 digests over raw bytes
- A small registry so the tree's hash primitive is pluggable by name
- hash_pair: the sorted-concatenation rule for internal nodes
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- hash_pair sorts its two inputs byte-wise before concatenating, so a
  parent hash does not depend on child order
- Leaf hashing (double hash of the ABI encoding) lives in
  merkletree.encoding.leaf_encoder; a 64-byte internal-node preimage can
  never be mistaken for a leaf preimage under that rule
"""
from __future__ import annotations

import hashlib
from typing import Callable

from eth_utils import keccak

from merkletree.schemas.errors import InvalidHashError, UnsupportedHashError


HashFunction = Callable[[bytes], bytes]

# Size of every node hash in the tree
NODE_SIZE: int = 32

DEFAULT_HASH_ALGORITHM: str = "keccak256"


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    This is the Ethereum flavour of Keccak (pre-NIST padding), the same
    primitive on-chain verifiers use.

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


HASH_ALGORITHMS: dict[str, HashFunction] = {
    "keccak256": keccak256,
    "sha256": sha256,
}


def get_hash_function(name: str) -> HashFunction:
    """
    Resolve a registered hash algorithm by name.

    Raises:
        UnsupportedHashError: If the name is not registered
    """
    try:
        return HASH_ALGORITHMS[name]
    except KeyError:
        raise UnsupportedHashError(name, sorted(HASH_ALGORITHMS)) from None


def hash_pair(a: bytes, b: bytes, hasher: HashFunction = keccak256) -> bytes:
    """
    Compute the parent hash of two child nodes.

    The children are concatenated in ascending byte order, so
    hash_pair(a, b) == hash_pair(b, a).

    Args:
        a: One child hash
        b: The other child hash
        hasher: Hash primitive (keccak256 by default)

    Returns:
        Parent hash
    """
    if a <= b:
        return hasher(a + b)
    return hasher(b + a)


def is_valid_node(value: object) -> bool:
    """Check that a value is a 32-byte node hash."""
    return isinstance(value, (bytes, bytearray)) and len(value) == NODE_SIZE


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + bytes(data).hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        InvalidHashError: If the value is not a string, doesn't start with 0x,
            has odd length, or contains invalid hex characters
    """
    if not isinstance(hex_string, str):
        raise InvalidHashError(
            f"Expected hex string, got {type(hex_string).__name__}",
            details={"value": repr(hex_string)},
        )

    if not hex_string.startswith(("0x", "0X")):
        raise InvalidHashError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}...",
            details={"value": hex_string},
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise InvalidHashError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}",
            details={"value": hex_string},
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise InvalidHashError(
            f"Invalid hex characters in string: {e}",
            details={"value": hex_string},
        ) from e


def node_from_hex(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed node hash and check it is exactly 32 bytes.

    Raises:
        InvalidHashError: If the string is malformed or the wrong length
    """
    node = from_hex(hex_string)
    if not is_valid_node(node):
        raise InvalidHashError(
            f"Expected a {NODE_SIZE}-byte node hash, got {len(node)} bytes",
            details={"value": hex_string},
        )
    return node


__all__ = [
    "HashFunction",
    "NODE_SIZE",
    "DEFAULT_HASH_ALGORITHM",
    "HASH_ALGORITHMS",
    "keccak256",
    "sha256",
    "get_hash_function",
    "hash_pair",
    "is_valid_node",
    "to_hex",
    "from_hex",
    "node_from_hex",
]
