"""
Crypto utilities.

Hash primitives, the sorted-pair node rule and hex helpers.
"""
from .hashing import (
    DEFAULT_HASH_ALGORITHM,
    HASH_ALGORITHMS,
    NODE_SIZE,
    HashFunction,
    from_hex,
    get_hash_function,
    hash_pair,
    is_valid_node,
    keccak256,
    node_from_hex,
    sha256,
    to_hex,
)

__all__ = [
    "DEFAULT_HASH_ALGORITHM",
    "HASH_ALGORITHMS",
    "NODE_SIZE",
    "HashFunction",
    "from_hex",
    "get_hash_function",
    "hash_pair",
    "is_valid_node",
    "keccak256",
    "node_from_hex",
    "sha256",
    "to_hex",
]
