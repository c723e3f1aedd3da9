"""
Leaf encoding.

Validates leaf type signatures and ABI-encodes typed leaf tuples.
"""
from .leaf_encoder import (
    LeafEncoding,
    coerce_leaf,
    encode_leaf,
    normalize_leaf,
    standard_leaf_hash,
    validate_type_signature,
)

__all__ = [
    "LeafEncoding",
    "coerce_leaf",
    "encode_leaf",
    "normalize_leaf",
    "standard_leaf_hash",
    "validate_type_signature",
]
