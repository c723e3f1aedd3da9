"""
Merkle - Proof Verification
Stateless verification of inclusion proofs.

These functions need no tree: only the root, the leaf encoding, the leaf
value and the proof. They implement the same algorithm as OpenZeppelin's
MerkleProof.verify, so a proof accepted here is accepted on-chain.

Algorithm:
1. leaf = H(H(abi_encode(leaf_encoding, value)))
2. For each sibling, bottom to top: leaf = hash_pair(leaf, sibling)
3. Valid iff the result equals the root
"""
from __future__ import annotations

from typing import Any, Sequence

from merkletree.crypto.hashing import (
    DEFAULT_HASH_ALGORITHM,
    get_hash_function,
    node_from_hex,
)
from merkletree.encoding.leaf_encoder import LeafEncoding
from merkletree.merkle.merkle_tree import process_proof
from merkletree.schemas.proof import LeafProof


def verify_leaf_hash(
    root: str,
    leaf_hash: str,
    proof: Sequence[str],
    *,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> bool:
    """
    Verify a proof for an already-hashed leaf.

    Args:
        root: 0x-prefixed expected root
        leaf_hash: 0x-prefixed leaf hash
        proof: 0x-prefixed sibling hashes, bottom to top
        hash_algorithm: Registered hash primitive name

    Returns:
        True if the proof reproduces the root

    Raises:
        InvalidHashError: If root, leaf_hash or a proof element is not a
            0x-prefixed 32-byte hex string
    """
    hasher = get_hash_function(hash_algorithm)
    expected = node_from_hex(root)
    nodes = [node_from_hex(p) for p in proof]
    return process_proof(node_from_hex(leaf_hash), nodes, hasher) == expected


def verify_proof(
    root: str,
    leaf_encoding: Sequence[str],
    value: Sequence[Any],
    proof: Sequence[str],
    *,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> bool:
    """
    Verify that a leaf value is included under a root.

    Pure function: no tree is needed and nothing is mutated.

    Args:
        root: 0x-prefixed expected root
        leaf_encoding: ABI type of each leaf field
        value: Claimed leaf value
        proof: 0x-prefixed sibling hashes, bottom to top
        hash_algorithm: Registered hash primitive name

    Returns:
        True if the proof is valid, False otherwise

    Raises:
        EncodingError: If value does not encode under leaf_encoding
        InvalidHashError: If root or a proof element is malformed
    """
    hasher = get_hash_function(hash_algorithm)
    leaf = LeafEncoding.of(leaf_encoding).leaf_hash(value, hasher)
    expected = node_from_hex(root)
    nodes = [node_from_hex(p) for p in proof]
    return process_proof(leaf, nodes, hasher) == expected


class MerkleVerifier:
    """
    Convenience class for verifying proofs.

    Example:
        >>> bundle = tree.get_proof_bundle(0)
        >>> MerkleVerifier.verify(bundle)
        True
    """

    @staticmethod
    def verify(
        bundle: LeafProof,
        *,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ) -> bool:
        """
        Verify a LeafProof against the root it carries.

        The leaf hash is recomputed from bundle.value; bundle.leaf_hash is
        not trusted.
        """
        return verify_proof(
            bundle.root,
            bundle.leaf_encoding,
            bundle.value,
            bundle.proof,
            hash_algorithm=hash_algorithm,
        )

    @staticmethod
    def verify_value_in_root(
        root: str,
        leaf_encoding: Sequence[str],
        value: Sequence[Any],
        proof: Sequence[str],
        *,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ) -> bool:
        """Verify a value is included in a root. Alias of verify_proof()."""
        return verify_proof(
            root,
            leaf_encoding,
            value,
            proof,
            hash_algorithm=hash_algorithm,
        )


__all__ = [
    "MerkleVerifier",
    "verify_leaf_hash",
    "verify_proof",
]
