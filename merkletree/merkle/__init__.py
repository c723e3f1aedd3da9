"""
Merkle Tree Engine
Deterministic Merkle tree construction + proof generation/verification.

This module provides:
- StandardMerkleTree: typed-leaf tree handle (build, lookup, prove, dump)
- make_merkle_tree / get_proof / process_proof: array-layout primitives
- verify_proof: stateless verification of a value against a root
- dump_tree / load_tree / write_tree / read_tree: persistence codec

Canonical Commitment Rules:
1. Leaf hashing: keccak256(keccak256(abi.encode(types, value)))
2. Parent hashing: keccak256(sort(left, right)) - child order irrelevant
3. Layout: 2N-1 node array, root at 0, children of i at 2i+1 and 2i+2
4. Leaves sorted by hash and stored in the array suffix in reverse order
5. No padding or duplication; single leaf: root = leaf

Usage:
    from merkletree.merkle import StandardMerkleTree, verify_proof

    tree = StandardMerkleTree.of([["0x1111...1111"], ["0x2222...2222"]], ["address"])
    proof = tree.get_proof(0)
    assert verify_proof(tree.root, ["address"], ["0x1111...1111"], proof)
"""
from .merkle_tree import (
    MerkleProof,
    build_merkle_proof,
    compute_tree_depth,
    find_inconsistent_nodes,
    get_proof,
    is_valid_merkle_tree,
    make_merkle_tree,
    process_proof,
    render_merkle_tree,
    verify_merkle_proof,
)

from .standard_tree import (
    LeafEntry,
    StandardMerkleTree,
)

from .merkle_proofs import (
    MerkleVerifier,
    verify_leaf_hash,
    verify_proof,
)

from .persistence import (
    dump_tree,
    load_tree,
    read_tree,
    write_tree,
)


__all__ = [
    # Array layout
    "MerkleProof",
    "build_merkle_proof",
    "compute_tree_depth",
    "find_inconsistent_nodes",
    "get_proof",
    "is_valid_merkle_tree",
    "make_merkle_tree",
    "process_proof",
    "render_merkle_tree",
    "verify_merkle_proof",
    # Tree handle
    "LeafEntry",
    "StandardMerkleTree",
    # Verification
    "MerkleVerifier",
    "verify_leaf_hash",
    "verify_proof",
    # Persistence
    "dump_tree",
    "load_tree",
    "read_tree",
    "write_tree",
]
