"""
Merkle - Tree Layout
Array-backed Merkle tree construction, proof generation and verification.

This module works on raw node hashes. Leaf encoding and value lookup are
layered on top by merkletree.merkle.standard_tree.

Canonical Layout Rules (Hard Contracts):
1. A tree over N leaves is an array of 2N-1 node hashes; node 0 is the root
2. Children of node i are 2i+1 and 2i+2; the parent of node i is (i-1)//2
3. Leaf k of the input sequence is stored at position 2N-2-k, so leaves
   fill the array suffix in reverse order
4. Internal nodes are filled from position N-2 down to 0:
   tree[i] = hash_pair(tree[2i+1], tree[2i+2])
5. Parent hashing sorts the two children before concatenating
6. No node is ever duplicated or carried up: every internal node has
   exactly two children. When a level has an odd count, the leftover
   node pairs with a node one level down
7. Single leaf: the tree is [leaf] and the root is the leaf itself

Leaf ordering is decided by the caller; this module never sorts.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from merkletree.crypto.hashing import (
    HashFunction,
    hash_pair,
    is_valid_node,
    keccak256,
    to_hex,
)
from merkletree.schemas.errors import (
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidHashError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Index Arithmetic
# =============================================================================

def left_child_index(i: int) -> int:
    return 2 * i + 1


def right_child_index(i: int) -> int:
    return 2 * i + 2


def parent_index(i: int) -> int:
    if i <= 0:
        raise IndexOutOfRangeError(i, 0, message="Root has no parent")
    return (i - 1) // 2


def sibling_index(i: int) -> int:
    if i <= 0:
        raise IndexOutOfRangeError(i, 0, message="Root has no siblings")
    # odd positions are left children
    return i + 1 if i % 2 == 1 else i - 1


def is_tree_node(tree: Sequence[bytes], i: int) -> bool:
    return 0 <= i < len(tree)


def is_internal_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, left_child_index(i))


def is_leaf_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, i) and not is_internal_node(tree, i)


def leaf_position(num_leaves: int, leaf_index: int) -> int:
    """Array position of the leaf_index-th leaf handed to make_merkle_tree."""
    return 2 * num_leaves - 2 - leaf_index


def proof_length(tree_index: int) -> int:
    """Number of siblings in the proof for the node at tree_index."""
    return (tree_index + 1).bit_length() - 1


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels from leaves to root (inclusive).

    A single leaf has depth 1, two leaves depth 2, three leaves depth 3.
    Returns 0 for an empty tree.
    """
    if num_leaves <= 0:
        return 0
    return (2 * num_leaves - 1).bit_length()


# =============================================================================
# Construction
# =============================================================================

def make_merkle_tree(
    leaves: Sequence[bytes],
    hasher: HashFunction = keccak256,
) -> list[bytes]:
    """
    Build the full node array for a sequence of leaf hashes.

    Example with three leaves [a, b, c]:
        tree = [root, x, c, b, a]    x = hash_pair(b, a)
        root = hash_pair(x, c)

    Args:
        leaves: Leaf hashes (32 bytes each), already in tree order
        hasher: Hash primitive for internal nodes

    Returns:
        List of 2N-1 node hashes, root first

    Raises:
        EmptyInputError: If leaves is empty
        InvalidHashError: If a leaf is not a 32-byte value
    """
    if len(leaves) == 0:
        raise EmptyInputError()

    for i, leaf in enumerate(leaves):
        if not is_valid_node(leaf):
            raise InvalidHashError(
                f"Leaf {i} is not a 32-byte hash",
                details={"leaf_index": i},
            )

    tree: list[bytes] = [b""] * (2 * len(leaves) - 1)

    for i, leaf in enumerate(leaves):
        tree[len(tree) - 1 - i] = bytes(leaf)

    for i in range(len(tree) - 1 - len(leaves), -1, -1):
        tree[i] = hash_pair(
            tree[left_child_index(i)],
            tree[right_child_index(i)],
            hasher,
        )

    logger.debug(f"Built Merkle tree: {len(leaves)} leaves, {len(tree)} nodes")
    return tree


# =============================================================================
# Proofs
# =============================================================================

@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf node.

    Attributes:
        leaf: The leaf hash being proven
        tree_index: Array position of the leaf node
        siblings: Sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
    """
    leaf: bytes
    tree_index: int
    siblings: tuple[bytes, ...]
    root: bytes

    def __post_init__(self) -> None:
        if self.tree_index < 0:
            raise ValueError(f"Tree index must be non-negative, got {self.tree_index}")

    @property
    def hex_siblings(self) -> list[str]:
        return [to_hex(s) for s in self.siblings]


def get_proof(tree: Sequence[bytes], index: int) -> list[bytes]:
    """
    Collect the sibling hashes for the leaf at array position index.

    Algorithm:
    1. Start at the leaf node
    2. While not at the root: record tree[sibling_index(i)], then move
       to parent_index(i)

    Args:
        tree: Full node array
        index: Array position of a leaf node

    Returns:
        Sibling hashes, bottom to top (empty for a single-leaf tree)

    Raises:
        IndexOutOfRangeError: If index is not a leaf position
    """
    if not is_leaf_node(tree, index):
        raise IndexOutOfRangeError(
            index,
            len(tree),
            message=f"Index {index} is not a leaf node of a {len(tree)}-node tree",
        )

    proof: list[bytes] = []
    while index > 0:
        proof.append(tree[sibling_index(index)])
        index = parent_index(index)
    return proof


def build_merkle_proof(tree: Sequence[bytes], index: int) -> MerkleProof:
    """Generate a MerkleProof for the leaf at array position index."""
    siblings = get_proof(tree, index)
    return MerkleProof(
        leaf=tree[index],
        tree_index=index,
        siblings=tuple(siblings),
        root=tree[0],
    )


def process_proof(
    leaf: bytes,
    proof: Sequence[bytes],
    hasher: HashFunction = keccak256,
) -> bytes:
    """
    Recompute a root from a leaf hash and its proof.

    Each sibling is folded in with hash_pair, so no left/right flags are
    needed: the sorted-pair rule makes child order irrelevant.

    Raises:
        InvalidHashError: If the leaf or a sibling is not a 32-byte value
    """
    if not is_valid_node(leaf):
        raise InvalidHashError("Leaf is not a 32-byte hash")

    computed = bytes(leaf)
    for i, sibling in enumerate(proof):
        if not is_valid_node(sibling):
            raise InvalidHashError(
                f"Proof element {i} is not a 32-byte hash",
                details={"proof_index": i},
            )
        computed = hash_pair(computed, bytes(sibling), hasher)
    return computed


def verify_merkle_proof(proof: MerkleProof, hasher: HashFunction = keccak256) -> bool:
    """
    Verify a MerkleProof against its claimed root.

    Returns:
        True if the recomputed root equals proof.root
    """
    return process_proof(proof.leaf, proof.siblings, hasher) == proof.root


# =============================================================================
# Integrity & Rendering
# =============================================================================

def find_inconsistent_nodes(
    tree: Sequence[bytes],
    hasher: HashFunction = keccak256,
) -> list[int]:
    """
    Positions of nodes that are malformed or don't match their children.

    An empty list means every node is a 32-byte value and every internal
    node equals hash_pair of its two children.
    """
    bad: list[int] = []
    for i, node in enumerate(tree):
        if not is_valid_node(node):
            bad.append(i)
            continue
        if is_internal_node(tree, i):
            left = tree[left_child_index(i)]
            right = tree[right_child_index(i)]
            if not (is_valid_node(left) and is_valid_node(right)):
                continue
            if hash_pair(left, right, hasher) != node:
                bad.append(i)
    return bad


def is_valid_merkle_tree(tree: Sequence[bytes], hasher: HashFunction = keccak256) -> bool:
    """Check a node array is non-empty, 2N-1 long and internally consistent."""
    if len(tree) == 0 or len(tree) % 2 == 0:
        return False
    return not find_inconsistent_nodes(tree, hasher)


def render_merkle_tree(tree: Sequence[bytes]) -> str:
    """
    Draw the node array as an indented tree.

    Example for two leaves:
        0) 0xroot...
        ├─ 1) 0xleaf...
        └─ 2) 0xleaf...

    Raises:
        EmptyInputError: If the tree has no nodes
    """
    if len(tree) == 0:
        raise EmptyInputError("Expected non-zero number of nodes")

    stack: list[tuple[int, list[int]]] = [(0, [])]
    lines: list[str] = []

    while stack:
        i, path = stack.pop()
        # path entries: 1 = more siblings follow, 0 = last child
        guides = "".join("│  " if p else "   " for p in path[:-1])
        branch = "".join("├─ " if p else "└─ " for p in path[-1:])
        lines.append(f"{guides}{branch}{i}) {to_hex(tree[i])}")

        if right_child_index(i) < len(tree):
            stack.append((right_child_index(i), path + [0]))
            stack.append((left_child_index(i), path + [1]))

    return "\n".join(lines)


__all__ = [
    "MerkleProof",
    "left_child_index",
    "right_child_index",
    "parent_index",
    "sibling_index",
    "is_tree_node",
    "is_internal_node",
    "is_leaf_node",
    "leaf_position",
    "proof_length",
    "compute_tree_depth",
    "make_merkle_tree",
    "get_proof",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "find_inconsistent_nodes",
    "is_valid_merkle_tree",
    "render_merkle_tree",
]
