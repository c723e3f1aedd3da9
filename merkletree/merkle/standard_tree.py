"""
Merkle - Standard Merkle Tree
Typed-leaf Merkle tree compatible with OpenZeppelin's MerkleProof.sol.

This module provides:
- StandardMerkleTree: immutable, caller-owned handle over a built tree
- LeafEntry: a stored leaf value and its array position

Construction Rules:
1. Each value is normalized and hashed: H(H(abi_encode(types, value)))
2. With sort_leaves (default) leaf hashes are sorted ascending by bytes;
   the sort is stable, so equal hashes keep input order
3. The sorted hashes are laid out with make_merkle_tree (see merkle_tree)
4. Every value remembers its tree_index; entries() still yields values in
   original input order

A tree is never mutated after construction. Adding or removing a leaf
means building a new tree.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Union

from merkletree.crypto.hashing import (
    DEFAULT_HASH_ALGORITHM,
    get_hash_function,
    is_valid_node,
    node_from_hex,
    to_hex,
)
from merkletree.encoding.leaf_encoder import LeafEncoding
from merkletree.merkle.merkle_tree import (
    find_inconsistent_nodes,
    get_proof,
    is_leaf_node,
    make_merkle_tree,
    process_proof,
    render_merkle_tree,
)
from merkletree.schemas.errors import (
    AmbiguousLeafError,
    CorruptDataError,
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidProofError,
    MerkleTreeException,
    NotFoundError,
)
from merkletree.schemas.proof import LeafProof
from merkletree.schemas.verification import CheckResult, VerificationResult


logger = logging.getLogger(__name__)

LeafRef = Union[int, Sequence[Any]]


def _freeze(value: Any) -> Any:
    """Nested lists become tuples, so a stored value cannot be changed in place."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    """Fresh nested lists for callers; nothing returned aliases stored state."""
    if isinstance(value, (list, tuple)):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class LeafEntry:
    """A leaf value in stored form and the array position of its node."""
    value: tuple[Any, ...]
    tree_index: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _freeze(self.value))


class StandardMerkleTree:
    """
    Merkle tree over typed leaf tuples.

    Build with StandardMerkleTree.of(...) or restore with
    StandardMerkleTree.load(...). The object is safe to share between
    threads: nothing in it changes after __init__.

    Example:
        >>> tree = StandardMerkleTree.of(
        ...     [["0x1111111111111111111111111111111111111111"],
        ...      ["0x2222222222222222222222222222222222222222"]],
        ...     ["address"],
        ... )
        >>> proof = tree.get_proof(0)
        >>> tree.verify(0, proof)
        True
    """

    def __init__(
        self,
        tree: Sequence[bytes],
        entries: Sequence[LeafEntry],
        leaf_encoding: LeafEncoding,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ) -> None:
        """
        Wrap an already-built node array.

        Most callers want of() or load(). The constructor only checks the
        shape (2N-1 nodes, leaf positions form the array suffix); it
        does not rehash anything.

        Raises:
            CorruptDataError: If the node array and entries disagree in shape
        """
        if len(entries) == 0:
            raise EmptyInputError()
        if len(tree) != 2 * len(entries) - 1:
            raise CorruptDataError(
                f"Expected {2 * len(entries) - 1} node hashes for "
                f"{len(entries)} leaves, got {len(tree)}",
                details={"leaves": len(entries), "nodes": len(tree)},
            )

        positions = [entry.tree_index for entry in entries]
        if sorted(positions) != list(range(len(entries) - 1, len(tree))):
            raise CorruptDataError(
                "Leaf tree indices must cover the leaf positions of the tree exactly once",
                details={"tree_indices": positions},
            )

        for i, node in enumerate(tree):
            if not is_valid_node(node):
                raise CorruptDataError(
                    f"Node {i} is not a 32-byte hash",
                    details={"tree_index": i},
                )

        self._tree: tuple[bytes, ...] = tuple(bytes(node) for node in tree)
        self._entries: tuple[LeafEntry, ...] = tuple(entries)
        self._encoding = leaf_encoding
        self._hash_algorithm = hash_algorithm
        self._hasher = get_hash_function(hash_algorithm)

        # leaf hash -> value indices, built once
        self._hash_lookup: dict[bytes, list[int]] = {}
        for index, entry in enumerate(self._entries):
            self._hash_lookup.setdefault(self._tree[entry.tree_index], []).append(index)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        values: Sequence[Sequence[Any]],
        leaf_encoding: Sequence[str],
        *,
        sort_leaves: bool = True,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ) -> "StandardMerkleTree":
        """
        Build a tree from leaf values.

        Args:
            values: Leaf value tuples in input order (at least one)
            leaf_encoding: ABI type of each leaf field, e.g. ["address"]
            sort_leaves: Sort leaf hashes before layout (reference behaviour)
            hash_algorithm: Registered hash primitive name

        Returns:
            The built tree

        Raises:
            EmptyInputError: If values is empty
            EncodingError: If a value does not encode under leaf_encoding
            UnsupportedHashError: If hash_algorithm is not registered
        """
        encoding = LeafEncoding.of(leaf_encoding)
        hasher = get_hash_function(hash_algorithm)

        if len(values) == 0:
            raise EmptyInputError()

        hashed: list[tuple[int, tuple[Any, ...], bytes]] = []
        for value_index, value in enumerate(values):
            try:
                stored = tuple(encoding.normalize(value))
                leaf = encoding.leaf_hash(stored, hasher)
            except MerkleTreeException as e:
                e.details.setdefault("value_index", value_index)
                raise
            hashed.append((value_index, stored, leaf))

        if sort_leaves:
            hashed.sort(key=lambda item: item[2])

        tree = make_merkle_tree([leaf for _, _, leaf in hashed], hasher)

        entries: list[LeafEntry | None] = [None] * len(hashed)
        for leaf_index, (value_index, stored, _) in enumerate(hashed):
            entries[value_index] = LeafEntry(
                value=stored,
                tree_index=len(tree) - 1 - leaf_index,
            )

        built = cls(tree, entries, encoding, hash_algorithm)
        logger.info(
            f"Built tree: {len(entries)} leaves, encoding={list(encoding.types)}, "
            f"root={built.root}"
        )
        return built

    @classmethod
    def load(cls, document: dict[str, Any], *, validate: bool = False) -> "StandardMerkleTree":
        """
        Restore a tree from a dumped document. See merkletree.merkle.persistence.
        """
        from merkletree.merkle.persistence import load_tree

        return load_tree(document, validate=validate)

    def dump(self, fmt: str | None = None) -> dict[str, Any]:
        """
        Serialize to a JSON-ready document. See merkletree.merkle.persistence.
        """
        from merkletree.merkle.persistence import dump_tree

        return dump_tree(self, fmt=fmt)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def root(self) -> str:
        """0x-prefixed Merkle root."""
        return to_hex(self._tree[0])

    @property
    def root_bytes(self) -> bytes:
        return self._tree[0]

    @property
    def tree(self) -> tuple[bytes, ...]:
        """All node hashes in array layout."""
        return self._tree

    @property
    def leaf_encoding(self) -> tuple[str, ...]:
        return self._encoding.types

    @property
    def hash_algorithm(self) -> str:
        return self._hash_algorithm

    @property
    def length(self) -> int:
        """Number of leaves."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def values(self) -> list[list[Any]]:
        """Leaf values in original input order."""
        return [_thaw(entry.value) for entry in self._entries]

    @property
    def tree_indices(self) -> list[int]:
        """Array position of each leaf value, in original input order."""
        return [entry.tree_index for entry in self._entries]

    def entries(self) -> Iterator[tuple[int, list[Any]]]:
        """Yield (index, value) in original input order."""
        for index, entry in enumerate(self._entries):
            yield index, _thaw(entry.value)

    def at(self, index: int) -> list[Any]:
        """Leaf value at an input-order index."""
        return _thaw(self._entries[self._check_index(index)].value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StandardMerkleTree):
            return NotImplemented
        return (
            self._tree == other._tree
            and self._entries == other._entries
            and self._encoding == other._encoding
            and self._hash_algorithm == other._hash_algorithm
        )

    def __repr__(self) -> str:
        return (
            f"StandardMerkleTree(root={self.root}, leaves={self.length}, "
            f"encoding={list(self.leaf_encoding)})"
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Leaf index must be an int, got {type(index).__name__}")
        if index < 0 or index >= len(self._entries):
            raise IndexOutOfRangeError(index, len(self._entries))
        return index

    def leaf_hash(self, value: Sequence[Any]) -> str:
        """0x-prefixed leaf hash of any candidate value under this tree's encoding."""
        return to_hex(self._encoding.leaf_hash(value, self._hasher))

    def leaf_lookup(self, value: Sequence[Any]) -> int:
        """
        Find the input-order index of a leaf value.

        Matching is semantic: values are compared by leaf hash, so an
        address matches regardless of letter case.

        Raises:
            NotFoundError: If no leaf has this value
            AmbiguousLeafError: If more than one leaf has this value
            EncodingError: If the value does not encode under the tree's types
        """
        leaf = self._encoding.leaf_hash(value, self._hasher)
        indices = self._hash_lookup.get(leaf, [])
        if not indices:
            raise NotFoundError(details={"value": list(value)})
        if len(indices) > 1:
            raise AmbiguousLeafError(list(indices))
        return indices[0]

    def find(self, field_index: int, field_value: Any) -> list[int]:
        """
        Input-order indices of leaves whose field at field_index equals field_value.

        field_value is coerced under that field's type first, so an address
        given in any case matches. An empty list means no match.

        Raises:
            IndexOutOfRangeError: If field_index is not a field of the encoding
            EncodingError: If field_value does not encode under the field type
        """
        if field_index < 0 or field_index >= self._encoding.arity:
            raise IndexOutOfRangeError(
                field_index,
                self._encoding.arity,
                message=f"Field {field_index} out of range for {self._encoding.arity} field(s)",
            )
        field_encoding = LeafEncoding.of([self._encoding.types[field_index]])
        wanted = _freeze(field_encoding.normalize([field_value])[0])
        return [
            index
            for index, entry in enumerate(self._entries)
            if entry.value[field_index] == wanted
        ]

    def _resolve(self, leaf: LeafRef) -> int:
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            return self._check_index(leaf)
        return self.leaf_lookup(leaf)

    # -------------------------------------------------------------------------
    # Proofs
    # -------------------------------------------------------------------------

    def get_proof(self, leaf: LeafRef) -> list[str]:
        """
        Inclusion proof for a leaf, by input-order index or by value.

        Returns:
            0x-prefixed sibling hashes, bottom to top

        Raises:
            IndexOutOfRangeError: If an index is outside the tree
            NotFoundError: If a value is not in the tree (or is ambiguous)
            InvalidProofError: If the tree's nodes do not reproduce the root
        """
        index = self._resolve(leaf)
        tree_index = self._entries[index].tree_index
        siblings = get_proof(self._tree, tree_index)

        if process_proof(self._tree[tree_index], siblings, self._hasher) != self._tree[0]:
            raise InvalidProofError(leaf_index=index)

        logger.debug(f"Proof for leaf {index} (node {tree_index}): {len(siblings)} siblings")
        return [to_hex(sibling) for sibling in siblings]

    def get_proof_bundle(self, leaf: LeafRef) -> LeafProof:
        """Inclusion proof packaged with the value, leaf hash and root."""
        index = self._resolve(leaf)
        entry = self._entries[index]
        return LeafProof(
            value=_thaw(entry.value),
            index=index,
            tree_index=entry.tree_index,
            leaf_hash=to_hex(self._tree[entry.tree_index]),
            proof=self.get_proof(index),
            root=self.root,
            leaf_encoding=list(self.leaf_encoding),
        )

    def verify(self, leaf: LeafRef, proof: Sequence[str]) -> bool:
        """
        Check a proof for a leaf against this tree's root.

        A leaf given by index is hashed from the stored value; a leaf given
        by value is hashed as given.
        """
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            value: Sequence[Any] = self._entries[self._check_index(leaf)].value
        else:
            value = leaf
        leaf_hash = self._encoding.leaf_hash(value, self._hasher)
        nodes = [node_from_hex(p) for p in proof]
        return process_proof(leaf_hash, nodes, self._hasher) == self._tree[0]

    # -------------------------------------------------------------------------
    # Integrity & Rendering
    # -------------------------------------------------------------------------

    def validate(self) -> VerificationResult:
        """
        Full integrity check of the tree.

        Rehashes every leaf value and every internal node. Use after loading
        a document from an untrusted source.
        """
        result = VerificationResult.success()

        bad_nodes = find_inconsistent_nodes(self._tree, self._hasher)
        if bad_nodes:
            result.add_check(CheckResult.failed(
                "node_hashes",
                f"{len(bad_nodes)} internal node(s) do not match their children",
                details={"tree_indices": bad_nodes},
            ))
        else:
            result.add_check(CheckResult.passed(
                "node_hashes",
                f"All {len(self._tree) - len(self._entries)} internal node(s) consistent",
            ))

        bad_leaves: list[int] = []
        for index, entry in enumerate(self._entries):
            if not is_leaf_node(self._tree, entry.tree_index):
                bad_leaves.append(index)
                continue
            try:
                leaf = self._encoding.leaf_hash(entry.value, self._hasher)
            except MerkleTreeException:
                bad_leaves.append(index)
                continue
            if leaf != self._tree[entry.tree_index]:
                bad_leaves.append(index)

        if bad_leaves:
            result.add_check(CheckResult.failed(
                "leaf_hashes",
                f"{len(bad_leaves)} leaf value(s) do not match their leaf node",
                details={"indices": bad_leaves},
            ))
        else:
            result.add_check(CheckResult.passed(
                "leaf_hashes",
                f"All {len(self._entries)} leaf value(s) match their leaf node",
            ))

        return result

    def render(self) -> str:
        """Draw the tree, one node per line."""
        return render_merkle_tree(self._tree)


__all__ = [
    "LeafEntry",
    "LeafRef",
    "StandardMerkleTree",
]
