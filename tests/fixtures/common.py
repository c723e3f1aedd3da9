"""
Common test fixtures shared by all test modules.

Provides factory functions for:
- Leaf values (addresses, address+amount pairs)
- Built trees
- Tree documents written to disk
"""

import json
from pathlib import Path
from typing import Any, Sequence

from merkletree.merkle.persistence import write_tree
from merkletree.merkle.standard_tree import StandardMerkleTree


ADDRESS_1 = "0x1111111111111111111111111111111111111111"
ADDRESS_2 = "0x2222222222222222222222222222222222222222"
ADDRESS_3 = "0x3333333333333333333333333333333333333333"


# =============================================================================
# Value Factories
# =============================================================================

def make_address(i: int) -> str:
    """Deterministic distinct address for index i."""
    return "0x" + f"{i + 1:040x}"


def make_address_values(n: int) -> list[list[str]]:
    """n single-field address leaves."""
    return [[make_address(i)] for i in range(n)]


def make_claim_values(n: int) -> list[list[Any]]:
    """n (address, uint256) leaves, like an airdrop claim list."""
    return [[make_address(i), str((i + 1) * 10**18)] for i in range(n)]


# =============================================================================
# Tree Factories
# =============================================================================

def make_tree(
    values: Sequence[Sequence[Any]] | None = None,
    leaf_encoding: Sequence[str] = ("address",),
    **kwargs: Any,
) -> StandardMerkleTree:
    """Build a tree; defaults to the two-address example tree."""
    if values is None:
        values = [[ADDRESS_1], [ADDRESS_2]]
    return StandardMerkleTree.of(values, list(leaf_encoding), **kwargs)


def write_tree_file(
    directory: Path,
    tree: StandardMerkleTree | None = None,
    name: str = "tree.json",
    fmt: str | None = None,
) -> Path:
    """Write a tree document into directory and return its path."""
    return write_tree(directory / name, tree or make_tree(), fmt=fmt)


def write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
