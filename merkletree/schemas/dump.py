"""
Schemas & Errors
File: dump.py

Purpose: Persisted tree document schemas.

Two document shapes are understood:
- TreeDump: the native format (format_version 1)
- StandardV1Dump: the "standard-v1" format written by the JavaScript
  StandardMerkleTree, so trees built by other tooling can be served here

Shape checks live here; cross-field consistency (node count, tree index
permutation, root) is enforced by merkletree.merkle.persistence.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .versioning import FORMAT_VERSION, STANDARD_V1_FORMAT


class TreeDump(BaseModel):
    """Native persisted form of a StandardMerkleTree."""

    model_config = ConfigDict(extra="forbid")

    format_version: int = Field(
        default=FORMAT_VERSION,
        description="Document format version",
    )
    hash_algorithm: str = Field(
        default="keccak256",
        description="Name of the hash primitive used for leaves and nodes",
    )
    leaf_type_signature: list[str] = Field(
        ...,
        description="ABI type of every leaf field, in field order",
        min_length=1,
    )
    leaf_values: list[list[Any]] = Field(
        ...,
        description="Leaf values in original input order",
        min_length=1,
    )
    leaf_tree_indices: list[int] = Field(
        ...,
        description="Array position of each leaf value in tree_hashes",
    )
    tree_hashes: list[str] = Field(
        ...,
        description="All 2N-1 node hashes as 0x-prefixed hex, root first",
        min_length=1,
    )
    root: str | None = Field(
        default=None,
        description="Redundant copy of tree_hashes[0]",
    )


class StandardV1Value(BaseModel):
    """A single value entry of a standard-v1 document."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    value: list[Any]
    tree_index: int = Field(..., alias="treeIndex")


class StandardV1Dump(BaseModel):
    """Document shape of the JavaScript StandardMerkleTree dump()."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    format: str = Field(default=STANDARD_V1_FORMAT)
    leaf_encoding: list[str] = Field(..., alias="leafEncoding", min_length=1)
    tree: list[str] = Field(..., min_length=1)
    values: list[StandardV1Value] = Field(..., min_length=1)
