"""
Schemas & Errors
File: proof.py

Purpose: Serializable proof artifact handed to consumers.
A LeafProof has no back-reference to the tree that produced it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LeafProof(BaseModel):
    """Inclusion proof for a single leaf, plus what is needed to check it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    value: list[Any] = Field(
        ...,
        description="The leaf value being proven",
    )
    index: int = Field(
        ...,
        description="0-based position of the value in original input order",
        ge=0,
    )
    tree_index: int = Field(
        ...,
        description="Array position of the leaf node",
        ge=0,
    )
    leaf_hash: str = Field(
        ...,
        description="0x-prefixed leaf hash",
    )
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling hashes, bottom to top",
    )
    root: str = Field(
        ...,
        description="Root the proof verifies against",
    )
    leaf_encoding: list[str] = Field(
        ...,
        description="ABI types of the leaf fields",
    )
