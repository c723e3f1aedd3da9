"""
merkletree - verifiable membership proofs over typed leaf sets.

Build a Merkle tree once over a fixed set of leaf values, persist it,
and later serve inclusion proofs that OpenZeppelin's MerkleProof.sol
accepts.
"""

__version__ = "0.1.0"

from merkletree.merkle import (
    StandardMerkleTree,
    dump_tree,
    load_tree,
    read_tree,
    verify_proof,
    write_tree,
)
from merkletree.schemas.errors import (
    AmbiguousLeafError,
    CorruptDataError,
    EmptyInputError,
    EncodingError,
    FormatVersionError,
    IndexOutOfRangeError,
    MerkleTreeException,
    NotFoundError,
)

__all__ = [
    "__version__",
    "StandardMerkleTree",
    "dump_tree",
    "load_tree",
    "read_tree",
    "verify_proof",
    "write_tree",
    "AmbiguousLeafError",
    "CorruptDataError",
    "EmptyInputError",
    "EncodingError",
    "FormatVersionError",
    "IndexOutOfRangeError",
    "MerkleTreeException",
    "NotFoundError",
]
