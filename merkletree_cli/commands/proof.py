"""
CLI Proof Command

Load a tree document and print the proof for a leaf.

A leaf is selected by:
- --index N: its position in the original values list
- VALUE...: every field of the leaf, e.g. `proof 0xabc.. 100`
- a single VALUE on a multi-field tree: matched against one field
  (--field, default 0), printing a proof for every match

Usage:
    merkletree proof 0x1111111111111111111111111111111111111111 [--tree tree.json]
    merkletree proof --index 3 [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from typing import Any

from merkletree.merkle.persistence import read_tree
from merkletree.merkle.standard_tree import StandardMerkleTree
from merkletree.schemas.errors import NotFoundError
from merkletree.schemas.proof import LeafProof


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def select_indices(tree: StandardMerkleTree, args: Namespace) -> list[int]:
    """
    Resolve the command line selection to input-order leaf indices.

    Raises:
        NotFoundError: If no leaf matches
        AmbiguousLeafError: If a full value matches more than one leaf
        IndexOutOfRangeError: If --index is outside the tree
        ValueError: If the selection arguments don't fit the tree
    """
    values: list[str] = args.values or []

    if args.index is not None:
        if values:
            raise ValueError("Give either --index or a value, not both")
        tree.at(args.index)
        return [args.index]

    if not values:
        raise ValueError("Give a leaf value or --index")

    if len(values) == len(tree.leaf_encoding):
        return [tree.leaf_lookup(values)]

    if len(values) == 1:
        indices = tree.find(args.field, values[0])
        if not indices:
            raise NotFoundError(
                f"Value not found in tree: {values[0]}",
                details={"value": values[0], "field": args.field},
            )
        return indices

    raise ValueError(
        f"Expected 1 or {len(tree.leaf_encoding)} value(s) for encoding "
        f"{list(tree.leaf_encoding)}, got {len(values)}"
    )


def print_proofs_human(bundles: list[LeafProof]) -> None:
    """Print proofs in human-readable format."""
    for bundle in bundles:
        print(f"Value: {json.dumps(bundle.value)}")
        print(f"Proof: {json.dumps(bundle.proof)}")


def proofs_to_dict(tree: StandardMerkleTree, bundles: list[LeafProof]) -> dict[str, Any]:
    return {
        "root": tree.root,
        "leaf_encoding": list(tree.leaf_encoding),
        "proofs": [bundle.model_dump(mode="json") for bundle in bundles],
    }


def proof_cmd(args: Namespace) -> int:
    """Handle proof command."""
    config = args.cli_config
    tree_path = args.tree or config.tree_path
    validate = config.validate_on_load and not args.no_validate

    logger.info(f"Loading tree: {tree_path}")
    tree = read_tree(tree_path, validate=validate)

    try:
        indices = select_indices(tree, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    bundles = [tree.get_proof_bundle(index) for index in indices]

    if args.json or config.output_format == "json":
        print(json.dumps(proofs_to_dict(tree, bundles), indent=2))
    else:
        print_proofs_human(bundles)

    return EXIT_SUCCESS
