"""
CLI Build Command

Build a Merkle tree from a values file, print its root and write the
tree document.

Usage:
    merkletree build values.csv [--encoding address uint256] [--out tree.json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from merkletree.encoding.leaf_encoder import LeafEncoding
from merkletree.merkle.persistence import write_tree
from merkletree.merkle.standard_tree import StandardMerkleTree

from merkletree_cli.sources import read_values


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a tree build for CLI output."""
    source: str = ""
    output_path: str = ""
    root: str = ""
    leaves: int = 0
    leaf_encoding: list[str] = field(default_factory=list)
    hash_algorithm: str = ""
    sorted_leaves: bool = True
    format: str = "native"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def print_summary_human(summary: BuildSummary) -> None:
    """Print summary in human-readable format."""
    print(f"Merkle Root: {summary.root}")
    print(f"leaves: {summary.leaves}")
    print(f"encoding: {', '.join(summary.leaf_encoding)}")
    print(f"written: {summary.output_path}")


def build_cmd(args: Namespace) -> int:
    """Handle build command."""
    config = args.cli_config

    encoding = LeafEncoding.of(args.encoding or config.leaf_encoding)
    hash_algorithm = args.hash or config.hash_algorithm
    sort_leaves = config.sort_leaves and not args.no_sort
    out_path = args.out or config.tree_path
    header = args.header or config.csv_header

    values = read_values(
        args.source,
        encoding,
        header=header,
        delimiter=config.csv_delimiter,
    )

    tree = StandardMerkleTree.of(
        values,
        encoding.types,
        sort_leaves=sort_leaves,
        hash_algorithm=hash_algorithm,
    )

    fmt = None if args.format == "native" else args.format
    written = write_tree(out_path, tree, fmt=fmt)

    summary = BuildSummary(
        source=str(args.source),
        output_path=str(written),
        root=tree.root,
        leaves=tree.length,
        leaf_encoding=list(tree.leaf_encoding),
        hash_algorithm=tree.hash_algorithm,
        sorted_leaves=sort_leaves,
        format=args.format,
    )

    if args.json or config.output_format == "json":
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
