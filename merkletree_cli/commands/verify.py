"""
CLI Verify Command

Check a proof for a leaf value against a root, without the tree.

The root, encoding and hash algorithm can be given directly or taken
from a tree document.

Usage:
    merkletree verify 0x1111.. --root 0xabc.. --proof 0xdef.. [--encoding address]
    merkletree verify 0x1111.. --proof 0xdef.. --tree tree.json
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from merkletree.merkle.merkle_proofs import verify_proof
from merkletree.merkle.persistence import read_tree


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    value: list[str] = field(default_factory=list)
    root: str = ""
    leaf_encoding: list[str] = field(default_factory=list)
    proof: list[str] = field(default_factory=list)
    valid: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"root: {summary.root}")
    print(f"value: {json.dumps(summary.value)}")
    print(f"valid: {str(summary.valid).lower()}")


def verify_cmd(args: Namespace) -> int:
    """Handle verify command."""
    config = args.cli_config

    if args.root:
        root = args.root
        leaf_encoding = args.encoding or config.leaf_encoding
        hash_algorithm = args.hash or config.hash_algorithm
    else:
        tree_path = args.tree or config.tree_path
        logger.info(f"Taking root from tree: {tree_path}")
        tree = read_tree(tree_path, validate=config.validate_on_load)
        root = tree.root
        leaf_encoding = args.encoding or list(tree.leaf_encoding)
        hash_algorithm = args.hash or tree.hash_algorithm

    valid = verify_proof(
        root,
        leaf_encoding,
        args.values,
        args.proof or [],
        hash_algorithm=hash_algorithm,
    )

    summary = VerifySummary(
        value=list(args.values),
        root=root,
        leaf_encoding=list(leaf_encoding),
        proof=list(args.proof or []),
        valid=valid,
    )

    if args.json or config.output_format == "json":
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if valid else EXIT_VERIFICATION_FAILED
