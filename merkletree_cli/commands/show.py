"""
CLI Show Command

Describe a tree document: root, size, encoding. Optionally draw the tree
or run a full integrity check.

Usage:
    merkletree show [--tree tree.json] [--render] [--check] [--json]
"""

from __future__ import annotations

import json
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from merkletree.merkle.merkle_tree import compute_tree_depth
from merkletree.merkle.persistence import read_tree


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class ShowSummary:
    """Summary of a tree document for CLI output."""
    tree_path: str = ""
    root: str = ""
    leaves: int = 0
    depth: int = 0
    leaf_encoding: list[str] = field(default_factory=list)
    hash_algorithm: str = ""
    integrity_ok: bool | None = None
    errors: list[str] = field(default_factory=list)
    rendering: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.integrity_ok is None:
            del d["integrity_ok"]
        if not d["errors"]:
            del d["errors"]
        if self.rendering is None:
            del d["rendering"]
        return d


def print_summary_human(summary: ShowSummary) -> None:
    """Print summary in human-readable format."""
    print(f"tree: {summary.tree_path}")
    print(f"root: {summary.root}")
    print(f"leaves: {summary.leaves}")
    print(f"depth: {summary.depth}")
    print(f"encoding: {', '.join(summary.leaf_encoding)}")
    print(f"hash: {summary.hash_algorithm}")
    if summary.integrity_ok is not None:
        print(f"integrity_ok: {str(summary.integrity_ok).lower()}")
    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors:
            print(f"  ✗ {err}")
    if summary.rendering is not None:
        print()
        print(summary.rendering)


def show_cmd(args: Namespace) -> int:
    """Handle show command."""
    config = args.cli_config
    tree_path = args.tree or config.tree_path

    # --check reports problems itself instead of failing the load
    tree = read_tree(tree_path, validate=config.validate_on_load and not args.check)

    summary = ShowSummary(
        tree_path=str(tree_path),
        root=tree.root,
        leaves=tree.length,
        depth=compute_tree_depth(tree.length),
        leaf_encoding=list(tree.leaf_encoding),
        hash_algorithm=tree.hash_algorithm,
    )

    if args.check:
        result = tree.validate()
        summary.integrity_ok = result.ok
        summary.errors = result.get_error_messages()

    if args.render:
        summary.rendering = tree.render()

    if args.json or config.output_format == "json":
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if summary.integrity_ok is False:
        return EXIT_VERIFICATION_FAILED
    return EXIT_SUCCESS
