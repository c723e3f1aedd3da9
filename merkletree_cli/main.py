"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    merkletree build SOURCE [--encoding T ...] [--out PATH] [--no-sort] [--json]
    merkletree proof VALUE... [--index N] [--field K] [--tree PATH] [--json]
    merkletree verify VALUE... --proof H... [--root R] [--tree PATH] [--json]
    merkletree show [--tree PATH] [--render] [--check] [--json]
    merkletree config --init|--show

Environment Variables:
    MERKLETREE_TREE_PATH         Tree document path (default: tree.json)
    MERKLETREE_LEAF_ENCODING     Leaf types, e.g. "address,uint256"
    MERKLETREE_HASH_ALGORITHM    keccak256 (default) or sha256
    MERKLETREE_SORT_LEAVES       Sort leaf hashes before layout (default: true)
    MERKLETREE_VALIDATE_ON_LOAD  Rehash trees when loading (default: true)
    MERKLETREE_CSV_HEADER        auto, yes or no (default: auto)
    MERKLETREE_LOG_LEVEL         Log level (default: WARNING)
    MERKLETREE_OUTPUT_FORMAT     human or json (default: human)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from merkletree.crypto.hashing import HASH_ALGORITHMS
from merkletree.schemas.errors import MerkleTreeException
from merkletree.schemas.versioning import STANDARD_V1_FORMAT

from merkletree_cli import __version__
from merkletree_cli.commands import build, proof, show, verify
from merkletree_cli.config import (
    CSV_HEADER_MODES,
    get_default_config_template,
    load_config,
)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="merkletree",
        description="Build Merkle trees over typed leaf values and serve inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./merkletree.json or ~/.config/merkletree/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a tree from a values file",
        description="Build a Merkle tree from a CSV or JSON values file and write the tree document.",
    )
    build_parser.add_argument(
        "source",
        type=str,
        help="Values file (.csv, or .json array of leaf tuples)",
    )
    build_parser.add_argument(
        "--encoding", "-e",
        nargs="+",
        default=None,
        metavar="TYPE",
        help="ABI type of each leaf field (default: from config, address)",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the tree document (default: from config, tree.json)",
    )
    build_parser.add_argument(
        "--no-sort",
        action="store_true",
        default=False,
        help="Keep input order instead of sorting leaves by hash",
    )
    build_parser.add_argument(
        "--hash",
        type=str,
        choices=sorted(HASH_ALGORITHMS),
        default=None,
        help="Hash algorithm (default: from config, keccak256)",
    )
    build_parser.add_argument(
        "--header",
        type=str,
        choices=list(CSV_HEADER_MODES),
        default=None,
        help="Whether the CSV's first row is a header (default: auto)",
    )
    build_parser.add_argument(
        "--format",
        type=str,
        choices=["native", STANDARD_V1_FORMAT],
        default="native",
        help="Tree document format (default: native)",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the proof for a leaf",
        description="Load a tree document and print the value and proof of a leaf.",
    )
    proof_parser.add_argument(
        "values",
        nargs="*",
        metavar="VALUE",
        help="Leaf value fields, or a single value matched against --field",
    )
    proof_parser.add_argument(
        "--index", "-i",
        type=int,
        default=None,
        help="Select the leaf by its position in the original values",
    )
    proof_parser.add_argument(
        "--field",
        type=int,
        default=0,
        help="Field matched when a single value is given (default: 0)",
    )
    proof_parser.add_argument(
        "--tree", "-t",
        type=str,
        default=None,
        help="Tree document (default: from config, tree.json)",
    )
    proof_parser.add_argument(
        "--no-validate",
        action="store_true",
        default=False,
        help="Skip rehashing the tree on load",
    )
    proof_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof for a leaf value",
        description="Recompute the root from a leaf value and proof and compare.",
    )
    verify_parser.add_argument(
        "values",
        nargs="+",
        metavar="VALUE",
        help="Leaf value fields",
    )
    verify_parser.add_argument(
        "--proof", "-p",
        nargs="*",
        default=[],
        metavar="HASH",
        help="Proof hashes, bottom to top",
    )
    verify_parser.add_argument(
        "--root", "-r",
        type=str,
        default=None,
        help="Expected root (default: root of --tree)",
    )
    verify_parser.add_argument(
        "--tree", "-t",
        type=str,
        default=None,
        help="Tree document to take root and encoding from when --root is not given",
    )
    verify_parser.add_argument(
        "--encoding", "-e",
        nargs="+",
        default=None,
        metavar="TYPE",
        help="ABI type of each leaf field",
    )
    verify_parser.add_argument(
        "--hash",
        type=str,
        choices=sorted(HASH_ALGORITHMS),
        default=None,
        help="Hash algorithm",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- show command ---
    show_parser = subparsers.add_parser(
        "show",
        help="Describe a tree document",
        description="Print root, size and encoding of a tree document.",
    )
    show_parser.add_argument(
        "--tree", "-t",
        type=str,
        default=None,
        help="Tree document (default: from config, tree.json)",
    )
    show_parser.add_argument(
        "--render",
        action="store_true",
        default=False,
        help="Draw the tree",
    )
    show_parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Rehash every node and report inconsistencies",
    )
    show_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    show_parser.set_defaults(func=show.show_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="merkletree.json",
        help="Path for config file (default: merkletree.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template(), encoding="utf-8")
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (MERKLETREE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: merkletree config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename or e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except MerkleTreeException as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        if getattr(args, "json", False) or config.output_format == "json":
            print(json.dumps({"error": e.to_error_model().model_dump()}, default=str), file=sys.stderr)
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
