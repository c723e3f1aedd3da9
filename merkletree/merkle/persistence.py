"""
Merkle - Persistence Codec
Dump and load StandardMerkleTree documents.

A dumped document carries every node hash, so loading never rehashes
leaves. Two formats are understood:

Native (format_version 1):
    {"format_version": 1, "hash_algorithm": "keccak256",
     "leaf_type_signature": [...], "leaf_values": [[...], ...],
     "leaf_tree_indices": [...], "tree_hashes": ["0x..", ...], "root": "0x.."}

standard-v1 (JavaScript StandardMerkleTree.dump()):
    {"format": "standard-v1", "leafEncoding": [...], "tree": ["0x..", ...],
     "values": [{"value": [...], "treeIndex": n}, ...]}

Load checks (always): known format, schema shape, 0x 32-byte hashes,
2N-1 nodes, tree indices covering the leaf positions, root == tree[0].
With validate=True every leaf and internal node is also rehashed.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from merkletree.crypto.hashing import DEFAULT_HASH_ALGORITHM, node_from_hex, to_hex
from merkletree.encoding.leaf_encoder import LeafEncoding
from merkletree.merkle.standard_tree import LeafEntry, StandardMerkleTree
from merkletree.schemas.dump import StandardV1Dump, StandardV1Value, TreeDump
from merkletree.schemas.errors import (
    CorruptDataError,
    EncodingError,
    FormatVersionError,
    InvalidHashError,
)
from merkletree.schemas.versioning import (
    FORMAT_VERSION,
    STANDARD_V1_FORMAT,
    SUPPORTED_FOREIGN_FORMATS,
    SUPPORTED_FORMAT_VERSIONS,
    is_supported_foreign_format,
    is_supported_format_version,
)


logger = logging.getLogger(__name__)

# Largest integer a JavaScript number holds exactly
MAX_SAFE_INTEGER = 2**53 - 1


def _supported_formats() -> list[Any]:
    return sorted(SUPPORTED_FORMAT_VERSIONS) + sorted(SUPPORTED_FOREIGN_FORMATS)


def _js_safe(value: Any) -> Any:
    """Render integers a JS number would round as decimal strings."""
    if isinstance(value, list):
        return [_js_safe(item) for item in value]
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_INTEGER:
        return str(value)
    return value


# =============================================================================
# Dump
# =============================================================================

def dump_tree(tree: StandardMerkleTree, fmt: str | None = None) -> dict[str, Any]:
    """
    Serialize a tree to a JSON-ready document.

    Args:
        tree: The tree to dump
        fmt: None for the native format, or "standard-v1"

    Returns:
        Document dict

    Raises:
        FormatVersionError: If fmt is not a writable format, or the tree
            uses a hash algorithm standard-v1 cannot express
    """
    tree_hashes = [to_hex(node) for node in tree.tree]

    if fmt is None:
        document = TreeDump(
            format_version=FORMAT_VERSION,
            hash_algorithm=tree.hash_algorithm,
            leaf_type_signature=list(tree.leaf_encoding),
            leaf_values=tree.values,
            leaf_tree_indices=tree.tree_indices,
            tree_hashes=tree_hashes,
            root=tree.root,
        )
        return document.model_dump(mode="json")

    if fmt == STANDARD_V1_FORMAT:
        if tree.hash_algorithm != DEFAULT_HASH_ALGORITHM:
            raise FormatVersionError(fmt, [FORMAT_VERSION])
        document = StandardV1Dump(
            format=STANDARD_V1_FORMAT,
            leaf_encoding=list(tree.leaf_encoding),
            tree=tree_hashes,
            values=[
                StandardV1Value(value=_js_safe(value), tree_index=tree_index)
                for value, tree_index in zip(tree.values, tree.tree_indices)
            ],
        )
        return document.model_dump(mode="json", by_alias=True)

    raise FormatVersionError(fmt, _supported_formats())


# =============================================================================
# Load
# =============================================================================

def _parse_document(document: dict[str, Any]) -> TreeDump:
    """Check the format tag and bring either format to the native shape."""
    if not isinstance(document, dict):
        raise CorruptDataError(
            f"Tree document must be a JSON object, got {type(document).__name__}"
        )

    if "format" in document:
        fmt = document["format"]
        if not is_supported_foreign_format(fmt):
            raise FormatVersionError(fmt, _supported_formats())
        try:
            foreign = StandardV1Dump.model_validate(document)
        except ValidationError as e:
            raise CorruptDataError(
                f"Malformed {fmt} document: {e.error_count()} schema error(s)",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e
        return TreeDump.model_construct(
            format_version=FORMAT_VERSION,
            hash_algorithm=DEFAULT_HASH_ALGORITHM,
            leaf_type_signature=foreign.leaf_encoding,
            leaf_values=[entry.value for entry in foreign.values],
            leaf_tree_indices=[entry.tree_index for entry in foreign.values],
            tree_hashes=foreign.tree,
            root=None,
        )

    version = document.get("format_version")
    if not is_supported_format_version(version):
        raise FormatVersionError(version, _supported_formats())
    try:
        return TreeDump.model_validate(document)
    except ValidationError as e:
        raise CorruptDataError(
            f"Malformed tree document: {e.error_count()} schema error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def load_tree(document: dict[str, Any], *, validate: bool = False) -> StandardMerkleTree:
    """
    Restore a tree from a dumped document.

    Args:
        document: Parsed JSON document (native or standard-v1)
        validate: Also rehash every leaf and internal node

    Returns:
        The restored tree; load(dump(tree)) == tree

    Raises:
        FormatVersionError: If the document format is unknown
        CorruptDataError: If the document is malformed or inconsistent
        UnsupportedHashError: If the document names an unknown hash algorithm
    """
    parsed = _parse_document(document)

    if len(parsed.leaf_values) != len(parsed.leaf_tree_indices):
        raise CorruptDataError(
            f"{len(parsed.leaf_values)} leaf values but "
            f"{len(parsed.leaf_tree_indices)} tree indices",
        )

    expected_nodes = 2 * len(parsed.leaf_values) - 1
    if len(parsed.tree_hashes) != expected_nodes:
        raise CorruptDataError(
            f"Expected {expected_nodes} node hashes for {len(parsed.leaf_values)} "
            f"leaves, got {len(parsed.tree_hashes)}",
            details={"leaves": len(parsed.leaf_values), "nodes": len(parsed.tree_hashes)},
        )

    try:
        nodes = [node_from_hex(h) for h in parsed.tree_hashes]
        if parsed.root is not None and node_from_hex(parsed.root) != nodes[0]:
            raise CorruptDataError(
                "Document root does not match tree_hashes[0]",
                details={"root": parsed.root, "tree_root": parsed.tree_hashes[0]},
            )
    except InvalidHashError as e:
        raise CorruptDataError(f"Malformed node hash: {e.message}", details=e.details) from e

    try:
        encoding = LeafEncoding.of(parsed.leaf_type_signature)
        entries = [
            LeafEntry(value=tuple(encoding.normalize(value)), tree_index=tree_index)
            for value, tree_index in zip(parsed.leaf_values, parsed.leaf_tree_indices)
        ]
    except EncodingError as e:
        raise CorruptDataError(f"Invalid leaf data: {e.message}", details=e.details) from e

    tree = StandardMerkleTree(nodes, entries, encoding, parsed.hash_algorithm)

    if validate:
        result = tree.validate()
        if not result.ok:
            raise CorruptDataError(
                "Tree failed integrity validation: " + "; ".join(result.get_error_messages()),
                details={"checks": [c.model_dump() for c in result.get_failed_checks()]},
            )

    logger.info(f"Loaded tree: {tree.length} leaves, root={tree.root}")
    return tree


# =============================================================================
# Files
# =============================================================================

def write_tree(
    path: str | Path,
    tree: StandardMerkleTree,
    *,
    fmt: str | None = None,
    indent: int | None = 2,
) -> Path:
    """
    Write a tree document to disk atomically.

    The document goes to a temporary file in the target directory and is
    then renamed over path, so a failure never leaves a partial document.
    """
    out_path = Path(path)
    content = json.dumps(dump_tree(tree, fmt=fmt), indent=indent) + "\n"

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{out_path.name}.",
        suffix=".tmp",
        dir=out_path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, out_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Wrote tree document: {out_path}")
    return out_path


def read_tree(path: str | Path, *, validate: bool = False) -> StandardMerkleTree:
    """
    Read and load a tree document from disk.

    Raises:
        FileNotFoundError: If path does not exist
        CorruptDataError: If the file is not valid JSON or not a valid tree
        FormatVersionError: If the document format is unknown
    """
    in_path = Path(path)
    text = in_path.read_text(encoding="utf-8")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptDataError(
            f"Tree document is not valid JSON: {e.msg} (line {e.lineno})",
            details={"path": str(in_path)},
        ) from e
    return load_tree(document, validate=validate)


__all__ = [
    "dump_tree",
    "load_tree",
    "write_tree",
    "read_tree",
]
