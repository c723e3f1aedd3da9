"""
CLI Values Sources

Read leaf values for `merkletree build` from a file.

- .json: a JSON array of leaf tuples, e.g. [["0x11.."], ["0x22.."]]
- anything else: CSV, one leaf per row, column order = field order

The first CSV row may be a header. In "auto" mode it is treated as a
header only when none of its cells encodes under its field type.
"""

from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path
from typing import Any

from merkletree.encoding.leaf_encoder import LeafEncoding, coerce_leaf
from merkletree.schemas.errors import EncodingError


logger = logging.getLogger(__name__)

# Cells shaped like values rather than column names
_LITERAL_RE = re.compile(r"^(-?[0-9]|\[|\()")


def _is_header(row: list[str], encoding: LeafEncoding) -> bool:
    """
    A header row has no cell that encodes under its field type.

    string fields accept any text, so they say nothing either way. A cell
    that looks like a literal (a number, 0x-hex, a JSON array) is data even
    when it is malformed, so a bad first row is kept and fails loudly when
    the tree is built.
    """
    checked = [
        (type_str, cell)
        for type_str, cell in zip(encoding.types, row)
        if type_str != "string"
    ]
    if not checked:
        return False
    for type_str, cell in checked:
        if _LITERAL_RE.match(cell):
            return False
        try:
            coerce_leaf([type_str], [cell])
        except EncodingError:
            continue
        return False
    return True


def read_csv_values(
    path: Path,
    encoding: LeafEncoding,
    *,
    header: str = "auto",
    delimiter: str = ",",
) -> list[list[str]]:
    """
    Read leaf tuples from a CSV file.

    Blank lines are skipped and cells are stripped. Values stay strings;
    coercion to their ABI types happens when the tree is built.

    Raises:
        EncodingError: If a row has the wrong number of columns
    """
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        rows = [
            [cell.strip() for cell in row]
            for row in csv.reader(f, delimiter=delimiter)
            if any(cell.strip() for cell in row)
        ]

    if rows and (header == "yes" or (header == "auto" and _is_header(rows[0], encoding))):
        logger.debug(f"Skipping header row: {rows[0]}")
        rows = rows[1:]

    for line, row in enumerate(rows, start=1):
        if len(row) != encoding.arity:
            raise EncodingError(
                f"Row {line} of {path} has {len(row)} column(s), "
                f"expected {encoding.arity}",
                details={"row": line, "path": str(path)},
            )

    logger.info(f"Read {len(rows)} value(s) from {path}")
    return rows


def read_json_values(path: Path) -> list[list[Any]]:
    """
    Read leaf tuples from a JSON array file.

    Raises:
        EncodingError: If the file is not a JSON array of arrays
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise EncodingError(
                f"Values file is not valid JSON: {e.msg} (line {e.lineno})",
                details={"path": str(path)},
            ) from e

    if not isinstance(data, list) or not all(isinstance(row, list) for row in data):
        raise EncodingError(
            f"Values file must be a JSON array of arrays: {path}",
            details={"path": str(path)},
        )

    logger.info(f"Read {len(data)} value(s) from {path}")
    return data


def read_values(
    path: str | Path,
    encoding: LeafEncoding,
    *,
    header: str = "auto",
    delimiter: str = ",",
) -> list[list[Any]]:
    """
    Read leaf tuples from a CSV or JSON file, chosen by extension.

    Raises:
        FileNotFoundError: If path does not exist
        EncodingError: If the file content is not a list of leaf tuples
    """
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Values file not found: {in_path}")
    if in_path.suffix.lower() == ".json":
        return read_json_values(in_path)
    return read_csv_values(in_path, encoding, header=header, delimiter=delimiter)
