"""
CLI Configuration

Configuration management for the merkletree CLI.
Supports a JSON configuration file, environment variables and a .env file.

Precedence (lowest to highest): defaults, config file, environment.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv


# Environment variable prefix
ENV_PREFIX = "MERKLETREE_"

CSV_HEADER_MODES = ("auto", "yes", "no")
OUTPUT_FORMATS = ("human", "json")


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Tree document
    tree_path: str = "tree.json"
    validate_on_load: bool = True

    # Tree construction
    leaf_encoding: list[str] = field(default_factory=lambda: ["address"])
    hash_algorithm: str = "keccak256"
    sort_leaves: bool = True

    # Values source
    csv_header: str = "auto"  # "auto", "yes" or "no"
    csv_delimiter: str = ","

    # Logging
    log_level: str = "WARNING"
    log_file: str | None = None

    # Output
    output_format: str = "human"  # "human" or "json"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_encoding(raw: str) -> list[str]:
    """Accept either a JSON list or a comma-separated list of types."""
    raw = raw.strip()
    if raw.startswith("["):
        parsed = json.loads(raw)
        if not isinstance(parsed, list):
            raise ValueError(f"Leaf encoding must be a list, got: {raw}")
        return [str(t) for t in parsed]
    # tuple types contain commas, so only split at depth 0
    types, depth, current = [], 0, ""
    for ch in raw:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            types.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        types.append(current.strip())
    return types


def _check(config: CLIConfig) -> CLIConfig:
    if config.csv_header not in CSV_HEADER_MODES:
        raise ValueError(
            f"csv_header must be one of {list(CSV_HEADER_MODES)}, got: {config.csv_header!r}"
        )
    if config.output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"output_format must be one of {list(OUTPUT_FORMATS)}, got: {config.output_format!r}"
        )
    if not config.leaf_encoding:
        raise ValueError("leaf_encoding must declare at least one type")
    return config


def apply_env(config: CLIConfig) -> CLIConfig:
    """Override config fields from MERKLETREE_* environment variables."""
    if os.getenv(f"{ENV_PREFIX}TREE_PATH"):
        config.tree_path = os.getenv(f"{ENV_PREFIX}TREE_PATH", config.tree_path)
    config.validate_on_load = _env_bool(f"{ENV_PREFIX}VALIDATE_ON_LOAD", config.validate_on_load)

    if os.getenv(f"{ENV_PREFIX}LEAF_ENCODING"):
        config.leaf_encoding = _parse_encoding(os.getenv(f"{ENV_PREFIX}LEAF_ENCODING", ""))
    if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
        config.hash_algorithm = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM", config.hash_algorithm)
    config.sort_leaves = _env_bool(f"{ENV_PREFIX}SORT_LEAVES", config.sort_leaves)

    if os.getenv(f"{ENV_PREFIX}CSV_HEADER"):
        config.csv_header = os.getenv(f"{ENV_PREFIX}CSV_HEADER", "auto").lower()
    if os.getenv(f"{ENV_PREFIX}CSV_DELIMITER"):
        config.csv_delimiter = os.getenv(f"{ENV_PREFIX}CSV_DELIMITER", ",")

    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", config.log_level)
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")

    if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        config.output_format = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT", "human").lower()

    return config


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    config = CLIConfig()

    config.tree_path = data.get("tree_path", config.tree_path)
    config.validate_on_load = data.get("validate_on_load", config.validate_on_load)

    encoding = data.get("leaf_encoding", config.leaf_encoding)
    config.leaf_encoding = _parse_encoding(encoding) if isinstance(encoding, str) else list(encoding)
    config.hash_algorithm = data.get("hash_algorithm", config.hash_algorithm)
    config.sort_leaves = data.get("sort_leaves", config.sort_leaves)

    config.csv_header = data.get("csv_header", config.csv_header)
    config.csv_delimiter = data.get("csv_delimiter", config.csv_delimiter)

    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)

    config.output_format = data.get("output_format", config.output_format)

    return config


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / "merkletree.json",
        Path.cwd() / ".merkletree.json",
        Path.home() / ".config" / "merkletree" / "config.json",
    ]


def load_config(config_path: Path | None = None, *, use_dotenv: bool = True) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. A .env file in the
    working directory is read into the environment first.

    Args:
        config_path: Optional path to config file; must exist if given
        use_dotenv: Read .env before looking at the environment

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If config_path is given but missing
        ValueError: If a setting has an invalid value
    """
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        for default_path in default_config_paths():
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    return _check(apply_env(config))


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(CLIConfig().to_dict(), indent=2) + "\n"
