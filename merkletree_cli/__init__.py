"""
merkletree CLI

Command-line interface for building Merkle trees and serving proofs.

Usage:
    python -m merkletree_cli build values.csv --out tree.json
    python -m merkletree_cli proof 0x1111111111111111111111111111111111111111
    python -m merkletree_cli verify 0x1111.. --root 0x.. --proof 0x..
    python -m merkletree_cli show --render
"""

__version__ = "0.1.0"
