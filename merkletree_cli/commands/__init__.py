"""
CLI command modules.
"""

from merkletree_cli.commands import build, proof, show, verify

__all__ = ["build", "proof", "show", "verify"]
