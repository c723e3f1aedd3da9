"""
Test fixtures package for merkletree tests.

Usage:
    from fixtures import make_tree, make_address_values

    def test_something():
        tree = make_tree(make_address_values(5))
"""

from .common import (
    ADDRESS_1,
    ADDRESS_2,
    ADDRESS_3,
    make_address,
    make_address_values,
    make_claim_values,
    make_tree,
    write_json,
    write_tree_file,
)

__all__ = [
    "ADDRESS_1",
    "ADDRESS_2",
    "ADDRESS_3",
    "make_address",
    "make_address_values",
    "make_claim_values",
    "make_tree",
    "write_json",
    "write_tree_file",
]
