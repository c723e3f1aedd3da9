"""
Hashing Unit Tests
Tests for merkletree/crypto/hashing.py

Tests:
- keccak256 / sha256 known values
- hash registry lookup
- hash_pair ordering (sorted concatenation)
- to_hex / from_hex / node_from_hex validation
"""
import hashlib

import pytest
from eth_utils import keccak

from merkletree.crypto.hashing import (
    HASH_ALGORITHMS,
    from_hex,
    get_hash_function,
    hash_pair,
    is_valid_node,
    keccak256,
    node_from_hex,
    sha256,
    to_hex,
)
from merkletree.schemas.errors import InvalidHashError, UnsupportedHashError


EMPTY_KECCAK = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


class TestKeccak256:
    """Tests for keccak256()."""

    def test_empty_input_known_value(self):
        assert keccak256(b"").hex() == EMPTY_KECCAK

    def test_is_not_nist_sha3(self):
        """Ethereum keccak differs from hashlib's sha3_256."""
        assert keccak256(b"") != hashlib.sha3_256(b"").digest()

    def test_digest_size(self):
        assert len(keccak256(b"hello")) == 32

    def test_deterministic(self):
        assert keccak256(b"data") == keccak256(b"data")


class TestSha256:
    """Tests for sha256()."""

    def test_matches_hashlib(self):
        assert sha256(b"hello") == hashlib.sha256(b"hello").digest()


class TestHashRegistry:
    """Tests for the pluggable hash registry."""

    def test_default_algorithms_registered(self):
        assert set(HASH_ALGORITHMS) == {"keccak256", "sha256"}

    def test_get_hash_function(self):
        assert get_hash_function("keccak256") is keccak256
        assert get_hash_function("sha256") is sha256

    def test_unknown_algorithm_raises(self):
        with pytest.raises(UnsupportedHashError) as exc_info:
            get_hash_function("md5")

        assert exc_info.value.details["hash_algorithm"] == "md5"


class TestHashPair:
    """Tests for the sorted-pair node rule."""

    def test_order_independent(self):
        a = keccak256(b"a")
        b = keccak256(b"b")

        assert hash_pair(a, b) == hash_pair(b, a)

    def test_sorts_before_concatenating(self):
        low = bytes(31) + b"\x01"
        high = bytes(31) + b"\x02"

        assert hash_pair(high, low) == keccak(low + high)

    def test_same_child_twice(self):
        a = keccak256(b"a")

        assert hash_pair(a, a) == keccak(a + a)

    def test_uses_given_hasher(self):
        a = keccak256(b"a")
        b = keccak256(b"b")
        low, high = sorted([a, b])

        assert hash_pair(a, b, sha256) == hashlib.sha256(low + high).digest()


class TestHexHelpers:
    """Tests for hex encoding and node decoding."""

    def test_to_hex_prefix(self):
        assert to_hex(bytes.fromhex("deadbeef")) == "0xdeadbeef"

    def test_from_hex_round_trip(self):
        data = keccak256(b"x")

        assert from_hex(to_hex(data)) == data

    def test_from_hex_accepts_uppercase_prefix(self):
        assert from_hex("0XABCD") == bytes.fromhex("abcd")

    def test_from_hex_requires_prefix(self):
        with pytest.raises(InvalidHashError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_rejects_odd_length(self):
        with pytest.raises(InvalidHashError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_rejects_bad_characters(self):
        with pytest.raises(InvalidHashError):
            from_hex("0xzz")

    def test_from_hex_rejects_non_string(self):
        with pytest.raises(InvalidHashError):
            from_hex(b"0x00")

    def test_node_from_hex_requires_32_bytes(self):
        with pytest.raises(InvalidHashError, match="32-byte"):
            node_from_hex("0x" + "00" * 31)

        assert node_from_hex("0x" + "11" * 32) == b"\x11" * 32

    def test_is_valid_node(self):
        assert is_valid_node(b"\x00" * 32)
        assert not is_valid_node(b"\x00" * 31)
        assert not is_valid_node("0x" + "00" * 32)
