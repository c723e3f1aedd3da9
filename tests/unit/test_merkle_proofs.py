"""
Proof Verification Unit Tests
Tests for merkletree/merkle/merkle_proofs.py

Tests:
- Stateless verification of values and leaf hashes against a root
- MerkleVerifier bundles
- Malformed inputs raise instead of returning False
"""
import pytest

from fixtures import ADDRESS_1, ADDRESS_2, ADDRESS_3, make_tree
from merkletree.merkle.merkle_proofs import (
    MerkleVerifier,
    verify_leaf_hash,
    verify_proof,
)
from merkletree.schemas.errors import EncodingError, InvalidHashError, UnsupportedHashError


class TestVerifyProof:
    """Tests for verify_proof()."""

    def test_every_leaf_verifies(self, claim_tree):
        for index, value in claim_tree.entries():
            proof = claim_tree.get_proof(index)

            assert verify_proof(claim_tree.root, ["address", "uint256"], value, proof)

    def test_loose_value_verifies(self, claim_tree):
        """Amounts as decimal strings and lowercase addresses still verify."""
        address, amount = claim_tree.at(0)
        proof = claim_tree.get_proof(0)

        assert verify_proof(claim_tree.root, ["address", "uint256"], [address.lower(), str(amount)], proof)

    def test_wrong_value_fails(self, two_leaf_tree):
        proof = two_leaf_tree.get_proof(0)

        assert not verify_proof(two_leaf_tree.root, ["address"], [ADDRESS_3], proof)

    def test_wrong_root_fails(self, two_leaf_tree, address_tree):
        proof = two_leaf_tree.get_proof(0)

        assert not verify_proof(address_tree.root, ["address"], [ADDRESS_1], proof)

    def test_single_leaf_empty_proof(self):
        tree = make_tree([[ADDRESS_1]])

        assert verify_proof(tree.root, ["address"], [ADDRESS_1], [])
        assert not verify_proof(tree.root, ["address"], [ADDRESS_2], [])

    def test_malformed_root_raises(self, two_leaf_tree):
        with pytest.raises(InvalidHashError):
            verify_proof("0x1234", ["address"], [ADDRESS_1], two_leaf_tree.get_proof(0))

    def test_malformed_proof_element_raises(self, two_leaf_tree):
        with pytest.raises(InvalidHashError):
            verify_proof(two_leaf_tree.root, ["address"], [ADDRESS_1], ["zz"])

    def test_bad_value_raises(self, two_leaf_tree):
        with pytest.raises(EncodingError):
            verify_proof(two_leaf_tree.root, ["address"], ["0x12"], [])

    def test_arity_mismatch_raises(self, two_leaf_tree):
        with pytest.raises(EncodingError, match="arity"):
            verify_proof(two_leaf_tree.root, ["address"], [ADDRESS_1, 1], [])

    def test_hash_algorithm(self):
        tree = make_tree(hash_algorithm="sha256")
        proof = tree.get_proof(0)

        assert verify_proof(tree.root, ["address"], tree.at(0), proof, hash_algorithm="sha256")
        assert not verify_proof(tree.root, ["address"], tree.at(0), proof)

    def test_unknown_hash_algorithm(self, two_leaf_tree):
        with pytest.raises(UnsupportedHashError):
            verify_proof(two_leaf_tree.root, ["address"], [ADDRESS_1], [], hash_algorithm="md5")


class TestVerifyLeafHash:
    """Tests for verify_leaf_hash()."""

    def test_leaf_hash_verifies(self, address_tree):
        value = address_tree.at(4)
        leaf = address_tree.leaf_hash(value)

        assert verify_leaf_hash(address_tree.root, leaf, address_tree.get_proof(4))

    def test_wrong_leaf_hash_fails(self, address_tree):
        leaf = address_tree.leaf_hash(address_tree.at(3))

        assert not verify_leaf_hash(address_tree.root, leaf, address_tree.get_proof(4))

    def test_short_leaf_hash_raises(self, address_tree):
        with pytest.raises(InvalidHashError):
            verify_leaf_hash(address_tree.root, "0x00", address_tree.get_proof(0))


class TestMerkleVerifier:
    """Tests for MerkleVerifier."""

    def test_verify_bundle(self, claim_tree):
        for index in range(len(claim_tree)):
            assert MerkleVerifier.verify(claim_tree.get_proof_bundle(index))

    def test_bundle_survives_json(self, claim_tree):
        bundle = claim_tree.get_proof_bundle(2)
        restored = type(bundle).model_validate_json(bundle.model_dump_json())

        assert MerkleVerifier.verify(restored)

    def test_tampered_bundle_value(self, claim_tree):
        bundle = claim_tree.get_proof_bundle(2)
        tampered = bundle.model_copy(update={"value": claim_tree.at(1)})

        assert not MerkleVerifier.verify(tampered)

    def test_leaf_hash_field_not_trusted(self, claim_tree):
        bundle = claim_tree.get_proof_bundle(2)
        tampered = bundle.model_copy(update={"leaf_hash": "0x" + "00" * 32})

        assert MerkleVerifier.verify(tampered)

    def test_verify_value_in_root(self, two_leaf_tree):
        proof = two_leaf_tree.get_proof(1)

        assert MerkleVerifier.verify_value_in_root(
            two_leaf_tree.root, ["address"], [ADDRESS_2], proof,
        )
