"""
Persistence Unit Tests
Tests for merkletree/merkle/persistence.py

Tests:
- dump/load round trips in the native and standard-v1 formats
- Loading documents written by the JavaScript implementation
- Rejection of unknown formats and inconsistent documents
- Atomic file writes
"""
import json

import pytest

from fixtures import ADDRESS_1, ADDRESS_2, make_tree, write_json, write_tree_file
from merkletree.merkle.persistence import (
    MAX_SAFE_INTEGER,
    dump_tree,
    load_tree,
    read_tree,
    write_tree,
)
from merkletree.merkle.standard_tree import StandardMerkleTree
from merkletree.schemas.errors import (
    CorruptDataError,
    FormatVersionError,
    UnsupportedHashError,
)


class TestNativeFormat:
    """Tests for the native document format."""

    def test_dump_fields(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)

        assert document["format_version"] == 1
        assert document["hash_algorithm"] == "keccak256"
        assert document["leaf_type_signature"] == ["address"]
        assert document["leaf_values"] == [[ADDRESS_1], [ADDRESS_2]]
        assert document["leaf_tree_indices"] == two_leaf_tree.tree_indices
        assert document["tree_hashes"][0] == two_leaf_tree.root
        assert document["root"] == two_leaf_tree.root

    def test_round_trip(self, claim_tree):
        loaded = load_tree(dump_tree(claim_tree))

        assert loaded == claim_tree
        assert loaded.get_proof(3) == claim_tree.get_proof(3)

    def test_round_trip_through_json(self, address_tree):
        text = json.dumps(address_tree.dump())

        assert StandardMerkleTree.load(json.loads(text)) == address_tree

    def test_round_trip_sha256(self):
        tree = make_tree(hash_algorithm="sha256")
        loaded = load_tree(dump_tree(tree), validate=True)

        assert loaded.hash_algorithm == "sha256"
        assert loaded == tree

    def test_root_is_optional(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        del document["root"]

        assert load_tree(document) == two_leaf_tree

    def test_dump_is_deterministic(self, claim_tree):
        assert json.dumps(claim_tree.dump()) == json.dumps(claim_tree.dump())


class TestStandardV1Format:
    """Tests for the JavaScript standard-v1 document format."""

    def test_dump_shape(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree, fmt="standard-v1")

        assert document["format"] == "standard-v1"
        assert document["leafEncoding"] == ["address"]
        assert document["tree"] == ["0x" + node.hex() for node in two_leaf_tree.tree]
        assert document["values"] == [
            {"value": [ADDRESS_1], "treeIndex": two_leaf_tree.tree_indices[0]},
            {"value": [ADDRESS_2], "treeIndex": two_leaf_tree.tree_indices[1]},
        ]

    def test_round_trip(self, claim_tree):
        loaded = load_tree(claim_tree.dump("standard-v1"))

        assert loaded == claim_tree

    def test_large_integers_written_as_strings(self, claim_tree):
        document = claim_tree.dump("standard-v1")

        assert claim_tree.at(0)[1] > MAX_SAFE_INTEGER
        assert document["values"][0]["value"][1] == str(claim_tree.at(0)[1])

    def test_small_integers_stay_numbers(self):
        tree = make_tree([[ADDRESS_1, "5"]], ["address", "uint256"])

        assert tree.dump("standard-v1")["values"][0]["value"] == [ADDRESS_1, 5]

    def test_load_js_document(self, two_leaf_tree):
        """A document as written by the JS library, with lowercase addresses."""
        document = {
            "format": "standard-v1",
            "leafEncoding": ["address"],
            "tree": [two_leaf_tree.root] + [
                "0x" + node.hex() for node in two_leaf_tree.tree[1:]
            ],
            "values": [
                {"value": [ADDRESS_1.lower()], "treeIndex": two_leaf_tree.tree_indices[0]},
                {"value": [ADDRESS_2.lower()], "treeIndex": two_leaf_tree.tree_indices[1]},
            ],
        }

        loaded = load_tree(document, validate=True)

        assert loaded.root == two_leaf_tree.root
        assert loaded.verify(0, loaded.get_proof(0))

    def test_sha256_cannot_be_standard_v1(self):
        tree = make_tree(hash_algorithm="sha256")

        with pytest.raises(FormatVersionError):
            dump_tree(tree, fmt="standard-v1")


class TestRejectedDocuments:
    """Documents that must not load."""

    def test_unknown_dump_format(self, two_leaf_tree):
        with pytest.raises(FormatVersionError):
            dump_tree(two_leaf_tree, fmt="yaml")

    def test_unknown_format_version(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["format_version"] = 2

        with pytest.raises(FormatVersionError, match="Unknown tree format"):
            load_tree(document)

    def test_missing_format_version(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        del document["format_version"]

        with pytest.raises(FormatVersionError):
            load_tree(document)

    def test_bool_format_version(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["format_version"] = True

        with pytest.raises(FormatVersionError):
            load_tree(document)

    def test_unknown_foreign_format(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree, fmt="standard-v1")
        document["format"] = "simple-v1"

        with pytest.raises(FormatVersionError):
            load_tree(document)

    def test_not_an_object(self):
        with pytest.raises(CorruptDataError, match="JSON object"):
            load_tree([1, 2, 3])

    def test_missing_field(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        del document["tree_hashes"]

        with pytest.raises(CorruptDataError, match="schema error"):
            load_tree(document)

    def test_unexpected_field(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["extra"] = 1

        with pytest.raises(CorruptDataError):
            load_tree(document)

    def test_wrong_node_count(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["tree_hashes"] = document["tree_hashes"][:2]

        with pytest.raises(CorruptDataError, match="Expected 3 node hashes"):
            load_tree(document)

    def test_index_count_mismatch(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["leaf_tree_indices"] = document["leaf_tree_indices"][:1]

        with pytest.raises(CorruptDataError, match="tree indices"):
            load_tree(document)

    def test_bad_tree_index(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["leaf_tree_indices"] = [0, 1]

        with pytest.raises(CorruptDataError, match="exactly once"):
            load_tree(document)

    def test_malformed_hash(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["tree_hashes"][1] = "0x1234"

        with pytest.raises(CorruptDataError, match="Malformed node hash"):
            load_tree(document)

    def test_root_mismatch(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["root"] = "0x" + "00" * 32

        with pytest.raises(CorruptDataError, match="root does not match"):
            load_tree(document)

    def test_invalid_leaf_value(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["leaf_values"][0] = ["nope"]

        with pytest.raises(CorruptDataError, match="Invalid leaf data"):
            load_tree(document)

    def test_unknown_hash_algorithm(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["hash_algorithm"] = "md5"

        with pytest.raises(UnsupportedHashError):
            load_tree(document)

    def test_tampered_value_passes_without_validate(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["leaf_values"][0], document["leaf_values"][1] = (
            document["leaf_values"][1],
            document["leaf_values"][0],
        )

        assert load_tree(document).values == [[ADDRESS_2], [ADDRESS_1]]

    def test_tampered_value_fails_validate(self, two_leaf_tree):
        document = dump_tree(two_leaf_tree)
        document["leaf_values"][0], document["leaf_values"][1] = (
            document["leaf_values"][1],
            document["leaf_values"][0],
        )

        with pytest.raises(CorruptDataError, match="integrity validation"):
            load_tree(document, validate=True)

    def test_tampered_node_fails_validate(self, address_tree):
        document = dump_tree(address_tree)
        document["tree_hashes"][1] = "0x" + "00" * 32

        with pytest.raises(CorruptDataError, match="integrity validation"):
            load_tree(document, validate=True)


class TestFiles:
    """Tests for write_tree() and read_tree()."""

    def test_write_and_read(self, tmp_path, claim_tree):
        path = write_tree(tmp_path / "tree.json", claim_tree)

        assert path.exists()
        assert read_tree(path, validate=True) == claim_tree

    def test_write_standard_v1(self, tmp_path, two_leaf_tree):
        path = write_tree_file(tmp_path, two_leaf_tree, fmt="standard-v1")

        assert json.loads(path.read_text())["format"] == "standard-v1"
        assert read_tree(path) == two_leaf_tree

    def test_creates_parent_directories(self, tmp_path, two_leaf_tree):
        path = write_tree(tmp_path / "a" / "b" / "tree.json", two_leaf_tree)

        assert path.exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path, two_leaf_tree, address_tree):
        write_tree(tmp_path / "tree.json", two_leaf_tree)
        write_tree(tmp_path / "tree.json", address_tree)

        assert [p.name for p in tmp_path.iterdir()] == ["tree.json"]
        assert read_tree(tmp_path / "tree.json") == address_tree

    def test_failed_write_keeps_old_document(self, tmp_path, two_leaf_tree):
        path = write_tree(tmp_path / "tree.json", two_leaf_tree)
        before = path.read_text()
        sha_tree = make_tree(hash_algorithm="sha256")

        with pytest.raises(FormatVersionError):
            write_tree(path, sha_tree, fmt="standard-v1")

        assert path.read_text() == before

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_tree(tmp_path / "missing.json")

    def test_read_invalid_json(self, tmp_path):
        path = tmp_path / "tree.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CorruptDataError, match="not valid JSON"):
            read_tree(path)

    def test_read_written_document(self, tmp_path, two_leaf_tree):
        path = write_json(tmp_path / "tree.json", dump_tree(two_leaf_tree))

        assert read_tree(path) == two_leaf_tree
