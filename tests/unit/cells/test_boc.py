"""Unit tests for the bag-of-cells container."""

from __future__ import annotations

import pytest

from tvc_codec.cells import (
    CellBuilder,
    boc_to_cell,
    crc32c,
    deserialize_boc,
    serialize_boc,
)
from tvc_codec.errors import BocError


def test_crc32c_check_value() -> None:
    assert crc32c(b"123456789") == 0xE3069283
    assert crc32c(b"") == 0


def test_single_cell_fixture_parses_and_reserializes(legacy_code_boc: bytes) -> None:
    cell = boc_to_cell(legacy_code_boc)

    assert cell.bit_length == 80
    assert cell.data.hex() == "ff00f8008101008011a1"
    assert cell.refs == ()
    assert serialize_boc(cell) == legacy_code_boc


def test_chained_fixture_parses_and_reserializes(scheme_code_boc: bytes) -> None:
    root = boc_to_cell(scheme_code_boc)

    assert root.depth == 2
    assert len(root.refs) == 1
    assert root.refs[0].refs[0].data == b"\xd3"
    assert serialize_boc(root) == scheme_code_boc


def test_flags_index_and_crc_variants_round_trip(scheme_code_boc: bytes) -> None:
    root = boc_to_cell(scheme_code_boc)

    indexed = serialize_boc(root, with_index=True)
    assert indexed[4] & 0x80
    assert boc_to_cell(indexed) == root

    bare = serialize_boc(root, with_crc32c=False)
    assert not bare[4] & 0x40
    assert len(bare) == len(scheme_code_boc) - 4
    assert boc_to_cell(bare) == root


def test_identical_subtrees_are_stored_once() -> None:
    leaf = CellBuilder().store_bytes(b"shared").end_cell()
    root = CellBuilder().store_ref(leaf).store_ref(leaf).end_cell()

    encoded = serialize_boc(root)

    assert encoded[6] == 2
    decoded = boc_to_cell(encoded)
    assert decoded.refs[0] == decoded.refs[1] == leaf


def test_multiple_roots() -> None:
    first = CellBuilder().store_uint(1, 8).end_cell()
    second = CellBuilder().store_uint(2, 8).store_ref(first).end_cell()

    encoded = serialize_boc([first, second])

    assert deserialize_boc(encoded) == (first, second)
    with pytest.raises(BocError, match="exactly one root"):
        boc_to_cell(encoded)


def test_malformed_containers_are_rejected(legacy_code_boc: bytes) -> None:
    with pytest.raises(BocError, match="magic"):
        deserialize_boc(b"\x00" + legacy_code_boc[1:])

    corrupted = bytearray(legacy_code_boc)
    corrupted[-6] ^= 0x01
    with pytest.raises(BocError, match="crc32c"):
        deserialize_boc(bytes(corrupted))

    with pytest.raises(BocError, match="unexpected end"):
        deserialize_boc(legacy_code_boc[:12])

    with pytest.raises(BocError, match="trailing"):
        deserialize_boc(legacy_code_boc + b"\x00")


def test_serialize_requires_a_root() -> None:
    with pytest.raises(ValueError, match="at least one root"):
        serialize_boc([])
