"""Unit tests for byte chains and trailing-field storage."""

from __future__ import annotations

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tvc_codec.cells import CellBuilder
from tvc_codec.errors import CellOverflowError, InvalidEncodingError, MalformedChainError
from tvc_codec.schema.chunks import (
    chain_cells,
    decode_chunks,
    encode_chunks,
    load_bytes_ref,
    load_string_ref,
    load_tail_bytes,
    store_string_ref,
    store_tail_bytes,
)


def test_empty_payload_is_one_empty_cell() -> None:
    head = encode_chunks(b"")

    assert head.bit_length == 0
    assert head.refs == ()
    assert decode_chunks(head) == b""


@pytest.mark.parametrize(
    ("length", "tail_bytes"),
    [(1, 1), (126, 126), (127, 127), (128, 1), (254, 127), (300, 46), (1270, 127)],
)
def test_chain_shape(length: int, tail_bytes: int) -> None:
    payload = bytes(index % 251 for index in range(length))

    cells = chain_cells(encode_chunks(payload))

    assert len(cells) == math.ceil(length / 127)
    for cell in cells[:-1]:
        assert cell.bit_length == 127 * 8
        assert len(cell.refs) == 1
    assert cells[-1].bit_length == tail_bytes * 8
    assert cells[-1].refs == ()


def test_chain_preserves_order() -> None:
    payload = b"".join(bytes([index]) * 127 for index in range(5)) + b"end"

    head = encode_chunks(payload)

    assert head.begin_parse().load_bytes(1) == b"\x00"
    assert decode_chunks(head) == payload


@given(payload=st.binary(max_size=2048))
@settings(max_examples=60, derandomize=True, deadline=None)
def test_property_chunk_round_trip(payload: bytes) -> None:
    assert decode_chunks(encode_chunks(payload)) == payload


def test_chain_length_is_bounded_by_cell_depth() -> None:
    longest = bytes(127 * 1025)
    assert len(chain_cells(encode_chunks(longest))) == 1025

    with pytest.raises(CellOverflowError):
        encode_chunks(longest + b"\x00")


def test_chained_string_rejects_non_utf8() -> None:
    builder = CellBuilder().store_ref(encode_chunks(b"\xff\xfe"))

    with pytest.raises(InvalidEncodingError, match="chained string"):
        load_string_ref(builder.end_cell().begin_parse())


def test_chain_with_two_references_is_malformed() -> None:
    tail = CellBuilder().store_bytes(b"tail").end_cell()
    forked = CellBuilder().store_bytes(b"head").store_ref(tail).store_ref(tail).end_cell()

    with pytest.raises(MalformedChainError, match="expected at most 1"):
        decode_chunks(forked)
    with pytest.raises(MalformedChainError):
        chain_cells(forked)


def test_chain_with_partial_byte_is_malformed() -> None:
    odd = CellBuilder().store_uint(0b101, 3).end_cell()

    with pytest.raises(MalformedChainError, match="not whole bytes"):
        decode_chunks(odd)


def test_missing_reference_slot() -> None:
    with pytest.raises(MalformedChainError, match="missing reference slot"):
        load_bytes_ref(CellBuilder().end_cell().begin_parse())


def test_string_ref_round_trip(whiskers_desc: str) -> None:
    builder = CellBuilder()
    store_string_ref(builder, whiskers_desc)
    cell = builder.end_cell()

    assert cell.bit_length == 0
    assert len(cell.refs) == 1
    assert load_string_ref(cell.begin_parse()) == whiskers_desc


def test_tail_bytes_fill_free_bits_then_spill() -> None:
    builder = CellBuilder().store_uint(0, 1000)
    store_tail_bytes(builder, b"abcdef")
    cell = builder.end_cell()

    assert cell.bit_length == 1016
    assert len(cell.refs) == 1
    assert decode_chunks(cell.refs[0]) == b"cdef"

    cell_slice = cell.begin_parse()
    cell_slice.load_uint(1000)
    assert load_tail_bytes(cell_slice, "test.tail") == b"abcdef"


def test_tail_bytes_that_fit_stay_inline() -> None:
    builder = CellBuilder().store_uint(7, 8)
    store_tail_bytes(builder, b"inline")
    cell = builder.end_cell()

    assert cell.refs == ()
    cell_slice = cell.begin_parse()
    cell_slice.load_uint(8)
    assert load_tail_bytes(cell_slice, "test.tail") == b"inline"


def test_tail_bytes_reject_partial_bytes_and_extra_refs() -> None:
    with pytest.raises(InvalidEncodingError, match="test.tail"):
        load_tail_bytes(CellBuilder().store_uint(1, 3).end_cell().begin_parse(), "test.tail")

    leaf = CellBuilder().end_cell()
    two_refs = CellBuilder().store_ref(leaf).store_ref(leaf).end_cell()
    with pytest.raises(MalformedChainError, match="test.tail"):
        load_tail_bytes(two_refs.begin_parse(), "test.tail")
