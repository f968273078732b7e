"""Byte chains: arbitrary-length payloads split across single-reference cells.

A payload is cut into 127-byte chunks, one per cell. Each cell except the last
holds exactly 127 bytes and one reference to the cell carrying the following
chunk; the last (tail) cell holds the remainder and no reference. A cell can
only reference finished cells, so the chain is built tail first by folding
backward over the buffer, and the head is what the caller stores.
"""

from __future__ import annotations

import logging

from tvc_codec.cells import Cell, CellBuilder, CellSlice
from tvc_codec.constants import CHUNK_BYTES
from tvc_codec.errors import InvalidEncodingError, MalformedChainError
from tvc_codec.schema.base import decode_text

__all__ = [
    "chain_cells",
    "decode_chunks",
    "encode_chunks",
    "load_bytes_ref",
    "load_string_ref",
    "load_tail_bytes",
    "store_bytes_ref",
    "store_string_ref",
    "store_tail_bytes",
]

_LOG = logging.getLogger(__name__)


def encode_chunks(data: bytes) -> Cell:
    """Split ``data`` into a chain of cells and return the head of the chain.

    Empty input still produces one empty tail cell. A length that is an exact
    multiple of 127 ends with a full tail cell, never an empty one.
    """

    raw = bytes(data)
    end = len(raw)
    start = end - (end % CHUNK_BYTES or min(end, CHUNK_BYTES))

    current = CellBuilder().store_bytes(raw[start:end]).end_cell()
    cell_count = 1
    while start > 0:
        end, start = start, start - CHUNK_BYTES
        builder = CellBuilder().store_bytes(raw[start:end])
        builder.store_ref(current)
        current = builder.end_cell()
        cell_count += 1

    _LOG.debug("encoded %d byte(s) into a chain of %d cell(s)", len(raw), cell_count)
    return current


def decode_chunks(head: Cell) -> bytes:
    """Walk a chain from ``head`` and concatenate the chunk payloads in order."""

    parts: list[bytes] = []
    cell: Cell | None = head
    while cell is not None:
        cell_slice = cell.begin_parse()
        if cell_slice.remaining_refs > 1:
            raise MalformedChainError(
                f"chain cell {len(parts)} has {cell_slice.remaining_refs} references, "
                "expected at most 1"
            )
        if cell_slice.remaining_bits % 8:
            raise MalformedChainError(
                f"chain cell {len(parts)} holds {cell_slice.remaining_bits} bits, not whole bytes"
            )
        parts.append(cell_slice.load_bytes(cell_slice.remaining_bits // 8))
        cell = cell_slice.load_ref() if cell_slice.remaining_refs else None

    return b"".join(parts)


def chain_cells(head: Cell) -> list[Cell]:
    """Return the cells of a chain from head to tail without validating payloads."""

    cells = [head]
    while cells[-1].refs:
        if len(cells[-1].refs) > 1:
            raise MalformedChainError(
                f"chain cell {len(cells) - 1} has {len(cells[-1].refs)} references, "
                "expected at most 1"
            )
        cells.append(cells[-1].refs[0])
    return cells


def store_bytes_ref(builder: CellBuilder, data: bytes) -> None:
    """Store ``data`` as a chain in the next reference slot of ``builder``."""

    builder.store_ref(encode_chunks(data))


def load_bytes_ref(cell_slice: CellSlice) -> bytes:
    """Consume the next reference of ``cell_slice`` as a chain and return its bytes."""

    if cell_slice.remaining_refs < 1:
        raise MalformedChainError("missing reference slot for chained bytes")
    return decode_chunks(cell_slice.load_ref())


def store_string_ref(builder: CellBuilder, text: str) -> None:
    store_bytes_ref(builder, text.encode("utf-8"))


def load_string_ref(cell_slice: CellSlice) -> str:
    return decode_text(load_bytes_ref(cell_slice), "chained string")


def store_tail_bytes(builder: CellBuilder, data: bytes) -> None:
    """Write ``data`` as the trailing field of the cell under construction.

    The field has no length prefix: it is whatever bits the cell holds after
    the preceding fields. Bytes that fit in the free bits go inline; anything
    left over is chained into the next free reference slot.
    """

    raw = bytes(data)
    inline = min(len(raw), builder.remaining_bits // 8)
    builder.store_bytes(raw[:inline])
    if inline < len(raw):
        _LOG.debug("tail field spills %d byte(s) into a chain", len(raw) - inline)
        store_bytes_ref(builder, raw[inline:])


def load_tail_bytes(cell_slice: CellSlice, path: str) -> bytes:
    """Read every remaining bit of the cell (plus a spill chain, if present) as bytes."""

    if cell_slice.remaining_bits % 8:
        raise InvalidEncodingError(
            f"{path}: {cell_slice.remaining_bits} trailing bits are not whole bytes"
        )
    inline = cell_slice.load_bytes(cell_slice.remaining_bits // 8)
    if cell_slice.remaining_refs == 0:
        return inline
    if cell_slice.remaining_refs > 1:
        raise MalformedChainError(
            f"{path}: {cell_slice.remaining_refs} references left after the trailing field, "
            "expected at most 1"
        )
    return inline + load_bytes_ref(cell_slice)
