"""Bag-of-cells (BoC) container: whole-tree serialization to and from bytes.

Layout of the ``b5ee9c72`` container written here::

    magic:4 | flags:1 | off_bytes:1 | cells:size | roots:size | absent:size
    | tot_cells_size:off_bytes | root_list:(roots * size) | index?:(cells * off_bytes)
    | cell_data:tot_cells_size | crc32c?:4

``flags`` packs ``has_idx``, ``has_crc32c``, ``has_cache_bits``, two reserved
bits, and ``size`` (bytes per cell index). Cells are ordered so that every
reference points to a later index; identical subtrees are stored once.
"""

from __future__ import annotations

import logging
from typing import Final, Literal

from tvc_codec.cells.cell import Cell
from tvc_codec.constants import BOC_MAGIC, CELL_MAX_BITS, CELL_MAX_REFS
from tvc_codec.errors import BocError

__all__ = ["boc_to_cell", "cell_to_boc", "crc32c", "deserialize_boc", "serialize_boc"]

_LOG = logging.getLogger(__name__)

_CRC32C_POLY: Final[int] = 0x82F63B78
_FLAG_HAS_IDX: Final[int] = 0x80
_FLAG_HAS_CRC32C: Final[int] = 0x40
_FLAG_HAS_CACHE_BITS: Final[int] = 0x20
_FLAG_RESERVED: Final[int] = 0x18
_SIZE_MASK: Final[int] = 0x07


def _build_crc32c_table() -> tuple[int, ...]:
    table: list[int] = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ _CRC32C_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_CRC32C_TABLE: Final[tuple[int, ...]] = _build_crc32c_table()


def crc32c(data: bytes) -> int:
    """Return the CRC-32C (Castagnoli) checksum of ``data``."""

    crc = 0xFFFFFFFF
    for byte in data:
        crc = (crc >> 8) ^ _CRC32C_TABLE[(crc ^ byte) & 0xFF]
    return crc ^ 0xFFFFFFFF


def serialize_boc(
    roots: Cell | tuple[Cell, ...] | list[Cell],
    *,
    with_crc32c: bool = True,
    with_index: bool = False,
) -> bytes:
    """Serialize one or more root cells into a single BoC container."""

    root_cells = (roots,) if isinstance(roots, Cell) else tuple(roots)
    if not root_cells:
        raise ValueError("serialize_boc requires at least one root cell")

    ordered = _topological_order(root_cells)
    positions = {cell.repr_hash: index for index, cell in enumerate(ordered)}
    size = _byte_width(len(ordered))

    encoded_cells: list[bytes] = []
    for cell in ordered:
        parts = [cell.descriptors(), cell.padded_data()]
        parts.extend(positions[ref.repr_hash].to_bytes(size, "big") for ref in cell.refs)
        encoded_cells.append(b"".join(parts))

    total_size = sum(len(chunk) for chunk in encoded_cells)
    off_bytes = _byte_width(total_size)

    flags = size
    if with_index:
        flags |= _FLAG_HAS_IDX
    if with_crc32c:
        flags |= _FLAG_HAS_CRC32C

    out = bytearray(BOC_MAGIC)
    out.append(flags)
    out.append(off_bytes)
    out += len(ordered).to_bytes(size, "big")
    out += len(root_cells).to_bytes(size, "big")
    out += (0).to_bytes(size, "big")
    out += total_size.to_bytes(off_bytes, "big")
    for root in root_cells:
        out += positions[root.repr_hash].to_bytes(size, "big")
    if with_index:
        offset = 0
        for chunk in encoded_cells:
            offset += len(chunk)
            out += offset.to_bytes(off_bytes, "big")
    for chunk in encoded_cells:
        out += chunk
    if with_crc32c:
        out += crc32c(bytes(out)).to_bytes(4, "little")

    _LOG.debug(
        "serialized %d cell(s), %d root(s) into %d bytes", len(ordered), len(root_cells), len(out)
    )
    return bytes(out)


def deserialize_boc(data: bytes) -> tuple[Cell, ...]:
    """Parse a BoC container and return its root cells in declared order."""

    reader = _Reader(bytes(data))
    if reader.take(4) != BOC_MAGIC:
        raise BocError("unknown BoC magic, expected b5ee9c72")

    flags = reader.take_int(1)
    has_idx = bool(flags & _FLAG_HAS_IDX)
    has_crc = bool(flags & _FLAG_HAS_CRC32C)
    if flags & _FLAG_HAS_CACHE_BITS and not has_idx:
        raise BocError("cache bits require an index")
    if flags & _FLAG_RESERVED:
        raise BocError("reserved BoC flags must be zero")
    size = flags & _SIZE_MASK
    if not 1 <= size <= 4:
        raise BocError(f"cell index size must be 1..4 bytes, got {size}")
    off_bytes = reader.take_int(1)
    if not 1 <= off_bytes <= 8:
        raise BocError(f"offset size must be 1..8 bytes, got {off_bytes}")

    cell_count = reader.take_int(size)
    root_count = reader.take_int(size)
    absent_count = reader.take_int(size)
    total_size = reader.take_int(off_bytes)
    if root_count < 1 or root_count > cell_count:
        raise BocError(f"invalid root count {root_count} for {cell_count} cell(s)")
    if absent_count:
        raise BocError("absent cells are not supported")

    root_indexes = [reader.take_int(size) for _ in range(root_count)]
    if has_idx:
        reader.take(cell_count * off_bytes)

    cells_start = reader.position
    raw_cells = [_read_raw_cell(reader, size, index) for index in range(cell_count)]
    if reader.position - cells_start != total_size:
        raise BocError(
            f"cell data size mismatch: header says {total_size}, "
            f"parsed {reader.position - cells_start}"
        )

    if has_crc:
        payload_end = reader.position
        expected = reader.take_int(4, byteorder="little")
        actual = crc32c(reader.data[:payload_end])
        if actual != expected:
            raise BocError(f"crc32c mismatch: expected {expected:08x}, computed {actual:08x}")
    if reader.remaining:
        raise BocError(f"{reader.remaining} trailing byte(s) after BoC payload")

    built: dict[int, Cell] = {}
    for index in range(cell_count - 1, -1, -1):
        payload, bit_length, ref_indexes = raw_cells[index]
        refs: list[Cell] = []
        for ref_index in ref_indexes:
            if ref_index <= index or ref_index >= cell_count:
                raise BocError(f"cell {index} references invalid index {ref_index}")
            refs.append(built[ref_index])
        built[index] = Cell(payload, bit_length, tuple(refs))

    roots: list[Cell] = []
    for root_index in root_indexes:
        if root_index >= cell_count:
            raise BocError(f"root index {root_index} out of range")
        roots.append(built[root_index])

    _LOG.debug("deserialized %d cell(s), %d root(s)", cell_count, root_count)
    return tuple(roots)


def boc_to_cell(data: bytes) -> Cell:
    """Parse a BoC that must contain exactly one root and return it."""

    roots = deserialize_boc(data)
    if len(roots) != 1:
        raise BocError(f"expected exactly one root cell, got {len(roots)}")
    return roots[0]


def cell_to_boc(cell: Cell, *, with_crc32c: bool = True, with_index: bool = False) -> bytes:
    return serialize_boc(cell, with_crc32c=with_crc32c, with_index=with_index)


# ------------------------
# Internal helper routines
# ------------------------


class _Reader:
    __slots__ = ("data", "position")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def take(self, count: int) -> bytes:
        if count > self.remaining:
            raise BocError(
                f"unexpected end of BoC: need {count} byte(s) at offset {self.position}, "
                f"{self.remaining} left"
            )
        chunk = self.data[self.position : self.position + count]
        self.position += count
        return chunk

    def take_int(self, count: int, *, byteorder: Literal["big", "little"] = "big") -> int:
        return int.from_bytes(self.take(count), byteorder)


def _read_raw_cell(reader: _Reader, size: int, index: int) -> tuple[bytes, int, list[int]]:
    d1 = reader.take_int(1)
    d2 = reader.take_int(1)
    ref_count = d1 & 0x07
    is_exotic = bool(d1 & 0x08)
    with_hashes = bool(d1 & 0x10)
    level_mask = d1 >> 5
    if is_exotic:
        raise BocError(f"cell {index}: exotic cells are not supported")
    if level_mask:
        raise BocError(f"cell {index}: non-zero level mask {level_mask}")
    if ref_count > CELL_MAX_REFS:
        raise BocError(f"cell {index}: {ref_count} references exceed {CELL_MAX_REFS}")
    if with_hashes:
        reader.take(32 + 2)

    data_length = (d2 + 1) // 2
    payload = bytearray(reader.take(data_length))
    if d2 % 2:
        if not payload or payload[-1] == 0:
            raise BocError(f"cell {index}: missing completion tag")
        last = payload[-1]
        trailing = (last & -last).bit_length()
        bit_length = data_length * 8 - trailing
        payload[-1] = last & ~(1 << (trailing - 1)) & 0xFF
    else:
        bit_length = data_length * 8
    if bit_length > CELL_MAX_BITS:
        raise BocError(f"cell {index}: {bit_length} data bits exceed {CELL_MAX_BITS}")

    ref_indexes = [reader.take_int(size) for _ in range(ref_count)]
    return bytes(payload), bit_length, ref_indexes


def _topological_order(roots: tuple[Cell, ...]) -> list[Cell]:
    # Reverse post-order of a DFS places every parent before its children.
    post_order: list[Cell] = []
    visited: set[bytes] = set()
    stack: list[tuple[Cell, bool]] = [(root, False) for root in reversed(roots)]
    while stack:
        cell, expanded = stack.pop()
        if expanded:
            post_order.append(cell)
            continue
        if cell.repr_hash in visited:
            continue
        visited.add(cell.repr_hash)
        stack.append((cell, True))
        for ref in reversed(cell.refs):
            if ref.repr_hash not in visited:
                stack.append((ref, False))
    post_order.reverse()
    return post_order


def _byte_width(value: int) -> int:
    return max(1, (value.bit_length() + 7) // 8)
