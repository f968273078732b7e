"""Immutable cells, bit builders, and read cursors.

A cell holds up to 1023 data bits and up to four references to other,
already finalized, cells, and a tree is at most 1024 references deep.
Builders accumulate bits most-significant first and seal into a ``Cell``;
slices read a cell back field by field while tracking how many bits and
references are left.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from tvc_codec.constants import CELL_MAX_BITS, CELL_MAX_DEPTH, CELL_MAX_REFS
from tvc_codec.errors import CellOverflowError, TruncatedError

__all__ = ["Cell", "CellBuilder", "CellSlice", "begin_cell"]


@dataclass(frozen=True, slots=True, eq=False)
class Cell:
    """Ordinary (non-exotic, level 0) cell.

    ``data`` is the bit payload packed big-endian into bytes; bits past
    ``bit_length`` in the last byte are always zero. Equality and hashing use
    the representation hash, so two cells compare equal when their whole
    subtrees match.
    """

    data: bytes = b""
    bit_length: int = 0
    refs: tuple[Cell, ...] = ()
    depth: int = field(init=False, repr=False)
    repr_hash: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise ValueError(f"Cell.data: expected bytes, got {type(self.data).__name__}")
        if isinstance(self.bit_length, bool) or not isinstance(self.bit_length, int):
            raise ValueError(
                f"Cell.bit_length: expected integer, got {type(self.bit_length).__name__}"
            )
        if not 0 <= self.bit_length <= CELL_MAX_BITS:
            raise CellOverflowError(
                f"Cell.bit_length: must be within 0..{CELL_MAX_BITS}, got {self.bit_length}"
            )

        data = bytearray(self.data)
        if len(data) != (self.bit_length + 7) // 8:
            raise ValueError(
                f"Cell.data: {self.bit_length} bits need {(self.bit_length + 7) // 8} bytes, "
                f"got {len(data)}"
            )
        spare = len(data) * 8 - self.bit_length
        if spare:
            data[-1] &= (0xFF << spare) & 0xFF

        refs = tuple(self.refs)
        if len(refs) > CELL_MAX_REFS:
            raise CellOverflowError(
                f"Cell.refs: at most {CELL_MAX_REFS} references, got {len(refs)}"
            )
        for index, ref in enumerate(refs):
            if not isinstance(ref, Cell):
                raise ValueError(f"Cell.refs[{index}]: expected Cell, got {type(ref).__name__}")

        depth = 1 + max(ref.depth for ref in refs) if refs else 0
        if depth > CELL_MAX_DEPTH:
            raise CellOverflowError(f"Cell.depth: must be <= {CELL_MAX_DEPTH}, got {depth}")

        object.__setattr__(self, "data", bytes(data))
        object.__setattr__(self, "refs", refs)
        object.__setattr__(self, "depth", depth)
        object.__setattr__(self, "repr_hash", hashlib.sha256(self._representation()).digest())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self.repr_hash == other.repr_hash

    def __hash__(self) -> int:
        return hash(self.repr_hash)

    def descriptors(self) -> bytes:
        """Return the two descriptor bytes ``d1 d2`` of an ordinary cell."""

        d1 = len(self.refs)
        d2 = self.bit_length // 8 + (self.bit_length + 7) // 8
        return bytes((d1, d2))

    def padded_data(self) -> bytes:
        """Return the payload with the completion tag set after a partial last byte."""

        remainder = self.bit_length % 8
        if not remainder:
            return self.data
        padded = bytearray(self.data)
        padded[-1] |= 1 << (7 - remainder)
        return bytes(padded)

    def begin_parse(self) -> CellSlice:
        return CellSlice(self)

    def _representation(self) -> bytes:
        parts = [self.descriptors(), self.padded_data()]
        parts.extend(ref.depth.to_bytes(2, "big") for ref in self.refs)
        parts.extend(ref.repr_hash for ref in self.refs)
        return b"".join(parts)


class CellBuilder:
    """Mutable bit accumulator sealed into a ``Cell`` by ``end_cell``.

    A builder belongs to the code constructing it; share only the finished cell.
    """

    __slots__ = ("_bits", "_refs", "_value")

    def __init__(self) -> None:
        self._value = 0
        self._bits = 0
        self._refs: list[Cell] = []

    @property
    def bit_length(self) -> int:
        return self._bits

    @property
    def remaining_bits(self) -> int:
        return CELL_MAX_BITS - self._bits

    @property
    def remaining_refs(self) -> int:
        return CELL_MAX_REFS - len(self._refs)

    def store_uint(self, value: int, width: int) -> CellBuilder:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"value must be an integer, got {type(value).__name__}")
        if width < 0:
            raise ValueError(f"width must be >= 0, got {width}")
        if value < 0 or value >> width:
            raise ValueError(f"value {value} does not fit into {width} unsigned bits")
        self._reserve_bits(width)
        self._value = (self._value << width) | value
        self._bits += width
        return self

    def store_bit(self, flag: bool) -> CellBuilder:
        return self.store_uint(1 if flag else 0, 1)

    def store_bytes(self, data: bytes) -> CellBuilder:
        raw = bytes(data)
        if not raw:
            return self
        return self.store_uint(int.from_bytes(raw, "big"), len(raw) * 8)

    def store_ref(self, cell: Cell) -> CellBuilder:
        if not isinstance(cell, Cell):
            raise ValueError(f"reference must be a Cell, got {type(cell).__name__}")
        if len(self._refs) >= CELL_MAX_REFS:
            raise CellOverflowError(f"cell overflow: more than {CELL_MAX_REFS} references")
        self._refs.append(cell)
        return self

    def end_cell(self) -> Cell:
        byte_length = (self._bits + 7) // 8
        padded = self._value << (byte_length * 8 - self._bits)
        return Cell(padded.to_bytes(byte_length, "big"), self._bits, tuple(self._refs))

    def _reserve_bits(self, width: int) -> None:
        if self._bits + width > CELL_MAX_BITS:
            raise CellOverflowError(
                f"cell overflow: {self._bits} + {width} bits exceeds {CELL_MAX_BITS}"
            )


class CellSlice:
    """Read cursor over one cell's bits and references."""

    __slots__ = ("_bit_pos", "_cell", "_padded_bits", "_ref_pos", "_value")

    def __init__(self, cell: Cell) -> None:
        self._cell = cell
        self._value = int.from_bytes(cell.data, "big")
        self._padded_bits = len(cell.data) * 8
        self._bit_pos = 0
        self._ref_pos = 0

    @property
    def cell(self) -> Cell:
        return self._cell

    @property
    def remaining_bits(self) -> int:
        return self._cell.bit_length - self._bit_pos

    @property
    def remaining_refs(self) -> int:
        return len(self._cell.refs) - self._ref_pos

    def preload_uint(self, width: int) -> int:
        if width < 0:
            raise ValueError(f"width must be >= 0, got {width}")
        if width > self.remaining_bits:
            raise TruncatedError(
                f"cannot read {width} bits, only {self.remaining_bits} remain in cell"
            )
        shift = self._padded_bits - self._bit_pos - width
        return (self._value >> shift) & ((1 << width) - 1)

    def load_uint(self, width: int) -> int:
        value = self.preload_uint(width)
        self._bit_pos += width
        return value

    def load_bit(self) -> bool:
        return self.load_uint(1) == 1

    def load_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if count == 0:
            return b""
        return self.load_uint(count * 8).to_bytes(count, "big")

    def load_ref(self) -> Cell:
        ref = self.preload_ref()
        self._ref_pos += 1
        return ref

    def preload_ref(self, index: int = 0) -> Cell:
        """Return the ``index``-th unread reference without consuming it."""

        if index < 0 or index >= self.remaining_refs:
            raise TruncatedError(
                f"cannot read reference {index}, only {self.remaining_refs} remain in cell"
            )
        return self._cell.refs[self._ref_pos + index]


def begin_cell() -> CellBuilder:
    return CellBuilder()
