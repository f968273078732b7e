"""Cell primitive used by the contract schemas: cells, builders, slices, and BoC."""

from tvc_codec.cells.boc import boc_to_cell, cell_to_boc, crc32c, deserialize_boc, serialize_boc
from tvc_codec.cells.cell import Cell, CellBuilder, CellSlice, begin_cell

__all__ = [
    "Cell",
    "CellBuilder",
    "CellSlice",
    "begin_cell",
    "boc_to_cell",
    "cell_to_boc",
    "crc32c",
    "deserialize_boc",
    "serialize_boc",
]
