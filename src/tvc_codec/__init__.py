"""
tvc-codec: cell-tree encoding of compiled contract artifacts.

Contract code and build metadata are stored as a tree of fixed-capacity cells
and exchanged as bag-of-cells bytes. Importing the package has no side
effects; logging and config are only set up by the CLI.
"""

from tvc_codec.cells import Cell, CellBuilder, CellSlice, boc_to_cell, serialize_boc
from tvc_codec.errors import (
    CodecError,
    InvalidEncodingError,
    MalformedChainError,
    TooLargeError,
    TruncatedError,
    UnexpectedEditionError,
    UnexpectedTagError,
)
from tvc_codec.schema import (
    Contract,
    ContractE0,
    LegacyContract,
    Metadata,
    SmallStr,
    Version,
    contract_from_boc,
    read_contract,
)

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "CellBuilder",
    "CellSlice",
    "CodecError",
    "Contract",
    "ContractE0",
    "InvalidEncodingError",
    "LegacyContract",
    "MalformedChainError",
    "Metadata",
    "SmallStr",
    "TooLargeError",
    "TruncatedError",
    "UnexpectedEditionError",
    "UnexpectedTagError",
    "Version",
    "__version__",
    "boc_to_cell",
    "contract_from_boc",
    "read_contract",
    "serialize_boc",
]
