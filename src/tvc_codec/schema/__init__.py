"""Contract artifact schemas stored as cell trees.

Leaf to root: byte chains (``chunks``), bounded strings and version records
(``records``), metadata, and the two contract envelope variants (``contract``).
"""

from tvc_codec.schema.base import CellSerializable, decode_text
from tvc_codec.schema.chunks import (
    chain_cells,
    decode_chunks,
    encode_chunks,
    load_bytes_ref,
    load_string_ref,
    store_bytes_ref,
    store_string_ref,
)
from tvc_codec.schema.contract import (
    CONTRACT_VARIANTS,
    Contract,
    ContractE0,
    LegacyContract,
    contract_from_boc,
    read_contract,
)
from tvc_codec.schema.records import Metadata, SmallStr, Version

__all__ = [
    "CONTRACT_VARIANTS",
    "CellSerializable",
    "Contract",
    "ContractE0",
    "LegacyContract",
    "Metadata",
    "SmallStr",
    "Version",
    "chain_cells",
    "contract_from_boc",
    "decode_chunks",
    "decode_text",
    "encode_chunks",
    "load_bytes_ref",
    "load_string_ref",
    "read_contract",
    "store_bytes_ref",
    "store_string_ref",
]
