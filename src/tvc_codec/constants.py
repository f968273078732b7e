"""Stable constants shared by the cell primitive and the contract schemas."""

from __future__ import annotations

from typing import Final

# Cell capacity.
CELL_MAX_BITS: Final[int] = 1023
CELL_MAX_REFS: Final[int] = 4
CELL_MAX_DEPTH: Final[int] = 1024

# Bag-of-cells container.
BOC_MAGIC: Final[bytes] = bytes.fromhex("b5ee9c72")

# Byte chains: one chunk per cell, 127 * 8 = 1016 bits.
CHUNK_BYTES: Final[int] = 127

# small_str#_ len:uint7 string:(len * [ uint8 ]) = SmallStr;
MAX_UINT7: Final[int] = (1 << 7) - 1

# version#_ commit:bits160 semantic:bits = Version;
COMMIT_BYTES: Final[int] = 20

MAX_UINT64: Final[int] = (1 << 64) - 1

# Envelope tags and editions.
LEGACY_CONTRACT_TAG: Final[int] = 0xA2F0B81C
CONTRACT_E0_TAG: Final[int] = 0x4F511203
CONTRACT_E0_EDITION: Final[int] = 0

# Version of the tvc.toml layout.
CONFIG_SCHEMA_VERSION: Final[int] = 1

__all__ = [
    "BOC_MAGIC",
    "CELL_MAX_BITS",
    "CELL_MAX_DEPTH",
    "CELL_MAX_REFS",
    "CHUNK_BYTES",
    "COMMIT_BYTES",
    "CONFIG_SCHEMA_VERSION",
    "CONTRACT_E0_EDITION",
    "CONTRACT_E0_TAG",
    "LEGACY_CONTRACT_TAG",
    "MAX_UINT64",
    "MAX_UINT7",
]
