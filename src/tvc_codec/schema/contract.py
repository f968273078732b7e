"""Contract envelopes: the root record of a compiled contract artifact.

Two variants share the leading 32-bit tag and are told apart by it::

    tvc#a2f0b81c code:(Maybe ^Cell) desc:(Maybe ^Chunks) = TVC;

    tvm_contract#4f511203 e:uint8
        code:^Cell meta:(Maybe ^Metadata)
        { e = 0 } = TVMContract;

The first is the legacy form, kept so that existing artifacts stay decodable.
The second is edition 0 of the tagged form.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar, Final

from tvc_codec.cells import Cell, CellBuilder, CellSlice, boc_to_cell
from tvc_codec.constants import CONTRACT_E0_EDITION, CONTRACT_E0_TAG, LEGACY_CONTRACT_TAG
from tvc_codec.errors import UnexpectedEditionError, UnexpectedTagError
from tvc_codec.schema.base import CellSerializable, JSONValue, _fail
from tvc_codec.schema.chunks import load_string_ref, store_string_ref
from tvc_codec.schema.records import Metadata

__all__ = [
    "CONTRACT_VARIANTS",
    "Contract",
    "ContractE0",
    "LegacyContract",
    "contract_from_boc",
    "read_contract",
]

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LegacyContract(CellSerializable):
    """Legacy envelope: optional raw code cell and optional chained description."""

    TAG: ClassVar[int] = LEGACY_CONTRACT_TAG

    code: Cell | None = None
    desc: str | None = None

    def __post_init__(self) -> None:
        if self.code is not None and not isinstance(self.code, Cell):
            _fail("LegacyContract.code", f"expected Cell or None, got {type(self.code).__name__}")
        if self.desc is not None and not isinstance(self.desc, str):
            _fail("LegacyContract.desc", f"expected str or None, got {type(self.desc).__name__}")

    def write_to(self, builder: CellBuilder) -> None:
        builder.store_uint(self.TAG, 32)

        builder.store_bit(self.code is not None)
        if self.code is not None:
            builder.store_ref(self.code)

        builder.store_bit(self.desc is not None)
        if self.desc is not None:
            store_string_ref(builder, self.desc)

    @classmethod
    def read_from(cls, cell_slice: CellSlice) -> LegacyContract:
        tag = cell_slice.load_uint(32)
        if tag != cls.TAG:
            raise UnexpectedTagError(tag, cls.TAG)

        code = cell_slice.load_ref() if cell_slice.load_bit() else None
        desc = load_string_ref(cell_slice) if cell_slice.load_bit() else None
        return cls(code=code, desc=desc)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "variant": "legacy",
            "tag": f"0x{self.TAG:08x}",
            "code": _code_summary(self.code) if self.code is not None else None,
            "desc": self.desc,
        }


@dataclass(frozen=True, slots=True)
class ContractE0(CellSerializable):
    """Tagged envelope, edition 0: mandatory code and optional build metadata."""

    TAG: ClassVar[int] = CONTRACT_E0_TAG
    EDITION: ClassVar[int] = CONTRACT_E0_EDITION

    code: Cell
    meta: Metadata | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.code, Cell):
            _fail("ContractE0.code", f"expected Cell, got {type(self.code).__name__}")
        if self.meta is not None and not isinstance(self.meta, Metadata):
            _fail("ContractE0.meta", f"expected Metadata or None, got {type(self.meta).__name__}")

    def write_to(self, builder: CellBuilder) -> None:
        builder.store_uint(self.TAG, 32)
        builder.store_uint(self.EDITION, 8)

        # A ^Cell field is a box cell whose only reference is the code root.
        builder.store_ref(CellBuilder().store_ref(self.code).end_cell())

        builder.store_bit(self.meta is not None)
        if self.meta is not None:
            builder.store_ref(self.meta.to_cell())

    @classmethod
    def read_from(cls, cell_slice: CellSlice) -> ContractE0:
        tag = cell_slice.load_uint(32)
        if tag != cls.TAG:
            raise UnexpectedTagError(tag, cls.TAG)

        edition = cell_slice.load_uint(8)
        if edition != cls.EDITION:
            raise UnexpectedEditionError(edition, cls.EDITION)

        code = cell_slice.load_ref().begin_parse().load_ref()
        meta = Metadata.from_cell(cell_slice.load_ref()) if cell_slice.load_bit() else None
        return cls(code=code, meta=meta)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "variant": "e0",
            "tag": f"0x{self.TAG:08x}",
            "edition": self.EDITION,
            "code": _code_summary(self.code),
            "meta": self.meta.to_dict() if self.meta is not None else None,
        }


Contract = LegacyContract | ContractE0

CONTRACT_VARIANTS: Final[Mapping[int, type[LegacyContract] | type[ContractE0]]] = {
    LegacyContract.TAG: LegacyContract,
    ContractE0.TAG: ContractE0,
}


def read_contract(cell_slice: CellSlice) -> Contract:
    """Decode whichever envelope variant the leading tag names."""

    tag = cell_slice.preload_uint(32)
    variant = CONTRACT_VARIANTS.get(tag)
    if variant is None:
        raise UnexpectedTagError(tag, CONTRACT_VARIANTS.keys())
    _LOG.debug("decoding contract envelope %s (tag 0x%08x)", variant.__name__, tag)
    return variant.read_from(cell_slice)


def contract_from_boc(data: bytes) -> Contract:
    return read_contract(boc_to_cell(data).begin_parse())


def _code_summary(code: Cell) -> dict[str, JSONValue]:
    return {
        "hash": code.repr_hash.hex(),
        "depth": code.depth,
        "bits": code.bit_length,
        "refs": len(code.refs),
    }
