"""Build-metadata records: bounded strings, compiler versions, and contract metadata.

TL-B layouts::

    small_str#_ len:uint7 string:(len * [ uint8 ]) = SmallStr;
    version#_ commit:bits160 semantic:bits = Version;
    metadata#_ sold:^Version linker:^Version
               compiled_at:uint64 name:SmallStr
               desc:bits = Metadata;

``semantic`` and ``desc`` carry no length prefix: they are the bits left in the
cell after the fixed fields, so a ``Version`` always owns its cell and is stored
by reference from its parent.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from tvc_codec.cells import CellBuilder, CellSlice
from tvc_codec.constants import COMMIT_BYTES, MAX_UINT7, MAX_UINT64
from tvc_codec.errors import TooLargeError
from tvc_codec.schema.base import (
    CellSerializable,
    JSONValue,
    _as_hex_bytes,
    _as_int,
    _as_str,
    _expect_object,
    _fail,
    decode_text,
)
from tvc_codec.schema.chunks import load_tail_bytes, store_tail_bytes

__all__ = ["Metadata", "SmallStr", "Version"]


@dataclass(frozen=True, slots=True)
class SmallStr(CellSerializable):
    """String of at most 127 UTF-8 bytes, stored inline behind a 7-bit length."""

    string: str = ""

    def __post_init__(self) -> None:
        _as_str(self.string, "SmallStr.string")

    def write_to(self, builder: CellBuilder) -> None:
        raw = self.string.encode("utf-8")
        if len(raw) > MAX_UINT7:
            raise TooLargeError(len(raw), MAX_UINT7)
        builder.store_uint(len(raw), 7)
        builder.store_bytes(raw)

    @classmethod
    def read_from(cls, cell_slice: CellSlice) -> SmallStr:
        length = cell_slice.load_uint(7)
        return cls(decode_text(cell_slice.load_bytes(length), "SmallStr.string"))

    def to_dict(self) -> dict[str, JSONValue]:
        return {"string": self.string}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> SmallStr:
        parsed = _expect_object(data, "SmallStr", required={"string"})
        return cls(_as_str(parsed["string"], "SmallStr.string"))


@dataclass(frozen=True, slots=True)
class Version(CellSerializable):
    """Toolchain version: 20-byte commit id plus a free-form semantic version."""

    commit: bytes = bytes(COMMIT_BYTES)
    semantic: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.commit, (bytes, bytearray)):
            _fail("Version.commit", f"expected bytes, got {type(self.commit).__name__}")
        if len(self.commit) != COMMIT_BYTES:
            _fail("Version.commit", f"must be exactly {COMMIT_BYTES} bytes, got {len(self.commit)}")
        object.__setattr__(self, "commit", bytes(self.commit))
        _as_str(self.semantic, "Version.semantic")

    @classmethod
    def from_hex(cls, commit_hex: str, semantic: str) -> Version:
        return cls(_as_hex_bytes(commit_hex, "Version.commit", length=COMMIT_BYTES), semantic)

    def write_to(self, builder: CellBuilder) -> None:
        builder.store_bytes(self.commit)
        store_tail_bytes(builder, self.semantic.encode("utf-8"))

    @classmethod
    def read_from(cls, cell_slice: CellSlice) -> Version:
        commit = cell_slice.load_bytes(COMMIT_BYTES)
        semantic = decode_text(load_tail_bytes(cell_slice, "Version.semantic"), "Version.semantic")
        return cls(commit, semantic)

    def to_dict(self) -> dict[str, JSONValue]:
        return {"commit": self.commit.hex(), "semantic": self.semantic}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Version:
        parsed = _expect_object(data, "Version", required={"commit", "semantic"})
        return cls.from_hex(
            _as_str(parsed["commit"], "Version.commit"),
            _as_str(parsed["semantic"], "Version.semantic"),
        )


@dataclass(frozen=True, slots=True)
class Metadata(CellSerializable):
    """Build metadata attached to a contract: compiler and linker versions, time, name."""

    sold: Version
    linker: Version
    compiled_at: int
    name: SmallStr
    desc: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.sold, Version):
            _fail("Metadata.sold", f"expected Version, got {type(self.sold).__name__}")
        if not isinstance(self.linker, Version):
            _fail("Metadata.linker", f"expected Version, got {type(self.linker).__name__}")
        _as_int(self.compiled_at, "Metadata.compiled_at", minimum=0, maximum=MAX_UINT64)
        if isinstance(self.name, str):
            object.__setattr__(self, "name", SmallStr(self.name))
        elif not isinstance(self.name, SmallStr):
            _fail("Metadata.name", f"expected SmallStr, got {type(self.name).__name__}")
        _as_str(self.desc, "Metadata.desc")

    def write_to(self, builder: CellBuilder) -> None:
        # sold must take reference 0 and linker reference 1.
        builder.store_ref(self.sold.to_cell())
        builder.store_ref(self.linker.to_cell())
        builder.store_uint(self.compiled_at, 64)
        self.name.write_to(builder)
        store_tail_bytes(builder, self.desc.encode("utf-8"))

    @classmethod
    def read_from(cls, cell_slice: CellSlice) -> Metadata:
        sold = Version.from_cell(cell_slice.load_ref())
        linker = Version.from_cell(cell_slice.load_ref())
        compiled_at = cell_slice.load_uint(64)
        name = SmallStr.read_from(cell_slice)
        desc = decode_text(load_tail_bytes(cell_slice, "Metadata.desc"), "Metadata.desc")
        return cls(sold=sold, linker=linker, compiled_at=compiled_at, name=name, desc=desc)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "sold": self.sold.to_dict(),
            "linker": self.linker.to_dict(),
            "compiled_at": self.compiled_at,
            "name": self.name.string,
            "desc": self.desc,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Metadata:
        parsed = _expect_object(
            data,
            "Metadata",
            required={"sold", "linker", "compiled_at", "name"},
            optional={"desc"},
        )
        sold = parsed["sold"]
        linker = parsed["linker"]
        if not isinstance(sold, Mapping):
            _fail("Metadata.sold", f"expected object, got {type(sold).__name__}")
        if not isinstance(linker, Mapping):
            _fail("Metadata.linker", f"expected object, got {type(linker).__name__}")
        return cls(
            sold=Version.from_dict(sold),
            linker=Version.from_dict(linker),
            compiled_at=_as_int(
                parsed["compiled_at"], "Metadata.compiled_at", minimum=0, maximum=MAX_UINT64
            ),
            name=SmallStr(_as_str(parsed["name"], "Metadata.name")),
            desc=_as_str(parsed.get("desc", ""), "Metadata.desc"),
        )
