"""Serializable mixin and validation helpers shared by every cell-backed record."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import NoReturn, TypeVar

from tvc_codec.cells import Cell, CellBuilder, CellSlice, boc_to_cell, serialize_boc
from tvc_codec.errors import InvalidEncodingError

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

TRecord = TypeVar("TRecord", bound="CellSerializable")


class CellSerializable:
    """Mixin for records that write themselves into a builder and read back from a slice.

    Subclasses implement ``write_to`` / ``read_from`` plus ``to_dict``; the cell
    and BoC conveniences are derived from them. Only records whose fields all
    have a dict form implement ``from_dict``. The contract envelopes hold a raw
    code cell, so they are built from Python values and have no dict input.
    """

    __slots__ = ()

    def write_to(self, builder: CellBuilder) -> None:
        raise NotImplementedError(f"{self.__class__.__name__}.write_to is not implemented")

    @classmethod
    def read_from(cls: type[TRecord], cell_slice: CellSlice) -> TRecord:
        raise NotImplementedError(f"{cls.__name__}.read_from is not implemented")

    def to_dict(self) -> dict[str, JSONValue]:
        raise NotImplementedError(f"{self.__class__.__name__}.to_dict is not implemented")

    @classmethod
    def from_dict(cls: type[TRecord], data: Mapping[str, object]) -> TRecord:
        raise NotImplementedError(f"{cls.__name__}.from_dict is not implemented")

    def to_cell(self) -> Cell:
        builder = CellBuilder()
        self.write_to(builder)
        return builder.end_cell()

    def to_boc(self, *, with_crc32c: bool = True, with_index: bool = False) -> bytes:
        return serialize_boc(self.to_cell(), with_crc32c=with_crc32c, with_index=with_index)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_cell(cls: type[TRecord], cell: Cell) -> TRecord:
        return cls.read_from(cell.begin_parse())

    @classmethod
    def from_boc(cls: type[TRecord], data: bytes) -> TRecord:
        return cls.from_cell(boc_to_cell(data))


def decode_text(raw: bytes, path: str) -> str:
    """Decode UTF-8 at the schema boundary; the wire format itself is plain bytes."""

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError(f"{path}: bytes are not valid UTF-8 ({exc.reason})") from exc


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[key] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_str(value: object, path: str) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    return value


def _as_int(value: object, path: str, *, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    if not minimum <= value <= maximum:
        _fail(path, f"must be within {minimum}..{maximum}, got {value}")
    return value


def _as_hex_bytes(value: object, path: str, *, length: int) -> bytes:
    text = _as_str(value, path).strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        _fail(path, f"expected hex string, got {value!r}")
    if len(raw) != length:
        _fail(path, f"expected {length} bytes, got {len(raw)}")
    return raw


__all__ = ["CellSerializable", "JSONScalar", "JSONValue", "decode_text"]
