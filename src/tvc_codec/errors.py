"""Error types raised by the cell primitive and the contract schemas.

Every error is terminal: decoding and encoding stop at the first failure and
no partially built record or cell is returned. Schema readers let child errors
propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable


class CodecError(ValueError):
    """Base class for every encode/decode failure."""


class CellOverflowError(CodecError):
    """Raised when a builder would exceed the bit or reference capacity of a cell."""


class TruncatedError(CodecError):
    """Raised when fewer bits or references remain than the next field requires."""


class BocError(CodecError):
    """Raised when a bag-of-cells container is malformed."""


class TooLargeError(CodecError):
    """Raised when a bounded string does not fit its 7-bit length prefix."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"string length must be <= {limit} bytes, got {length}")
        self.length = length
        self.limit = limit


class UnexpectedTagError(CodecError):
    """Raised when a record starts with a tag its schema does not accept."""

    def __init__(self, actual: int, expected: int | Iterable[int]) -> None:
        allowed = (expected,) if isinstance(expected, int) else tuple(sorted(expected))
        rendered = ", ".join(f"0x{tag:08x}" for tag in allowed)
        super().__init__(f"unexpected tlb tag 0x{actual:08x}, must be 32 bits of {rendered}")
        self.actual = actual
        self.expected = allowed


class UnexpectedEditionError(CodecError):
    """Raised when a tagged record carries an unsupported edition byte."""

    def __init__(self, actual: int, expected: int) -> None:
        super().__init__(f"unexpected edition {actual}, for current struct must be {expected}")
        self.actual = actual
        self.expected = expected


class MalformedChainError(CodecError):
    """Raised when a chunk chain breaks its single-reference layout."""


class InvalidEncodingError(CodecError):
    """Raised when decoded bytes are not valid text where text is required."""


__all__ = [
    "BocError",
    "CellOverflowError",
    "CodecError",
    "InvalidEncodingError",
    "MalformedChainError",
    "TooLargeError",
    "TruncatedError",
    "UnexpectedEditionError",
    "UnexpectedTagError",
]
