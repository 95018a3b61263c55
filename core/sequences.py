from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

NUCLEOTIDES = "ACGT"
_NUCLEOTIDE_SET = frozenset(NUCLEOTIDES)

INVALID_CHARACTER = "invalid_character"
MISSING_INPUT = "missing"
TOO_LONG = "too_long"


class ValidationError(ValueError):
    """Rejected comparison input.

    ``kind`` is one of ``invalid_character``, ``missing`` or ``too_long``.
    ``symbol`` and ``index`` are only set for invalid characters; ``field``
    names the offending argument (``original`` or ``edited``) when known.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        field: Optional[str] = None,
        symbol: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.field = field
        self.symbol = symbol
        self.index = index

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "kind": self.kind,
            "field": self.field,
            "symbol": self.symbol,
            "index": self.index,
        }


def normalize_symbols(text: object, field: Optional[str] = None) -> str:
    if not isinstance(text, str):
        label = field or "sequence"
        if text is None:
            raise ValidationError(f"{label} sequence is required", kind=MISSING_INPUT, field=field)
        raise ValidationError(f"{label} sequence must be a string", kind=MISSING_INPUT, field=field)
    for idx, symbol in enumerate(text):
        # per raw character; str.upper() may change the length ("ß" -> "SS")
        if symbol.upper() not in _NUCLEOTIDE_SET:
            prefix = f"{field} sequence: " if field else ""
            raise ValidationError(
                f"{prefix}invalid nucleotide '{symbol}' at index {idx} (expected one of {', '.join(NUCLEOTIDES)})",
                kind=INVALID_CHARACTER,
                field=field,
                symbol=symbol,
                index=idx,
            )
    return text.upper()


@dataclass(frozen=True)
class Sequence:
    """Nucleotide string over A/C/G/T, upper-cased on construction."""

    symbols: str
    name: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbols", normalize_symbols(self.symbols))

    def __len__(self) -> int:
        return len(self.symbols)

    def __str__(self) -> str:
        return self.symbols

    @classmethod
    def from_text(cls, text: object, field: str, name: Optional[str] = None) -> "Sequence":
        if isinstance(text, Sequence):
            return text
        return cls(symbols=normalize_symbols(text, field), name=name)
