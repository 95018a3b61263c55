from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar, Union

AUTO_SIZE_TOKEN = "auto"
DEFAULT_LINE_WIDTH = 60
DEFAULT_MAX_LENGTH = 5000


SizeArg = Union[float, str]
Number = TypeVar("Number", int, float)


@dataclass(frozen=True)
class CompareParams:
    line_width: int = DEFAULT_LINE_WIDTH
    max_length: int = DEFAULT_MAX_LENGTH
    width: SizeArg = AUTO_SIZE_TOKEN
    height: SizeArg = AUTO_SIZE_TOKEN
    dpi: int = 150
    font_size: float = 9.0

    @classmethod
    def from_cli_args(cls, args: Any) -> "CompareParams":
        return cls(
            line_width=to_int(args.line_width, positive=True, name="line_width"),
            max_length=to_int(args.max_length, positive=True, name="max_length"),
            width=parse_size(args.width, "width"),
            height=parse_size(args.height, "height"),
            dpi=to_int(args.dpi, positive=True, name="dpi"),
            font_size=to_float(args.font_size, positive=True, name="font_size"),
        )

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]], *, max_length: int = DEFAULT_MAX_LENGTH) -> "CompareParams":
        payload = payload or {}
        if not isinstance(payload, dict):
            raise ValueError("params must be an object")

        def require(name: str, default: Any) -> Any:
            return payload.get(name, default)

        requested_max = to_int(require("max_length", max_length), positive=True, name="max_length")
        return cls(
            line_width=to_int(require("line_width", DEFAULT_LINE_WIDTH), positive=True, name="line_width"),
            # a request may tighten the configured limit but never raise it
            max_length=min(requested_max, max_length),
            width=parse_size(require("width", AUTO_SIZE_TOKEN), "width"),
            height=parse_size(require("height", AUTO_SIZE_TOKEN), "height"),
            dpi=to_int(require("dpi", 150), positive=True, name="dpi"),
            font_size=to_float(require("font_size", 9.0), positive=True, name="font_size"),
        )


def parse_size(value: Any, name: str) -> SizeArg:
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized == AUTO_SIZE_TOKEN:
            return AUTO_SIZE_TOKEN
    return to_float(value, positive=True, name=name)


def _parse_number(
    value: Any,
    cast: Callable[[Any], Number],
    *,
    name: str,
    kind: str,
    positive: bool,
    min_value: Optional[Number],
    max_value: Optional[Number],
) -> Number:
    # JSON true/false would otherwise slip through as 1/0
    if isinstance(value, bool):
        raise ValueError(f"{name} must be {kind}")
    try:
        parsed = cast(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be {kind}") from exc
    if positive and parsed <= 0:
        raise ValueError(f"{name} must be positive")
    if min_value is not None and parsed < min_value:
        raise ValueError(f"{name} must be >= {min_value}")
    if max_value is not None and parsed > max_value:
        raise ValueError(f"{name} must be <= {max_value}")
    return parsed


def to_float(
    value: Any,
    *,
    name: str,
    positive: bool = False,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> float:
    return _parse_number(
        value,
        float,
        name=name,
        kind="a floating-point number",
        positive=positive,
        min_value=min_value,
        max_value=max_value,
    )


def to_int(
    value: Any,
    *,
    name: str,
    positive: bool = False,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    return _parse_number(
        value,
        int,
        name=name,
        kind="an integer",
        positive=positive,
        min_value=min_value,
        max_value=max_value,
    )
