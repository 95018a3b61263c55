from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .aligner import AlignmentResult, align
from .params import CompareParams
from .render import diff_rows, render_bytes, summary_line
from .sequences import MISSING_INPUT, TOO_LONG, Sequence, ValidationError
from .verification import result_digest

logger = logging.getLogger(__name__)

# fixture shown on the comparer page
DEMO_ORIGINAL = "ATGCTAGCTAGCTAGCTAGCTAGCTAGCTAGGCATCGATCGAT"
DEMO_EDITED = "ATGCTAGCGAGCTAGCTAGCAAACTAGCTAGGCATCGATCGAT"

EXPORT_FORMATS = {"svg": "image/svg+xml", "png": "image/png"}


@dataclass(frozen=True)
class ComparisonReport:
    original: Sequence
    edited: Sequence
    result: AlignmentResult
    params: CompareParams

    @property
    def original_label(self) -> str:
        return self.original.name or "original"

    @property
    def edited_label(self) -> str:
        return self.edited.name or "edited"


def _check_length(sequence: Sequence, field: str, max_length: int) -> None:
    if len(sequence) > max_length:
        raise ValidationError(
            f"{field} sequence has {len(sequence)} symbols; the limit is {max_length}",
            kind=TOO_LONG,
            field=field,
        )


def compare_sequences(
    original: object,
    edited: object,
    params: Optional[CompareParams] = None,
    *,
    original_name: Optional[str] = None,
    edited_name: Optional[str] = None,
) -> ComparisonReport:
    params = params or CompareParams()
    original_seq = Sequence.from_text(original, "original", name=original_name)
    edited_seq = Sequence.from_text(edited, "edited", name=edited_name)
    _check_length(original_seq, "original", params.max_length)
    _check_length(edited_seq, "edited", params.max_length)

    result = align(original_seq, edited_seq)
    logger.debug(
        "Aligned %d x %d symbols, edit distance %d",
        len(original_seq),
        len(edited_seq),
        result.edit_distance,
    )
    return ComparisonReport(original=original_seq, edited=edited_seq, result=result, params=params)


def _payload_text(payload: Dict[str, Any], name: str) -> str:
    value = payload.get(name)
    if value is None:
        raise ValidationError(f"{name} is required", kind=MISSING_INPUT, field=name)
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string", kind=MISSING_INPUT, field=name)
    return value.strip()


def _optional_name(payload: Dict[str, Any], name: str) -> Optional[str]:
    text = str(payload.get(name) or "").strip()
    return text or None


def comparison_from_payload(payload: Dict[str, Any], *, max_length: Optional[int] = None) -> ComparisonReport:
    if not isinstance(payload, dict):
        raise ValueError("comparison payload must be an object")
    if max_length is None:
        params = CompareParams.from_payload(payload.get("params"))
    else:
        params = CompareParams.from_payload(payload.get("params"), max_length=max_length)
    return compare_sequences(
        _payload_text(payload, "original"),
        _payload_text(payload, "edited"),
        params,
        original_name=_optional_name(payload, "original_name"),
        edited_name=_optional_name(payload, "edited_name"),
    )


def report_to_payload(report: ComparisonReport) -> Dict[str, object]:
    result = report.result
    return {
        "original": result.original,
        "edited": result.edited,
        "original_name": report.original_label,
        "edited_name": report.edited_label,
        "ops": [op.to_dict() for op in result.ops],
        "counts": result.counts(),
        "edit_distance": result.edit_distance,
        "similarity_ratio": result.similarity_ratio,
        "summary": summary_line(result),
        "line_width": report.params.line_width,
        "rows": [block.to_dict() for block in diff_rows(result, report.params.line_width)],
        "result_digest": result_digest(result),
    }


def export_comparison(report: ComparisonReport, fmt: str) -> bytes:
    if fmt not in EXPORT_FORMATS:
        raise ValueError("Export format must be 'svg' or 'png'")
    params = report.params
    return render_bytes(
        fmt=fmt,
        result=report.result,
        line_width=params.line_width,
        width=params.width,
        height=params.height,
        dpi=params.dpi,
        font_size=params.font_size,
        original_label=report.original_label,
        edited_label=report.edited_label,
    )


def render_comparison_svg(report: ComparisonReport) -> str:
    return export_comparison(report, "svg").decode("utf-8")
