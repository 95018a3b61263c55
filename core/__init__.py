"""Shared core APIs for the sequence comparison service."""

from .aligner import AlignmentOp, AlignmentResult, OpKind, align, similarity_ratio
from .params import CompareParams
from .sequences import Sequence, ValidationError
from .service import (
    ComparisonReport,
    compare_sequences,
    comparison_from_payload,
    export_comparison,
    report_to_payload,
)

__all__ = [
    "AlignmentOp",
    "AlignmentResult",
    "OpKind",
    "align",
    "similarity_ratio",
    "CompareParams",
    "Sequence",
    "ValidationError",
    "ComparisonReport",
    "compare_sequences",
    "comparison_from_payload",
    "export_comparison",
    "report_to_payload",
]
