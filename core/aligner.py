"""Edit-distance alignment of two nucleotide sequences.

The aligner fills a Levenshtein cost matrix (unit cost for substitution,
insertion and deletion, zero for a match) and walks it back from the
bottom-right corner. Ties between predecessors are always broken in the
same order (diagonal, then deletion, then insertion) so identical inputs
produce identical alignments.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np

from .sequences import Sequence

SequenceArg = Union[Sequence, str]


class OpKind(str, Enum):
    MATCH = "match"
    SUBSTITUTION = "substitution"
    INSERTION = "insertion"
    DELETION = "deletion"


@dataclass(frozen=True)
class AlignmentOp:
    kind: OpKind
    original: Optional[str]
    edited: Optional[str]
    original_index: Optional[int]
    edited_index: Optional[int]

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "original": self.original,
            "edited": self.edited,
            "original_index": self.original_index,
            "edited_index": self.edited_index,
        }


@dataclass(frozen=True)
class AlignmentResult:
    original: str
    edited: str
    ops: Tuple[AlignmentOp, ...]
    match_count: int
    substitution_count: int
    insertion_count: int
    deletion_count: int

    @property
    def edit_distance(self) -> int:
        return self.substitution_count + self.insertion_count + self.deletion_count

    @property
    def similarity_ratio(self) -> float:
        return similarity_ratio(self)

    @property
    def columns(self) -> int:
        return len(self.ops)

    def original_side(self) -> str:
        return "".join(op.original for op in self.ops if op.kind is not OpKind.INSERTION)

    def edited_side(self) -> str:
        return "".join(op.edited for op in self.ops if op.kind is not OpKind.DELETION)

    def counts(self) -> dict:
        return {
            "match": self.match_count,
            "substitution": self.substitution_count,
            "insertion": self.insertion_count,
            "deletion": self.deletion_count,
        }


def _as_codes(symbols: str) -> np.ndarray:
    return np.frombuffer(symbols.encode("ascii"), dtype=np.uint8)


def cost_dtype(n: int, m: int) -> np.dtype:
    """Smallest signed integer type holding every cell and row intermediate."""

    # cells never exceed max(n, m); the running minimum dips to -m
    bound = n + m + 1
    for dtype in (np.int16, np.int32):
        if bound <= np.iinfo(dtype).max:
            return np.dtype(dtype)
    return np.dtype(np.int64)


def edit_distance_matrix(original: str, edited: str) -> np.ndarray:
    n = len(original)
    m = len(edited)
    dtype = cost_dtype(n, m)
    cost = np.zeros((n + 1, m + 1), dtype=dtype)
    cost[0, :] = np.arange(m + 1, dtype=dtype)
    cost[:, 0] = np.arange(n + 1, dtype=dtype)
    if n == 0 or m == 0:
        return cost

    edited_codes = _as_codes(edited)
    original_codes = _as_codes(original)
    columns = np.arange(m + 1, dtype=dtype)
    best = np.empty(m + 1, dtype=dtype)
    for i in range(1, n + 1):
        previous = cost[i - 1]
        mismatch = (edited_codes != original_codes[i - 1]).astype(dtype)
        # best of diagonal and deletion for each column; insertions are then
        # a running minimum along the row: cost[i][j] = min_k(best[k] + j - k)
        best[0] = i
        np.minimum(previous[:-1] + mismatch, previous[1:] + 1, out=best[1:])
        cost[i] = np.minimum.accumulate(best - columns) + columns
    return cost


def _traceback(original: str, edited: str, cost: np.ndarray) -> List[AlignmentOp]:
    ops: List[AlignmentOp] = []
    i = len(original)
    j = len(edited)
    while i > 0 or j > 0:
        current = int(cost[i, j])
        if i > 0 and j > 0:
            o_char = original[i - 1]
            e_char = edited[j - 1]
            step = 0 if o_char == e_char else 1
            if current == int(cost[i - 1, j - 1]) + step:
                kind = OpKind.MATCH if step == 0 else OpKind.SUBSTITUTION
                ops.append(AlignmentOp(kind, o_char, e_char, i - 1, j - 1))
                i -= 1
                j -= 1
                continue
        if i > 0 and current == int(cost[i - 1, j]) + 1:
            ops.append(AlignmentOp(OpKind.DELETION, original[i - 1], None, i - 1, None))
            i -= 1
            continue
        ops.append(AlignmentOp(OpKind.INSERTION, None, edited[j - 1], None, j - 1))
        j -= 1
    ops.reverse()
    return ops


def align(original: SequenceArg, edited: SequenceArg) -> AlignmentResult:
    """Align ``edited`` against ``original`` with a minimal set of edits.

    Strings are validated and upper-cased; anything outside A/C/G/T raises
    :class:`~core.sequences.ValidationError`.
    """

    original_seq = Sequence.from_text(original, "original")
    edited_seq = Sequence.from_text(edited, "edited")
    original_text = original_seq.symbols
    edited_text = edited_seq.symbols

    cost = edit_distance_matrix(original_text, edited_text)
    ops = _traceback(original_text, edited_text, cost)

    tally = {kind: 0 for kind in OpKind}
    for op in ops:
        tally[op.kind] += 1

    return AlignmentResult(
        original=original_text,
        edited=edited_text,
        ops=tuple(ops),
        match_count=tally[OpKind.MATCH],
        substitution_count=tally[OpKind.SUBSTITUTION],
        insertion_count=tally[OpKind.INSERTION],
        deletion_count=tally[OpKind.DELETION],
    )


def similarity_ratio(result: AlignmentResult) -> float:
    longest = max(len(result.original), len(result.edited))
    if longest == 0:
        return 1.0
    return result.match_count / longest
