from __future__ import annotations

from pathlib import Path
from typing import List, Tuple


def parse_fasta_pair(path: Path) -> Tuple[str, str, str, str]:
    """Read two unaligned records: the first is the original, the second the edited sequence.

    Returns ``(original, edited, original_name, edited_name)``. Symbols are
    returned as written; validation happens when the sequences are aligned.
    """

    names: List[str] = []
    sequences: List[List[str]] = []
    current_seq: List[str] | None = None

    with path.open("r", encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith(">"):
                current_seq = []
                sequences.append(current_seq)
                names.append(line[1:].strip())
                continue
            if current_seq is None:
                raise ValueError(f"FASTA file '{path.name}' must start with a header line beginning with '>'")
            current_seq.append(line.replace(" ", ""))

    if len(sequences) != 2:
        raise ValueError(
            f"Expected exactly two sequences in '{path.name}', found {len(sequences)}"
        )

    original = "".join(sequences[0])
    edited = "".join(sequences[1])
    return original, edited, names[0] or "original", names[1] or "edited"
