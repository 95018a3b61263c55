from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Dict, List, Optional, Sequence

from .aligner import AlignmentOp, AlignmentResult, OpKind
from .mpl_backend import configure_headless_matplotlib
from .params import AUTO_SIZE_TOKEN, SizeArg

GAP_CHAR = "-"

NUCLEOTIDE_COLORS: Dict[str, str] = {
    "A": "#4daf4a",  # green
    "C": "#377eb8",  # blue
    "G": "#000000",  # black
    "T": "#e41a1c",  # red
}

OP_HIGHLIGHT_COLORS: Dict[OpKind, Optional[str]] = {
    OpKind.MATCH: None,
    OpKind.SUBSTITUTION: "#fee391",
    OpKind.INSERTION: "#c7e9c0",
    OpKind.DELETION: "#fcbba1",
}

OP_MARKERS: Dict[OpKind, str] = {
    OpKind.MATCH: "|",
    OpKind.SUBSTITUTION: "*",
    OpKind.INSERTION: " ",
    OpKind.DELETION: " ",
}


@dataclass
class DiffBlock:
    column_start: int
    original_row: str
    marker_row: str
    edited_row: str
    kinds: List[OpKind] = field(default_factory=list)
    original_start: Optional[int] = None
    original_end: Optional[int] = None
    edited_start: Optional[int] = None
    edited_end: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "column_start": self.column_start,
            "original": self.original_row,
            "markers": self.marker_row,
            "edited": self.edited_row,
            "kinds": [kind.value for kind in self.kinds],
            "original_start": self.original_start,
            "original_end": self.original_end,
            "edited_start": self.edited_start,
            "edited_end": self.edited_end,
        }


def _side_range(indices: Sequence[Optional[int]]):
    present = [idx for idx in indices if idx is not None]
    if not present:
        return None, None
    return present[0] + 1, present[-1] + 1


def diff_rows(result: AlignmentResult, line_width: int) -> List[DiffBlock]:
    if line_width <= 0:
        raise ValueError("line_width must be positive")

    blocks: List[DiffBlock] = []
    ops = result.ops
    for start in range(0, len(ops), line_width):
        chunk: Sequence[AlignmentOp] = ops[start : start + line_width]
        original_start, original_end = _side_range([op.original_index for op in chunk])
        edited_start, edited_end = _side_range([op.edited_index for op in chunk])
        blocks.append(
            DiffBlock(
                column_start=start,
                original_row="".join(op.original or GAP_CHAR for op in chunk),
                marker_row="".join(OP_MARKERS[op.kind] for op in chunk),
                edited_row="".join(op.edited or GAP_CHAR for op in chunk),
                kinds=[op.kind for op in chunk],
                original_start=original_start,
                original_end=original_end,
                edited_start=edited_start,
                edited_end=edited_end,
            )
        )
    return blocks


def summary_line(result: AlignmentResult) -> str:
    return (
        f"matches={result.match_count} substitutions={result.substitution_count} "
        f"insertions={result.insertion_count} deletions={result.deletion_count} "
        f"edit_distance={result.edit_distance} similarity={result.similarity_ratio:.4f}"
    )


def format_diff_text(
    result: AlignmentResult,
    line_width: int,
    original_label: str = "original",
    edited_label: str = "edited",
) -> str:
    label_width = max(len(original_label), len(edited_label))
    lines: List[str] = []

    def coord(value: Optional[int]) -> str:
        return "-" if value is None else str(value)

    for block in diff_rows(result, line_width):
        coord_width = max(
            len(coord(block.original_start)),
            len(coord(block.edited_start)),
        )
        lines.append(
            f"{original_label:<{label_width}} {coord(block.original_start):>{coord_width}} "
            f"{block.original_row} {coord(block.original_end)}"
        )
        lines.append(f"{'':<{label_width}} {'':>{coord_width}} {block.marker_row}")
        lines.append(
            f"{edited_label:<{label_width}} {coord(block.edited_start):>{coord_width}} "
            f"{block.edited_row} {coord(block.edited_end)}"
        )
        lines.append("")
    lines.append(summary_line(result))
    return "\n".join(lines)


def resolve_figure_size(width: SizeArg, height: SizeArg, columns: int, blocks: int) -> tuple:
    if width == AUTO_SIZE_TOKEN:
        resolved_width = max(4.0, columns * 0.14 + 1.6)
    else:
        resolved_width = float(width)
    if height == AUTO_SIZE_TOKEN:
        resolved_height = max(1.2, blocks * 0.8 + 0.4)
    else:
        resolved_height = float(height)
    return resolved_width, resolved_height


def plot_comparison(
    result: AlignmentResult,
    line_width: int,
    width: SizeArg,
    height: SizeArg,
    dpi: int,
    font_size: float,
    output: Path,
    original_label: str = "original",
    edited_label: str = "edited",
) -> None:
    configure_headless_matplotlib()
    import matplotlib.pyplot as plt
    from matplotlib.patches import Rectangle

    blocks = diff_rows(result, line_width)
    columns = min(line_width, result.columns) if result.columns else 0
    fig_width, fig_height = resolve_figure_size(width, height, columns, len(blocks))
    fig, ax = plt.subplots(figsize=(fig_width, fig_height), dpi=dpi)

    label_x = -1.0
    for block_idx, block in enumerate(blocks):
        top = -block_idx * 3.0
        bottom = top - 1.0
        ax.text(label_x, top, original_label, ha="right", va="center", fontsize=font_size, color="#555555")
        ax.text(label_x, bottom, edited_label, ha="right", va="center", fontsize=font_size, color="#555555")
        for col, kind in enumerate(block.kinds):
            highlight = OP_HIGHLIGHT_COLORS[kind]
            if highlight is not None:
                ax.add_patch(
                    Rectangle((col - 0.5, bottom - 0.5), 1.0, 2.0, facecolor=highlight, edgecolor="none", zorder=0)
                )
            for y_pos, char in ((top, block.original_row[col]), (bottom, block.edited_row[col])):
                ax.text(
                    col,
                    y_pos,
                    char,
                    ha="center",
                    va="center",
                    family="monospace",
                    fontsize=font_size,
                    color=NUCLEOTIDE_COLORS.get(char, "#999999"),
                    zorder=1,
                )

    if not blocks:
        ax.text(0.5, 0.5, "empty alignment", ha="center", va="center", transform=ax.transAxes)
    else:
        ax.set_xlim(label_x - 6.0, max(columns, 1))
        ax.set_ylim(-(len(blocks) - 1) * 3.0 - 1.8, 0.8)
    ax.set_title(
        f"edit distance {result.edit_distance}, similarity {result.similarity_ratio:.1%}",
        fontsize=font_size,
    )
    ax.axis("off")

    fig.savefig(output, bbox_inches="tight")
    plt.close(fig)


def render_bytes(
    *,
    fmt: str,
    result: AlignmentResult,
    line_width: int,
    width: SizeArg,
    height: SizeArg,
    dpi: int,
    font_size: float,
    original_label: str = "original",
    edited_label: str = "edited",
) -> bytes:
    suffix = ".svg" if fmt == "svg" else ".png"
    with NamedTemporaryFile(suffix=suffix, delete=True) as handle:
        plot_comparison(
            result,
            line_width,
            width,
            height,
            dpi,
            font_size,
            Path(handle.name),
            original_label=original_label,
            edited_label=edited_label,
        )
        handle.seek(0)
        return handle.read()
