"""Rendering of execution traces as text tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import zip_longest
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .execution import Execution, History, ParallelHistory

_CELL_HEIGHT = 2


def _count_lines(text: str) -> int:
    if not text:
        return 0
    breaks = text.count("\n")
    return breaks if text.endswith("\n") else breaks + 1


def _center(text: str, width: int) -> str:
    padding = max(width - len(text), 0)
    left = padding // 2
    return " " * left + text + " " * (padding - left)


@dataclass(frozen=True)
class CellsSpan:
    """A run of cells in a column, optionally carrying one line of text."""

    len_in_cells: int
    content: str | None = None

    def __post_init__(self) -> None:
        if self.len_in_cells <= 0:
            raise ValueError("a span must cover at least one cell")
        if self.content is not None and _count_lines(self.content) > 1:
            raise ValueError("multi-line content not supported")

    def len_in_lines(self, cell_height: int) -> int:
        """Number of text lines the span occupies, excluding its separator."""
        return self.len_in_cells * cell_height - 1


@dataclass
class Column:
    """A titled column made of consecutive spans."""

    header: str
    spans: list[CellsSpan] = field(default_factory=list)


def _column_width(column: Column) -> int:
    widest = max(
        (len(span.content) + 2 for span in column.spans if span.content is not None),
        default=0,
    )
    return max(widest, len(column.header) + 2)


def _column_lines(column: Column, width: int, cell_height: int) -> Iterator[str]:
    for span in column.spans:
        length = span.len_in_lines(cell_height)
        middle = length // 2
        for index in range(length):
            text = span.content if index == middle and span.content else ""
            yield _center(text, width)
        yield "-" * width


def _row(cells: list[str]) -> str:
    return "|" + "".join(cell + "|" for cell in cells)


@dataclass
class Table:
    """A table of columns whose spans line up on a common cell grid."""

    cell_height: int
    columns: list[Column] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.cell_height < 1:
            raise ValueError("cell height must be positive")

    def render(self) -> str:
        """Render the table, one newline-terminated line per row."""
        widths = [_column_width(column) for column in self.columns]
        separator = _row(["=" * width for width in widths])
        lines = [
            separator,
            _row([_center(col.header, w) for col, w in zip(self.columns, widths)]),
            separator,
        ]
        bodies = [
            _column_lines(column, width, self.cell_height)
            for column, width in zip(self.columns, widths)
        ]
        for cells in zip_longest(*bodies):
            lines.append(
                _row(
                    [
                        cell if cell is not None else " " * width
                        for cell, width in zip(cells, widths)
                    ]
                )
            )
        return "".join(line + "\n" for line in lines)

    def __str__(self) -> str:
        return self.render()


def format_history(history: History) -> str:
    """Render a sequential history as a single-column table."""
    spans = [CellsSpan(_CELL_HEIGHT, str(inv)) for inv in history]
    return Table(_CELL_HEIGHT, [Column("MAIN THREAD", spans)]).render()


def format_parallel_history(history: ParallelHistory) -> str:
    """Render a parallel history with one column per thread, aligned on time."""
    thread_parts = history.thread_parts()
    max_return = max(
        (part[-1].return_timestamp for part in thread_parts if part), default=0
    )

    columns = []
    for thread_id, part in enumerate(thread_parts):
        spans = []
        prev_return = -1
        for inv in part:
            if inv.call_timestamp > prev_return + 1:
                spans.append(CellsSpan(inv.call_timestamp - prev_return - 1))
            spans.append(
                CellsSpan(inv.return_timestamp - inv.call_timestamp + 1, str(inv))
            )
            prev_return = inv.return_timestamp
        if prev_return < max_return:
            spans.append(CellsSpan(max_return - prev_return))
        columns.append(Column(f"THREAD {thread_id}", spans))

    return Table(_CELL_HEIGHT, columns).render()


def format_execution(execution: Execution) -> str:
    """Render all three parts of an execution."""
    return (
        "INIT PART:\n"
        + format_history(execution.init_part)
        + "\n"
        + "PARALLEL PART:\n"
        + format_parallel_history(execution.parallel_part)
        + "\n"
        + "POST PART:\n"
        + format_history(execution.post_part)
        + "\n"
    )