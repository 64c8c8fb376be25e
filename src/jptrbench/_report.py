"""Aligned text tables for raw samples and ranked summaries."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any
from typing import Final

if TYPE_CHECKING:
    from jptrbench import Sample
    from jptrbench import SummaryRow

COLUMN_SPLITTER: Final = " | "


@dataclass(frozen=True)
class Column:
    """A table column: record key, heading and alignment."""

    key: str
    align_right: bool = False

    @property
    def heading(self) -> str:
        return self.key.upper()


SAMPLE_COLUMNS: Final = (
    Column("library"),
    Column("operation"),
    Column("compiled"),
    Column("duration", align_right=True),
    Column("ops", align_right=True),
    Column("ea", align_right=True),
    Column("err"),
)

SUMMARY_COLUMNS: Final = (
    Column("library"),
    Column("method"),
    Column("compiled"),
    Column("samples", align_right=True),
    Column("avg", align_right=True),
    Column("slower", align_right=True),
    Column("errors", align_right=True),
)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_table(
    records: Iterable[Mapping[str, Any]], columns: Sequence[Column]
) -> str:
    """Renders records as a table with one padded column per field.

    Args:
        records: Rows keyed by column key; missing keys render empty
        columns: Column layout in display order

    Returns:
        Table text without a trailing newline
    """
    rows = [[_cell(record.get(c.key)) for c in columns] for record in records]
    widths = [len(c.heading) for c in columns]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def render(cells: list[str]) -> str:
        padded = [
            cell.rjust(width) if column.align_right else cell.ljust(width)
            for cell, width, column in zip(cells, widths, columns)
        ]
        return COLUMN_SPLITTER.join(padded).rstrip()

    lines = [render([c.heading for c in columns])]
    lines.extend(render(row) for row in rows)
    return "\n".join(lines)


def _describe_error(error: BaseException | None) -> str:
    if error is None:
        return ""
    return f"{type(error).__name__}: {error}"


def format_samples(samples: Iterable[Sample]) -> str:
    """Renders raw timing samples in chronological order."""
    records = [
        {
            "library": sample.library,
            "operation": sample.operation,
            "compiled": sample.compiled,
            "duration": sample.duration,
            "ops": sample.ops,
            "ea": None if sample.ea is None else f"{sample.ea:.2f}",
            "err": _describe_error(sample.error),
        }
        for sample in samples
    ]
    return format_table(records, SAMPLE_COLUMNS)


def format_summary(rows: Iterable[SummaryRow]) -> str:
    """Renders ranked summary rows."""
    records = [
        {
            "library": row.library,
            "method": row.method,
            "compiled": "compiled" if row.compiled else "",
            "samples": row.samples,
            "avg": row.avg,
            "slower": row.slower,
            "errors": row.errors or "",
        }
        for row in rows
    ]
    return format_table(records, SUMMARY_COLUMNS)
