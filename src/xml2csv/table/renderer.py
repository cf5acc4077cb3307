"""Table rendering.

One row per record, one field per final column. Every field is quoted, with
embedded quote characters doubled; fields a record never sets stay empty.
"""

import csv
import io
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TextIO

from xml2csv.shared import RenderConfig, get_logger
from xml2csv.tree import Node, iter_children, iter_subtree

from .naming import FinalColumnSet


@dataclass
class Table:
    """Header plus rows of unquoted field values."""

    columns: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def records(self) -> List[Dict[str, str]]:
        """Rows as column -> value mappings."""
        return [dict(zip(self.columns, row)) for row in self.rows]

    def to_dataframe(self) -> Any:
        """Convert to a ``pandas.DataFrame``."""
        from xml2csv.api.adapters import DataFrameAdapter
        return DataFrameAdapter().to_dataframe(self)


def normalize_content(content: str) -> str:
    """Whitespace-only content becomes empty; anything else is kept verbatim."""
    if not content.strip():
        return ""
    return content


class TableRenderer:
    """Walks each record and lays its leaves out along the final columns."""

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or RenderConfig()
        self.logger = get_logger(__name__, correlation_id, "table_renderer")

    def render(self, root: Optional[Node], columns: FinalColumnSet) -> Table:
        """Build the table for every record under ``root``.

        Args:
            root: Document element whose direct children are the records
            columns: Final column set from the column namer

        Returns:
            Table with rows in document order
        """
        table = Table(columns=list(columns.names))
        if root is None:
            return table

        for record in iter_children(root):
            table.rows.append(self.render_record(record, columns))

        self.logger.info(
            "Table rendered",
            extra={"row_count": table.row_count, "column_count": table.column_count}
        )
        return table

    def render_record(self, record: Node, columns: FinalColumnSet) -> List[str]:
        """Field values of one record, aligned to ``columns``."""
        values = [""] * len(columns)
        for node in iter_subtree(record):
            if not node.is_leaf or node.column_name is None:
                continue
            slot = columns.index.get(node.column_name)
            if slot is not None:
                values[slot] = normalize_content(node.content)
        return values

    def _row_writer(self, stream: TextIO, line_terminator: str = "") -> Any:
        return csv.writer(
            stream,
            delimiter=self.config.delimiter,
            quotechar=self.config.quote_char,
            quoting=csv.QUOTE_ALL,
            doublequote=True,
            lineterminator=line_terminator,
        )

    def format_header(self, columns: List[str]) -> str:
        return self.config.delimiter.join(columns)

    def to_text(self, table: Table) -> str:
        buffer = io.StringIO()
        self.write(table, buffer)
        return buffer.getvalue()

    def write(self, table: Table, stream: TextIO) -> int:
        """Write ``table`` to ``stream``: a bare header, then quoted rows.

        Returns:
            Number of lines written
        """
        terminator = self.config.line_terminator
        stream.write(self.format_header(table.columns) + terminator)
        writer = self._row_writer(stream, terminator)
        writer.writerows(table.rows)
        return table.row_count + 1
