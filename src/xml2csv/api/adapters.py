"""Integration adapters for handing converted tables to other libraries.

pandas is imported lazily so that plain CSV conversion never pays for it.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from xml2csv.shared import get_logger
from xml2csv.table import Table


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    target_library: str
    description: str
    supported_versions: List[str] = field(default_factory=list)


class DataFrameAdapter:
    """Conversion between :class:`Table` and ``pandas.DataFrame``.

    Examples:
        >>> table = convert(b"<r><x><a>1</a></x></r>").table
        >>> DataFrameAdapter().to_dataframe(table)
           a
        0  1
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="pandas",
            target_library="pandas",
            description="Conversion between Table and pandas DataFrame",
            supported_versions=["1.0+"],
        )

    def is_available(self) -> bool:
        """Check if pandas can be imported."""
        try:
            import pandas  # noqa: F401
            return True
        except ImportError:
            return False

    def to_dataframe(self, table: Table) -> Any:
        """Build a DataFrame with one string column per table column.

        Unset fields are empty strings, not NaN.
        """
        import pandas as pd

        start_time = time.time()
        df = pd.DataFrame(table.rows, columns=table.columns, dtype="object")
        self._logger.debug(
            "Converted table to DataFrame",
            extra={
                "dataframe_shape": df.shape,
                "conversion_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return df

    def from_dataframe(self, df: Any) -> Table:
        """Build a Table from a DataFrame; missing values become empty strings."""
        import pandas as pd

        if not isinstance(df, pd.DataFrame):
            raise TypeError(f"expected a pandas DataFrame, got {type(df).__name__}")

        columns = [str(column) for column in df.columns]
        rows = [
            ["" if pd.isna(value) else str(value) for value in row]
            for row in df.itertuples(index=False, name=None)
        ]
        self._logger.debug(
            "Converted DataFrame to table",
            extra={"row_count": len(rows), "column_count": len(columns)}
        )
        return Table(columns=columns, rows=rows)

    def summary(self, table: Table) -> Dict[str, Any]:
        """Shape and per-column fill counts of ``table``."""
        filled = {
            column: sum(1 for row in table.rows if row[i])
            for i, column in enumerate(table.columns)
        }
        return {
            "row_count": table.row_count,
            "column_count": table.column_count,
            "filled": filled,
        }
