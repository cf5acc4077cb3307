"""Public conversion API for xml2csv.

Progressive disclosure from module-level functions to the configurable
:class:`XMLTableConverter`, plus adapters for other libraries.
"""

from .adapters import AdapterMetadata, DataFrameAdapter
from .converter import (
    ConversionResult,
    XMLTableConverter,
    convert,
    convert_bytes,
    convert_file,
    convert_stream,
    write_csv,
)

__all__ = [
    "AdapterMetadata",
    "ConversionResult",
    "DataFrameAdapter",
    "XMLTableConverter",
    "convert",
    "convert_bytes",
    "convert_file",
    "convert_stream",
    "write_csv",
]
