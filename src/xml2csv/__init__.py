"""xml2csv.

Flattens a record-oriented XML document into a delimited table: every
direct child of the document element is a record, every leaf below it a
field, and columns are named after the path from the record to the leaf.

Progressive API Disclosure:
- Level 1: Simple functions - convert(), convert_file(), write_csv()
- Level 2: Configured converter - XMLTableConverter class
"""

__version__ = "0.1.0"

# Level 1: Simple functions
# Level 2: Configured converter
from .api import (
    ConversionResult,
    XMLTableConverter,
    convert,
    convert_bytes,
    convert_file,
    convert_stream,
    write_csv,
)

# Configuration and errors for advanced usage
from .shared import (
    ConverterConfig,
    InputReadError,
    StructuralError,
    XML2CSVError,
)
from .table import Table

__all__ = [
    "__version__",

    # Level 1
    "convert",
    "convert_bytes",
    "convert_file",
    "convert_stream",
    "write_csv",

    # Level 2
    "XMLTableConverter",

    # Results
    "ConversionResult",
    "Table",

    # Configuration and errors
    "ConverterConfig",
    "InputReadError",
    "StructuralError",
    "XML2CSVError",
]
