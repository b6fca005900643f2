"""CSV emission for records with multi-valued fields."""

from candi.export.csv_document import (
    CsvDocument,
    CsvEntry,
    expand_entry,
    format_field,
    generate_csv,
)

__all__ = [
    "CsvDocument",
    "CsvEntry",
    "expand_entry",
    "format_field",
    "generate_csv",
]
