"""Header templates and HTML table to record conversion."""

from candi.tables.assemble import assemble_record
from candi.tables.headers import compile_header, compile_headers
from candi.tables.pipeline import (
    get_data_from_table,
    get_table_headers,
    row_to_cells,
    row_to_record,
    rows_to_records,
    table_to_records,
)
from candi.tables.records import (
    add_field_to_records,
    grid_to_records,
    rearrange_record,
    rearrange_records,
)

__all__ = [
    "add_field_to_records",
    "assemble_record",
    "compile_header",
    "compile_headers",
    "get_data_from_table",
    "get_table_headers",
    "grid_to_records",
    "rearrange_record",
    "rearrange_records",
    "row_to_cells",
    "row_to_record",
    "rows_to_records",
    "table_to_records",
]
