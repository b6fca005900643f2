"""
Irregular HTML tables to records and CSV.

Header templates describe how each table column becomes one or more record
fields (see candi.tables.headers). Records with multi-valued fields are
written out with candi.export.CsvDocument, which spreads the values of a
field over as many rows as needed.
"""
