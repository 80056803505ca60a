"""Excel -> JSON batch converter.

Each spreadsheet's first sheet is converted into ``<dir>/json/<stem>.json``:
row 1 holds the field names, row 4 is the marker row (``"3"`` selects a
column) and every following row becomes one record.
"""

__version__ = "0.1.0"
