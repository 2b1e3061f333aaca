##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
CSV and Excel reading and writing for imports and exports.

Rows are plain mappings of header to cell value. The format follows the file
extension: `.xlsx` files go through openpyxl, everything else is CSV. Lists are
written joined with `", "`. CSV cells hold `true`/`false` for booleans while
Excel cells keep their native type; the import pipeline reads both back.
"""

import csv
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter

from refinery.importer.models import ERROR_COLUMN, ColumnMapping, ImportReport


LOG = logging.getLogger(__name__)

CSV = "csv"
XLSX = "xlsx"
MAX_COLUMN_WIDTH = 50


def table_format(filepath: str) -> str:
    """Return `xlsx` for Excel workbooks and `csv` for any other file."""
    return XLSX if os.path.splitext(filepath)[1].lower() == ".xlsx" else CSV


def format_cell(value: Any) -> str:
    """Render one value as CSV cell text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_cell(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def excel_cell(value: Any) -> Any:
    """Convert one value into something an Excel cell can hold; scalars keep their type."""
    if isinstance(value, (list, tuple, dict)):
        return format_cell(value)
    # Excel has no time zones
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.isoformat()
    return value


def read_csv(filepath: str) -> List[Dict[str, str]]:
    """
    Read a CSV file with a header row.

    Args:
        filepath: The file to read.

    Returns:
        One mapping of header to cell text per non-empty row.
    """
    with open(filepath, "r", newline="", encoding="utf-8-sig") as _file:
        reader = csv.DictReader(_file)
        rows = [
            {header: cell if cell is not None else "" for header, cell in row.items() if header is not None}
            for row in reader
            if any((cell or "").strip() for cell in row.values() if isinstance(cell, str))
        ]
    LOG.debug(f"Read {len(rows)} row(s) from {filepath}.")
    return rows


def read_xlsx(filepath: str) -> List[Dict[str, Any]]:
    """
    Read the first sheet of an Excel workbook whose first row holds the headers.

    Columns without a header are ignored and empty cells become `""`.

    Args:
        filepath: The workbook to read.

    Returns:
        One mapping of header to cell value per non-empty row.
    """
    workbook = load_workbook(filepath, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        values = sheet.iter_rows(values_only=True)
        header_row = next(values, ())
        headers = [str(header).strip() if header is not None else None for header in header_row]
        rows = []
        for cells in values:
            row = {header: cell if cell is not None else "" for header, cell in zip(headers, cells) if header}
            for header in headers[len(cells) :]:
                if header:
                    row[header] = ""
            if any(str(cell).strip() for cell in row.values()):
                rows.append(row)
    finally:
        workbook.close()
    LOG.debug(f"Read {len(rows)} row(s) from {filepath}.")
    return rows


def read_rows(filepath: str) -> List[Dict[str, Any]]:
    """
    Read a CSV file or an Excel workbook, chosen by the file extension.

    Returns:
        One mapping of header to cell value per non-empty row.
    """
    if table_format(filepath) == XLSX:
        return read_xlsx(filepath)
    return read_csv(filepath)


def _write_csv(filepath: str, headers: List[str], rows: Sequence[Dict[str, Any]]):
    with open(filepath, "w", newline="", encoding="utf-8") as _file:
        writer = csv.writer(_file)
        writer.writerow(headers)
        for row in rows:
            writer.writerow([format_cell(row.get(header)) for header in headers])


def _write_xlsx(filepath: str, headers: List[str], rows: Sequence[Dict[str, Any]], sheet_title: str):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    sheet.append(headers)
    for row in rows:
        sheet.append([excel_cell(row.get(header)) for header in headers])

    for index, header in enumerate(headers, start=1):
        longest = max([len(header)] + [len(format_cell(row.get(header))) for row in rows])
        sheet.column_dimensions[get_column_letter(index)].width = min(longest + 2, MAX_COLUMN_WIDTH)
    workbook.save(filepath)


def _write(filepath: str, headers: List[str], rows: Sequence[Dict[str, Any]], sheet_title: str = "Data"):
    directory = os.path.dirname(os.path.abspath(filepath))
    os.makedirs(directory, exist_ok=True)
    if table_format(filepath) == XLSX:
        _write_xlsx(filepath, headers, rows, sheet_title)
    else:
        _write_csv(filepath, headers, rows)


def write_records(
    filepath: str, records: Sequence[Dict[str, Any]], columns: Optional[Sequence[ColumnMapping]] = None
) -> int:
    """
    Write records to a CSV file or an Excel workbook.

    Args:
        filepath: The file to write. A `.xlsx` extension writes a workbook.
        records: The records, keyed by field.
        columns: Optional mappings choosing and naming the columns; without them every
            field of the first record is written under its own name.

    Returns:
        The number of records written. Nothing is written for an empty list.
    """
    if not records:
        LOG.warning(f"No data to export to {filepath}.")
        return 0
    if columns:
        headers = [column.header for column in columns]
        rows = [{column.header: record.get(column.field) for column in columns} for record in records]
    else:
        headers = list(records[0].keys())
        rows = list(records)
    _write(filepath, headers, rows)
    LOG.info(f"Wrote {len(rows)} record(s) to {filepath}.")
    return len(rows)


def write_template(filepath: str, columns: Sequence[ColumnMapping]):
    """
    Write an import template: the header row followed by one example row.
    """
    headers = [column.header for column in columns]
    _write(filepath, headers, [{column.header: column.example for column in columns}], sheet_title="Template")
    LOG.info(f"Wrote import template to {filepath}.")


def write_failed_rows(filepath: str, report: ImportReport) -> int:
    """
    Write the failed rows of an import, with their errors, for a retry.

    Returns:
        The number of rows written.
    """
    failed = report.failed_rows()
    if not failed:
        return 0
    headers = [header for header in failed[0] if header != ERROR_COLUMN]
    for row in failed[1:]:
        headers.extend(header for header in row if header != ERROR_COLUMN and header not in headers)
    _write(filepath, headers + [ERROR_COLUMN], failed, sheet_title="Failed rows")
    LOG.info(f"Wrote {len(failed)} failed row(s) to {filepath}.")
    return len(failed)
