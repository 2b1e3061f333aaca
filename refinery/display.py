##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Console output for the Refinery CLI: record tables, import reports, progress
bars and configuration summaries.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from tabulate import tabulate

from refinery.importer.models import ImportReport
from refinery.importer.tabular import format_cell


LOG = logging.getLogger(__name__)

# Colors here are chosen based on the Bang Wong color palette (https://www.nature.com/articles/nmeth.1618)
ANSI_COLORS = {
    "RESET": "\033[0m",
    "GREY": "\033[38;2;102;102;102m",
    "BLUE": "\033[38;2;0;114;178m",
    "GREEN": "\033[38;2;0;158;115m",
    "YELLOW": "\033[38;2;240;228;66m",
    "RED": "\033[38;2;213;94;0m",
}

MAX_CELL_WIDTH = 40


def _truncate(text: str, width: int) -> str:
    text = text.replace("\n", " ")
    return text if len(text) <= width else text[: width - 3] + "..."


def format_table_cell(value: Any, width: int = MAX_CELL_WIDTH) -> str:
    """
    Render a value for a console table. Embedded records show their name (or id).
    """
    if isinstance(value, dict):
        value = value.get("name", value.get("id", value))
    elif isinstance(value, list) and all(isinstance(item, dict) for item in value):
        value = [_embedded_label(item) for item in value]
    return _truncate(format_cell(value), width)


def _embedded_label(item: Dict[str, Any]) -> Any:
    if "name" in item or "id" in item:
        return item.get("name", item.get("id"))
    if len(item) == 1:
        nested = next(iter(item.values()))
        return _embedded_label(nested) if isinstance(nested, dict) else nested
    return item


def display_records(records: Sequence[Dict[str, Any]], columns: Optional[List[str]] = None, total: int = None):
    """
    Print records as a table.

    Args:
        records: The records to print.
        columns: The fields to show, in order. Defaults to every field of the first record.
        total: The number of matching records overall, printed under the table.
    """
    if not records:
        print("No records found.")
        return
    columns = columns or list(records[0].keys())
    rows = [[format_table_cell(record.get(column)) for column in columns] for record in records]
    print(tabulate(rows, headers=columns, tablefmt="simple"))
    if total is not None:
        print(f"\nShowing {len(records)} of {total} record(s).")


def display_progress_bar(
    current: int,
    total: int,
    prefix: str = "",
    suffix: str = "",
    decimals: int = 1,
    length: int = 50,
    fill: str = "█",
    print_end: str = "\r",
    color: str = None,
):
    """
    Prints a progress bar that visually represents the completion percentage
    relative to a given total.

    Args:
        current: Current progress value.
        total: Total value representing 100% completion.
        prefix: Optional prefix string to display before the progress bar.
        suffix: Optional suffix string to display after the progress bar.
        decimals: Number of decimal places to display in the percentage.
        length: Character length of the progress bar.
        fill: Character used to fill the progress bar.
        print_end: Character(s) to print at the end of the line (e.g., '\\r', '\\n').
            A newline is always printed once `current` reaches `total`.
        color: Key of `ANSI_COLORS` used for the filled part of the bar.
    """
    if total <= 0:
        return
    if color and color in ANSI_COLORS:
        fill = f"{ANSI_COLORS[color]}{fill}{ANSI_COLORS['RESET']}"

    percent = ("{0:." + str(decimals) + "f}").format(100 * (current / float(total)))
    filled_length = int(length * current // total)
    progress_bar = fill * filled_length + "-" * (length - filled_length)
    print(f"\r{prefix} |{progress_bar}| {percent}% {suffix}", end="\n" if current >= total else print_end)


def display_import_report(report: ImportReport, source: str = "", max_errors: int = 10):
    """
    Print the outcome of an import: counts, relation warnings and the first row errors.

    Args:
        report: The import report.
        source: The file the rows came from, used as a heading.
        max_errors: The maximum number of row errors printed.
    """
    heading = f"Import of {source}" if source else "Import"
    print(f"\n{heading}")
    print("-" * len(heading))
    summary = [
        ("imported", report.success_count),
        ("failed", report.failed_count),
        ("not processed", len(report.rows) - len(report.results)),
    ]
    print(tabulate(summary, tablefmt="presto"))

    for error in report.validation_errors:
        print(f"{ANSI_COLORS['YELLOW']}Warning: {error}{ANSI_COLORS['RESET']}")

    errors = report.errors(limit=None)
    if errors:
        print(f"\n{ANSI_COLORS['RED']}Errors:{ANSI_COLORS['RESET']}")
        for message in errors[:max_errors]:
            print(f"  {message}")
        if len(errors) > max_errors:
            print(f"  ... and {len(errors) - max_errors} more")
    if report.aborted:
        print(f"{ANSI_COLORS['YELLOW']}The import was aborted before every row was processed.{ANSI_COLORS['RESET']}")


def display_info(title: str, info: Dict[str, Any]):
    """
    Print a titled two column table of settings.
    """
    print(title)
    print("-" * 25)
    print("")
    print(tabulate(info.items(), tablefmt="presto"))
