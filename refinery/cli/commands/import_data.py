##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
CLI command for importing CSV and Excel files into a resource.

Every file goes through the import pipeline on its own: relation ids are
validated, rows are written in file order and a report is printed per file.
Several files are imported concurrently, at most `import.max_parallel_files`
at a time.
"""

import logging
import os
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace
from typing import List, Optional

from refinery.catalog.resources import Resource
from refinery.cli.commands.command_entry_point import CommandEntryPoint
from refinery.cli.utils import get_cli_config, resolve_resource
from refinery.data_provider import DataProvider
from refinery.display import display_import_report, display_progress_bar
from refinery.exceptions import RefineryError, ValidationError
from refinery.importer.models import ImportReport
from refinery.importer.tabular import read_rows, table_format, write_failed_rows
from refinery.utils import expand_path, gather_bounded


LOG = logging.getLogger(__name__)


def failed_rows_path(failed_out: str, source: str, multiple: bool) -> str:
    """
    Where the failed rows of `source` are written.

    With a single input file `failed_out` is the output file itself; with several
    it is a directory receiving one `<name>.failed.<ext>` per input file, in the
    input file's format.
    """
    if not multiple:
        return failed_out
    stem = os.path.splitext(os.path.basename(source))[0]
    return os.path.join(failed_out, f"{stem}.failed.{table_format(source)}")


class ImportCommand(CommandEntryPoint):
    """
    Handles the `import` command.

    Methods:
        add_parser: Adds the `import` command to the CLI parser.
        process_command: Imports every given file and prints the reports.
        import_file: Imports a single file.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `import` command parser to the CLI argument parser.

        Parameters:
            subparsers: The subparsers object to which the `import` command parser will be added.
        """
        import_parser: ArgumentParser = subparsers.add_parser(
            "import",
            help="Import CSV or Excel (.xlsx) files into a resource.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        import_parser.set_defaults(func=self.process_command)
        import_parser.add_argument("resource", type=str, help="The resource (table) to import into, e.g. prompts.")
        import_parser.add_argument("files", type=str, nargs="+", help="One or more CSV or .xlsx files to import.")
        import_parser.add_argument(
            "-d",
            "--descriptor",
            type=str,
            default=None,
            help="A YAML import descriptor. Required for resources outside the catalog.",
        )
        import_parser.add_argument(
            "-o",
            "--failed-out",
            type=str,
            default=None,
            help="Write failed rows with their errors here. A directory when importing several files.",
        )
        import_parser.add_argument(
            "--strict",
            action="store_true",
            help="Exit with an error when any row fails to import.",
        )
        import_parser.add_argument(
            "--database", type=str, default=None, help="Database path overriding the configured one."
        )

    async def import_file(
        self, provider: DataProvider, resource: Resource, source: str, show_progress: bool, max_missing_ids: int
    ) -> ImportReport:
        """
        Import one CSV file or Excel workbook.

        Args:
            provider: The data provider to write with.
            resource: The resource receiving the rows.
            source: The file to import.
            show_progress: Draw a progress bar while importing.
            max_missing_ids: Missing ids listed per relation warning.

        Returns:
            The import report of the file.
        """
        records = read_rows(expand_path(source))
        LOG.info(f"Importing {len(records)} row(s) from {source} into '{resource.name}'.")

        def _progress(done: int, total: int):
            display_progress_bar(done, total, prefix=os.path.basename(source), suffix=f"{done}/{total}", color="GREEN")

        return await provider.run_import(
            resource.descriptor,
            records,
            transform=resource.import_transform,
            on_progress=_progress if show_progress else None,
            max_reported_missing_ids=max_missing_ids,
        )

    def process_command(self, args: Namespace):
        """
        CLI command to import CSV and Excel files.

        Args:
            args: Parsed command-line arguments.

        Raises:
            ValidationError: If the resource has no import descriptor.
            PartialBatchError: With `--strict`, if any row failed.
        """
        resource = resolve_resource(args.resource, args.descriptor)
        if resource.descriptor is None:
            raise ValidationError(f"'{resource.name}' has no import descriptor. Pass one with --descriptor.")

        config = get_cli_config(args)
        multiple = len(args.files) > 1

        async def _import(provider: DataProvider) -> List[Optional[ImportReport]]:
            max_missing_ids = config.import_.max_reported_missing_ids
            jobs = [
                self.import_file(provider, resource, source, not multiple, max_missing_ids) for source in args.files
            ]
            return await gather_bounded(jobs, config.import_.max_parallel_files, return_exceptions=True)

        outcomes = self.run_with_provider(args, _import)

        failed_files = []
        partial = []
        for source, outcome in zip(args.files, outcomes):
            if isinstance(outcome, Exception):
                LOG.error(f"Could not import {source}: {outcome}")
                failed_files.append(source)
                continue
            display_import_report(outcome, source, max_errors=config.import_.max_reported_errors)
            if args.failed_out and outcome.failed_count:
                write_failed_rows(failed_rows_path(expand_path(args.failed_out), source, multiple), outcome)
            if outcome.failed_count:
                partial.append(outcome)

        if failed_files:
            raise RefineryError(f"{len(failed_files)} of {len(args.files)} file(s) could not be imported.")
        if args.strict and partial:
            partial[0].raise_for_failures()
