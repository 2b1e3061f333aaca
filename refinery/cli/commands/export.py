##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
CLI command for exporting a resource to CSV or Excel, or writing its import template.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from refinery.cli.commands.command_entry_point import CommandEntryPoint
from refinery.cli.utils import collect_filters, resolve_resource
from refinery.data_provider import DataProvider
from refinery.exceptions import ValidationError
from refinery.importer.exporter import export_resource, export_template
from refinery.importer.models import ImportDescriptor
from refinery.utils import expand_path


LOG = logging.getLogger(__name__)


class ExportCommand(CommandEntryPoint):
    """
    Handles the `export` command.

    Methods:
        add_parser: Adds the `export` command to the CLI parser.
        process_command: Writes the export or the template.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `export` command parser to the CLI argument parser.

        Parameters:
            subparsers: The subparsers object to which the `export` command parser will be added.
        """
        export: ArgumentParser = subparsers.add_parser(
            "export",
            help="Export a resource to CSV or Excel (.xlsx) in the layout its import reads.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        export.set_defaults(func=self.process_command)
        export.add_argument("resource", type=str, help="The resource (table) to export, e.g. prompts.")
        export.add_argument("output", type=str, help="The file to write. A .xlsx extension writes an Excel workbook.")
        export.add_argument(
            "-t",
            "--template",
            action="store_true",
            help="Write an empty import template (headers and an example row) instead of the data.",
        )
        export.add_argument(
            "-d",
            "--descriptor",
            type=str,
            default=None,
            help="A YAML import descriptor choosing the columns.",
        )
        export.add_argument(
            "-f",
            "--filter",
            dest="filters",
            action="append",
            default=None,
            help="Only export records matching field:operator:value. Repeat for more filters.",
        )
        export.add_argument("--database", type=str, default=None, help="Database path overriding the configured one.")

    def process_command(self, args: Namespace):
        """
        CLI command to export a resource.

        Args:
            args: Parsed command-line arguments.
        """
        resource = resolve_resource(args.resource, args.descriptor)
        output = expand_path(args.output)

        if args.template:
            if resource.descriptor is None or not resource.descriptor.columns:
                raise ValidationError(f"'{resource.name}' has no import columns to build a template from.")
            export_template(resource.descriptor, output)
            print(f"Import template for '{resource.name}' written to {output}.")
            return

        descriptor = resource.descriptor or ImportDescriptor(resource.entity)
        filters = collect_filters(args.filters)

        async def _export(provider: DataProvider) -> int:
            return await export_resource(
                provider, descriptor, output, resource.select, resource.export_transform, filters
            )

        count = self.run_with_provider(args, _export)
        print(f"Exported {count} '{resource.name}' record(s) to {output}.")
