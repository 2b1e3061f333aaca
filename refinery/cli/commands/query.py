##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
CLI command for listing the records of a resource.

`refinery query prompts --filter tier:eq:pro --filter tag_id:in:seo,ads --sort created_at:desc`
prints one page of prompts as a table together with the total number of matches.
Filters on a resource's many-to-many fields (e.g. `tag_id`) go through its junction table.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from refinery.cli.commands.command_entry_point import CommandEntryPoint
from refinery.cli.utils import collect_filters, parse_sorter, resolve_resource
from refinery.data_provider import DataProvider, ListResult
from refinery.display import display_records
from refinery.query.predicates import CountMode, Pagination, SelectMeta


LOG = logging.getLogger(__name__)


class QueryCommand(CommandEntryPoint):
    """
    Handles the `query` command.

    Methods:
        add_parser: Adds the `query` command to the CLI parser.
        process_command: Reads one page of records and prints it.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `query` command parser to the CLI argument parser.

        Parameters:
            subparsers: The subparsers object to which the `query` command parser will be added.
        """
        query: ArgumentParser = subparsers.add_parser(
            "query",
            help="List the records of a resource.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        query.set_defaults(func=self.process_command)
        query.add_argument("resource", type=str, help="The resource (table) to read, e.g. prompts.")
        query.add_argument(
            "-f",
            "--filter",
            dest="filters",
            action="append",
            default=None,
            help="A filter of the form field:operator:value. Repeat for more filters; they are AND-combined. "
            "Operators: eq, ne, gt, gte, lt, lte, in (comma separated values), contains, null (true/false).",
        )
        query.add_argument(
            "-s",
            "--sort",
            dest="sorters",
            action="append",
            default=None,
            help="A sort key of the form field[:asc|:desc]. Repeat for more keys.",
        )
        query.add_argument("--page", type=int, default=1, help="The page to show.")
        query.add_argument("--page-size", type=int, default=10, help="The number of records per page.")
        query.add_argument(
            "--select",
            type=str,
            default=None,
            help="A select expression, e.g. '*, categories(id, name)'. Defaults to the resource's own.",
        )
        query.add_argument(
            "--count",
            type=str,
            default=CountMode.EXACT.value,
            choices=[mode.value for mode in CountMode],
            help="How the total number of matches is counted.",
        )
        query.add_argument(
            "--columns",
            type=str,
            default=None,
            help="Comma separated fields to show. Defaults to every field.",
        )
        query.add_argument("--database", type=str, default=None, help="Database path overriding the configured one.")

    def process_command(self, args: Namespace):
        """
        CLI command to list records.

        Args:
            args: Parsed command-line arguments.
        """
        resource = resolve_resource(args.resource)
        filters = collect_filters(args.filters)
        sorters = [parse_sorter(expression) for expression in args.sorters or []]
        pagination = Pagination(page=args.page, page_size=args.page_size)
        meta = SelectMeta(select=args.select or resource.select, count_mode=args.count)

        async def _query(provider: DataProvider) -> ListResult:
            return await provider.get_list(resource.entity, filters, sorters, pagination, meta, resource.relations)

        result = self.run_with_provider(args, _query)
        columns = [column.strip() for column in args.columns.split(",")] if args.columns else None
        display_records(result.data, columns, total=result.total)
