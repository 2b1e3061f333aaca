##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Export of a resource to CSV or Excel, in the same column layout its import uses.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence

from refinery.importer.models import ImportDescriptor
from refinery.importer.tabular import write_records, write_template
from refinery.query.predicates import Filter, SelectMeta


if TYPE_CHECKING:
    from refinery.data_provider import DataProvider


LOG = logging.getLogger(__name__)

ExportTransform = Callable[[Dict[str, Any]], Dict[str, Any]]


async def export_resource(
    provider: "DataProvider",
    descriptor: ImportDescriptor,
    filepath: str,
    select: str = "*",
    transform: Optional[ExportTransform] = None,
    filters: Sequence[Filter] = (),
) -> int:
    """
    Write every record of the descriptor's resource to a CSV file or an Excel workbook.

    Records are read page by page, newest first. Each record goes through
    `transform` (e.g. to flatten embedded relations into id lists) before the
    descriptor's columns are picked out of it, so the file can be imported back.

    Args:
        provider: The data provider to read with.
        descriptor: The resource and its column layout.
        filepath: The file to write; `.xlsx` writes a workbook.
        select: The select expression used to read the records.
        transform: Optional per-record transform.
        filters: Optional filters restricting the export.

    Returns:
        The number of records written.
    """
    entity = descriptor.resource
    records = await provider.fetch_all(entity, filters, meta=SelectMeta(select=select))
    if transform is not None:
        records = [transform(record) for record in records]
    LOG.debug(f"Exporting {len(records)} '{entity.name}' record(s) to {filepath}.")
    return write_records(filepath, records, descriptor.columns or None)


def export_template(descriptor: ImportDescriptor, filepath: str):
    """
    Write an import template for the descriptor's resource.
    """
    write_template(filepath, descriptor.columns)
