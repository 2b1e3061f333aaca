##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
The base class every Refinery CLI command derives from.

Commands register their own sub-parser and handle the parsed arguments. Most of
them talk to the store, so the base class also knows how to build a data
provider from the arguments and drive a coroutine against it to completion.
"""

import asyncio
from abc import ABC, abstractmethod
from argparse import ArgumentParser, Namespace
from typing import Any, Awaitable, Callable

from refinery.cli.utils import create_provider
from refinery.data_provider import DataProvider


class CommandEntryPoint(ABC):
    """
    A top-level `refinery` command.

    Methods:
        add_parser: Adds the parser for this command to the main `ArgumentParser`.
        process_command: Executes the logic for this command.
        run_with_provider: Runs a coroutine against a freshly built data provider.
    """

    @abstractmethod
    def add_parser(self, subparsers: ArgumentParser):
        """Add the parser for this command to the main `ArgumentParser`."""
        raise NotImplementedError("Subclasses of `CommandEntryPoint` must implement an `add_parser` method.")

    @abstractmethod
    def process_command(self, args: Namespace):
        """Execute the logic for this CLI command."""
        raise NotImplementedError("Subclasses of `CommandEntryPoint` must implement a `process_command` method.")

    @staticmethod
    def run_with_provider(args: Namespace, operation: Callable[[DataProvider], Awaitable[Any]]) -> Any:
        """
        Build the data provider described by `args`, await `operation(provider)` on a
        new event loop and release the driver afterwards.

        Returns:
            Whatever `operation` returns.
        """

        async def _run():
            provider = create_provider(args)
            try:
                return await operation(provider)
            finally:
                await provider.driver.close()

        return asyncio.run(_run())
