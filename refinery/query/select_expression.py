##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Parsing and rewriting of select expressions.

A select expression lists the columns and embedded relations a read returns, e.g.
`*, categories(id, name), prompt_tags(tags(id, name))`. An embedded relation may
carry a hint after a bang; `categories!inner(*)` asks the store to drop parent rows
that have no matching related row. The query translator rewrites expressions
through `ensure_inner` and `ensure_column`; store drivers walk the parsed tree.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from refinery.exceptions import ValidationError
from refinery.query.predicates import IDENTIFIER_PATTERN


INNER_HINT = "inner"


@dataclass
class Column:
    """A plain column (or `*`) in a select expression."""

    name: str

    def render(self) -> str:
        return self.name


@dataclass
class Embed:
    """An embedded relation with its own nested select expression."""

    table: str
    hint: Optional[str] = None
    items: List[Union[Column, "Embed"]] = field(default_factory=list)

    @property
    def is_inner(self) -> bool:
        return self.hint == INNER_HINT

    @property
    def selects_all(self) -> bool:
        return any(isinstance(item, Column) and item.name == "*" for item in self.items)

    def has_column(self, column: str) -> bool:
        return self.selects_all or any(isinstance(item, Column) and item.name == column for item in self.items)

    def render(self) -> str:
        hint = f"!{self.hint}" if self.hint else ""
        inner = ", ".join(item.render() for item in self.items)
        return f"{self.table}{hint}({inner})"


class _Parser:
    """Recursive descent parser over a select expression string."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def _skip_ws(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _peek(self) -> str:
        self._skip_ws()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _error(self, message: str) -> ValidationError:
        return ValidationError(f"Invalid select expression '{self.text}': {message} at position {self.pos}.")

    def _identifier(self) -> str:
        self._skip_ws()
        start = self.pos
        while self.pos < len(self.text) and (self.text[self.pos].isalnum() or self.text[self.pos] == "_"):
            self.pos += 1
        name = self.text[start : self.pos]
        if not IDENTIFIER_PATTERN.match(name):
            raise self._error("expected an identifier")
        return name

    def parse_items(self, closing: str = "") -> List[Union[Column, Embed]]:
        items = []
        while True:
            items.append(self._parse_item())
            char = self._peek()
            if char == ",":
                self.pos += 1
                continue
            if char == closing:
                return items
            raise self._error(f"unexpected '{char}'" if char else "unexpected end of input")

    def _parse_item(self) -> Union[Column, Embed]:
        if self._peek() == "*":
            self.pos += 1
            return Column("*")
        name = self._identifier()
        hint = None
        if self._peek() == "!":
            self.pos += 1
            hint = self._identifier()
        if self._peek() == "(":
            self.pos += 1
            items = self.parse_items(closing=")")
            self.pos += 1
            return Embed(name, hint, items)
        if hint is not None:
            raise self._error(f"hint '!{hint}' without an embedded relation")
        return Column(name)


class SelectExpression:
    """
    A parsed select expression.

    Methods:
        parse: Build an expression from its string form.
        render: Return the canonical string form.
        find_embed: Look up a top-level embedded relation.
        ensure_inner: Make sure a relation is embedded with the inner hint.
        ensure_column: Make sure a relation is embedded with a given column.
    """

    def __init__(self, items: List[Union[Column, Embed]]):
        self.items = items

    @classmethod
    def parse(cls, text: str) -> "SelectExpression":
        if text is None or not text.strip():
            return cls([Column("*")])
        parser = _Parser(text)
        return cls(parser.parse_items())

    def render(self) -> str:
        return ", ".join(item.render() for item in self.items)

    def __str__(self) -> str:
        return self.render()

    @property
    def columns(self) -> List[str]:
        return [item.name for item in self.items if isinstance(item, Column)]

    @property
    def embeds(self) -> List[Embed]:
        return [item for item in self.items if isinstance(item, Embed)]

    def find_embed(self, table: str) -> Optional[Embed]:
        for embed in self.embeds:
            if embed.table == table:
                return embed
        return None

    def ensure_inner(self, table: str) -> Embed:
        """
        Embed `table` as an inner join exactly once.

        An existing plain embedding of the table is upgraded in place.

        Args:
            table: The related table.

        Returns:
            The embed node for `table`.
        """
        embed = self.find_embed(table)
        if embed is None:
            embed = Embed(table, INNER_HINT, [Column("*")])
            self.items.append(embed)
        elif not embed.is_inner:
            embed.hint = INNER_HINT
        return embed

    def ensure_column(self, table: str, column: str) -> Embed:
        """
        Make sure `table` is embedded and returns `column`.

        Args:
            table: The foreign table.
            column: The column of the foreign table that must be selected.

        Returns:
            The embed node for `table`.
        """
        embed = self.find_embed(table)
        if embed is None:
            embed = Embed(table, None, [Column(column)])
            self.items.append(embed)
        elif not embed.has_column(column):
            embed.items.append(Column(column))
        return embed
