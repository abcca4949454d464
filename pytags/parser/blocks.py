# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Block assembly: collapse an INDENT ... DEDENT run of the token vector into a
single opaque BLOCK token.

The parser grammar never sees INDENT/DEDENT; a suite is `NEWLINE BLOCK`.
This keeps each statement's parse shallow: the body of a def or class is
only a token range until the enclosing tag is realized, at which point the
range is parsed as its own sequence of statements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from lark import Token

from .tokens import BLOCK, DEDENT, INDENT


class BlockError(ValueError):
	"""
	An INDENT whose matching DEDENT is missing from the token range.

	Fatal to the statement sequence being parsed, never to its parents or
	siblings; the driver turns it into a diagnostic.
	"""

	def __init__(self, message: str, *, loc: object | None) -> None:
		super().__init__(message)
		self.loc = loc


@dataclass(frozen=True)
class Block:
	"""A balanced INDENT/DEDENT run: `tokens[start]` is the INDENT, `tokens[end]` its DEDENT."""

	token: Token
	start: int
	end: int

	@property
	def body(self) -> range:
		"""Indices of the tokens strictly inside the block."""
		return range(self.start + 1, self.end)


def assemble_block(tokens: Sequence[Token], index: int, limit: int | None = None) -> Block:
	"""
	Scan forward from the INDENT at `tokens[index]` to its matching DEDENT.

	Raises BlockError when the run is still open at `limit` (default: end of
	the token vector).
	"""
	opening = tokens[index]
	if opening.type != INDENT:
		raise ValueError(f"block must start at an INDENT token, got {opening.type}")
	limit = len(tokens) if limit is None else limit
	level = 0
	for pos in range(index, limit):
		kind = tokens[pos].type
		if kind == INDENT:
			level += 1
		elif kind == DEDENT:
			level -= 1
			if level == 0:
				# DEDENTs sit at the start of the next statement; the block
				# ends with the last real token inside it.
				last = pos
				while last > index + 1 and tokens[last].type == DEDENT:
					last -= 1
				closing = tokens[last]
				token = Token(
					BLOCK,
					"",
					start_pos=opening.start_pos,
					line=opening.line,
					column=opening.column,
					end_line=closing.end_line,
					end_column=closing.end_column,
					end_pos=closing.end_pos,
				)
				return Block(token=token, start=index, end=pos)
	raise BlockError(f"indented block opened at line {opening.line} is never closed", loc=opening)


__all__ = ["Block", "BlockError", "assemble_block"]
