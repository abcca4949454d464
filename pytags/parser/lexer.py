# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Indentation-sensitive lexer.

The lexer turns a source text (or a `[start, end)` region of it) into lark
`Token`s. On top of the ordinary token rules it synthesizes the block
structure Python expresses with whitespace:

- INDENT when a logical line starts deeper than the current level,
- DEDENT for each level closed by a shallower line,
- NEWLINE at the end of each non-blank logical line.

While brackets are open (`depth > 0`) line breaks are swallowed and
indentation is not measured, so a parenthesized expression may span lines
freely. A backslash before a line break does the same for one line.

Tab policy: a tab advances the column to the next multiple of
`ParserConfig.tab_width`; a form feed resets the column to zero.

All mutable state lives in `LexState`, allocated per `Lexer` instance; a
Lexer is single-use.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from lark import Token

from ..core.diagnostics import Diagnostic, DiagnosticKind
from ..core.span import Span
from .config import IndentPolicy, ParserConfig
from .tokens import (
	CLOSERS,
	DEDENT,
	ERRORTOKEN,
	INDENT,
	NAME,
	NEWLINE,
	NUMBER,
	OPENERS,
	OPERATOR_RE,
	OPERATORS,
	STRING,
	UNTERMINATED_STRING,
)

logger = logging.getLogger(__name__)

_LINEBREAK = re.compile(r"\r\n|\r|\n")
_NAME = re.compile(r"[^\W\d]\w*")
_STRING_START = re.compile(r"(?i:rb|br|fr|rf|[rbuf])?('''|\"\"\"|'|\")")
_NUMBER = re.compile(
	r"""
	0[xX](?:_?[0-9a-fA-F])+[lL]?
	| 0[oO](?:_?[0-7])+[lL]?
	| 0[bB](?:_?[01])+[lL]?
	| (?:\d(?:_?\d)*(?:\.(?:\d(?:_?\d)*)?)? | \.\d(?:_?\d)*)
	  (?:[eE][+-]?\d(?:_?\d)*)?
	  [jJlL]?
	""",
	re.VERBOSE,
)


class IndentStack:
	"""
	Open indentation levels, bottom (floor) first.

	Each entry is `(column, synthetic)`. Synthetic levels are opened by the
	tolerant dedent policy; they never produce INDENT/DEDENT tokens.
	"""

	def __init__(self, floor: int = 0) -> None:
		self._levels: List[tuple[int, bool]] = [(floor, False)]

	@property
	def top(self) -> int:
		return self._levels[-1][0]

	@property
	def floor(self) -> int:
		return self._levels[0][0]

	def push(self, column: int, synthetic: bool = False) -> None:
		if column <= self.top:
			raise ValueError(f"indentation level {column} does not exceed current level {self.top}")
		self._levels.append((column, synthetic))

	def pop(self) -> bool:
		"""Close the innermost level; returns True when it was a real (INDENT-opened) level."""
		if len(self._levels) == 1:
			raise IndexError("cannot pop the indentation floor")
		_column, synthetic = self._levels.pop()
		return not synthetic

	def columns(self) -> list[int]:
		return [column for column, _synthetic in self._levels]

	def __len__(self) -> int:
		return len(self._levels)


@dataclass
class LexState:
	"""Request-scoped lexer state."""

	indents: IndentStack = field(default_factory=IndentStack)
	# Unmatched open brackets; never negative.
	depth: int = 0
	# The current logical line has produced at least one token.
	pending: bool = False
	# Strict indent policy: drop tokens through the next NEWLINE.
	dropping: bool = False


class Lexer:
	def __init__(
		self,
		text: str,
		start: int = 0,
		end: Optional[int] = None,
		config: Optional[ParserConfig] = None,
		diagnostics: Optional[List[Diagnostic]] = None,
	) -> None:
		self.text = text
		self.start = max(0, start)
		self.end = len(text) if end is None else max(self.start, min(end, len(text)))
		self.config = config or ParserConfig()
		self.diagnostics: List[Diagnostic] = diagnostics if diagnostics is not None else []
		self.state = LexState(indents=IndentStack(self._floor()))
		self._pos = self.start
		self._line = 1
		self._line_start = 0
		for match in _LINEBREAK.finditer(text, 0, self.start):
			self._line += 1
			self._line_start = match.end()
		self._at_line_start = True

	def tokens(self) -> Iterator[Token]:
		"""Yield the token stream; lines rejected by the strict indent policy are dropped."""
		state = self.state
		for token in self._scan():
			if state.dropping and token.type not in (INDENT, DEDENT):
				if token.type == NEWLINE:
					state.dropping = False
				continue
			yield token

	def _floor(self) -> int:
		if self.start == 0:
			return 0
		pos = self.start
		while pos < self.end:
			column, first = self._measure(pos)
			if first < self.end and self.text[first] not in "#\r\n":
				return column
			match = _LINEBREAK.search(self.text, first, self.end)
			if match is None:
				break
			pos = match.end()
		return 0

	def _measure(self, pos: int) -> tuple[int, int]:
		"""Return (indentation column, offset of first non-blank char) for a line starting at `pos`."""
		text, end, tab_width = self.text, self.end, self.config.tab_width
		column = 0
		while pos < end:
			ch = text[pos]
			if ch == " ":
				column += 1
			elif ch == "\t":
				column = (column // tab_width + 1) * tab_width
			elif ch == "\f":
				column = 0
			else:
				break
			pos += 1
		return column, pos

	def _scan(self) -> Iterator[Token]:
		text, end, state = self.text, self.end, self.state
		keywords = self.config.keywords
		while self._pos < end:
			if self._at_line_start and state.depth == 0:
				self._at_line_start = False
				yield from self._indentation()
				continue

			pos = self._pos
			ch = text[pos]
			if ch in " \t\f":
				self._pos += 1
				continue
			if ch == "#":
				match = _LINEBREAK.search(text, pos, end)
				self._pos = match.start() if match else end
				continue
			if ch in "\r\n":
				match = _LINEBREAK.match(text, pos, end)
				stop = match.end() if match else pos + 1
				if state.depth == 0:
					self._at_line_start = True
					if state.pending:
						state.pending = False
						yield self._emit(NEWLINE, pos, stop)
						continue
				self._advance_line(stop)
				self._pos = stop
				continue
			if ch == "\\":
				match = _LINEBREAK.match(text, pos + 1, end)
				if match:
					self._advance_line(match.end())
					self._pos = match.end()
					continue
				yield self._emit(ERRORTOKEN, pos, pos + 1)
				continue

			match = _STRING_START.match(text, pos, end) if ch in "'\"rRbBuUfF" else None
			if match:
				yield self._string(pos, match)
				continue
			if ch.isdigit() or (ch == "." and pos + 1 < end and text[pos + 1].isdigit()):
				match = _NUMBER.match(text, pos, end)
				if match and match.end() > pos:
					yield self._emit(NUMBER, pos, match.end())
					continue
			match = _NAME.match(text, pos, end)
			if match:
				yield self._emit(keywords.get(match.group(), NAME), pos, match.end())
				continue
			match = OPERATOR_RE.match(text, pos, end)
			if match:
				terminal = OPERATORS[match.group()]
				if terminal in OPENERS:
					state.depth += 1
				elif terminal in CLOSERS and state.depth > 0:
					state.depth -= 1
				yield self._emit(terminal, pos, match.end())
				continue
			yield self._emit(ERRORTOKEN, pos, pos + 1)

		if state.pending:
			state.pending = False
			yield self._emit(NEWLINE, end, end)
		indents = state.indents
		while len(indents) > 1:
			if indents.pop():
				yield self._make(DEDENT, end, end)
		state.depth = 0

	def _indentation(self) -> Iterator[Token]:
		text, state = self.text, self.state
		line_start = self._pos
		column, first = self._measure(line_start)
		self._pos = first
		if first >= self.end or text[first] in "#\r\n":
			# Blank or comment-only line: the stack is left alone.
			return
		indents = state.indents
		if column > indents.top:
			indents.push(column)
			yield self._make(INDENT, line_start, first)
			return
		while column < indents.top and len(indents) > 1:
			if indents.pop():
				yield self._make(DEDENT, first, first)
		if column == indents.top:
			return

		strict = self.config.indent_policy is IndentPolicy.STRICT
		self.diagnostics.append(
			Diagnostic(
				message="unindent does not match any outer indentation level",
				kind=DiagnosticKind.INDENT_ERROR,
				code="E-INDENT-MISMATCH",
				phase="lexer",
				severity="error" if strict else "warning",
				span=self._span(line_start, first),
				notes=[f"column {column}, open levels {indents.columns()}"],
			)
		)
		logger.debug("indent mismatch at line %d (column %d, levels %s)", self._line, column, indents.columns())
		if strict:
			state.dropping = True
		elif column > indents.top:
			indents.push(column, synthetic=True)

	def _string(self, pos: int, match: re.Match) -> Token:
		quote = match.group(1)
		close = self._find_close(match.end(), quote)
		if close is not None:
			return self._emit(STRING, pos, close)
		stop = self.config.unterminated_recovery(self.text, pos, self.end, quote)
		stop = max(match.end(), min(stop, self.end))
		token = self._emit(UNTERMINATED_STRING, pos, stop)
		self.diagnostics.append(
			Diagnostic(
				message="unterminated string literal",
				kind=DiagnosticKind.LEX_ERROR,
				code="E-LEX-UNTERMINATED",
				phase="lexer",
				span=Span.from_loc(token),
			)
		)
		return token

	def _find_close(self, pos: int, quote: str) -> Optional[int]:
		text, end = self.text, self.end
		single = len(quote) == 1
		while pos < end:
			ch = text[pos]
			if ch == "\\":
				pos += 3 if text.startswith("\r\n", pos + 1, end) else 2
				continue
			if single and ch in "\r\n":
				return None
			if text.startswith(quote, pos, end):
				return pos + len(quote)
			pos += 1
		return None

	def _emit(self, terminal: str, start: int, stop: int) -> Token:
		token = self._make(terminal, start, stop)
		self._pos = stop
		if terminal != NEWLINE:
			self.state.pending = True
		return token

	def _make(self, terminal: str, start: int, stop: int) -> Token:
		value = self.text[start:stop]
		line, column = self._line, start - self._line_start + 1
		for match in _LINEBREAK.finditer(value):
			self._advance_line(start + match.end())
		return Token(
			terminal,
			value,
			start_pos=start,
			line=line,
			column=column,
			end_line=self._line,
			end_column=stop - self._line_start + 1,
			end_pos=stop,
		)

	def _advance_line(self, line_start: int) -> None:
		self._line += 1
		self._line_start = line_start

	def _span(self, start: int, stop: int) -> Span:
		return Span(
			start=start,
			end=stop,
			line=self._line,
			column=start - self._line_start + 1,
			end_line=self._line,
			end_column=stop - self._line_start + 1,
		)


def tokenize(
	text: str,
	start: int = 0,
	end: Optional[int] = None,
	config: Optional[ParserConfig] = None,
) -> tuple[list[Token], list[Diagnostic]]:
	"""Lex `text[start:end]` eagerly; returns the token vector and lexer diagnostics."""
	lexer = Lexer(text, start, end, config)
	return list(lexer.tokens()), lexer.diagnostics


__all__ = ["IndentStack", "LexState", "Lexer", "tokenize"]
