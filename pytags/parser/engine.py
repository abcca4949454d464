# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Table-driven LALR(1) engine.

Lark computes the action/goto tables from `grammar.lark` once at import time
and installs the semantic actions as reduction callbacks. Driving the
automaton is left to this module: the tagger needs to ask "would this token
be accepted here?" before committing to it (to end a statement, to resync
after an error), which lark's one-shot `parse()` does not expose cheaply.

`Grammar` is immutable and shared; `ParseState` is allocated per statement
and never shared.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from lark import Lark, Token, Transformer
from lark.lexer import Lexer as LarkLexer
from lark.parsers.lalr_analysis import Shift
from lark.parsers.lalr_parser_state import ParseConf, ParserState

logger = logging.getLogger(__name__)

END = "$END"


class _PreLexed(LarkLexer):
	"""Lark lexer stand-in: tokens are produced by `pytags.parser.lexer`."""

	def __init__(self, lexer_conf) -> None:
		self.lexer_conf = lexer_conf

	def lex(self, data):
		return iter(data)


class Grammar:
	"""Fixed production set plus its LALR tables; read-only after construction."""

	def __init__(self, source: str, start: Sequence[str], transformer: Optional[Transformer] = None) -> None:
		self.start = tuple(start)
		self._lark = Lark(
			source,
			parser="lalr",
			lexer=_PreLexed,
			start=list(self.start),
			transformer=transformer,
			maybe_placeholders=False,
		)
		# Lark internals (`parser._parse_table`, `parser_conf.callbacks`), laid out
		# as in lark 1.3; `lalr_parser_state` needs lark >= 1.2, the pinned floor.
		frontend = self._lark.parser
		self.table = frontend.parser._parse_table
		self.callbacks = frontend.parser_conf.callbacks
		self.states = self.table.states
		# Every terminal the automaton can act on; anything else is foreign to the grammar.
		self.terminals = frozenset(
			term for actions in self.states.values() for term in actions if term.isupper() and term != END
		)
		self._confs = {name: ParseConf(self.table, self.callbacks, name) for name in self.start}
		logger.debug(
			"grammar ready: %d rules, %d states, %d terminals",
			len(self._lark.rules),
			len(self.states),
			len(self.terminals),
		)

	def knows(self, terminal: str) -> bool:
		return terminal in self.terminals

	def state(self, start: str) -> "ParseState":
		return ParseState(self._confs[start], None)


class ParseState(ParserState):
	"""Automaton state stack plus semantic value stack for one parse."""

	__slots__ = ()

	@property
	def empty(self) -> bool:
		return len(self.state_stack) == 1

	def accepts(self, terminal: str) -> bool:
		"""
		Return True if `terminal` would be shifted (or, for `$END`, accepted).

		Reductions are simulated on a copy of the state stack only, so no
		semantic action runs and the real stacks are left untouched.
		"""
		states = self.parse_conf.states
		end_state = self.parse_conf.end_state
		stack = list(self.state_stack)
		while True:
			action = states[stack[-1]].get(terminal)
			if action is None:
				return False
			kind, arg = action
			if kind is Shift:
				return terminal != END
			size = len(arg.expansion)
			if size:
				del stack[-size:]
			_kind, goto = states[stack[-1]][arg.origin.name]
			stack.append(goto)
			if terminal == END and goto == end_state:
				return True

	def expected(self) -> list[str]:
		"""Terminals that can legally come next, in sorted order."""
		actions = self.parse_conf.states[self.position]
		return sorted(term for term in actions if term.isupper() and self.accepts(term))

	def feed(self, token: Token) -> None:
		self.feed_token(token)

	def finish(self, last: Optional[Token] = None) -> object:
		"""Feed end-of-input and return the value of the start symbol."""
		end = Token.new_borrow_pos(END, "", last) if last is not None else Token(END, "")
		return self.feed_token(end, True)


def parse_tokens(grammar: Grammar, tokens: Iterable[Token], start: str) -> object:
	"""
	Parse a complete token fragment from `start`.

	Raises `lark.exceptions.UnexpectedToken` at the first token with no action.
	"""
	state = grammar.state(start)
	last = None
	for token in tokens:
		state.feed(token)
		last = token
	return state.finish(last)


__all__ = ["END", "Grammar", "ParseState", "parse_tokens"]
