# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parse driver: token vector -> Tag tree + diagnostics.

The driver walks one statement sequence (the whole file, or the inside of a
block) at a time. Each statement gets a fresh `ParseState`; tokens are fed
while the automaton accepts them, and a statement ends as soon as the next
token would be rejected but end-of-statement would be accepted. Suites are
collapsed into BLOCK tokens on the way in (see `blocks.py`) and only parsed
when the enclosing draft is realized, so nesting is handled by recursion
over token ranges rather than by the grammar.

Recovery, in order of preference:
- a token type the grammar does not know is skipped (UnmatchedSyntax);
- a rejected token ends the statement with a SyntaxError, and tokens are
  discarded through the next NEWLINE;
- an indented block with nothing to attach to is parsed in place
  ("unexpected indent");
- an unbalanced block ends the current sequence only (BlockError).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from lark import Token, Tree
from lark.exceptions import UnexpectedToken

from ..core.diagnostics import Diagnostic, DiagnosticKind
from ..core.span import Span
from .actions import Pending, Suite, TagActions, build_parameters, render, salvage_parameters
from .blocks import Block, BlockError, assemble_block
from .config import ParserConfig
from .engine import END, Grammar, ParseState, parse_tokens
from .lexer import tokenize
from .tags import Parameter, Tag, TagKind, walk_tags
from .tokens import BLOCK, CLOSERS, DEDENT, INDENT, NAME, NEWLINE, OPENERS, PARAMS, TokenClass

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_GRAMMAR = Grammar(_GRAMMAR_SRC, start=("statement", "parameters", "test"), transformer=TagActions())


@dataclass
class ParseResult:
	tags: List[Tag] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)
	tokens: List[Token] = field(default_factory=list)

	@property
	def errors(self) -> List[Diagnostic]:
		return [diag for diag in self.diagnostics if diag.is_error]

	def walk(self) -> Iterator[Tag]:
		return walk_tags(self.tags)

	def to_dict(self, file: Optional[str] = None) -> dict:
		return {
			"file": file,
			"tags": [tag.to_dict() for tag in self.tags],
			"diagnostics": [diag.to_dict(file) for diag in self.diagnostics],
		}


class TagParser:
	"""
	Lexer + LALR parser producing declaration tags.

	The instance only holds static configuration and the shared grammar; all
	per-parse state is created inside each call, so one TagParser may serve
	any number of (even concurrent) parses.
	"""

	def __init__(self, config: Optional[ParserConfig] = None) -> None:
		self.config = config or ParserConfig()
		self.grammar = _GRAMMAR

	def tokenize(self, text: str, start: int = 0, end: Optional[int] = None) -> Tuple[List[Token], List[Diagnostic]]:
		return tokenize(text, start, end, self.config)

	def parse(self, text: str, start: int = 0, end: Optional[int] = None) -> ParseResult:
		tokens, diagnostics = self.tokenize(text, start, end)
		result = _ParseRun(self.grammar, self.config, tokens, diagnostics).run()
		logger.debug(
			"parsed %d tokens into %d top-level tags (%d diagnostics)",
			len(tokens),
			len(result.tags),
			len(result.diagnostics),
		)
		return result

	def parse_tokens(self, tokens: Sequence[Token]) -> ParseResult:
		"""Parse an already-lexed token vector (INDENT/DEDENT included)."""
		return _ParseRun(self.grammar, self.config, list(tokens), []).run()

	def parse_expression(self, text: str) -> Tree:
		"""
		Parse a single expression and return its lark tree.

		Raises `lark.exceptions.UnexpectedToken` when `text` is not exactly one
		expression.
		"""
		tokens, _diagnostics = self.tokenize(text)
		body = [tok for tok in tokens if tok.type not in (NEWLINE, INDENT, DEDENT)]
		return parse_tokens(self.grammar, body, "test")

	def classify(self, token: Token) -> Optional[TokenClass]:
		return self.config.token_classes.get(token.type)


class _ParseRun:
	"""Request-scoped driver state for one parse."""

	def __init__(self, grammar: Grammar, config: ParserConfig, tokens: List[Token], diagnostics: List[Diagnostic]) -> None:
		self.grammar = grammar
		self.config = config
		self.tokens = tokens
		self.diagnostics = diagnostics
		self._halted = False
		# index -> (token handed to the automaton, index after it)
		self._collapsed: Dict[int, Tuple[Token, int]] = {}
		self._blocks: Dict[int, Block] = {}
		self._regions: Dict[int, Tuple[Token, int, int]] = {}

	def run(self) -> ParseResult:
		tags = self._statements(0, len(self.tokens), 0)
		self.diagnostics.sort(key=lambda diag: diag.span.sort_key())
		return ParseResult(tags=tags, diagnostics=self.diagnostics, tokens=self.tokens)

	# Reporting

	def _report(
		self,
		kind: DiagnosticKind,
		code: str,
		message: str,
		loc: Any,
		notes: Optional[List[str]] = None,
	) -> None:
		if self._halted:
			return
		span = Span.from_loc(loc)
		if len(self.diagnostics) >= self.config.max_errors:
			self._halted = True
			self.diagnostics.append(
				Diagnostic(
					message=f"too many errors ({self.config.max_errors}); parsing stopped",
					kind=kind,
					code="E-TOO-MANY-ERRORS",
					phase="parser",
					span=span,
				)
			)
			logger.debug("error limit reached at line %s", span.line)
			return
		self.diagnostics.append(
			Diagnostic(message=message, kind=kind, code=code, phase="parser", span=span, notes=notes or [])
		)

	# Token access

	def _next(self, index: int, limit: int) -> Tuple[Token, int]:
		cached = self._collapsed.get(index)
		if cached is not None:
			return cached
		token = self.tokens[index]
		result = None
		if token.type == INDENT:
			block = assemble_block(self.tokens, index, limit)
			self._blocks[id(block.token)] = block
			result = (block.token, block.end + 1)
		elif token.type == "LPAR" and self._opens_parameters(index):
			result = self._parameters_region(index, limit)
		if result is None:
			result = (token, index + 1)
		self._collapsed[index] = result
		return result

	def _opens_parameters(self, index: int) -> bool:
		return index >= 2 and self.tokens[index - 1].type == NAME and self.tokens[index - 2].type == "DEF"

	def _parameters_region(self, index: int, limit: int) -> Optional[Tuple[Token, int]]:
		depth = 0
		for pos in range(index, limit):
			kind = self.tokens[pos].type
			if kind in OPENERS:
				depth += 1
			elif kind in CLOSERS:
				depth -= 1
				if depth == 0:
					opening, closing = self.tokens[index], self.tokens[pos]
					token = Token(
						PARAMS,
						render(self.tokens[index:pos + 1]),
						start_pos=opening.start_pos,
						line=opening.line,
						column=opening.column,
						end_line=closing.end_line,
						end_column=closing.end_column,
						end_pos=closing.end_pos,
					)
					self._regions[id(token)] = (token, index + 1, pos)
					return token, pos + 1
			elif kind in (NEWLINE, INDENT, DEDENT):
				break
		# Unbalanced: leave the parenthesis to the grammar, which will reject it.
		return None

	# Statement sequences

	def _statements(self, lo: int, hi: int, depth: int) -> List[Tag]:
		tags: List[Tag] = []
		state: Optional[ParseState] = None
		last: Optional[Token] = None
		recovered = False
		index = lo
		while index < hi and not self._halted:
			try:
				token, after = self._next(index, hi)
			except BlockError as exc:
				self._report(DiagnosticKind.BLOCK_ERROR, "E-BLOCK-UNBALANCED", str(exc), exc.loc)
				return tags
			kind = token.type

			if state is None or state.empty:
				if kind == NEWLINE:
					index = after
					continue
				if kind == BLOCK:
					if not recovered:
						self._report(DiagnosticKind.SYNTAX_ERROR, "E-SYNTAX-INDENT", "unexpected indent", token)
					block = self._blocks[id(token)]
					# Hoisted tags join this level, but the block still counts as nesting.
					if self._expands(depth + 1):
						tags.extend(self._statements(block.start + 1, block.end, depth + 1))
					index = after
					recovered = False
					continue
				recovered = False

			if not self.grammar.knows(kind):
				self._report(
					DiagnosticKind.UNMATCHED_SYNTAX,
					"E-UNMATCHED",
					f"unrecognized token {_describe(token)}",
					token,
				)
				index = after
				continue

			if state is None:
				state = self.grammar.state("statement")
			if state.accepts(kind):
				state.feed(token)
				last = token
				index = after
				continue
			if not state.empty and state.accepts(END):
				tags.extend(self._complete(state, last, depth))
				state = None
				continue

			self._report(
				DiagnosticKind.SYNTAX_ERROR,
				"E-SYNTAX",
				f"invalid syntax: unexpected {_describe(token)}",
				token,
				notes=[f"expected one of: {', '.join(state.expected())}"],
			)
			state = None
			index = self._synchronize(index, hi)
			recovered = True

		if state is not None and not state.empty and not self._halted:
			if state.accepts(END):
				tags.extend(self._complete(state, last, depth))
			else:
				self._report(
					DiagnosticKind.SYNTAX_ERROR,
					"E-SYNTAX",
					"unexpected end of input" if hi == len(self.tokens) else "unexpected end of block",
					last,
					notes=[f"expected one of: {', '.join(state.expected())}"],
				)
		return tags

	def _synchronize(self, index: int, limit: int) -> int:
		"""Skip the rest of the logical line, NEWLINE included; a rejected block is left for hoisting."""
		if self.tokens[index].type == INDENT:
			return index
		start = index
		while index < limit:
			kind = self.tokens[index].type
			index += 1
			if kind == NEWLINE:
				break
		logger.debug("resynchronized: skipped tokens %d..%d", start, index)
		return index

	def _complete(self, state: ParseState, last: Optional[Token], depth: int) -> List[Tag]:
		items = state.finish(last)
		return [self._realize(item, depth) for item in items]

	# Drafts -> tags

	def _realize(self, item: Any, depth: int) -> Tag:
		if isinstance(item, Tag):
			return item
		draft: Pending = item
		attributes = dict(draft.attributes)
		if draft.kind is TagKind.FUNCTION:
			attributes["parameters"] = self._parameters(draft.params)
		children: List[Tag] = []
		for suite in draft.suites:
			children.extend(self._suite(suite, depth + 1))
		if draft.kind in (TagKind.FUNCTION, TagKind.CLASS):
			attributes["documentation"] = _docstring(children)
		return Tag(name=draft.name, kind=draft.kind, span=draft.span, attributes=attributes, children=children)

	def _expands(self, depth: int) -> bool:
		return self.config.max_depth is None or depth <= self.config.max_depth

	def _suite(self, suite: Suite, depth: int) -> List[Tag]:
		if not self._expands(depth):
			return []
		if not suite.is_block:
			return [self._realize(item, depth) for item in suite.body]
		block = self._blocks[id(suite.body)]
		return self._statements(block.start + 1, block.end, depth)

	def _parameters(self, token: Optional[Token]) -> List[Parameter]:
		if token is None:
			return []
		_token, lo, hi = self._regions[id(token)]
		if lo == hi:
			return []
		region = self.tokens[lo:hi]
		try:
			tree = parse_tokens(self.grammar, region, "parameters")
		except UnexpectedToken as exc:
			bad = exc.token if exc.token.type != END else region[-1]
			self._report(
				DiagnosticKind.SYNTAX_ERROR,
				"E-SYNTAX-PARAMS",
				f"invalid parameter list: unexpected {_describe(bad)}",
				bad,
			)
			logger.debug("salvaging parameter list at line %s", token.line)
			return salvage_parameters(region)
		return build_parameters(tree)


def _docstring(children: List[Tag]) -> Optional[str]:
	if not children:
		return None
	first = children[0]
	if first.kind is TagKind.CODE and first.attributes.get("statement") == "string":
		return first.attributes.get("string")
	return None


def _describe(token: Token) -> str:
	if token.type == NEWLINE:
		return "end of line"
	if token.type == BLOCK:
		return "indented block"
	if token.type == DEDENT:
		return "dedent"
	if token.type == END:
		return "end of input"
	return repr(str(token.value))


def parse_source(text: str, start: int = 0, end: Optional[int] = None, **options: Any) -> ParseResult:
	"""Tag `text` with a throwaway parser built from `options` (ParserConfig fields)."""
	return TagParser(ParserConfig(**options)).parse(text, start, end)


__all__ = ["ParseResult", "TagParser", "parse_source"]
