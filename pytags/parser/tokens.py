# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Static token tables: keyword spellings, operator spellings and the advisory
token-class table consumed by downstream tooling (highlighters, outline
views).

All tables are built once at import time and never mutated; a `ParserConfig`
may substitute its own keyword/token-class mappings.
"""

from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping

# Synthetic/special terminals produced by the lexer or the driver.
NAME = "NAME"
NUMBER = "NUMBER"
STRING = "STRING"
UNTERMINATED_STRING = "UNTERMINATED_STRING"
NEWLINE = "NEWLINE"
INDENT = "INDENT"
DEDENT = "DEDENT"
ERRORTOKEN = "ERRORTOKEN"
BLOCK = "BLOCK"
PARAMS = "PARAMS"

_KEYWORD_SPELLINGS = (
	"and", "as", "assert", "async", "await", "break", "class", "continue",
	"def", "del", "elif", "else", "except", "finally", "for", "from",
	"global", "if", "import", "in", "is", "lambda", "nonlocal", "not", "or",
	"pass", "raise", "return", "try", "while", "with", "yield",
)

# Spelling -> terminal. `None`/`True`/`False` stay plain names, as do the
# Python 2 statements `print` and `exec`.
KEYWORDS: Mapping[str, str] = MappingProxyType({word: word.upper() for word in _KEYWORD_SPELLINGS})

# Spelling -> terminal. Order matters only for building the longest-match
# regex below.
OPERATORS: Mapping[str, str] = MappingProxyType(
	{
		"**=": "AUGASSIGN",
		"//=": "AUGASSIGN",
		">>=": "AUGASSIGN",
		"<<=": "AUGASSIGN",
		"...": "ELLIPSIS",
		"->": "ARROW",
		"**": "DOUBLESTAR",
		"//": "DOUBLESLASH",
		"<<": "LSHIFT",
		">>": "RSHIFT",
		"<=": "LE",
		">=": "GE",
		"==": "EQEQ",
		"!=": "NE",
		"<>": "NE",
		":=": "WALRUS",
		"+=": "AUGASSIGN",
		"-=": "AUGASSIGN",
		"*=": "AUGASSIGN",
		"/=": "AUGASSIGN",
		"%=": "AUGASSIGN",
		"&=": "AUGASSIGN",
		"|=": "AUGASSIGN",
		"^=": "AUGASSIGN",
		"@=": "AUGASSIGN",
		"(": "LPAR",
		")": "RPAR",
		"[": "LSQB",
		"]": "RSQB",
		"{": "LBRACE",
		"}": "RBRACE",
		":": "COLON",
		",": "COMMA",
		";": "SEMI",
		".": "DOT",
		"@": "AT",
		"=": "ASSIGN",
		"+": "PLUS",
		"-": "MINUS",
		"*": "STAR",
		"/": "SLASH",
		"%": "PERCENT",
		"&": "AMP",
		"|": "VBAR",
		"^": "CIRCUMFLEX",
		"~": "TILDE",
		"<": "LT",
		">": "GT",
	}
)

OPERATOR_RE = re.compile("|".join(re.escape(op) for op in sorted(OPERATORS, key=len, reverse=True)))

OPENERS = frozenset({"LPAR", "LSQB", "LBRACE"})
CLOSERS = frozenset({"RPAR", "RSQB", "RBRACE"})


class TokenClass(str, Enum):
	"""Coarse display class of a terminal (advisory only)."""

	SYMBOL = "symbol"
	NUMBER = "number"
	STRING = "string"
	PUNCTUATION = "punctuation"
	OPEN_PAREN = "open-paren"
	CLOSE_PAREN = "close-paren"
	NEWLINE = "newline"
	INDENTATION = "indentation"


def _build_token_classes() -> dict[str, TokenClass]:
	classes: dict[str, TokenClass] = {NAME: TokenClass.SYMBOL}
	for terminal in KEYWORDS.values():
		classes[terminal] = TokenClass.SYMBOL
	for terminal in OPERATORS.values():
		if terminal in OPENERS:
			classes[terminal] = TokenClass.OPEN_PAREN
		elif terminal in CLOSERS:
			classes[terminal] = TokenClass.CLOSE_PAREN
		else:
			classes[terminal] = TokenClass.PUNCTUATION
	classes[NUMBER] = TokenClass.NUMBER
	classes[STRING] = TokenClass.STRING
	classes[UNTERMINATED_STRING] = TokenClass.STRING
	classes[NEWLINE] = TokenClass.NEWLINE
	classes[INDENT] = TokenClass.INDENTATION
	classes[DEDENT] = TokenClass.INDENTATION
	return classes


TOKEN_CLASSES: Mapping[str, TokenClass] = MappingProxyType(_build_token_classes())


__all__ = [
	"BLOCK",
	"CLOSERS",
	"DEDENT",
	"ERRORTOKEN",
	"INDENT",
	"KEYWORDS",
	"NAME",
	"NEWLINE",
	"NUMBER",
	"OPENERS",
	"OPERATORS",
	"OPERATOR_RE",
	"PARAMS",
	"STRING",
	"TOKEN_CLASSES",
	"TokenClass",
	"UNTERMINATED_STRING",
]
