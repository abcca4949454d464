# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Static parser configuration.

A `ParserConfig` is supplied when a `TagParser` is constructed and stays
fixed for the lifetime of that parser; everything that changes per parse
lives in request-scoped state inside the lexer and the driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Optional

from .tokens import KEYWORDS, TOKEN_CLASSES, TokenClass

# (text, token_start, limit, quote) -> end offset of the broken token.
UnterminatedRecovery = Callable[[str, int, int, str], int]


class IndentPolicy(str, Enum):
	"""What to do with a dedent that lands between two open levels."""

	# Record a warning and open a silent level at the odd column.
	TOLERANT = "tolerant"
	# Record an error and drop the offending logical line.
	STRICT = "strict"


def end_of_line(text: str, start: int, limit: int, quote: str) -> int:
	"""
	Default recovery for an unterminated string.

	Single-quoted strings end at the next line break; triple-quoted strings
	run to the end of the scanned region.
	"""
	if len(quote) == 3:
		return limit
	for pos in range(start, limit):
		if text[pos] in "\r\n":
			return pos
	return limit


@dataclass(frozen=True)
class ParserConfig:
	tab_width: int = 8
	indent_policy: IndentPolicy = IndentPolicy.TOLERANT
	keywords: Mapping[str, str] = field(default_factory=lambda: KEYWORDS)
	token_classes: Mapping[str, TokenClass] = field(default_factory=lambda: TOKEN_CLASSES)
	unterminated_recovery: UnterminatedRecovery = end_of_line
	# Blocks nested deeper than this are not expanded into child tags; None
	# lifts the bound (deep input is then limited by the interpreter stack).
	max_depth: Optional[int] = 100
	# Parsing stops once this many diagnostics have been recorded.
	max_errors: int = 200

	def __post_init__(self) -> None:
		if self.tab_width < 1:
			raise ValueError(f"tab_width must be positive, got {self.tab_width}")
		if self.max_errors < 1:
			raise ValueError(f"max_errors must be positive, got {self.max_errors}")
		if self.max_depth is not None and self.max_depth < 0:
			raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
		if not isinstance(self.indent_policy, IndentPolicy):
			object.__setattr__(self, "indent_policy", IndentPolicy(self.indent_policy))


__all__ = ["IndentPolicy", "ParserConfig", "UnterminatedRecovery", "end_of_line"]
