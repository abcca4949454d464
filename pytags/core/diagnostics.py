# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the lexer and parser.

Every recoverable problem found while tagging a source text is reported as a
`Diagnostic` instead of an exception, so a parse always yields a best-effort
tag tree plus the full list of what went wrong.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .span import Span


class DiagnosticKind(str, Enum):
	"""Taxonomy of recoverable tagging problems."""

	LEX_ERROR = "LexError"
	INDENT_ERROR = "IndentError"
	BLOCK_ERROR = "BlockError"
	SYNTAX_ERROR = "SyntaxError"
	UNMATCHED_SYNTAX = "UnmatchedSyntax"


@dataclass
class Diagnostic:
	"""Represents a tagging diagnostic (error/warning)."""

	message: str
	kind: DiagnosticKind = DiagnosticKind.SYNTAX_ERROR
	code: str | None = None
	# "lexer" or "parser"; JSON output and tests key on it.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def to_dict(self, file: str | None = None) -> dict:
		"""Render a Diagnostic to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"kind": self.kind.value,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic", "DiagnosticKind"]
