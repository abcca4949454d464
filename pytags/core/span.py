# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation shared by tokens, tags and diagnostics.

A Span carries absolute character offsets (`start`/`end`, half-open) plus
1-based line/column ranges. Offsets are what the tagger uses for ordering and
slicing; line/column pairs are what humans and editors want to see.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (offsets plus best-effort line/column info)."""

	start: Optional[int] = None
	end: Optional[int] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	file: Optional[str] = None

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from an existing token/location object.

		If `loc` is already a Span, it is returned unchanged. Lark tokens and
		`Meta` objects expose `start_pos`/`end_pos`; anything else is read
		field-by-field on a best-effort basis.
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		return cls(
			start=getattr(loc, "start_pos", None),
			end=getattr(loc, "end_pos", None),
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			file=getattr(loc, "file", None),
		)

	@property
	def known(self) -> bool:
		return self.start is not None

	def to(self, other: "Span | None") -> "Span":
		"""Return the span running from the start of `self` to the end of `other`."""
		if other is None or not other.known:
			return self
		if not self.known:
			return other
		return replace(
			self,
			end=other.end,
			end_line=other.end_line,
			end_column=other.end_column,
		)

	def with_file(self, file: Optional[str]) -> "Span":
		return replace(self, file=file)

	def sort_key(self) -> tuple[int, int]:
		return (self.start if self.start is not None else -1, self.end if self.end is not None else -1)


__all__ = ["Span"]
