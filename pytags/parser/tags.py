# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tag tree produced by the tagger.

A Tag records one named declaration (or one statement of plain code) with its
source span, kind-specific attributes and nested children. Tags are built by
the semantic actions and the driver; once a Tag is handed to its parent it is
not modified again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from ..core.span import Span


class TagKind(str, Enum):
	FUNCTION = "function"
	CLASS = "class"
	VARIABLE = "variable"
	IMPORT = "import"
	CODE = "code"


class ParameterKind(str, Enum):
	POSITIONAL_ONLY = "positional_only"
	POSITIONAL = "positional"
	KEYWORD_ONLY = "keyword_only"
	VAR_POSITIONAL = "var_positional"
	VAR_KEYWORD = "var_keyword"


@dataclass(frozen=True)
class Parameter:
	"""One formal parameter of a function tag."""

	name: str
	kind: ParameterKind = ParameterKind.POSITIONAL
	default: Optional[str] = None
	annotation: Optional[str] = None

	def __str__(self) -> str:
		if self.kind is ParameterKind.VAR_POSITIONAL:
			return f"*{self.name}"
		if self.kind is ParameterKind.VAR_KEYWORD:
			return f"**{self.name}"
		if self.default is not None:
			return f"{self.name}={self.default}"
		return self.name


@dataclass(frozen=True)
class ImportedName:
	"""`name` is the dotted module/member name as written; `alias` the `as` target."""

	name: str
	alias: Optional[str] = None

	@property
	def bound(self) -> str:
		"""The name this import binds in the importing scope."""
		if self.alias:
			return self.alias
		return self.name.split(".", 1)[0]

	def __str__(self) -> str:
		return f"{self.name} as {self.alias}" if self.alias else self.name


@dataclass
class Tag:
	name: str
	kind: TagKind
	span: Span = field(default_factory=Span)
	attributes: Dict[str, Any] = field(default_factory=dict)
	children: List["Tag"] = field(default_factory=list)

	@property
	def parameters(self) -> List[Parameter]:
		return self.attributes.get("parameters", [])

	def walk(self) -> Iterator["Tag"]:
		"""Yield this tag and all descendants, depth-first in source order."""
		yield self
		for child in self.children:
			yield from child.walk()

	def find(self, name: str, kind: Optional[TagKind] = None) -> Optional["Tag"]:
		for tag in self.walk():
			if tag.name == name and (kind is None or tag.kind is kind):
				return tag
		return None

	def summary(self) -> str:
		"""One-line human description used by outlines."""
		if self.kind is TagKind.FUNCTION:
			prefix = "async def" if self.attributes.get("is_async") else "def"
			params = ", ".join(str(p) for p in self.parameters)
			return f"{prefix} {self.name}({params})"
		if self.kind is TagKind.CLASS:
			bases = self.attributes.get("bases") or []
			return f"class {self.name}({', '.join(bases)})" if bases else f"class {self.name}"
		if self.kind is TagKind.IMPORT:
			return self.attributes.get("text") or f"import {self.name}"
		if self.kind is TagKind.VARIABLE:
			return self.name
		return self.attributes.get("text") or self.name

	def to_dict(self) -> dict:
		return {
			"name": self.name,
			"kind": self.kind.value,
			"line": self.span.line,
			"column": self.span.column,
			"end_line": self.span.end_line,
			"end_column": self.span.end_column,
			"attributes": {key: _jsonable(value) for key, value in self.attributes.items()},
			"children": [child.to_dict() for child in self.children],
		}


def _jsonable(value: Any) -> Any:
	if isinstance(value, list):
		return [_jsonable(item) for item in value]
	if isinstance(value, dict):
		return {key: _jsonable(item) for key, item in value.items()}
	if isinstance(value, Parameter):
		return {
			"name": value.name,
			"kind": value.kind.value,
			"default": value.default,
			"annotation": value.annotation,
		}
	if isinstance(value, ImportedName):
		return {"name": value.name, "alias": value.alias}
	return value


def walk_tags(tags: List[Tag]) -> Iterator[Tag]:
	for tag in tags:
		yield from tag.walk()


__all__ = ["ImportedName", "Parameter", "ParameterKind", "Tag", "TagKind", "walk_tags"]
