# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
pytags: declaration tagger for Python-like source.

The lexer/parser front end lives under `pytags.parser`; shared span and
diagnostic types live under `pytags.core`. The CLI entrypoint is
`pytags.cli:main`.
"""

from .parser import ParseResult, ParserConfig, TagParser, parse_source
from .parser.tags import Tag, TagKind

__all__ = ["ParseResult", "ParserConfig", "Tag", "TagKind", "TagParser", "parse_source"]
