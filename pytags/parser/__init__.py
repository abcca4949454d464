# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tagger front end: lexer, block assembler, LALR engine and tag builder.

Typical use:

	from pytags.parser import TagParser
	result = TagParser().parse(source_text)
	for tag in result.walk():
		...
"""

from .blocks import Block, BlockError, assemble_block
from .config import IndentPolicy, ParserConfig, end_of_line
from .lexer import IndentStack, Lexer, tokenize
from .parser import ParseResult, TagParser, parse_source
from .tags import ImportedName, Parameter, ParameterKind, Tag, TagKind
from .tokens import KEYWORDS, TOKEN_CLASSES, TokenClass

__all__ = [
	"Block",
	"BlockError",
	"ImportedName",
	"IndentPolicy",
	"IndentStack",
	"KEYWORDS",
	"Lexer",
	"Parameter",
	"ParameterKind",
	"ParseResult",
	"ParserConfig",
	"TOKEN_CLASSES",
	"Tag",
	"TagKind",
	"TagParser",
	"TokenClass",
	"assemble_block",
	"end_of_line",
	"parse_source",
	"tokenize",
]
