# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Semantic actions for the tagger grammar.

`TagActions` is handed to lark as the grammar transformer, so each method
below runs as the reduction callback of the rule it is named after. Rules
without a method build plain lark `Tree`s; those trees only ever matter as
text (see `render`) or as token extents (see `extent`).

Statement-level actions return either finished `Tag`s (variables, imports,
plain code) or `Pending` drafts for definitions and compound statements.
A draft still holds its suites as unparsed BLOCK tokens and, for a def, its
parameter list as an unparsed PARAMS token; the driver realizes drafts into
Tags once those regions have been parsed in turn.

The transformer is stateless: one instance serves every parse.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from lark import Token, Transformer, Tree

from ..core.span import Span
from .tags import ImportedName, Parameter, ParameterKind, Tag, TagKind
from .tokens import CLOSERS, KEYWORDS, OPENERS, UNTERMINATED_STRING

_INVISIBLE = frozenset({"NEWLINE", "INDENT", "DEDENT", "BLOCK"})
_NO_SPACE_AFTER = frozenset({"LPAR", "LSQB", "LBRACE", "DOT", "TILDE"})
_NO_SPACE_BEFORE = frozenset({"RPAR", "RSQB", "RBRACE", "COMMA", "COLON", "DOT", "SEMI"})
_CALLABLE = frozenset({"NAME", "RPAR", "RSQB", "STRING"})
_PREFIX_OPS = frozenset({"PLUS", "MINUS", "STAR", "DOUBLESTAR", "TILDE"})
_OPERATORS = frozenset(
	{
		"PLUS", "MINUS", "STAR", "DOUBLESTAR", "SLASH", "DOUBLESLASH", "PERCENT", "AT",
		"LSHIFT", "RSHIFT", "AMP", "VBAR", "CIRCUMFLEX", "TILDE",
		"LT", "GT", "EQEQ", "NE", "LE", "GE",
	}
)
# After one of these, `-x`, `*args` and friends are prefix operators.
_PREFIX_CONTEXT = (
	OPENERS
	| _OPERATORS
	| frozenset({"COMMA", "COLON", "ASSIGN", "AUGASSIGN", "WALRUS", "ARROW", "SEMI"})
	| frozenset(KEYWORDS.values())
)


@dataclass
class Suite:
	"""Body of a compound statement: a BLOCK token, or the items of an inline simple statement."""

	body: Union[Token, List[Any]]
	span: Span

	@property
	def is_block(self) -> bool:
		return isinstance(self.body, Token)


@dataclass
class Pending:
	"""Draft of a tag whose suites (and parameters) are not parsed yet."""

	kind: TagKind
	name: str
	span: Span
	attributes: Dict[str, Any] = field(default_factory=dict)
	suites: List[Suite] = field(default_factory=list)
	params: Optional[Token] = None


StatementItem = Union[Tag, Pending]


def leaves(node: Any) -> Iterator[Token]:
	"""Yield the tokens under `node` in source order."""
	stack = [node]
	while stack:
		item = stack.pop()
		if isinstance(item, Token):
			yield item
		elif isinstance(item, Tree):
			stack.extend(reversed(item.children))
		elif isinstance(item, list):
			stack.extend(reversed(item))


def render(node: Any) -> str:
	"""
	Display text for an expression or statement fragment.

	Tokens are re-joined with conventional spacing (PEP 8 flavoured), not
	copied from the source, so the result does not depend on the author's
	formatting or on comments and line breaks inside brackets.
	"""
	parts: List[str] = []
	brackets: List[str] = []
	prev: Optional[Token] = None
	glue = False
	for tok in leaves(node):
		kind = tok.type
		if kind in _INVISIBLE:
			continue
		if prev is not None and not glue and _spaced(prev.type, kind, brackets):
			parts.append(" ")
		parts.append(str(tok.value))
		glue = kind in _PREFIX_OPS and (prev is None or prev.type in _PREFIX_CONTEXT)
		if kind in OPENERS:
			brackets.append(kind)
		elif kind in CLOSERS and brackets:
			brackets.pop()
		prev = tok
	return "".join(parts)


def _spaced(prev: str, cur: str, brackets: List[str]) -> bool:
	if prev in _NO_SPACE_AFTER or cur in _NO_SPACE_BEFORE:
		return False
	if cur in ("LPAR", "LSQB") and prev in _CALLABLE:
		return False
	if brackets:
		# Keyword arguments and defaults: f(a=1).
		if "ASSIGN" in (prev, cur):
			return False
		# Slices: x[1:2].
		if brackets[-1] == "LSQB" and prev == "COLON":
			return False
	return True


def extent(node: Any) -> Optional[Span]:
	"""Span covering every token under `node`, or None if it holds no tokens."""
	first = _outer_span(node, reverse=False)
	if first is None:
		return None
	return first.to(_outer_span(node, reverse=True))


def _outer_span(node: Any, reverse: bool) -> Optional[Span]:
	# Leftmost (or rightmost) spanned item. Iterative: attribute chains such as
	# `a.b.b.b...` nest one tree level per trailer.
	stack = [node]
	while stack:
		item = stack.pop()
		if isinstance(item, Token):
			return Span.from_loc(item)
		if isinstance(item, (Tag, Pending, Suite)):
			return item.span
		if isinstance(item, Tree):
			items = item.children
		elif isinstance(item, list):
			items = item
		else:
			continue
		stack.extend(items if reverse else reversed(items))
	return None


def has_unterminated(node: Any) -> bool:
	return any(tok.type == UNTERMINATED_STRING for tok in leaves(node))


def string_value(node: Any) -> Optional[str]:
	"""Decoded value of a (possibly implicitly concatenated) string expression."""
	if not isinstance(node, Tree) or node.data not in ("string", "string_concat"):
		return None
	values = [tok.value for tok in leaves(node)]
	if any(tok.type != "STRING" for tok in leaves(node)):
		return None
	try:
		value = ast.literal_eval(" ".join(values))
	except (ValueError, SyntaxError):
		return None
	return value if isinstance(value, str) else None


def _dotted(node: Tree) -> str:
	return "".join(tok.value for tok in leaves(node))


def _first_token(children: List[Any]) -> Optional[Token]:
	return next(leaves(children), None)


def _is_bare_name(node: Any) -> bool:
	return isinstance(node, Tree) and node.data == "var"


def _code(name: str, node: Any, statement: str, **attributes: Any) -> Tag:
	attributes = {"statement": statement, "text": render(node), **attributes}
	return Tag(name=name, kind=TagKind.CODE, span=extent(node) or Span(), attributes=attributes)


def _header(children: List[Any]) -> List[Any]:
	"""Children up to (not including) the first top-level COLON."""
	out = []
	for child in children:
		if isinstance(child, Token) and child.type == "COLON":
			break
		out.append(child)
	return out


class TagActions(Transformer):
	"""Reduction callbacks building tags and drafts for statement-level rules."""

	# Statement sequencing

	def statement(self, children: List[Any]) -> List[StatementItem]:
		(item,) = children
		return item if isinstance(item, list) else [item]

	def simple_stmt(self, children: List[Any]) -> List[StatementItem]:
		items: List[StatementItem] = []
		for child in children:
			if isinstance(child, Token):
				continue
			items.extend(child if isinstance(child, list) else [child])
		return items

	def suite(self, children: List[Any]) -> Suite:
		if isinstance(children[0], Token):
			block = children[-1]
			return Suite(body=block, span=Span.from_loc(block))
		items = children[0]
		return Suite(body=items, span=extent(items) or Span())

	# Small statements

	def expr_stmt(self, children: List[Any]) -> Tag:
		(node,) = children
		text = render(node)
		value = string_value(node)
		if value is not None:
			return _code(text, node, "string", string=value)
		return _code(text, node, "expression")

	def assign_stmt(self, children: List[Any]) -> List[Tag]:
		targets = children[:-1:2]
		value = children[-1]
		if all(_is_bare_name(target) for target in targets) and not has_unterminated(value):
			span = extent(children) or Span()
			return [Tag(name=target.children[0].value, kind=TagKind.VARIABLE, span=span) for target in targets]
		return [_code(render(children), children, "assign")]

	def annassign_stmt(self, children: List[Any]) -> Tag:
		target, _colon, annotation = children[:3]
		value = children[4] if len(children) > 4 else None
		if _is_bare_name(target) and not has_unterminated(value):
			return Tag(
				name=target.children[0].value,
				kind=TagKind.VARIABLE,
				span=extent(children) or Span(),
				attributes={"annotation": render(annotation)},
			)
		return _code(render(children), children, "assign")

	def augassign_stmt(self, children: List[Any]) -> Tag:
		return _code(render(children), children, "augassign")

	def _keyword_statement(self, children: List[Any]) -> Tag:
		keyword = _first_token(children)
		name = keyword.value if keyword is not None else "statement"
		return _code(name, children, name)

	del_stmt = pass_stmt = break_stmt = continue_stmt = _keyword_statement
	return_stmt = raise_stmt = global_stmt = nonlocal_stmt = assert_stmt = _keyword_statement
	yield_stmt = _keyword_statement

	def import_name(self, children: List[Any]) -> Tag:
		names = [
			ImportedName(_dotted(item.children[0]), item.children[-1].value if len(item.children) > 1 else None)
			for item in children[1].children
			if isinstance(item, Tree)
		]
		return Tag(
			name=", ".join(imported.name for imported in names),
			kind=TagKind.IMPORT,
			span=extent(children) or Span(),
			attributes={"module": None, "level": 0, "names": names, "text": render(children)},
		)

	def import_from(self, children: List[Any]) -> Tag:
		level = 0
		module = ""
		names: List[ImportedName] = []
		for child in children:
			if isinstance(child, Token):
				if child.type == "STAR":
					names.append(ImportedName("*"))
				continue
			if child.data == "dots":
				level = sum(len(tok.value) for tok in child.children)
			elif child.data == "dotted_name":
				module = _dotted(child)
			elif child.data == "import_as_names":
				for item in child.children:
					if isinstance(item, Tree):
						alias = item.children[-1].value if len(item.children) > 1 else None
						names.append(ImportedName(item.children[0].value, alias))
		return Tag(
			name="." * level + module,
			kind=TagKind.IMPORT,
			span=extent(children) or Span(),
			attributes={"module": module or None, "level": level, "names": names, "text": render(children)},
		)

	# Compound statements

	def _compound(self, children: List[Any]) -> Pending:
		keyword = children[0]
		suites = [child for child in children if isinstance(child, Suite)]
		return Pending(
			kind=TagKind.CODE,
			name=keyword.value,
			span=extent(children) or Span(),
			attributes={"statement": keyword.value, "text": render(_header(children))},
			suites=suites,
		)

	if_stmt = while_stmt = for_stmt = try_stmt = with_stmt = _compound

	def elif_clause(self, children: List[Any]) -> Suite:
		return children[-1]

	except_clause = finally_clause = elif_clause

	def async_stmt(self, children: List[Any]) -> Pending:
		_async, draft = children
		draft.attributes["is_async"] = True
		if draft.kind is TagKind.CODE:
			draft.attributes["text"] = f"async {draft.attributes['text']}"
		draft.span = extent(children) or draft.span
		return draft

	async_funcdef = async_stmt

	def funcdef(self, children: List[Any]) -> Pending:
		name, params = children[1], children[2]
		returns = None
		if isinstance(children[3], Token) and children[3].type == "ARROW":
			returns = render(children[4])
		return Pending(
			kind=TagKind.FUNCTION,
			name=name.value,
			span=extent(children) or Span(),
			attributes={"decorators": [], "returns": returns, "is_async": False},
			suites=[children[-1]],
			params=params,
		)

	def classdef(self, children: List[Any]) -> Pending:
		bases: List[str] = []
		keywords: List[str] = []
		for child in children:
			if isinstance(child, Tree) and child.data == "arguments":
				bases, keywords = argument_parts(child)
		return Pending(
			kind=TagKind.CLASS,
			name=children[1].value,
			span=extent(children) or Span(),
			attributes={"bases": bases, "keywords": keywords, "decorators": []},
			suites=[children[-1]],
		)

	def decorated(self, children: List[Any]) -> Pending:
		draft = children[-1]
		draft.attributes["decorators"] = [render(decorator.children[1]) for decorator in children[:-1]]
		draft.span = extent(children) or draft.span
		return draft


def argument_parts(node: Tree) -> tuple[List[str], List[str]]:
	"""Split a call-style argument list into positional and keyword renderings."""
	positional: List[str] = []
	keywords: List[str] = []
	children = node.children
	index = 0
	while index < len(children):
		child = children[index]
		index += 1
		if isinstance(child, Token):
			if child.type == "DOUBLESTAR" and index < len(children):
				keywords.append(f"**{render(children[index])}")
				index += 1
			continue
		if child.data in ("starargs", "kwargs"):
			sub_positional, sub_keywords = argument_parts(child)
			positional.extend(sub_positional)
			keywords.extend(sub_keywords)
		elif child.data == "argvalue":
			keywords.append(f"{render(child.children[0])}={render(child.children[-1])}")
		else:
			positional.append(render(child))
	return positional, keywords


def build_parameters(tree: Tree) -> List[Parameter]:
	"""Flatten a `parameters` parse tree into ordered Parameters."""
	params: List[Parameter] = []
	_collect_parameters(tree, ParameterKind.POSITIONAL, params)
	return params


def _collect_parameters(node: Tree, kind: ParameterKind, params: List[Parameter]) -> ParameterKind:
	for child in node.children:
		if isinstance(child, Token):
			if child.type == "SLASH":
				for index, param in enumerate(params):
					if param.kind is ParameterKind.POSITIONAL:
						params[index] = Parameter(param.name, ParameterKind.POSITIONAL_ONLY, param.default, param.annotation)
			elif child.type == "NAME":
				params.append(Parameter(child.value, kind))
			continue
		if child.data == "starparams":
			kind = _collect_parameters(child, ParameterKind.KEYWORD_ONLY, params)
		elif child.data == "poststarparams":
			kind = _collect_parameters(child, kind, params)
		elif child.data == "starparam":
			params.append(_parameter(child.children[1], ParameterKind.VAR_POSITIONAL))
			kind = ParameterKind.KEYWORD_ONLY
		elif child.data == "starguard":
			kind = ParameterKind.KEYWORD_ONLY
		elif child.data == "kwparams":
			params.append(_parameter(child.children[1], ParameterKind.VAR_KEYWORD))
		else:
			params.append(_parameter(child, kind))
	return kind


def salvage_parameters(tokens: List[Token]) -> List[Parameter]:
	"""
	Best-effort parameters from a region the grammar rejected.

	The region is split at top-level commas; each piece that still looks
	like `name`, `name=default`, `name: ann`, `*name` or `**name` is kept.
	"""
	pieces: List[List[Token]] = [[]]
	depth = 0
	for tok in tokens:
		if tok.type in OPENERS:
			depth += 1
		elif tok.type in CLOSERS:
			depth = max(0, depth - 1)
		elif tok.type == "COMMA" and depth == 0:
			pieces.append([])
			continue
		pieces[-1].append(tok)

	params: List[Parameter] = []
	kind = ParameterKind.POSITIONAL
	for piece in pieces:
		if not piece:
			continue
		head = piece[0].type
		named = len(piece) > 1 and piece[1].type == "NAME"
		if head == "SLASH":
			params = [
				Parameter(p.name, ParameterKind.POSITIONAL_ONLY, p.default, p.annotation)
				if p.kind is ParameterKind.POSITIONAL
				else p
				for p in params
			]
		elif head == "STAR":
			if named:
				params.append(Parameter(piece[1].value, ParameterKind.VAR_POSITIONAL))
			kind = ParameterKind.KEYWORD_ONLY
		elif head == "DOUBLESTAR":
			if named:
				params.append(Parameter(piece[1].value, ParameterKind.VAR_KEYWORD))
		elif head == "NAME":
			params.append(_salvage_one(piece, kind))
	return params


def _salvage_one(piece: List[Token], kind: ParameterKind) -> Parameter:
	kinds = [tok.type for tok in piece]
	assign = kinds.index("ASSIGN") if "ASSIGN" in kinds else len(piece)
	colon = kinds.index("COLON") if "COLON" in kinds[:assign] else assign
	annotation = render(piece[colon + 1:assign]) or None
	default = render(piece[assign + 1:]) or None
	return Parameter(piece[0].value, kind, default, annotation)


def _parameter(node: Any, kind: ParameterKind) -> Parameter:
	default = None
	if isinstance(node, Tree) and node.data == "paramvalue":
		default = render(node.children[-1])
		node = node.children[0]
	annotation = None
	if isinstance(node, Tree) and node.data == "typedparam":
		annotation = render(node.children[-1])
		node = node.children[0]
	return Parameter(node.value, kind, default, annotation)


__all__ = [
	"Pending",
	"Suite",
	"TagActions",
	"argument_parts",
	"build_parameters",
	"extent",
	"has_unterminated",
	"leaves",
	"render",
	"salvage_parameters",
	"string_value",
]
