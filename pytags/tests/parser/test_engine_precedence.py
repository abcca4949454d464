# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Expression shapes and the incremental LALR automaton."""

import pytest
from lark import Token, Tree
from lark.exceptions import UnexpectedToken

from pytags.parser import TagParser
from pytags.parser.engine import END, parse_tokens


def _shape(node):
	"""Compact (data, children...) form; tokens become their values."""
	if isinstance(node, Token):
		return node.value
	return (node.data, *[_shape(child) for child in node.children])


@pytest.fixture(scope="module")
def tagger() -> TagParser:
	return TagParser()


def test_and_binds_tighter_than_or(tagger: TagParser) -> None:
	tree = tagger.parse_expression("a or b and c")
	assert _shape(tree) == (
		"or_test",
		("var", "a"),
		"or",
		("and_test", ("var", "b"), "and", ("var", "c")),
	)


def test_power_is_right_associative(tagger: TagParser) -> None:
	tree = tagger.parse_expression("a ** b ** c")
	assert _shape(tree) == (
		"power",
		("var", "a"),
		"**",
		("power", ("var", "b"), "**", ("var", "c")),
	)


def test_unary_minus_applies_to_power(tagger: TagParser) -> None:
	tree = tagger.parse_expression("-x ** 2")
	assert _shape(tree) == ("unary", "-", ("power", ("var", "x"), "**", ("number", "2")))


def test_multiplication_before_addition(tagger: TagParser) -> None:
	tree = tagger.parse_expression("1 + 2 * 3")
	assert _shape(tree) == (
		"arith_expr",
		("number", "1"),
		"+",
		("term", ("number", "2"), "*", ("number", "3")),
	)


def test_trailers_are_left_associative(tagger: TagParser) -> None:
	tree = tagger.parse_expression("a.b(c)[d]")
	assert _shape(tree) == (
		"getitem",
		("funccall", ("getattr", ("var", "a"), ".", "b"), "(", ("arguments", ("var", "c")), ")"),
		"[",
		("var", "d"),
		"]",
	)


def test_not_and_comparison_chain(tagger: TagParser) -> None:
	tree = tagger.parse_expression("not a < b is not c")
	assert tree.data == "not_test"
	comparison = tree.children[1]
	assert comparison.data == "comparison"
	assert [child.data for child in comparison.children if isinstance(child, Tree)] == [
		"var", "comp_op", "var", "comp_op", "var",
	]


def test_conditional_lambda_and_comprehension(tagger: TagParser) -> None:
	assert tagger.parse_expression("x if y else z").data == "test"
	assert tagger.parse_expression("lambda a, *b, **c: a").data == "lambdef"
	assert tagger.parse_expression("[n * n for n in range(3) if n]").data == "list_comprehension"
	assert tagger.parse_expression("{k: v for k, v in items}").data == "dict_comprehension"
	assert tagger.parse_expression("(n := 10)").data == "paren"
	assert tagger.parse_expression("'a' 'b'").data == "string_concat"


def test_bad_expression_raises(tagger: TagParser) -> None:
	with pytest.raises(UnexpectedToken):
		tagger.parse_expression("a +")
	with pytest.raises(UnexpectedToken):
		tagger.parse_expression("a b")


def test_state_accepts_without_side_effects(tagger: TagParser) -> None:
	grammar = tagger.grammar
	state = grammar.state("statement")
	assert state.empty
	assert state.accepts("NAME")
	assert not state.accepts("RPAR")
	state.feed(Token("NAME", "x"))
	depth = len(state.state_stack)
	assert state.accepts("ASSIGN")
	assert state.accepts("NEWLINE")
	assert not state.accepts("NAME")
	assert not state.accepts(END)
	assert len(state.state_stack) == depth
	expected = state.expected()
	assert "ASSIGN" in expected and "NEWLINE" in expected and "LPAR" in expected
	assert expected == sorted(expected)
	with pytest.raises(UnexpectedToken):
		state.feed(Token("NAME", "y"))


def test_state_finishes_statement(tagger: TagParser) -> None:
	state = tagger.grammar.state("statement")
	for token in tagger.tokenize("x = 1\n")[0]:
		state.feed(token)
	assert state.accepts(END)
	(tag,) = state.finish()
	assert tag.name == "x"


def test_grammar_knows_only_its_terminals(tagger: TagParser) -> None:
	grammar = tagger.grammar
	assert grammar.knows("NAME")
	assert grammar.knows("BLOCK")
	assert not grammar.knows("ERRORTOKEN")
	assert not grammar.knows("INDENT")
	assert not grammar.knows("DEDENT")
	assert not grammar.knows(END)


def test_parse_tokens_from_parameters_start(tagger: TagParser) -> None:
	tokens = [tok for tok in tagger.tokenize("a, *b, c=1, **d")[0] if tok.type != "NEWLINE"]
	tree = parse_tokens(tagger.grammar, tokens, "parameters")
	assert tree.data == "parameters"
