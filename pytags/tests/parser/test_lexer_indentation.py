# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""INDENT/DEDENT synthesis, bracket depth and the dedent policies."""

import pytest

from pytags.core import DiagnosticKind
from pytags.parser import IndentPolicy, IndentStack, Lexer, ParserConfig, tokenize


def _types(tokens) -> list[str]:
	return [tok.type for tok in tokens]


def _count(tokens, kind: str) -> int:
	return sum(1 for tok in tokens if tok.type == kind)


def test_indent_dedent_balance_and_stack_drained() -> None:
	src = """class A:
    def f(self):
        if x:
            pass
    y = 2
z = 3
"""
	lexer = Lexer(src)
	tokens = list(lexer.tokens())
	assert _count(tokens, "INDENT") == 3
	assert _count(tokens, "DEDENT") == 3
	assert lexer.diagnostics == []
	assert lexer.state.indents.columns() == [0]
	assert lexer.state.depth == 0


def test_dedents_drained_at_end_of_input() -> None:
	tokens, _diags = tokenize("if a:\n    if b:\n        c")
	assert _types(tokens)[-3:] == ["NEWLINE", "DEDENT", "DEDENT"]


def test_brackets_swallow_line_breaks() -> None:
	src = "x = (1,\n        2)\ny = [\n    3,\n]\n"
	tokens, diags = tokenize(src)
	assert diags == []
	assert _count(tokens, "NEWLINE") == 2
	assert _count(tokens, "INDENT") == 0
	two = [tok for tok in tokens if tok.value == "2"][0]
	assert (two.line, two.column) == (2, 9)


def test_depth_never_goes_negative() -> None:
	tokens, _diags = tokenize(")\n]\nx = 1\n")
	assert _types(tokens) == [
		"RPAR", "NEWLINE",
		"RSQB", "NEWLINE",
		"NAME", "ASSIGN", "NUMBER", "NEWLINE",
	]


def test_backslash_continuation() -> None:
	tokens, _diags = tokenize("total = 1 + \\\n    2\nnext = 3\n")
	assert _count(tokens, "NEWLINE") == 2
	assert _count(tokens, "INDENT") == 0
	two = [tok for tok in tokens if tok.value == "2"][0]
	assert (two.line, two.column) == (2, 5)


def test_blank_and_comment_lines_leave_stack_alone() -> None:
	src = "if a:\n    b = 1\n\n# note\n        \n    c = 2\n"
	tokens, diags = tokenize(src)
	assert diags == []
	assert _count(tokens, "INDENT") == 1
	assert _count(tokens, "DEDENT") == 1


def test_indent_token_spans_leading_whitespace() -> None:
	src = "if a:\n    b\n"
	tokens, _diags = tokenize(src)
	indent = [tok for tok in tokens if tok.type == "INDENT"][0]
	assert indent.value == "    "
	assert (indent.line, indent.column) == (2, 1)
	assert (indent.start_pos, indent.end_pos) == (6, 10)


def test_tabs_advance_to_next_stop() -> None:
	src = "if a:\n\tb = 1\n        c = 2\n"
	tokens, diags = tokenize(src)
	assert diags == []
	assert _count(tokens, "INDENT") == 1

	tokens, diags = tokenize(src, config=ParserConfig(tab_width=4))
	assert diags == []
	assert _count(tokens, "INDENT") == 2
	assert _count(tokens, "DEDENT") == 2


def test_form_feed_resets_column() -> None:
	tokens, diags = tokenize("\fx = 1\n")
	assert diags == []
	assert _types(tokens) == ["NAME", "ASSIGN", "NUMBER", "NEWLINE"]


def test_dedent_mismatch_tolerant() -> None:
	src = "if a:\n    x = 1\n   b = 2\n   c = 3\nd = 4\n"
	tokens, diags = tokenize(src)
	assert _count(tokens, "INDENT") == 1
	assert _count(tokens, "DEDENT") == 1
	assert len(diags) == 1
	diag = diags[0]
	assert diag.kind is DiagnosticKind.INDENT_ERROR
	assert diag.code == "E-INDENT-MISMATCH"
	assert diag.phase == "lexer"
	assert diag.severity == "warning"
	assert diag.span.line == 3
	# Nothing from the mismatched lines is lost.
	assert [tok.value for tok in tokens if tok.type == "NAME"] == ["a", "x", "b", "c", "d"]


def test_dedent_mismatch_strict_drops_line() -> None:
	src = "if a:\n    x = 1\n   b = 2\nd = 4\n"
	tokens, diags = tokenize(src, config=ParserConfig(indent_policy=IndentPolicy.STRICT))
	assert len(diags) == 1
	assert diags[0].severity == "error"
	assert diags[0].code == "E-INDENT-MISMATCH"
	assert _count(tokens, "INDENT") == 1
	assert _count(tokens, "DEDENT") == 1
	assert [tok.value for tok in tokens if tok.type == "NAME"] == ["a", "x", "d"]


def test_region_uses_absolute_positions_and_local_floor() -> None:
	text = "a = 1\nclass C:\n    def m(self):\n        return 1\nb = 2\n"
	start = text.index("    def")
	end = text.index("b = 2")
	lexer = Lexer(text, start, end)
	tokens = list(lexer.tokens())
	first = tokens[0]
	assert first.type == "DEF"
	assert (first.line, first.column, first.start_pos) == (3, 5, start + 4)
	assert _count(tokens, "INDENT") == 1
	assert _count(tokens, "DEDENT") == 1
	assert "b" not in [tok.value for tok in tokens]
	assert lexer.state.indents.columns() == [4]


def test_indent_stack_levels() -> None:
	stack = IndentStack()
	assert stack.top == 0 and stack.floor == 0 and len(stack) == 1
	stack.push(4)
	stack.push(6, synthetic=True)
	assert stack.columns() == [0, 4, 6]
	with pytest.raises(ValueError):
		stack.push(6)
	assert stack.pop() is False
	assert stack.pop() is True
	with pytest.raises(IndexError):
		stack.pop()
	assert IndentStack(3).columns() == [3]
