# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from pytags.parser import BlockError, assemble_block, tokenize


def _index(tokens, kind: str, nth: int = 0) -> int:
	return [pos for pos, tok in enumerate(tokens) if tok.type == kind][nth]


def test_block_spans_to_matching_dedent() -> None:
	src = "if a:\n    if b:\n        c = 1\n    d = 2\ne = 3\n"
	tokens, _diags = tokenize(src)
	opening = _index(tokens, "INDENT")
	block = assemble_block(tokens, opening)
	assert block.start == opening
	assert block.end == _index(tokens, "DEDENT", 1)
	assert tokens[block.end + 1].value == "e"
	assert block.token.type == "BLOCK"
	assert block.token.line == 2
	# The block ends with the NEWLINE of `d = 2`, not at the dedent.
	assert block.token.end_pos == src.index("e = 3")
	assert block.token.end_pos == tokens[block.end - 1].end_pos
	assert [tokens[pos].value for pos in block.body][:2] == ["if", "b"]


def test_inner_block_within_limit() -> None:
	src = "if a:\n    if b:\n        c = 1\ne = 3\n"
	tokens, _diags = tokenize(src)
	outer = assemble_block(tokens, _index(tokens, "INDENT"))
	inner = assemble_block(tokens, _index(tokens, "INDENT", 1), outer.end)
	assert inner.end == outer.end - 1
	assert tokens[inner.end].type == "DEDENT"


def test_unbalanced_block_raises() -> None:
	tokens, _diags = tokenize("if a:\n    b = 1\n")
	opening = _index(tokens, "INDENT")
	with pytest.raises(BlockError) as excinfo:
		assemble_block(tokens[:-1], opening)
	assert "line 2" in str(excinfo.value)
	assert excinfo.value.loc is tokens[opening]
	assert isinstance(excinfo.value, ValueError)


def test_limit_cuts_the_scan() -> None:
	tokens, _diags = tokenize("if a:\n    b = 1\n")
	with pytest.raises(BlockError):
		assemble_block(tokens, _index(tokens, "INDENT"), len(tokens) - 1)


def test_requires_indent() -> None:
	tokens, _diags = tokenize("x = 1\n")
	with pytest.raises(ValueError):
		assemble_block(tokens, 0)
