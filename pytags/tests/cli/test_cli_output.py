# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import json
from pathlib import Path

import pytest

from pytags.cli import main


def _write(tmp_path: Path, name: str, text: str) -> Path:
	path = tmp_path / name
	path.write_text(text)
	return path


def test_outline(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "mod.py", "import os\n\nclass C(Base):\n    def m(self, x=1):\n        return x\n")
	assert main([str(src)]) == 0
	out, err = capsys.readouterr()
	assert out.splitlines() == [
		"1: import import os",
		"3: class class C(Base)",
		"  4: function def m(self, x=1)",
		"    5: code return x",
	]
	assert err == ""


def test_diagnostics_on_stderr_and_exit_code(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "bad.py", "x = 'abc\n")
	assert main([str(src)]) == 1
	out, err = capsys.readouterr()
	assert out.splitlines() == ["1: code x = 'abc"]
	assert err.strip() == f"{src}:1:5: error: unterminated string literal"


def test_warnings_do_not_fail(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "warn.py", "if a:\n    x = 1\n   y = 2\n")
	assert main([str(src)]) == 0
	_out, err = capsys.readouterr()
	assert "warning: unindent does not match" in err


def test_json_shape(tmp_path: Path, capsys) -> None:
	good = _write(tmp_path, "good.py", "def f(a, *rest):\n    pass\n")
	bad = _write(tmp_path, "bad.py", 'x = "abc\n')
	assert main([str(good), str(bad), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	first, second = payload["files"]

	assert first["file"] == str(good)
	assert first["diagnostics"] == []
	(fn,) = first["tags"]
	assert fn["kind"] == "function"
	assert fn["line"] == 1
	assert [p["name"] for p in fn["attributes"]["parameters"]] == ["a", "rest"]
	assert fn["attributes"]["parameters"][1]["kind"] == "var_positional"
	assert fn["children"][0]["name"] == "pass"

	(diag,) = second["diagnostics"]
	assert diag == {
		"phase": "lexer",
		"kind": "LexError",
		"code": "E-LEX-UNTERMINATED",
		"message": "unterminated string literal",
		"severity": "error",
		"file": str(bad),
		"line": 1,
		"column": 5,
		"notes": [],
	}
	assert second["tags"][0]["kind"] == "code"


def test_missing_file(tmp_path: Path, capsys) -> None:
	missing = tmp_path / "nope.py"
	assert main([str(missing), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	(entry,) = payload["files"]
	assert entry["diagnostics"][0]["phase"] == "io"
	assert entry["diagnostics"][0]["file"] == str(missing)


def test_depth_option(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "deep.py", "class C:\n    def m(self):\n        pass\n")
	assert main([str(src), "--depth", "1"]) == 0
	out, _err = capsys.readouterr()
	assert out.splitlines() == ["1: class class C", "  2: function def m(self)"]


def test_strict_indent_option(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "strict.py", "if a:\n    x = 1\n   y = 2\n")
	assert main([str(src), "--strict-indent"]) == 1
	_out, err = capsys.readouterr()
	assert "error: unindent does not match" in err


def test_invalid_option_value(tmp_path: Path) -> None:
	src = _write(tmp_path, "mod.py", "x = 1\n")
	with pytest.raises(SystemExit) as excinfo:
		main([str(src), "--tab-width", "0"])
	assert excinfo.value.code == 2
