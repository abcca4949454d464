# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
pytags command line front end.

Prints an indented outline of the tags found in each file, or, with
`--json`, a structured document with tags and diagnostics per file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List

from .core.diagnostics import Diagnostic
from .parser import IndentPolicy, ParserConfig, TagParser
from .parser.tags import Tag


def _outline(tags: List[Tag], indent: int = 0) -> List[str]:
	lines: List[str] = []
	for tag in tags:
		lines.append(f"{'  ' * indent}{tag.span.line}: {tag.kind.value} {tag.summary()}")
		lines.extend(_outline(tag.children, indent + 1))
	return lines


def _format_diag(diag: Diagnostic, source: Path) -> str:
	span = diag.span if diag.span.file else diag.span.with_file(str(source))
	return f"{span.file}:{span.line}:{span.column}: {diag.severity}: {diag.message}"


def _build_config(args: argparse.Namespace) -> ParserConfig:
	config = ParserConfig()
	if args.tab_width is not None:
		config = replace(config, tab_width=args.tab_width)
	if args.strict_indent:
		config = replace(config, indent_policy=IndentPolicy.STRICT)
	if args.depth is not None:
		config = replace(config, max_depth=args.depth)
	if args.max_errors is not None:
		config = replace(config, max_errors=args.max_errors)
	return config


def main(argv: list[str] | None = None) -> int:
	"""
	Tag each source file and report the result.

	With --json, prints `{"exit_code", "files": [...]}` where each file entry
	carries its tags and diagnostics (phase/kind/code/message/severity/file/
	line/column); otherwise prints an outline to stdout and diagnostics to
	stderr. Exit code is 1 if any file has an error-severity diagnostic or
	cannot be read.
	"""
	parser = argparse.ArgumentParser(prog="pytags", description="Tag declarations in Python-like source files")
	parser.add_argument("source", type=Path, nargs="+", help="Path(s) to source file(s)")
	parser.add_argument("--json", action="store_true", help="Emit tags and diagnostics as JSON")
	parser.add_argument("--depth", type=int, default=None, help="Do not expand blocks nested deeper than this")
	parser.add_argument("--tab-width", type=int, default=None, help="Column width of a tab stop (default 8)")
	parser.add_argument(
		"--strict-indent",
		action="store_true",
		help="Treat inconsistent dedents as errors and drop the offending line",
	)
	parser.add_argument("--max-errors", type=int, default=None, help="Stop after this many diagnostics per file")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	try:
		tagger = TagParser(_build_config(args))
	except ValueError as exc:
		parser.error(str(exc))

	exit_code = 0
	files: List[dict] = []
	for source in args.source:
		try:
			text = source.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as exc:
			exit_code = 1
			msg = f"cannot read {source}: {exc}"
			if args.json:
				files.append(
					{
						"file": str(source),
						"tags": [],
						"diagnostics": [
							{"phase": "io", "kind": None, "code": None, "message": msg, "severity": "error", "file": str(source), "line": None, "column": None, "notes": []}
						],
					}
				)
			else:
				print(msg, file=sys.stderr)
			continue

		result = tagger.parse(text)
		if result.errors:
			exit_code = 1
		if args.json:
			files.append(result.to_dict(str(source)))
			continue
		if len(args.source) > 1:
			print(f"{source}:")
		for line in _outline(result.tags):
			print(line)
		for diag in result.diagnostics:
			print(_format_diag(diag, source), file=sys.stderr)

	if args.json:
		print(json.dumps({"exit_code": exit_code, "files": files}))
	return exit_code


if __name__ == "__main__":
	sys.exit(main())
