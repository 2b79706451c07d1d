"""Tests for the safesub CLI."""

import io
import sys
from unittest.mock import patch

import pytest


def _run(argv, stdin_text=None):
    from safesub.__main__ import main

    patches = [patch.object(sys, "argv", ["safesub", *argv])]
    if stdin_text is not None:
        patches.append(patch.object(sys, "stdin", io.StringIO(stdin_text)))
    for p in patches:
        p.start()
    try:
        main()
    finally:
        for p in patches:
            p.stop()


class TestSubCommand:
    def test_reads_stdin(self, capsys):
        _run(["sub", "--pattern", "(x)(y)", "--replacement", "${2}3$1"], "abxybaxy")
        assert capsys.readouterr().out == "aby3xbay3x"

    def test_reads_file(self, tmp_path, capsys):
        path = tmp_path / "in.txt"
        path.write_text("yyababaxxa")
        _run(["sub", "--pattern", "a(.*?)a", "--replacement", "$1", str(path)])
        assert capsys.readouterr().out == "yybbxx"

    def test_first_flag(self, capsys):
        _run(["sub", "--pattern", "ab", "--replacement", "x", "--first", "--count"], "ababab")
        captured = capsys.readouterr()
        assert captured.out == "xabab"
        assert "Replaced 1 match(es)" in captured.err

    def test_ignorecase_flag(self, capsys):
        _run(["sub", "--pattern", "ab", "--replacement", "x", "-i"], "ABab")
        assert capsys.readouterr().out == "xx"

    def test_options_file(self, tmp_path, capsys):
        opts = tmp_path / "opts.yaml"
        opts.write_text("global: false\n")
        _run(["sub", "--pattern", "ab", "--replacement", "x", "--options", str(opts)], "abab")
        assert capsys.readouterr().out == "xab"

    def test_malformed_options_file_exits_1(self, tmp_path, capsys):
        opts = tmp_path / "opts.yaml"
        opts.write_text("global: [true\n")
        with pytest.raises(SystemExit, match="1"):
            _run(["sub", "--pattern", "a", "--replacement", "b", "--options", str(opts)], "a")
        assert capsys.readouterr().err.startswith(f"Error: Invalid YAML in {opts}")

    def test_template_error_exits_1(self, capsys):
        with pytest.raises(SystemExit, match="1"):
            _run(["sub", "--pattern", "a", "--replacement", "ab\\q"], "a")
        err = capsys.readouterr().err
        assert err.startswith("Error: Escape can only contain backslash or dollar sign")

    def test_backref_out_of_range_exits_1(self, capsys):
        with pytest.raises(SystemExit, match="1"):
            _run(["sub", "--pattern", "(x)", "--replacement", "$3"], "x")
        assert "there are only 1 captures" in capsys.readouterr().err

    def test_bad_regex_exits_1(self, capsys):
        with pytest.raises(SystemExit, match="1"):
            _run(["sub", "--pattern", "(", "--replacement", "x"], "x")
        assert capsys.readouterr().err.startswith("Error:")

    def test_missing_input_file_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit, match="1"):
            _run(["sub", "--pattern", "a", "--replacement", "b", str(tmp_path / "nope")])
        assert "Error:" in capsys.readouterr().err

    def test_pattern_required(self):
        with pytest.raises(SystemExit):
            _run(["sub", "--replacement", "x"], "")


class TestApplyCommand:
    def test_applies_rules(self, tmp_path, capsys):
        rules = tmp_path / "rules.yaml"
        rules.write_text(
            "- pattern: 'a(.*?)b'\n"
            "  replacement: '$1\\$'\n"
        )
        _run(["apply", "--rules", str(rules), "--count"], "acccb")
        captured = capsys.readouterr()
        assert captured.out == "ccc$"
        assert "Applied 1 rule(s), replaced 1 match(es)" in captured.err

    def test_invalid_rules_file(self, tmp_path, capsys):
        rules = tmp_path / "rules.yaml"
        rules.write_text("pattern: a\n")
        with pytest.raises(SystemExit, match="1"):
            _run(["apply", "--rules", str(rules)], "a")
        assert "must be a list" in capsys.readouterr().err


    def test_malformed_rules_file_exits_1(self, tmp_path, capsys):
        rules = tmp_path / "rules.yaml"
        rules.write_text("- pattern: [a\n")
        with pytest.raises(SystemExit, match="1"):
            _run(["apply", "--rules", str(rules)], "a")
        assert capsys.readouterr().err.startswith(f"Error: Invalid YAML in {rules}")


class TestCheckCommand:
    def test_lists_segments(self, capsys):
        _run(["check", "--replacement", "${2}3$1"])
        out = capsys.readouterr().out
        assert "backref" in out
        assert "literal" in out
        assert "Needs at least 2 capture group(s)." in out

    def test_literal_only(self, capsys):
        _run(["check", "--replacement", "plain"])
        assert "No backreferences." in capsys.readouterr().out

    def test_syntax_error(self, capsys):
        with pytest.raises(SystemExit, match="1"):
            _run(["check", "--replacement", "${2ab"])
        assert "closing curly brace" in capsys.readouterr().err


class TestDemoCommand:
    def test_all_cases_pass(self, capsys, monkeypatch):
        monkeypatch.setenv("COLUMNS", "200")
        _run(["demo"])
        out = capsys.readouterr().out
        assert "PASS" in out
        assert "FAIL" not in out

    def test_failure_exits_1(self, capsys):
        bad_cases = [("aba", "a(.*?)a", "$1", "nope")]
        with patch("safesub.__main__.DEMO_CASES", bad_cases):
            with pytest.raises(SystemExit, match="1"):
                _run(["demo"])
        assert "1 of 1 case(s) failed." in capsys.readouterr().err
