"""CLI entry point: python -m safesub sub|apply|check|demo ..."""

from __future__ import annotations

import argparse
import logging
import re
import sys

from safesub.errors import SafesubError

# string, pattern, replacement, expected
DEMO_CASES: list[tuple[str, str, str, str]] = [
    ("aba", "a(.*?)a", "$1", "b"),
    ("ababab", "ab", "x", "xxx"),
    ("ababab", "(ab)", "$1x", "abxabxabx"),
    ("yyababaxxa", "a(.*?)a", "$1", "yybbxx"),
    ("acccb", "a(.*?)b", "$1\\$", "ccc$"),
    ("abxybaxy", "(x)(y)", "${2}3$1", "aby3xbay3x"),
]


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path) as f:
        return f.read()


def cmd_sub(args: argparse.Namespace) -> None:
    from safesub.options import apply_overrides, default_options, load_options
    from safesub.substitution import substitute_with_count

    # defaults <- YAML <- CLI flags
    if args.options:
        options = load_options(args.options)
    else:
        options = default_options()
    options = apply_overrides(
        options,
        first_only=args.first,
        ignorecase=args.ignorecase,
        multiline=args.multiline,
        dotall=args.dotall,
    )

    text = _read_input(args.input)
    result = substitute_with_count(text, args.pattern, args.replacement, options)
    sys.stdout.write(result.text)
    if args.count:
        print(f"Replaced {result.count} match(es)", file=sys.stderr)


def cmd_apply(args: argparse.Namespace) -> None:
    from safesub.rules import apply_rules, load_rules

    rules = load_rules(args.rules)
    text = _read_input(args.input)
    text, total = apply_rules(text, rules)
    sys.stdout.write(text)
    if args.count:
        print(f"Applied {len(rules)} rule(s), replaced {total} match(es)", file=sys.stderr)


def cmd_check(args: argparse.Namespace) -> None:
    from rich.console import Console
    from rich.table import Table

    from safesub.models import Literal
    from safesub.template_engine import compile_template

    compiled = compile_template(args.replacement)

    console = Console()
    table = Table(title="Template segments", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Value")
    for i, segment in enumerate(compiled.segments, start=1):
        if isinstance(segment, Literal):
            table.add_row(str(i), "literal", _escape(repr(segment.text)))
        else:
            table.add_row(str(i), "[cyan]backref[/cyan]", f"${segment.number}")
    console.print(table)

    if compiled.is_literal:
        console.print("[dim]No backreferences.[/dim]")
    else:
        console.print(f"Needs at least {compiled.max_backref} capture group(s).")


def cmd_demo(args: argparse.Namespace) -> None:
    from rich.console import Console
    from rich.table import Table

    from safesub.substitution import substitute

    console = Console()
    table = Table(title="Demo cases", show_header=True, header_style="bold")
    table.add_column("Case", justify="right", style="dim")
    table.add_column("String")
    table.add_column("Pattern")
    table.add_column("Replacement")
    table.add_column("Expected")
    table.add_column("Result")
    table.add_column("", no_wrap=True)

    failed = 0
    for i, (string, pattern, replacement, expected) in enumerate(DEMO_CASES, start=1):
        try:
            result = substitute(string, pattern, replacement)
        except SafesubError as e:
            result = f"error: {e}"
        ok = result == expected
        if not ok:
            failed += 1
        mark = "[bold green]PASS[/bold green]" if ok else "[bold red]FAIL[/bold red]"
        cells = [repr(v) for v in (string, pattern, replacement, expected, result)]
        table.add_row(str(i), *(_escape(c) for c in cells), mark)

    console.print(table)
    if failed:
        print(f"{failed} of {len(DEMO_CASES)} case(s) failed.", file=sys.stderr)
        sys.exit(1)


def _escape(text: str) -> str:
    from rich.markup import escape

    return escape(text)


def _add_flag_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--first", action="store_true", default=False,
                        help="Replace only the first match")
    parser.add_argument("-i", "--ignorecase", action="store_true", default=False)
    parser.add_argument("-m", "--multiline", action="store_true", default=False)
    parser.add_argument("-s", "--dotall", action="store_true", default=False,
                        help="Make '.' match newlines too")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="safesub",
        description="Regex substitution with user-supplied backreference templates",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # -- sub --
    p_sub = subparsers.add_parser("sub", help="Substitute matches in a file or stdin")
    p_sub.add_argument("--pattern", required=True, help="Regular expression (e.g. 'a(.*?)a')")
    p_sub.add_argument("--replacement", required=True,
                       help="Replacement template: $1, ${2}, \\$ and \\\\ are special")
    p_sub.add_argument("--options", default=None,
                       help="Path to YAML file with substitution options")
    p_sub.add_argument("--count", action="store_true", default=False,
                       help="Report the number of replacements on stderr")
    _add_flag_arguments(p_sub)
    p_sub.add_argument("input", nargs="?", default=None, help="Input file (default: stdin)")
    p_sub.set_defaults(func=cmd_sub)

    # -- apply --
    p_apply = subparsers.add_parser("apply", help="Apply a YAML rules file")
    p_apply.add_argument("--rules", required=True, help="Path to YAML rules file")
    p_apply.add_argument("--count", action="store_true", default=False,
                         help="Report the number of replacements on stderr")
    p_apply.add_argument("input", nargs="?", default=None, help="Input file (default: stdin)")
    p_apply.set_defaults(func=cmd_apply)

    # -- check --
    p_check = subparsers.add_parser("check", help="Validate a replacement template")
    p_check.add_argument("--replacement", required=True)
    p_check.set_defaults(func=cmd_check)

    # -- demo --
    p_demo = subparsers.add_parser("demo", help="Run the built-in example cases")
    p_demo.set_defaults(func=cmd_demo)

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        args.func(args)
    except (ValueError, re.error, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
