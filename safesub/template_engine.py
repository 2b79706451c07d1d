"""Replacement template compiler: turns "$1", "${2}", "\\$" etc. into a renderer.

A template is made of four kinds of tokens:

* literals: any run of characters other than ``$`` and ``\\``
* backreferences: ``$N`` or ``${N}`` with ``N`` a positive integer
* escaped dollar signs: ``\\$``
* escaped backslashes: ``\\\\``

Braces disambiguate a reference from digits that follow it, so ``${2}3$1``
is group 2, the literal ``3``, then group 1. Templates are parsed, never
evaluated, so user-supplied replacement strings cannot run code.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from safesub.errors import (
    BackrefOutOfRange,
    IllegalEscapeChar,
    InvalidBackrefSyntax,
    MissingClosingBrace,
    TrailingEscape,
)
from safesub.models import BackrefIndex, Literal, Segment

logger = logging.getLogger(__name__)

_LITERAL_RE = re.compile(r"[^$\\]+")
_NUMBER_RE = re.compile(r"[1-9][0-9]*")
_ESCAPABLE = ("$", "\\")


@dataclass(frozen=True)
class CompiledTemplate:
    """Parsed template, reusable across any number of renders."""

    segments: tuple[Segment, ...] = ()

    @property
    def max_backref(self) -> int:
        """Highest 1-based group number referenced, 0 when there is none."""
        return max(
            (s.number for s in self.segments if isinstance(s, BackrefIndex)),
            default=0,
        )

    @property
    def is_literal(self) -> bool:
        return not any(isinstance(s, BackrefIndex) for s in self.segments)

    def render(self, captures: Sequence[str]) -> str:
        """Build the replacement text for one match.

        ``captures[0]`` is the text of capture group 1. Raises
        ``BackrefOutOfRange`` if the template refers to a group past the
        end of ``captures``.
        """
        parts = []
        for segment in self.segments:
            if isinstance(segment, Literal):
                parts.append(segment.text)
            elif segment.index < len(captures):
                parts.append(captures[segment.index])
            else:
                raise BackrefOutOfRange(segment.number, len(captures))
        return "".join(parts)


def compile_template(template: str) -> CompiledTemplate:
    """Parse a replacement template.

    Raises a ``TemplateSyntaxError`` subclass on malformed input.
    """
    segments: list[Segment] = []
    pos = 0
    end = len(template)

    while pos < end:
        m = _LITERAL_RE.match(template, pos)
        if m:
            _append_literal(segments, m.group())
            pos = m.end()
        elif template[pos] == "\\":
            if pos + 1 == end:
                raise TrailingEscape(template, pos)
            escaped = template[pos + 1]
            if escaped not in _ESCAPABLE:
                raise IllegalEscapeChar(template, pos + 1, escaped)
            _append_literal(segments, escaped)
            pos += 2
        else:
            index, pos = _parse_backref(template, pos)
            segments.append(BackrefIndex(index))

    logger.debug("Compiled template %r into %d segment(s)", template, len(segments))
    return CompiledTemplate(tuple(segments))


def _append_literal(segments: list[Segment], text: str) -> None:
    # An escaped character can directly follow a literal run, so merge
    if segments and isinstance(segments[-1], Literal):
        segments[-1] = Literal(segments[-1].text + text)
    else:
        segments.append(Literal(text))


def _parse_backref(template: str, pos: int) -> tuple[int, int]:
    """Parse ``$N`` or ``${N}`` starting at the ``$`` at *pos*.

    Returns the zero-based group index and the position after the token.
    """
    pos += 1
    if template.startswith("{", pos):
        m = _NUMBER_RE.match(template, pos + 1)
        if not m:
            raise InvalidBackrefSyntax(template, pos + 1, braced=True)
        number = int(m.group())
        if not template.startswith("}", m.end()):
            raise MissingClosingBrace(template, m.end(), number)
        return number - 1, m.end() + 1

    m = _NUMBER_RE.match(template, pos)
    if not m:
        raise InvalidBackrefSyntax(template, pos, braced=False)
    return int(m.group()) - 1, m.end()
