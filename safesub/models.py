"""Data models for template compilation and substitution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Literal:
    """Text emitted verbatim."""

    text: str


@dataclass(frozen=True)
class BackrefIndex:
    """Reference to a capture group, stored zero-based."""

    index: int

    @property
    def number(self) -> int:
        """The 1-based group number as written in the template."""
        return self.index + 1


Segment = Union[Literal, BackrefIndex]


@dataclass(frozen=True)
class MatchRecord:
    """Span of one match in the source string and its captured substrings."""

    start: int
    end: int
    captures: tuple[str, ...] = ()

    @classmethod
    def from_match(cls, match: re.Match) -> MatchRecord:
        # Groups that did not take part in the match come back as None
        captures = tuple("" if group is None else group for group in match.groups())
        return cls(start=match.start(), end=match.end(), captures=captures)


@dataclass
class SubstituteOptions:
    """How a substitution is carried out."""

    global_: bool = True  # False = replace the first match only
    flags: int = 0  # re flags, only used when the pattern is given as a string


@dataclass
class SubstitutionResult:
    """Substituted text and the number of replacements made."""

    text: str
    count: int = 0
