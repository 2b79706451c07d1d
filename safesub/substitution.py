"""Regex search-and-replace driven by a user-supplied replacement template."""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

from safesub.models import MatchRecord, SubstituteOptions, SubstitutionResult
from safesub.template_engine import CompiledTemplate, compile_template

logger = logging.getLogger(__name__)

PatternLike = Union[str, "re.Pattern[str]"]
TemplateLike = Union[str, CompiledTemplate]


def substitute(
    source: str,
    pattern: PatternLike,
    template: TemplateLike,
    options: Optional[SubstituteOptions] = None,
) -> str:
    """Replace matches of *pattern* in *source* with the rendered *template*.

    All non-overlapping matches are replaced unless ``options.global_`` is
    False, in which case only the first one is. The template is compiled
    before any matching, so a malformed template fails even when the
    pattern never matches. An already compiled template is used as is.
    """
    return substitute_with_count(source, pattern, template, options).text


def substitute_with_count(
    source: str,
    pattern: PatternLike,
    template: TemplateLike,
    options: Optional[SubstituteOptions] = None,
) -> SubstitutionResult:
    """Same as substitute() but also reports how many matches were replaced."""
    if options is None:
        options = SubstituteOptions()

    if isinstance(template, CompiledTemplate):
        compiled = template
    else:
        compiled = compile_template(template)
    regex = _compile_pattern(pattern, options.flags)

    # Unmatched spans are copied from the source, so replacement text is
    # never searched again
    parts = []
    cursor = 0
    count = 0
    for match in regex.finditer(source):
        record = MatchRecord.from_match(match)
        parts.append(source[cursor:record.start])
        parts.append(compiled.render(record.captures))
        cursor = record.end
        count += 1
        if not options.global_:
            break
    parts.append(source[cursor:])

    logger.debug("Replaced %d match(es) of %r", count, regex.pattern)
    return SubstitutionResult(text="".join(parts), count=count)


def _compile_pattern(pattern: PatternLike, flags: int) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern, flags)
