"""Ordered substitution rules loaded from YAML.

A rules file is a list of mappings::

    - pattern: 'a(.*?)a'
      replacement: '$1'
    - pattern: '(x)(y)'
      replacement: '${2}3$1'
      global: false
      ignorecase: true

Every pattern and template is compiled on load, so a broken rule is
reported before any text is rewritten.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import yaml

from safesub.models import SubstituteOptions
from safesub.options import options_from_mapping
from safesub.substitution import substitute_with_count
from safesub.template_engine import CompiledTemplate, compile_template

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("pattern", "replacement")


@dataclass
class Rule:
    pattern: str
    replacement: str
    options: SubstituteOptions = field(default_factory=SubstituteOptions)
    template: Optional[CompiledTemplate] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.template is None:
            self.template = compile_template(self.replacement)


def load_rules(path: str) -> list[Rule]:
    """Load and validate a rules file."""
    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Rules YAML must be a list, got {type(raw).__name__}")

    return [_parse_rule(i, entry) for i, entry in enumerate(raw)]


def apply_rules(text: str, rules: list[Rule]) -> tuple[str, int]:
    """Apply each rule in turn; returns the text and total replacements."""
    total = 0
    for rule in rules:
        result = substitute_with_count(text, rule.pattern, rule.template, rule.options)
        logger.debug("Rule %r replaced %d match(es)", rule.pattern, result.count)
        text = result.text
        total += result.count
    return text, total


def _parse_rule(i: int, entry) -> Rule:
    section = f"rules[{i}]"
    if not isinstance(entry, dict):
        raise ValueError(f"'{section}' must be a mapping, got {type(entry).__name__}")

    entry = dict(entry)
    missing = [k for k in _REQUIRED_KEYS if k not in entry]
    if missing:
        raise ValueError(f"'{section}' is missing required keys: {missing}")

    pattern = entry.pop("pattern")
    replacement = entry.pop("replacement")
    for key, value in (("pattern", pattern), ("replacement", replacement)):
        if not isinstance(value, str):
            raise ValueError(
                f"'{section}.{key}' must be a string, got {type(value).__name__}"
            )

    options = options_from_mapping(entry, section=section)
    try:
        re.compile(pattern, options.flags)
    except re.error as exc:
        raise ValueError(f"'{section}.pattern' is not a valid regex: {exc}") from exc
    return Rule(pattern=pattern, replacement=replacement, options=options)
