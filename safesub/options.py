"""Substitution options and their YAML loader."""

from __future__ import annotations

import re
from dataclasses import replace

import yaml

from safesub.models import SubstituteOptions

# YAML key -> re flag
FLAG_KEYS: dict[str, re.RegexFlag] = {
    "ignorecase": re.IGNORECASE,
    "multiline": re.MULTILINE,
    "dotall": re.DOTALL,
}

OPTION_KEYS = frozenset({"global", *FLAG_KEYS})


def default_options() -> SubstituteOptions:
    return SubstituteOptions()


def load_options(path: str) -> SubstituteOptions:
    """Load substitution options from a YAML file.

    Unknown keys or non-boolean values cause a ``ValueError`` so typos are
    caught early.
    """
    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        return default_options()
    if not isinstance(raw, dict):
        raise ValueError(f"Options YAML must be a mapping, got {type(raw).__name__}")

    return options_from_mapping(raw, section="options")


def options_from_mapping(raw: dict, section: str = "options") -> SubstituteOptions:
    """Build options from a mapping using the same keys as the YAML file."""
    _validate_keys(section, raw, OPTION_KEYS)

    options = default_options()
    if "global" in raw:
        options.global_ = _as_bool(section, "global", raw["global"])
    for key, flag in FLAG_KEYS.items():
        if _as_bool(section, key, raw.get(key, False)):
            options.flags |= flag
    return options


def apply_overrides(
    options: SubstituteOptions,
    first_only: bool = False,
    ignorecase: bool = False,
    multiline: bool = False,
    dotall: bool = False,
) -> SubstituteOptions:
    """Return a copy of options with CLI flags layered on top.

    Flags only ever switch things on.
    """
    flags = options.flags
    if ignorecase:
        flags |= re.IGNORECASE
    if multiline:
        flags |= re.MULTILINE
    if dotall:
        flags |= re.DOTALL
    global_ = options.global_ and not first_only
    return replace(options, global_=global_, flags=flags)


def _validate_keys(section: str, raw: dict, allowed: frozenset[str]) -> None:
    unknown = set(raw) - allowed
    if unknown:
        raise ValueError(
            f"Unknown keys in '{section}': {sorted(map(str, unknown))}. "
            f"Allowed: {sorted(allowed)}"
        )


def _as_bool(section: str, key: str, value) -> bool:
    if not isinstance(value, bool):
        raise ValueError(
            f"'{section}.{key}' must be true or false, got {value!r}"
        )
    return value
