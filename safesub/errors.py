"""Exception types raised while compiling or rendering replacement templates."""

from __future__ import annotations


class SafesubError(ValueError):
    """Base class for all errors caused by malformed user input."""


class TemplateSyntaxError(SafesubError):
    """A replacement template could not be compiled."""

    def __init__(self, message: str, template: str, position: int):
        super().__init__(f"{message} (at position {position} in {template!r})")
        self.template = template
        self.position = position


class TrailingEscape(TemplateSyntaxError):
    def __init__(self, template: str, position: int):
        super().__init__("Illegal trailing backslash", template, position)


class IllegalEscapeChar(TemplateSyntaxError):
    def __init__(self, template: str, position: int, char: str):
        super().__init__(
            f"Escape can only contain backslash or dollar sign, "
            f"not U+{ord(char):04X} {char!r}",
            template,
            position,
        )
        self.char = char


class MissingClosingBrace(TemplateSyntaxError):
    def __init__(self, template: str, position: int, number: int):
        super().__init__(
            f"Expected closing curly brace for ${{{number}}} identifier",
            template,
            position,
        )
        self.number = number


class InvalidBackrefSyntax(TemplateSyntaxError):
    def __init__(self, template: str, position: int, braced: bool):
        if braced:
            message = "Expected ${123} style numeric identifier inside ${...}"
        else:
            message = "Expected $123 or ${123} style number after dollar sign"
        super().__init__(message, template, position)
        self.braced = braced


class BackrefOutOfRange(SafesubError):
    """The template references a capture group the match did not produce."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Unknown backref ${requested}; there are only {available} captures"
        )
        self.requested = requested
        self.available = available
