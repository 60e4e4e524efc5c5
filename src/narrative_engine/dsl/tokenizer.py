"""
Dialogue script tokenizer.

Turns raw script text into Token records: one per non-blank line, with the
comment removed, surrounding whitespace trimmed, the 1-based source line
number and the indentation depth (count of leading whitespace characters).

A '#' starts a comment unless it sits inside a double-quoted literal.
An unclosed quote protects nothing.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    """A single meaningful line of dialogue source."""
    line: str
    line_number: int
    indent: int

    @property
    def keyword(self) -> str:
        """First whitespace-delimited word of the line."""
        return self.line.split(None, 1)[0]

    @property
    def rest(self) -> str:
        """Everything after the first word, trimmed."""
        parts = self.line.split(None, 1)
        return parts[1].strip() if len(parts) > 1 else ""


def strip_comment(line: str) -> str:
    """Remove a trailing '#' comment, keeping '#' inside closed double quotes."""
    index = 0
    while index < len(line):
        char = line[index]
        if char == '"':
            closing = line.find('"', index + 1)
            if closing != -1:
                index = closing + 1
                continue
        elif char == "#":
            return line[:index]
        index += 1
    return line


def tokenize(source: str) -> list[Token]:
    """
    Tokenize dialogue source.

    Args:
        source: Raw script text

    Returns:
        Tokens in source order, blank and comment-only lines removed
    """
    tokens = []
    for number, raw in enumerate(source.splitlines(), start=1):
        text = strip_comment(raw)
        stripped = text.strip()
        if not stripped:
            continue
        indent = len(text) - len(text.lstrip())
        tokens.append(Token(line=stripped, line_number=number, indent=indent))
    return tokens
