"""
Text localization and variable interpolation.

Text values in content and dialogue are either literal strings or
localization references written as "@dotted.key". References resolve
against the active locale's dictionary and fall back to the reference
itself when the key is missing. After resolution, "{name}" placeholders
are filled from session variables; unknown names are left as written.
"""

import re
from typing import Callable, Mapping, Optional

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

LOCALIZATION_PREFIX = "@"


def _format(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def interpolate(text: str, variables: Optional[Mapping[str, object]] = None) -> str:
    """Replace {name} with the variable's value where the variable exists."""
    if not variables:
        return text

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return _format(variables[name])
        return match.group(0)

    return _PLACEHOLDER.sub(substitute, text)


def resolve_text(
    text: str,
    locale_data: Mapping[str, str],
    variables: Optional[Mapping[str, object]] = None,
) -> str:
    """
    Resolve a text value for display.

    Args:
        text: Literal text or "@key" reference
        locale_data: Key to string dictionary of the active locale
        variables: Session variables for {name} interpolation

    Returns:
        The display string
    """
    if text.startswith(LOCALIZATION_PREFIX):
        key = text[len(LOCALIZATION_PREFIX):]
        text = locale_data.get(key, text)
    return interpolate(text, variables)


def create_resolver(
    locale_data: Mapping[str, str],
    variables: Optional[Mapping[str, object]] = None,
) -> Callable[[str], str]:
    """Bind a locale dictionary and variables into a one-argument resolver."""

    def resolve(text: str) -> str:
        return resolve_text(text, locale_data, variables)

    return resolve
