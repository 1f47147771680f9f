"""Human-facing number formatting."""

from __future__ import annotations

import re

# A position inside a digit run followed by a multiple of three digits
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")


def format_number(value: float | int | str | None, sep: str = ",") -> str:
    """Insert a thousands separator into the integer part of ``value``.

    Native numbers and numeric strings are handled identically; the upstream
    feeds mix both. The fractional part after the first ``.`` is left as is:

        >>> format_number(1234567.89)
        '1,234,567.89'
        >>> format_number("5000000")
        '5,000,000'

    Anything that does not look like a number is passed through unchanged
    apart from grouping of its leading digit run. Never raises.
    """
    if value is None:
        return ""
    text = str(value)
    integer, dot, fraction = text.partition(".")
    return _THOUSANDS.sub(sep, integer) + dot + fraction
