"""
Size formatting and division parsing helpers for sizesort.

- format_size: render a byte count as "2 GB", "1.3970 GB", "512 B", ...
- parse_divisions: parse strings like "10gb,1gb,500b" into byte thresholds.
- sort_divisions: order thresholds the way the report writer consumes them.
"""

from __future__ import annotations

import re
from decimal import Decimal, localcontext
from typing import Iterable, List

from .errors import InvalidDivision


GB_BYTES = 1024**3
MB_BYTES = 1024**2
KB_BYTES = 1024
U64_MAX = 2**64 - 1

_UNITS = (
    (GB_BYTES, "GB"),
    (MB_BYTES, "MB"),
    (KB_BYTES, "KB"),
)

_UNIT_SELECTORS = {
    "g": GB_BYTES,
    "m": MB_BYTES,
    "k": KB_BYTES,
}

# Plain decimal literal: "12", "1.5", ".5", "2e3". No sign, no nan/inf.
_NUMBER_RE = re.compile(r"^\s*(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?\s*$", re.ASCII)


def format_size(num_bytes: int) -> str:
    """
    Format a byte count using the largest fitting binary unit.

    Exact multiples keep integer precision, everything else gets four decimals:
        0 -> "0 B"
        1024 -> "1 KB"
        1500 -> "1.4648 KB"
        2147483648 -> "2 GB"
    """
    for unit, label in _UNITS:
        if num_bytes >= unit:
            if num_bytes % unit == 0:
                return f"{num_bytes // unit} {label}"
            return f"{num_bytes / unit:.4f} {label}"
    return f"{num_bytes} B"


def _to_bytes(token: str, literal: str, multiplier: int) -> int:
    with localcontext() as ctx:
        ctx.prec = 80
        try:
            value = Decimal(literal.strip()) * multiplier
        except ArithmeticError as exc:
            raise InvalidDivision(token, f"'{literal.strip()}' is out of range") from exc
    if value >= U64_MAX:
        raise InvalidDivision(token, "size is above the unsigned 64-bit maximum")
    # int() on a Decimal truncates toward zero: "1.9b" -> 1
    return int(value)


def _parse_token(token: str) -> int:
    if len(token) < 2:
        raise InvalidDivision(token, "too short, expected <number><gb|mb|kb|b>")
    if token[-1] != "b":
        raise InvalidDivision(token, "must end with 'b' (gb, mb, kb or b)")

    selector = token[-2]
    if selector in _UNIT_SELECTORS:
        multiplier = _UNIT_SELECTORS[selector]
        literal = token[:-2]
    elif "0" <= selector <= "9":
        multiplier = 1
        literal = token[:-1]
    else:
        raise InvalidDivision(token, f"unknown size unit '{selector}b'")

    if not literal:
        raise InvalidDivision(token, "missing number before unit")
    if not _NUMBER_RE.match(literal):
        raise InvalidDivision(token, f"'{literal.strip()}' is not a number")
    return _to_bytes(token, literal, multiplier)


def parse_divisions(text: str) -> List[int]:
    """
    Parse a comma-separated list of size thresholds (case-insensitive).

    Accepted token forms: "10gb", "1.5mb", "64kb", "500b".
    An empty string means "no divisions" and returns [].
    The result keeps input order; see sort_divisions.

    Raises InvalidDivision with the offending token on the first bad entry.
    """
    if not text:
        return []
    return [_parse_token(token) for token in text.lower().split(",")]


def sort_divisions(divisions: Iterable[int]) -> List[int]:
    """Largest threshold first. Duplicates are kept."""
    return sorted(divisions, reverse=True)
