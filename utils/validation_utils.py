"""
utils/validation_utils.py

Purpose: Command argument parsing

- Integer amounts for credit commands
- CURP / NSS pair for /historial
"""

import re
from typing import Optional, Tuple


AMOUNT_PATTERN = re.compile(r"^[+-]?\d+$")


def parse_amount(raw: Optional[str]) -> Optional[int]:
    """
    Parses a credit amount.

    Args:
        raw: Argument text, e.g. "10" or "-3"

    Returns:
        The integer, or None if raw is not a whole number
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not AMOUNT_PATTERN.match(raw):
        return None
    return int(raw)


def parse_historial_args(args: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Splits "/historial" arguments into (curp, nss).

    Extra tokens are ignored; both values are passed on as typed.
    """
    if not args:
        return None
    parts = args.split()
    if len(parts) < 2:
        return None
    return parts[0], parts[1]
