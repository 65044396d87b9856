"""
utils/decoders.py
-----------------
Strict decoding of scalar results and formatting of timestamps sent
to the engine.
"""

import re
from datetime import datetime
from typing import Any

from db.errors import ResultDecodeError

_INT_RE = re.compile(r"^[+-]?\d+$")
_TRUE = {"true", "t"}
_FALSE = {"false", "f"}


def decode_int(value: Any) -> int:
    """
    Decode an integer result (ids, scheme ids).

    Raises:
        ResultDecodeError: If the value is not an integer or integer text.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    raise ResultDecodeError(f"Expected an integer result, got {value!r}")


def decode_bool(value: Any) -> bool:
    """
    Decode a boolean result.

    Accepts real booleans and the textual forms true/false (any case)
    or t/f. Anything else, numbers and NULL included, is an error
    rather than False.

    Raises:
        ResultDecodeError: If the value is not a boolean representation.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ResultDecodeError(f"Expected a boolean result, got {value!r}")


def decode_str(value: Any) -> str:
    """Decode a text result; NULL becomes an empty string."""
    return "" if value is None else str(value)


def format_timestamp(value: datetime) -> str:
    """
    Format a timestamp as `YYYY-MM-DD HH:MM:SS.ffffff`.

    Built from the numeric fields directly so neither locale nor the
    platform's strftime can change the output. Timezone info is ignored.
    """
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}.{value.microsecond:06d}"
    )
