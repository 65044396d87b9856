"""
models/statement.py
-------------------
A single statement sent to the engine: SQL text plus bound parameters.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from db.errors import ProviderError

# `%%` is an escaped literal percent in format/pyformat SQL.
_PLACEHOLDER = re.compile(r"%%|%s")


@dataclass(frozen=True)
class Statement:
    """
    Represents one pending or immediate engine call.

    Attributes:
        sql: Statement text using `%s` placeholders.
        params: Values bound to the placeholders, in order. Empty for raw
            text, which is then sent verbatim.
    """
    sql: str
    params: tuple[Any, ...] = field(default_factory=tuple, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def function(self) -> str:
        """Name of the engine function called, used for logging."""
        match = re.search(r"(?:SELECT\s+(?:\*\s+FROM\s+)?)(\w+)\s*\(", self.sql, re.IGNORECASE)
        return match.group(1) if match else "statement"

    def render(self, paramstyle: str) -> str:
        """
        Return the SQL text with placeholders in the driver's paramstyle.

        Raw statements (no params) are returned unchanged. For qmark and
        numeric drivers an escaped `%%` becomes a single `%`, so the text
        means the same to every driver.

        Raises:
            ProviderError: For paramstyles other than format, pyformat,
                qmark and numeric.
        """
        if not self.params or paramstyle in ("format", "pyformat"):
            return self.sql
        if paramstyle == "qmark":
            return _PLACEHOLDER.sub(lambda m: "%" if m.group() == "%%" else "?", self.sql)
        if paramstyle == "numeric":
            counter = iter(range(1, len(self.params) + 1))
            return _PLACEHOLDER.sub(
                lambda m: "%" if m.group() == "%%" else f":{next(counter)}", self.sql
            )
        raise ProviderError(f"Unsupported paramstyle: {paramstyle!r}", {"paramstyle": paramstyle})

    def __str__(self) -> str:
        return self.sql


def as_statement(statement: "Statement | str") -> Statement:
    """Wrap raw SQL text in a parameterless Statement."""
    if isinstance(statement, Statement):
        return statement
    return Statement(sql=statement)
