"""
models/result_table.py
----------------------
In-memory copy of a result set returned by the engine.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

from db.errors import EmptyResultError


@dataclass
class ResultTable:
    """
    A fully materialized, rectangular result set.

    Attributes:
        columns: Column names in result order.
        rows: Row tuples in result order.
    """
    columns: list[str] = field(default_factory=list)
    rows: list[tuple] = field(default_factory=list)

    @classmethod
    def from_cursor(cls, cursor) -> "ResultTable":
        """Read every row from an executed DB-API cursor."""
        if cursor.description is None:
            return cls()
        columns = [col[0] for col in cursor.description]
        rows = [tuple(r) for r in cursor.fetchall()]
        return cls(columns=columns, rows=rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def first(self) -> Any:
        """
        Return the value in row 0, column 0.

        Raises:
            EmptyResultError: If the result has no rows or no columns.
        """
        if not self.columns:
            raise EmptyResultError("Result has no columns.")
        if not self.rows:
            raise EmptyResultError("Result has no rows.")
        return self.rows[0][0]

    def column(self, name: str) -> list:
        """All values of one column, by name."""
        try:
            idx = self.columns.index(name)
        except ValueError:
            raise KeyError(name) from None
        return [r[idx] for r in self.rows]

    def to_dicts(self) -> list[dict]:
        """Rows as column-name keyed dicts."""
        return [dict(zip(self.columns, r)) for r in self.rows]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[tuple]:
        return iter(self.rows)
