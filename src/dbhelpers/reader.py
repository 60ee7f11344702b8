"""
Forward-only row reader over a DB-API cursor.

``Reader`` is what selectors, actions and predicates receive. It exposes the
current row by position or by column name plus a few typed accessors.
"""
import logging
from collections import deque
from typing import Any, Self

from libb import attrdict

logger = logging.getLogger(__name__)

__all__ = ['Reader']


class Reader:
    """Forward-only cursor over the result of one command execution.

    Rows are fetched from the driver in chunks of ``arraysize``; ``read()``
    advances to the next row and returns False once the result is exhausted.
    """

    def __init__(self, cursor: Any, arraysize: int = 500) -> None:
        self.dbapi_cursor = cursor
        self.arraysize = arraysize
        self._buffer: deque = deque()
        self._row: tuple | None = None
        self._exhausted = cursor.description is None
        self._names: list[str] = [d[0] for d in (cursor.description or [])]
        self._ordinals: dict[str, int] | None = None
        self.closed = False
        self.rows_read = 0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            key = self.get_ordinal(key)
        return self._current()[key]

    def __len__(self) -> int:
        return self.field_count

    def read(self) -> bool:
        """Advance to the next row. Returns False when no rows remain."""
        if self.closed:
            raise ValueError('Reader is closed')
        if not self._buffer and not self._exhausted:
            chunk = self.dbapi_cursor.fetchmany(self.arraysize)
            if chunk:
                self._buffer.extend(chunk)
            else:
                self._exhausted = True
        if not self._buffer:
            self._row = None
            return False
        self._row = tuple(self._buffer.popleft())
        self.rows_read += 1
        return True

    def close(self) -> None:
        """Release the reader. The owning command closes the cursor."""
        if not self.closed:
            self.closed = True
            self._buffer.clear()
            self._row = None
            logger.debug(f'Reader closed after {self.rows_read} rows')

    @property
    def field_count(self) -> int:
        return len(self._names)

    def get_name(self, i: int) -> str:
        return self._names[i]

    def get_ordinal(self, name: str) -> int:
        """Position of a column, matched case-insensitively."""
        if self._ordinals is None:
            self._ordinals = {}
            for i, n in enumerate(self._names):
                self._ordinals.setdefault(n.lower(), i)
        try:
            return self._ordinals[name.lower()]
        except KeyError:
            raise IndexError(f'No column named {name!r}') from None

    def get_value(self, i: int | str) -> Any:
        return self[i]

    def is_null(self, i: int | str) -> bool:
        return self[i] is None

    def get_int(self, i: int | str) -> int:
        return int(self[i])

    def get_float(self, i: int | str) -> float:
        return float(self[i])

    def get_str(self, i: int | str) -> str:
        return str(self[i])

    def get_bool(self, i: int | str) -> bool:
        return bool(self[i])

    def values(self) -> tuple:
        """All values of the current row in column order."""
        return self._current()

    def to_dict(self) -> dict[str, Any]:
        return dict(zip(self._names, self._current()))

    def to_attrdict(self) -> attrdict:
        return attrdict(self.to_dict())

    def _current(self) -> tuple:
        if self._row is None:
            raise ValueError('No current row; call read() first')
        return self._row
