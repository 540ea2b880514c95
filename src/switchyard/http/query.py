"""Request parameters — query string values plus bound path parameters.

Implements ``Mapping[str, str]`` with ``get_list`` for repeated keys.
Path parameters are merged in with ``add``, so handlers read both kinds
through one accessor. Values are only ever appended: a path parameter
never replaces a query-string value of the same name.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qs, urlencode


class QueryParams(Mapping[str, str]):
    """Multi-valued request parameters.

    Attributes:
        _data: Parsed parameters as field name -> list of values.
        _raw: Raw query string bytes as received.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key, in arrival order.
    """

    _data: dict[str, list[str]]
    _raw: bytes

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        self._raw = query_string
        self._data = parse_qs(query_string.decode("latin-1"), keep_blank_values=True)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self.get_list(k)!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    # -- Mutation (additive only) --

    def add(self, key: str, value: str) -> None:
        """Append *value* to *key*, keeping any existing values."""
        self._data.setdefault(key, []).append(value)

    def extend(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Append every ``(key, value)`` pair in order."""
        for key, value in pairs:
            self.add(key, value)

    def encode(self) -> str:
        """Re-encode all parameters, including bound path parameters."""
        return urlencode([(k, v) for k, values in self._data.items() for v in values])

    @property
    def raw(self) -> bytes:
        """The query string exactly as the client sent it."""
        return self._raw
