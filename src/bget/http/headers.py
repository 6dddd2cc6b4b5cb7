"""Case-insensitive, multi-value header mapping."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Union

HeaderValues = Union[str, Iterable[str]]


def as_values(values: HeaderValues) -> list[str]:
    """Normalise a single value or an iterable of values to a list of strings."""
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values]


class HeaderMap(MutableMapping[str, list[str]]):
    """
    Mapping of header name to an ordered list of values.

    Lookups ignore case, but the name is kept as it was first seen (or as it
    was last assigned with ``[]=``) for iteration and output. Values are
    always lists, so repeated headers such as ``Set-Cookie`` keep every
    occurrence in arrival order.

    Example:
        headers = HeaderMap()
        headers.add("Set-Cookie", "a=1")
        headers.add("set-cookie", "b=2")
        headers["SET-COOKIE"]  # ["a=1", "b=2"]
        headers == {"Set-Cookie": ["a=1", "b=2"]}  # True
    """

    def __init__(
        self,
        data: Mapping[str, HeaderValues] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._store: dict[str, tuple[str, list[str]]] = {}
        if data is None:
            return
        if isinstance(data, Mapping):
            for name, values in data.items():
                self[name] = values
        else:
            for name, value in data:
                self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append a value, keeping any values already stored for the name."""
        key = name.lower()
        if key in self._store:
            self._store[key][1].append(value)
        else:
            self._store[key] = (name, [value])

    def extend_last(self, name: str, continuation: str) -> None:
        """Append folded text to the last value of ``name``."""
        values = self._store[name.lower()][1]
        values[-1] = f"{values[-1]} {continuation}".strip()

    def __getitem__(self, name: str) -> list[str]:
        return self._store[name.lower()][1]

    def __setitem__(self, name: str, values: HeaderValues) -> None:
        self._store[name.lower()] = (name, as_values(values))

    def __delitem__(self, name: str) -> None:
        del self._store[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._store

    def copy(self) -> HeaderMap:
        return HeaderMap({name: list(values) for name, values in self.items()})

    def to_dict(self) -> dict[str, list[str]]:
        """Plain dict copy, original-case names to value lists."""
        return {name: list(values) for name, values in self.items()}

    def lines(self) -> list[str]:
        """Render as ``Name: value`` lines, one per value."""
        return [f"{name}: {value}" for name, values in self.items() for value in values]

    def __repr__(self) -> str:
        return f"HeaderMap({self.to_dict()!r})"
