"""Immutable, case-insensitive request headers."""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Case-insensitive view over raw ASGI header pairs.

    Names are lower-cased and values decoded as latin-1 once, at
    construction. ``__getitem__`` returns the first value for a name;
    ``get_list`` returns all of them.
    """

    __slots__ = ("_items", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        items: dict[str, list[str]] = {}
        for name, value in raw:
            items.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._items = items

    def __getitem__(self, key: str) -> str:
        return self._items[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return every value sent for *key*."""
        return list(self._items.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The undecoded ASGI header pairs."""
        return self._raw
