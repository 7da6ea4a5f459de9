"""Case-insensitive HTTP headers.

``Headers`` is the immutable request side: it stores raw byte pairs from
the ASGI scope and decodes on access. ``ResponseHeaders`` is the mutable
response side: handlers and middleware edit it until the response header
is written, then it is encoded once into the ASGI start message.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower().encode("latin-1")
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]


class ResponseHeaders:
    """Mutable, case-insensitive response headers.

    Names are stored lower-cased. ``set`` replaces every value for a
    name, ``add`` appends one (needed for ``Set-Cookie`` and ``Vary``).
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[tuple[str, str]] = []

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name == key_lower for name, _ in self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ResponseHeaders({self._items!r})"

    def get(self, key: str, default: str = "") -> str:
        """Return the first value for *key*, or *default* if unset."""
        key_lower = key.lower()
        for name, value in self._items:
            if name == key_lower:
                return value
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower()
        return [value for name, value in self._items if name == key_lower]

    def set(self, key: str, value: str) -> None:
        """Replace every value of *key* with *value*."""
        self.delete(key)
        self._items.append((key.lower(), value))

    def add(self, key: str, value: str) -> None:
        """Append a value for *key*, keeping existing ones."""
        self._items.append((key.lower(), value))

    def delete(self, key: str) -> None:
        """Remove every value of *key*."""
        key_lower = key.lower()
        self._items = [(name, value) for name, value in self._items if name != key_lower]

    def raw(self) -> list[tuple[bytes, bytes]]:
        """Encode as ASGI header byte pairs."""
        return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in self._items]
