from __future__ import annotations


class DirtyState:
    """Set of locally modified field names for one object.

    An object is dirty when any of its fields is. Only the owning model
    mutates this; the engine clears it after a successful round-trip.
    """

    __slots__ = ("_fields",)

    def __init__(self) -> None:
        self._fields: set[str] = set()

    def mark(self, field: str) -> None:
        self._fields.add(field)

    def clear(self, field: str | None = None) -> None:
        if field is None:
            self._fields.clear()
        else:
            self._fields.discard(field)

    def is_dirty(self, field: str | None = None) -> bool:
        if field is None:
            return bool(self._fields)
        return field in self._fields

    @property
    def fields(self) -> frozenset[str]:
        return frozenset(self._fields)

    def __repr__(self) -> str:
        return f"DirtyState({sorted(self._fields)!r})"
