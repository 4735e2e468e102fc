"""Local representation of one remote entity.

A `Model` holds property values for a single instance of a resource type and
tracks which of them changed locally. The type itself (endpoint, wire shape,
property metadata) lives on the shared `ResourceDescriptor`.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from src.xero_sync.exceptions import ValidationError
from src.xero_sync.remote.descriptor import (
    PropertyType,
    ResourceDescriptor,
    cast_from_remote,
    cast_to_remote,
)
from src.xero_sync.remote.dirty import DirtyState


class Model:
    def __init__(
        self,
        descriptor: ResourceDescriptor,
        values: Mapping[str, Any] | None = None,
    ) -> None:
        self.descriptor = descriptor
        self._data: dict[str, Any] = {}
        self._dirty = DirtyState()
        # property name -> {element index: [messages]} from the last relationship save
        self.relationship_errors: dict[str, dict[int, list[str]]] = {}

        for name, value in (values or {}).items():
            self.set(name, value)

    @property
    def type_name(self) -> str:
        return self.descriptor.name

    # Property access

    def get(self, name: str) -> Any:
        meta = self.descriptor.get_property(name)
        value = self._data.get(name)
        if value is None and meta.is_array:
            return []
        return value

    def set(self, name: str, value: Any) -> "Model":
        meta = self.descriptor.get_property(name)
        if meta.is_array and value is not None and not isinstance(value, list):
            value = list(value)
        current = self._data.get(name)
        # the stored list handed back after an in-place edit still counts as a change
        if name not in self._data or current != value or (meta.is_array and value is current):
            self._dirty.mark(name)
        self._data[name] = value
        return self

    def add_to(self, name: str, value: Any) -> "Model":
        """Append `value` to an array property and mark it dirty."""

        meta = self.descriptor.get_property(name)
        if not meta.is_array:
            raise ValueError(f"{self.type_name}.{name} is not an array property")
        self._data.setdefault(name, [])
        if self._data[name] is None:
            self._data[name] = []
        self._data[name].append(value)
        self._dirty.mark(name)
        return self

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._data.get(name) is not None

    def __iter__(self) -> Iterator[str]:
        return (name for name, value in self._data.items() if value is not None)

    @property
    def guid(self) -> str | None:
        value = self._data.get(self.descriptor.guid_property)
        return value or None

    def has_guid(self) -> bool:
        return self.guid is not None

    # Dirty tracking

    def is_dirty(self, name: str | None = None) -> bool:
        return self._dirty.is_dirty(name)

    def set_dirty(self, name: str) -> "Model":
        self.descriptor.get_property(name)
        self._dirty.mark(name)
        return self

    def set_clean(self, name: str | None = None) -> "Model":
        self._dirty.clear(name)
        return self

    @property
    def dirty_fields(self) -> frozenset[str]:
        return self._dirty.fields

    # Serialization

    def to_string_array(self, dirty_only: bool = False) -> dict[str, Any]:
        """Outbound representation of this object's own fields.

        Save-directly and read-only properties are never sent inline. With
        `dirty_only` only changed fields are kept, plus the GUID so the remote
        side can address the record.
        """

        out: dict[str, Any] = {}
        guid_property = self.descriptor.guid_property
        for meta in self.descriptor.properties:
            if meta.save_directly or meta.read_only:
                continue
            value = self._data.get(meta.name)
            if value is None:
                continue
            if dirty_only and meta.name != guid_property and not self._dirty.is_dirty(meta.name):
                continue
            out[meta.name] = cast_to_remote(meta, value)
        return out

    def from_string_array(self, data: Mapping[str, Any], replace_data: bool = False) -> "Model":
        """Fold a decoded response element into this object.

        Keys the type does not declare are ignored. With `replace_data`,
        declared properties missing from `data` are reset. Dirty flags are
        left for the caller to clear.
        """

        for meta in self.descriptor.properties:
            if meta.name in data:
                self._data[meta.name] = cast_from_remote(meta, data[meta.name], type(self))
            elif replace_data:
                self._data.pop(meta.name, None)
        return self

    def validate(self) -> bool:
        for meta in self.descriptor.properties:
            value = self._data.get(meta.name)
            if meta.required and (value is None or value == "" or value == []):
                raise ValidationError(
                    f"{self.type_name}.{meta.name} is required",
                    details={"model": self.type_name, "property": meta.name},
                )
            if meta.kind is PropertyType.OBJECT and value:
                children = value if isinstance(value, list) else [value]
                for child in children:
                    if isinstance(child, Model):
                        child.validate()
        return True

    def __repr__(self) -> str:
        return f"<{self.type_name} guid={self.guid!r} dirty={sorted(self.dirty_fields)!r}>"
