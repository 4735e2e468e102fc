"""Per-type resource metadata.

A `ResourceDescriptor` is an immutable record describing one remote entity
type: where it lives, how it is wrapped on the wire, which verbs the API
accepts for it and which properties it carries. Descriptors are registered in
a `DescriptorRegistry` at startup and shared by every instance of the type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

from src.xero_sync.exceptions import ConfigurationError, UnknownPropertyError
from src.xero_sync.helpers import parse_date, parse_datetime

METHOD_GET = "GET"
METHOD_PUT = "PUT"
METHOD_POST = "POST"
METHOD_DELETE = "DELETE"

API_CORE = "api.xro"
API_PAYROLL = "payroll.xro"
API_FILE = "files.xro"


class PropertyType(str, Enum):
    STRING = "string"
    INT = "int"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    OBJECT = "object"


@dataclass(frozen=True, slots=True)
class PropertyMeta:
    name: str
    kind: PropertyType = PropertyType.STRING
    related: "ResourceDescriptor | None" = None
    is_array: bool = False
    required: bool = False
    read_only: bool = False
    save_directly: bool = False


Setter = Callable[[Any, Any], None]


def _cast_scalar(kind: PropertyType, value: Any) -> Any:
    if value is None or (value == "" and kind is not PropertyType.STRING):
        return None
    if kind is PropertyType.STRING:
        return str(value)
    if kind is PropertyType.INT:
        return int(value)
    if kind is PropertyType.DECIMAL:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    if kind is PropertyType.BOOLEAN:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"true", "1", "yes"}
    if kind is PropertyType.DATE:
        return parse_date(value)
    if kind is PropertyType.DATETIME:
        return parse_datetime(value)
    raise ValueError(f"Cannot cast scalar of kind {kind}")


def cast_from_remote(meta: PropertyMeta, value: Any, model_cls: type) -> Any:
    """Cast a decoded response value into the local representation of `meta`."""

    if meta.kind is PropertyType.OBJECT:
        if meta.related is None:
            raise ConfigurationError(f"Property [{meta.name}] has no related type")

        def hydrate(raw: Any) -> Any:
            if isinstance(raw, model_cls):
                return raw
            child = model_cls(meta.related)
            child.from_string_array(raw if isinstance(raw, Mapping) else {})
            return child

        if meta.is_array:
            if value in (None, ""):
                return []
            items = value if isinstance(value, list) else [value]
            return [hydrate(item) for item in items]
        if value in (None, ""):
            return None
        return hydrate(value)

    if meta.is_array:
        if value in (None, ""):
            return []
        items = value if isinstance(value, list) else [value]
        return [_cast_scalar(meta.kind, item) for item in items]
    return _cast_scalar(meta.kind, value)


def _scalar_to_remote(kind: PropertyType, value: Any) -> Any:
    if kind is PropertyType.BOOLEAN:
        return "true" if value else "false"
    if kind is PropertyType.DATE:
        return value.isoformat() if hasattr(value, "isoformat") else str(value)
    if kind is PropertyType.DATETIME:
        if hasattr(value, "strftime"):
            return value.strftime("%Y-%m-%dT%H:%M:%S")
        return str(value)
    return str(value)


def cast_to_remote(meta: PropertyMeta, value: Any) -> Any:
    """Cast a local value to its outbound (string-based) representation."""

    if meta.kind is PropertyType.OBJECT:
        if meta.is_array:
            return [item.to_string_array() for item in value]
        return value.to_string_array()
    if meta.is_array:
        return [_scalar_to_remote(meta.kind, item) for item in value]
    return _scalar_to_remote(meta.kind, value)


def _make_setter(meta: PropertyMeta) -> Setter:
    def setter(model: Any, raw: Any) -> None:
        model.set(meta.name, cast_from_remote(meta, raw, type(model)))

    setter.__name__ = f"set_{meta.name}"
    return setter


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    resource_uri: str
    root_node_name: str
    guid_property: str
    properties: tuple[PropertyMeta, ...]
    api_stem: str = API_CORE
    supported_methods: frozenset[str] = frozenset({METHOD_GET})
    create_method: str | None = None
    _by_name: Mapping[str, PropertyMeta] = field(init=False, repr=False, compare=False)
    setters: Mapping[str, Setter] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_name = {meta.name: meta for meta in self.properties}
        if len(by_name) != len(self.properties):
            raise ConfigurationError(f"Duplicate property names on [{self.name}]")
        object.__setattr__(self, "supported_methods", frozenset(self.supported_methods))
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))
        object.__setattr__(
            self,
            "setters",
            MappingProxyType({meta.name: _make_setter(meta) for meta in self.properties}),
        )

    def __hash__(self) -> int:
        return hash((self.name, self.api_stem, self.resource_uri))

    def get_property(self, name: str) -> PropertyMeta:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownPropertyError(self.name, name) from None

    def has_property(self, name: str) -> bool:
        return name in self._by_name

    def supports_method(self, method: str) -> bool:
        return method in self.supported_methods

    @property
    def save_directly_properties(self) -> tuple[PropertyMeta, ...]:
        return tuple(meta for meta in self.properties if meta.save_directly)


class DescriptorRegistry:
    """Type tag -> descriptor lookup, populated once at startup."""

    def __init__(self, descriptors: Iterable[ResourceDescriptor] = ()) -> None:
        self._descriptors: dict[str, ResourceDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ResourceDescriptor) -> ResourceDescriptor:
        existing = self._descriptors.get(descriptor.name)
        if existing is not None and existing != descriptor:
            raise ConfigurationError(f"Model type [{descriptor.name}] is already registered")
        self._descriptors[descriptor.name] = descriptor
        return descriptor

    def get(self, type_tag: str) -> ResourceDescriptor:
        try:
            return self._descriptors[type_tag]
        except KeyError:
            raise ConfigurationError(
                f"Invalid model type [{type_tag}]", details={"model": type_tag}
            ) from None

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._descriptors

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)
