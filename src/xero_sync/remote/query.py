"""Filtered listing of a resource type.

Filtering, ordering and paging are evaluated by the remote API; this only
builds the request (`where`, `order`, `page`, `offset` parameters and the
`If-Modified-Since` header) and hydrates the returned elements.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from src.xero_sync.exceptions import ConfigurationError
from src.xero_sync.remote.descriptor import ResourceDescriptor
from src.xero_sync.remote.model import Model
from src.xero_sync.remote.request import Request
from src.xero_sync.remote.url import URL

if TYPE_CHECKING:
    from src.xero_sync.application import Application

logger = logging.getLogger(__name__)


def _format_where_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace('"', '\\"')
    return f'"{escaped}"'


class Query:
    ORDER_ASC = "ASC"
    ORDER_DESC = "DESC"

    def __init__(self, app: "Application") -> None:
        self.app = app
        self._descriptor: ResourceDescriptor | None = None
        self._where: list[tuple[str, str]] = []
        self._order: str | None = None
        self._modified_after: datetime | None = None
        self._page: int | None = None
        self._offset: int | None = None
        self._include_archived = False

    def from_(self, model: str | ResourceDescriptor) -> "Query":
        self._descriptor = self.app.validate_model_type(model)
        return self

    def _add_where(self, connector: str, args: tuple[Any, ...]) -> "Query":
        if len(args) == 1:
            clause = str(args[0])
        elif len(args) == 2:
            field, value = args
            clause = f"{field}=={_format_where_value(value)}"
        else:
            raise ConfigurationError("where() takes a raw clause or a (field, value) pair")
        self._where.append((connector, clause))
        return self

    def where(self, *args: Any) -> "Query":
        return self._add_where("AND", args)

    def or_where(self, *args: Any) -> "Query":
        return self._add_where("OR", args)

    def order_by(self, field: str, direction: str = ORDER_ASC) -> "Query":
        direction = direction.upper()
        if direction not in {self.ORDER_ASC, self.ORDER_DESC}:
            raise ConfigurationError(f"Invalid order direction [{direction}]")
        self._order = field if direction == self.ORDER_ASC else f"{field} {direction}"
        return self

    def modified_after(self, when: datetime) -> "Query":
        self._modified_after = when
        return self

    def page(self, page: int = 1) -> "Query":
        if page < 1:
            raise ConfigurationError("page must be >= 1")
        self._page = page
        return self

    def offset(self, offset: int = 0) -> "Query":
        self._offset = offset
        return self

    def include_archived(self, include: bool = True) -> "Query":
        self._include_archived = include
        return self

    def get_where(self) -> str:
        out = ""
        for connector, clause in self._where:
            out = clause if not out else f"{out} {connector} {clause}"
        return out

    def build_request(self) -> Request:
        if self._descriptor is None:
            raise ConfigurationError("Query has no model; call from_() first")

        descriptor = self._descriptor
        url = URL(self.app, descriptor.resource_uri, descriptor.api_stem)
        request = Request(self.app, url, Request.METHOD_GET)

        where = self.get_where()
        if where:
            request.set_parameter("where", where)
        if self._order:
            request.set_parameter("order", self._order)
        if self._page is not None:
            request.set_parameter("page", self._page)
        if self._offset is not None:
            request.set_parameter("offset", self._offset)
        if self._include_archived:
            request.set_parameter("includeArchived", "true")
        if self._modified_after is not None:
            request.set_header(
                "If-Modified-Since", self._modified_after.strftime("%Y-%m-%dT%H:%M:%S")
            )
        return request

    def execute(self) -> list[Model]:
        request = self.build_request()
        response = request.send()

        results: list[Model] = []
        for element in response.elements:
            model = Model(self._descriptor)
            model.from_string_array(element)
            results.append(model)

        logger.debug("Query on %s returned %s element(s)", self._descriptor.name, len(results))
        return results

    def first(self) -> Model | None:
        results = self.execute()
        return results[0] if results else None
