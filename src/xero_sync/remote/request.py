"""HTTP transport for the sync engine.

One `Request` is one blocking call through `requests`. Retries, caching and
token refresh are not handled here: any failure is raised to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

from src.xero_sync.exceptions import ConfigurationError
from src.xero_sync.remote.descriptor import METHOD_DELETE, METHOD_GET, METHOD_POST, METHOD_PUT
from src.xero_sync.remote.response import Response
from src.xero_sync.remote.url import URL

if TYPE_CHECKING:
    from src.xero_sync.application import Application

logger = logging.getLogger(__name__)


class Request:
    METHOD_GET = METHOD_GET
    METHOD_PUT = METHOD_PUT
    METHOD_POST = METHOD_POST
    METHOD_DELETE = METHOD_DELETE

    CONTENT_TYPE_XML = "application/xml"
    CONTENT_TYPE_JSON = "application/json"

    def __init__(self, app: "Application", url: URL, method: str = METHOD_GET) -> None:
        if method not in {METHOD_GET, METHOD_PUT, METHOD_POST, METHOD_DELETE}:
            raise ConfigurationError(f"Invalid request method [{method}]")

        self.app = app
        self.url = url
        self.method = method
        self.body: str | None = None
        self._parameters: dict[str, str] = {}
        self._headers: dict[str, str] = {}
        self._response: Response | None = None

        http = app.get_config("http")
        self._headers["Accept"] = http.get("accept") or self.CONTENT_TYPE_JSON
        if http.get("user_agent"):
            self._headers["User-Agent"] = http["user_agent"]

    def set_parameter(self, key: str, value: Any) -> "Request":
        self._parameters[key] = str(value)
        return self

    def get_parameters(self) -> dict[str, str]:
        return dict(self._parameters)

    def set_header(self, key: str, value: str) -> "Request":
        self._headers[key] = value
        return self

    def get_headers(self) -> dict[str, str]:
        return dict(self._headers)

    def set_body(self, body: str, content_type: str = CONTENT_TYPE_XML) -> "Request":
        self.body = body
        self._headers["Content-Type"] = content_type
        return self

    def _auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        token = self.app.get_config("oauth").get("access_token")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        tenant_id = self.app.get_config("xero").get("tenant_id")
        if tenant_id:
            headers["Xero-tenant-id"] = str(tenant_id)
        return headers

    def send(self) -> Response:
        headers = {**self._headers, **self._auth_headers()}
        timeout = self.app.get_config("http").get("timeout_seconds")

        resp = requests.request(
            self.method,
            str(self.url),
            headers=headers,
            params=self._parameters or None,
            data=self.body.encode("utf-8") if self.body is not None else None,
            timeout=timeout,
        )

        # never log headers (bearer token)
        logger.debug("%s %s -> %s", self.method, self.url, resp.status_code)

        self._response = Response(
            resp.status_code,
            resp.text,
            getattr(resp, "headers", None),
            request=self,
        )
        return self._response

    @property
    def response(self) -> Response | None:
        return self._response
