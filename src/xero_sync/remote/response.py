"""Parsed result of one HTTP call.

The API answers in XML or JSON depending on the endpoint and the Accept
header, and wraps collections in an envelope:

- XML:  <Response><Id/>...<Contacts><Contact/>...</Contacts></Response>
- JSON: {"Id": ..., "ProviderName": ..., "Contacts": [{...}, ...]}
- Files API pages: {"TotalCount": ..., "Items": [{...}]}
- Files API single objects are flat: {"Id": ..., "Name": ...}

`elements` is always a list of mappings in payload order. For batch saves the
position of an element is the only link back to the request item, so per
element errors are keyed by index.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Mapping

from src.xero_sync.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotAvailableError,
    NotFoundError,
    RateLimitExceededError,
    RemoteError,
    ServerError,
    UnauthorizedError,
)
from src.xero_sync.helpers import STATUS_ATTRIBUTE_KEY, parse_xml

logger = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_CREATED = 201
STATUS_NO_CONTENT = 204

_ENVELOPE_KEYS = {"ProviderName", "DateTimeUTC", "Items"}


def _collect_messages(raw: Any) -> list[str]:
    """Flatten `ValidationErrors`/`Warnings` payloads into message strings."""

    if not raw:
        return []
    items = raw if isinstance(raw, list) else [raw]
    messages: list[str] = []
    for item in items:
        if isinstance(item, Mapping):
            if "Message" in item:
                messages.append(str(item["Message"]))
            else:
                # XML: <ValidationErrors><ValidationError>...</ValidationError></ValidationErrors>
                for nested in item.values():
                    messages.extend(_collect_messages(nested))
        elif item:
            messages.append(str(item))
    return messages


def _first_collection(data: Mapping[str, Any]) -> list[Any] | None:
    for value in data.values():
        if isinstance(value, list) and (not value or isinstance(value[0], Mapping)):
            return value
    return None


class Response:
    def __init__(
        self,
        status_code: int,
        body: str | None,
        headers: Mapping[str, str] | None = None,
        *,
        request: Any = None,
    ) -> None:
        self.status_code = status_code
        self.body = body or ""
        self.headers = dict(headers or {})
        self.request = request

        self.is_flat = False
        self.root_error: dict[str, Any] | None = None
        self._raw: Any = None
        self._elements: list[dict[str, Any]] = []
        self._element_errors: dict[int, list[str]] = {}
        self._element_warnings: dict[int, list[str]] = {}

        self.parse()

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""

    def _header(self, name: str) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None

    def parse(self) -> None:
        self._parse_body()
        self._parse_element_errors()
        self._raise_for_status()

    def _parse_body(self) -> None:
        text = self.body.strip()
        if not text:
            return

        if "xml" in self.content_type or text.startswith("<"):
            try:
                root_tag, data = parse_xml(text)
            except ET.ParseError:
                logger.debug("Unparseable XML body (status %s)", self.status_code)
                return
            self._raw = data
            self._parse_xml(root_tag, data)
            return

        if "json" in self.content_type or text[0] in "[{":
            try:
                data = json.loads(text)
            except ValueError:
                logger.debug("Unparseable JSON body (status %s)", self.status_code)
                return
            self._raw = data
            self._parse_json(data)

    def _parse_xml(self, root_tag: str, data: Any) -> None:
        if isinstance(data, list):
            self._elements = [e for e in data if isinstance(e, Mapping)]
            return
        if not isinstance(data, dict):
            return

        if root_tag == "ApiException":
            self.root_error = {
                "code": data.get("ErrorNumber"),
                "type": data.get("Type"),
                "message": data.get("Message"),
            }
            elements = data.get("Elements")
            if isinstance(elements, Mapping):
                # <Elements><DataContractBase/>...</Elements>
                nested: list[Any] = []
                for value in elements.values():
                    nested.extend(value if isinstance(value, list) else [value])
                elements = nested
            self._elements = [e for e in (elements or []) if isinstance(e, Mapping)]
            return

        if root_tag == "Response":
            self._elements = _first_collection(data) or []
            return

        self.is_flat = True
        self._elements = [data]

    def _parse_json(self, data: Any) -> None:
        if isinstance(data, list):
            self._elements = [e for e in data if isinstance(e, Mapping)]
            return
        if not isinstance(data, dict):
            return

        if "Elements" in data and ("ErrorNumber" in data or "Type" in data):
            self.root_error = {
                "code": data.get("ErrorNumber"),
                "type": data.get("Type"),
                "message": data.get("Message"),
            }
            self._elements = [e for e in data.get("Elements") or [] if isinstance(e, Mapping)]
            return

        if _ENVELOPE_KEYS.intersection(data):
            self._elements = _first_collection(data) or []
            return

        self.is_flat = True
        self._elements = [data]

    def _parse_element_errors(self) -> None:
        for index, element in enumerate(self._elements):
            errors = _collect_messages(element.get("ValidationErrors"))
            status = str(element.get(STATUS_ATTRIBUTE_KEY) or "").upper()
            if errors or status == "ERROR":
                self._element_errors[index] = errors or ["Element rejected by the API"]

            warnings = _collect_messages(element.get("Warnings"))
            if warnings or status == "WARNING":
                self._element_warnings[index] = warnings

    def _error_message(self) -> str:
        parts: list[str] = []
        if self.root_error and self.root_error.get("message"):
            parts.append(str(self.root_error["message"]))
        for messages in self._element_errors.values():
            parts.extend(messages)
        if not parts and isinstance(self._raw, Mapping):
            for key in ("Detail", "Message", "Title"):
                if self._raw.get(key):
                    parts.append(str(self._raw[key]))
                    break
        if not parts and self.body:
            parts.append(self.body.strip()[:500])
        return "; ".join(parts) or f"HTTP {self.status_code}"

    def _raise_for_status(self) -> None:
        code = self.status_code
        if code < 400:
            return

        message = self._error_message()
        kwargs = {"status_code": code, "response": self}
        if code == 400:
            raise BadRequestError(message, **kwargs)
        if code == 401:
            raise UnauthorizedError(message, **kwargs)
        if code == 403:
            raise ForbiddenError(message, **kwargs)
        if code == 404:
            raise NotFoundError(f"Resource not found: {message}", **kwargs)
        if code == 429:
            retry_after = self._header("Retry-After")
            raise RateLimitExceededError(
                message,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                problem=self._header("X-Rate-Limit-Problem"),
                response=self,
            )
        if code == 500:
            raise ServerError(message, **kwargs)
        if code == 503:
            raise NotAvailableError(message, **kwargs)
        raise RemoteError(message, **kwargs)

    @property
    def elements(self) -> list[dict[str, Any]]:
        return list(self._elements)

    @property
    def raw(self) -> Any:
        return self._raw

    def get_errors_for_element(self, index: int) -> list[str] | None:
        return self._element_errors.get(index)

    def get_warnings_for_element(self, index: int) -> list[str] | None:
        return self._element_warnings.get(index)

    @property
    def element_errors(self) -> dict[int, list[str]]:
        return {index: list(messages) for index, messages in self._element_errors.items()}

    @property
    def element_warnings(self) -> dict[int, list[str]]:
        return {index: list(messages) for index, messages in self._element_warnings.items()}

    def has_errors(self) -> bool:
        return bool(self._element_errors) or self.root_error is not None

    def __repr__(self) -> str:
        return (
            f"<Response status={self.status_code} elements={len(self._elements)} "
            f"errors={sorted(self._element_errors)!r}>"
        )
