"""Shared fixtures for sync engine tests.

Network access is replaced by a fake `requests.request` that records every
call and answers from a queue of canned responses.
"""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from src.xero_sync.application import Application


class _FakeResp:
    def __init__(self, status_code: int, text: str, headers: dict | None = None) -> None:
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}


class FakeHTTP:
    def __init__(self) -> None:
        self.calls: list[SimpleNamespace] = []
        self._queue: list[_FakeResp] = []

    def queue(self, status_code: int = 200, text: str = "", headers: dict | None = None) -> "FakeHTTP":
        self._queue.append(_FakeResp(status_code, text, headers))
        return self

    def queue_xml(self, text: str, status_code: int = 200, headers: dict | None = None) -> "FakeHTTP":
        return self.queue(
            status_code, text, {"Content-Type": "text/xml; charset=utf-8", **(headers or {})}
        )

    def queue_json(self, payload, status_code: int = 200, headers: dict | None = None) -> "FakeHTTP":
        return self.queue(
            status_code,
            json.dumps(payload),
            {"Content-Type": "application/json; charset=utf-8", **(headers or {})},
        )

    def __call__(self, method, url, headers=None, params=None, data=None, timeout=None):
        self.calls.append(
            SimpleNamespace(
                method=method,
                url=url,
                headers=headers or {},
                params=params or {},
                body=data.decode("utf-8") if data is not None else None,
                timeout=timeout,
            )
        )
        if not self._queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return self._queue.pop(0)

    @property
    def last(self) -> SimpleNamespace:
        return self.calls[-1]


@pytest.fixture
def http(monkeypatch) -> FakeHTTP:
    fake = FakeHTTP()
    monkeypatch.setattr("requests.request", fake)
    return fake


@pytest.fixture
def app() -> Application:
    return Application(
        {
            "oauth": {"access_token": "test-token"},
            "xero": {"tenant_id": "tenant-123"},
        }
    )


def xero_envelope(collection: str, items_xml: str) -> str:
    return (
        "<Response>"
        "<Id>8b1c2d3e</Id><Status>OK</Status><ProviderName>Test</ProviderName>"
        "<DateTimeUTC>2024-05-01T10:00:00</DateTimeUTC>"
        f"<{collection}>{items_xml}</{collection}>"
        "</Response>"
    )


@pytest.fixture
def envelope():
    return xero_envelope
