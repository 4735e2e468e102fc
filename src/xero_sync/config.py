"""Configuration defaults and loading.

Configuration is a two-level mapping (`section -> option -> value`). User
config is merged over the defaults recursively, so callers only pass what
they want to change.

Env vars read by `config_from_env`:
- XERO_ACCESS_TOKEN          bearer token (required)
- XERO_TENANT_ID             sent as the `Xero-tenant-id` header
- XERO_BASE_URL              [default: https://api.xero.com]
- XERO_HTTP_TIMEOUT_SECONDS  [default: 30]
"""

from __future__ import annotations

import copy
import os
from typing import Any, Mapping

from dotenv import load_dotenv

DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "xero": {
        "base_url": "https://api.xero.com",
        "core_version": "2.0",
        "payroll_version": "1.0",
        "file_version": "1.0",
        "tenant_id": None,
    },
    "oauth": {
        "access_token": None,
    },
    "http": {
        "user_agent": "xero-sync",
        "accept": "application/json",
        "timeout_seconds": 30,
    },
}


def merge_config(*configs: Mapping[str, Any]) -> dict[str, Any]:
    """Merge mappings left to right; nested mappings merge, everything else replaces."""

    merged: dict[str, Any] = {}
    for config in configs:
        for key, value in (config or {}).items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, Mapping):
                merged[key] = merge_config(current, value)
            elif isinstance(value, Mapping):
                merged[key] = merge_config(value)
            else:
                merged[key] = copy.copy(value)
    return merged


def config_from_env() -> dict[str, Any]:
    load_dotenv(override=False)

    access_token = os.environ.get("XERO_ACCESS_TOKEN")
    if not access_token:
        raise ValueError("Missing XERO_ACCESS_TOKEN")

    config: dict[str, Any] = {
        "xero": {"tenant_id": os.environ.get("XERO_TENANT_ID")},
        "oauth": {"access_token": access_token},
        "http": {"timeout_seconds": int(os.environ.get("XERO_HTTP_TIMEOUT_SECONDS", "30"))},
    }
    base_url = os.environ.get("XERO_BASE_URL")
    if base_url:
        config["xero"]["base_url"] = base_url.rstrip("/")
    return config
