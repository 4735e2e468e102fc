from __future__ import annotations

from typing import TYPE_CHECKING

from src.xero_sync.exceptions import ConfigurationError
from src.xero_sync.remote.descriptor import API_CORE, API_FILE, API_PAYROLL

if TYPE_CHECKING:
    from src.xero_sync.application import Application

_VERSION_OPTIONS = {
    API_CORE: "core_version",
    API_PAYROLL: "payroll_version",
    API_FILE: "file_version",
}


class URL:
    """`{base_url}/{api_stem}/{version}/{path}` for one API endpoint."""

    def __init__(self, app: "Application", path: str, api_stem: str = API_CORE) -> None:
        self.path = path
        self.api_stem = api_stem

        if path.startswith(("http://", "https://")):
            self.full_url = path
            return

        version_option = _VERSION_OPTIONS.get(api_stem)
        if version_option is None:
            raise ConfigurationError(f"Invalid API stem [{api_stem}]")

        xero = app.get_config("xero")
        base = str(xero["base_url"]).rstrip("/")
        version = xero[version_option]
        self.full_url = f"{base}/{api_stem}/{version}/{path.lstrip('/')}"

    def __str__(self) -> str:
        return self.full_url

    def __repr__(self) -> str:
        return f"URL({self.full_url!r})"
