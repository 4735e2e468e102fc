"""Resource type catalogue.

Each API area declares its descriptors as module constants; `default_registry`
collects them under their type tags.
"""

from __future__ import annotations

from src.xero_sync.models.accounting import ACCOUNTING_DESCRIPTORS
from src.xero_sync.models.files import FILES_DESCRIPTORS
from src.xero_sync.remote.descriptor import DescriptorRegistry


def default_registry() -> DescriptorRegistry:
    return DescriptorRegistry((*ACCOUNTING_DESCRIPTORS, *FILES_DESCRIPTORS))
