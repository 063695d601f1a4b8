"""Bulk vendor factory.

Provides get_vendor() / set_vendor() to swap implementations:
- FakeBulkVendor for development and testing
- a real provider adapter in production, installed with set_vendor()
"""

from dispatcher.bulk.fake_vendor import FakeBulkVendor
from dispatcher.bulk.vendor_port import BulkVendor

_current_vendor: BulkVendor | None = None


def get_vendor() -> BulkVendor:
    """Return the current bulk vendor. Defaults to FakeBulkVendor."""
    global _current_vendor
    if _current_vendor is None:
        _current_vendor = FakeBulkVendor()
    return _current_vendor


def set_vendor(vendor: BulkVendor) -> None:
    """Override the active bulk vendor."""
    global _current_vendor
    _current_vendor = vendor


def reset_vendor() -> None:
    """Reset to default vendor."""
    global _current_vendor
    _current_vendor = None
