"""
Record store and client data layer.
"""

from .record_store import RecordStore, RecordStoreError
from .registry_client import RegistryClient, RegistryState, RecordSaveError, coerce_form, render_rows

__all__ = [
    "RecordStore",
    "RecordStoreError",
    "RegistryClient",
    "RegistryState",
    "RecordSaveError",
    "coerce_form",
    "render_rows"
]
