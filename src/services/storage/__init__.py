"""
Storage Services Package

Provides the abstract party storage interface and its implementations:
a local JSON file and Google Sheets. Which one is used is a configuration
choice (STORAGE_BACKEND).
"""

from typing import Optional

from src.config import Settings, get_settings
from src.services.storage.interface import (
    NotFoundError,
    PartyStorageInterface,
    StorageConnectionError,
    StorageError,
)
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsPartyStorage,
)
from src.services.storage.local_json import LocalJsonPartyStorage
from src.services.storage.records import party_from_record, party_to_record


def create_party_storage(settings: Optional[Settings] = None) -> PartyStorageInterface:
    """
    Build the configured party storage backend.

    Raises:
        StorageError: If the backend is Google Sheets and it isn't configured
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "google_sheets":
        try:
            sheets_settings = settings.google_sheets
        except ValueError as e:
            raise StorageError(f"Google Sheets storage is not configured: {e}") from e
        return GoogleSheetsPartyStorage(GoogleSheetsClient(sheets_settings))

    return LocalJsonPartyStorage(storage_settings.local_path)


__all__ = [
    # Interface
    "PartyStorageInterface",
    "create_party_storage",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsPartyStorage",
    "LocalJsonPartyStorage",
    # Record codec
    "party_from_record",
    "party_to_record",
]
