"""Services package."""

from src.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsPartyStorage,
    LocalJsonPartyStorage,
    NotFoundError,
    PartyStorageInterface,
    StorageConnectionError,
    StorageError,
    create_party_storage,
)

__all__ = [
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsPartyStorage",
    "LocalJsonPartyStorage",
    "NotFoundError",
    "PartyStorageInterface",
    "StorageConnectionError",
    "StorageError",
    "create_party_storage",
]
