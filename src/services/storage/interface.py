"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for party storage.
This allows us to:
1. Keep parties in a local JSON file or in Google Sheets
2. Use a temporary store in tests
3. Keep the ledger and the flows decoupled from storage

The unit of storage is the whole Party aggregate. An update replaces the
stored party entirely; with a single writer the last write wins.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from src.models.party import Party


class PartyStorageInterface(ABC):
    """
    Abstract interface for party storage operations.

    Any storage implementation (local file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def list_parties(self) -> list[Party]:
        """
        List all stored parties.

        Returns:
            Parties in storage order

        Raises:
            StorageError: If the backend can't be read
        """
        pass

    @abstractmethod
    async def get_party(self, party_id: str) -> Optional[Party]:
        """
        Retrieve a party by its ID.

        Args:
            party_id: The party's identifier

        Returns:
            The party if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_party(self, name: str, party_date: date) -> Party:
        """
        Create a new, empty party.

        Args:
            name: Party name
            party_date: Date of the party

        Returns:
            The stored party, with its generated ID and no members,
            tasks or expenses

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def update_party(self, party: Party) -> Party:
        """
        Replace a stored party with the given aggregate.

        Args:
            party: The full, edited party

        Returns:
            The party as stored

        Raises:
            StorageError: If update fails
            NotFoundError: If party doesn't exist
        """
        pass

    @abstractmethod
    async def delete_party(self, party_id: str) -> bool:
        """
        Delete a party by ID.

        Args:
            party_id: The party's identifier

        Returns:
            True if a party was deleted, False if none matched
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend. Safe to retry."""
    pass
