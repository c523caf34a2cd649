"""
Local JSON File Storage

All parties live as a list of records in a single JSON file. This is the
offline backend: no accounts or network required.

TRADEOFFS:
- The whole file is rewritten on every change (fine for a handful of parties)
- No locking; one writer at a time
- A corrupt file reads as empty rather than blocking the app; it is first
  copied to `<name>.bak`
"""

import json
import shutil
from datetime import date
from pathlib import Path
from typing import Optional, Union

from src.log import get_logger
from src.models.party import Party, new_entity_id
from src.services.storage.interface import (
    NotFoundError,
    PartyStorageInterface,
    StorageError,
)
from src.services.storage.records import party_from_record, party_to_record


class LocalJsonPartyStorage(PartyStorageInterface):
    """
    JSON file implementation of party storage.

    The file holds a JSON array of party records in creation order.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._backup_path = self._path.with_suffix(self._path.suffix + ".bak")
        self._logger = get_logger(__name__, backend="local", path=str(self._path))

    def _read_records(self) -> list[dict]:
        if not self._path.exists():
            return []
        try:
            records = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        except OSError as e:
            self._logger.error("local_store_unreadable", error=str(e))
            return []
        except json.JSONDecodeError as e:
            self._logger.error("local_store_unreadable", error=str(e))
            self._backup_unreadable()
            return []
        if not isinstance(records, list):
            self._logger.error("local_store_unreadable", error="top-level value is not a list")
            self._backup_unreadable()
            return []
        return records

    def _backup_unreadable(self) -> None:
        """Copy an unreadable store aside so the next write doesn't lose it."""
        try:
            shutil.copyfile(self._path, self._backup_path)
        except OSError as e:
            self._logger.error("local_store_backup_failed", error=str(e))
            return
        self._logger.warning("local_store_backed_up", backup_path=str(self._backup_path))

    def _write_records(self, records: list[dict]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e

    async def list_parties(self) -> list[Party]:
        """List all parties in creation order."""
        return [party_from_record(r) for r in self._read_records()]

    async def get_party(self, party_id: str) -> Optional[Party]:
        """Retrieve a party by its ID."""
        for record in self._read_records():
            if record.get("id") == party_id:
                return party_from_record(record)
        return None

    async def create_party(self, name: str, party_date: date) -> Party:
        """Create and store a new, empty party."""
        party = Party(id=new_entity_id(), name=name, date=party_date)
        records = self._read_records()
        records.append(party_to_record(party))
        self._write_records(records)
        self._logger.info("party_created", party_id=party.id)
        return party

    async def update_party(self, party: Party) -> Party:
        """Replace the stored party with the same ID."""
        records = self._read_records()
        for idx, record in enumerate(records):
            if record.get("id") == party.id:
                records[idx] = party_to_record(party)
                self._write_records(records)
                self._logger.info("party_updated", party_id=party.id)
                return party

        raise NotFoundError(f"Party not found: {party.id}")

    async def delete_party(self, party_id: str) -> bool:
        """Delete a party by ID."""
        records = self._read_records()
        remaining = [r for r in records if r.get("id") != party_id]
        if len(remaining) == len(records):
            return False

        self._write_records(remaining)
        self._logger.info("party_deleted", party_id=party_id)
        return True
