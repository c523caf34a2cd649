"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the shared, remote backend because:
1. Every friend in a party can open the same sheet
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- One row per party; members, tasks and expenses are JSON columns
- No transactions: an update rewrites the party's row (last write wins)
- Limited query capabilities (we filter in Python)

The implementation follows the abstract interface, so the rest of the app
doesn't care whether parties live in a sheet or a local file.
"""

import json
from datetime import date, datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import GoogleSheetsSettings, get_settings
from src.log import get_logger
from src.models.party import Party, new_entity_id
from src.services.storage.interface import (
    NotFoundError,
    PartyStorageInterface,
    StorageConnectionError,
    StorageError,
)
from src.services.storage.records import party_from_record, party_to_record


# Column mappings for Parties sheet
PARTY_COLUMNS = [
    "id",
    "name",
    "date",
    "friends_json",
    "tasks_json",
    "expenses_json",
    "updated_at",
]

retry_on_connection_error = retry(
    retry=retry_if_exception_type(StorageConnectionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry_on_connection_error
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_parties_sheet(self) -> gspread.Worksheet:
        """Get or create the Parties worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.parties_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.parties_sheet_name,
                rows=1000,
                cols=len(PARTY_COLUMNS),
            )
            sheet.append_row(PARTY_COLUMNS)
        return sheet


class GoogleSheetsPartyStorage(PartyStorageInterface):
    """
    Google Sheets implementation of party storage.

    Parties are stored as rows in a worksheet with one party per row.
    Members, tasks and expenses are JSON-serialized persisted records.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._logger = get_logger(__name__, backend="google_sheets")

    def _party_to_row(self, party: Party) -> list:
        """Convert a Party to a spreadsheet row."""
        record = party_to_record(party)
        return [
            record["id"],
            record["name"],
            record["date"],
            json.dumps(record["friends"], ensure_ascii=False),
            json.dumps(record["tasks"], ensure_ascii=False),
            json.dumps(record["expenses"], ensure_ascii=False),
            datetime.now(timezone.utc).isoformat(),
        ]

    def _row_to_party(self, row: list) -> Party:
        """Convert a spreadsheet row to a Party."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        try:
            record = {
                "id": safe_get(0),
                "name": safe_get(1),
                "date": safe_get(2),
                "friends": json.loads(safe_get(3, "[]")),
                "tasks": json.loads(safe_get(4, "[]")),
                "expenses": json.loads(safe_get(5, "[]")),
            }
        except json.JSONDecodeError as e:
            raise StorageError(f"Malformed party row {safe_get(0)!r}: {e}") from e

        return party_from_record(record)

    def _rows(self) -> list[list]:
        """All data rows (header excluded)."""
        try:
            sheet = self._client.get_parties_sheet()
            return sheet.get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageConnectionError(f"Failed to read parties: {e}")

    @retry_on_connection_error
    async def list_parties(self) -> list[Party]:
        """List all parties in sheet order. Malformed rows are skipped."""
        parties = []
        for row in self._rows():
            if not row or not row[0]:  # Skip empty rows
                continue

            try:
                parties.append(self._row_to_party(row))
            except StorageError as e:
                self._logger.warning("party_row_skipped", party_id=row[0], error=str(e))

        return parties

    @retry_on_connection_error
    async def get_party(self, party_id: str) -> Optional[Party]:
        """Retrieve a party by its ID."""
        for row in self._rows():
            if row and row[0] == party_id:
                return self._row_to_party(row)

        return None

    @retry_on_connection_error
    async def create_party(self, name: str, party_date: date) -> Party:
        """Create a new, empty party as a new row."""
        party = Party(id=new_entity_id(), name=name, date=party_date)
        try:
            sheet = self._client.get_parties_sheet()
            sheet.append_row(self._party_to_row(party), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageConnectionError(f"Failed to create party: {e}")

        self._logger.info("party_created", party_id=party.id)
        return party

    @retry_on_connection_error
    async def update_party(self, party: Party) -> Party:
        """Rewrite the row of an existing party."""
        try:
            sheet = self._client.get_parties_sheet()
            all_rows = sheet.get_all_values()

            # Find the row with this party ID
            for idx, row in enumerate(all_rows[1:], start=2):  # Start from 2 (row 1 is header)
                if row and row[0] == party.id:
                    sheet.update(
                        range_name=f"A{idx}:G{idx}",
                        values=[self._party_to_row(party)],
                        value_input_option="RAW",
                    )
                    self._logger.info("party_updated", party_id=party.id)
                    return party
        except StorageError:
            raise
        except Exception as e:
            raise StorageConnectionError(f"Failed to update party: {e}")

        raise NotFoundError(f"Party not found: {party.id}")

    @retry_on_connection_error
    async def delete_party(self, party_id: str) -> bool:
        """Delete a party's row."""
        try:
            sheet = self._client.get_parties_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == party_id:
                    sheet.delete_rows(idx)
                    self._logger.info("party_deleted", party_id=party_id)
                    return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageConnectionError(f"Failed to delete party: {e}")

        return False
