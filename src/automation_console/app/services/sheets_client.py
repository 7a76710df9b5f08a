"""Google Sheets reader.

Reads a rectangular range with a service account and maps every row below
the header row to ``{header: cell}``. Two logical sheets are used: customer
call records and the content calendar.
"""

import asyncio

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from automation_console.app.config import (
    CONTENT_SHEET_ID,
    CUSTOMER_SHEET_ID,
    GOOGLE_PRIVATE_KEY,
    GOOGLE_SERVICE_ACCOUNT_EMAIL,
    HTTP_TIMEOUT_SECONDS,
    SHEETS_SCOPE,
)
from automation_console.app.errors import NotConfiguredError, SheetsError
from automation_console.app.services.logging_service import get_logger

logger = get_logger(__name__)

SheetRow = dict[str, str]


def google_credentials(email: str, private_key: str, scopes: list[str]):
    """Service-account credentials, or None when either part is missing."""
    if not email or not private_key:
        return None
    try:
        return service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": email,
                "private_key": private_key,
                "token_uri": "https://oauth2.googleapis.com/token",
            },
            scopes=scopes,
        )
    except ValueError as e:
        raise NotConfiguredError("Google service account key is invalid") from e


def authorized_http(credentials, timeout: float = HTTP_TIMEOUT_SECONDS) -> AuthorizedHttp:
    """HTTP transport for googleapiclient with an explicit timeout."""
    return AuthorizedHttp(credentials, http=httplib2.Http(timeout=timeout))


def rows_from_values(values: list[list[str]] | None) -> list[SheetRow]:
    """Map a value grid to row dicts using its first row as headers.

    Missing trailing cells become empty strings. A grid without at least one
    data row yields no rows.
    """
    if not values or len(values) < 2:
        return []

    headers = [str(h) for h in values[0]]
    rows = []
    for raw in values[1:]:
        rows.append({
            header: (str(raw[i]) if i < len(raw) and raw[i] is not None else "")
            for i, header in enumerate(headers)
        })
    return rows


class SpreadsheetClient:
    """Reads customer and content rows from Google Sheets."""

    def __init__(
        self,
        email: str | None = None,
        private_key: str | None = None,
        customer_sheet_id: str | None = None,
        content_sheet_id: str | None = None,
    ) -> None:
        self.email = GOOGLE_SERVICE_ACCOUNT_EMAIL if email is None else email
        self.private_key = GOOGLE_PRIVATE_KEY if private_key is None else private_key
        self.customer_sheet_id = CUSTOMER_SHEET_ID if customer_sheet_id is None else customer_sheet_id
        self.content_sheet_id = CONTENT_SHEET_ID if content_sheet_id is None else content_sheet_id

    def _fetch_values(self, credentials, sheet_id: str, cell_range: str) -> list[list[str]]:
        service = build("sheets", "v4", http=authorized_http(credentials), cache_discovery=False)
        result = service.spreadsheets().values().get(spreadsheetId=sheet_id, range=cell_range).execute()
        return result.get("values") or []

    async def get_sheet_data(self, sheet_id: str, cell_range: str = "Sheet1") -> list[SheetRow]:
        """Rows of one sheet; empty when credentials or the sheet id are missing."""
        credentials = google_credentials(self.email, self.private_key, [SHEETS_SCOPE])
        if credentials is None or not sheet_id:
            logger.info("Google Sheets not configured, returning no rows")
            return []

        try:
            values = await asyncio.to_thread(self._fetch_values, credentials, sheet_id, cell_range)
        except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"Reading sheet {sheet_id} failed: {type(e).__name__}: {e}")
            raise SheetsError(f"Could not read the spreadsheet: {type(e).__name__}") from e

        rows = rows_from_values(values)
        logger.debug(f"Read {len(rows)} rows from sheet {sheet_id}")
        return rows

    async def get_customer_data(self) -> list[SheetRow]:
        return await self.get_sheet_data(self.customer_sheet_id)

    async def get_content_data(self) -> list[SheetRow]:
        return await self.get_sheet_data(self.content_sheet_id)


# Global client instance
sheets_client = SpreadsheetClient()
