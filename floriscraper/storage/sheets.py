"""Google Sheets sink backed by gspread and a service account."""

from __future__ import annotations

from typing import Any, Callable, Sequence

import gspread
from google.oauth2.service_account import Credentials
from tenacity import Retrying, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from floriscraper.errors import SinkError
from floriscraper.logging_config import get_logger
from floriscraper.models import ProductRecord

LOGGER = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsSink:
    """Writes the status cell and the product table of one spreadsheet.

    Status text is written ``USER_ENTERED`` so the sheet renders it like typed
    input; table rows are written ``RAW`` starting at ``A1`` of the target
    sheet. Each API call is retried before surfacing as :class:`SinkError`.
    """

    def __init__(
        self,
        spreadsheet: Any,
        *,
        status_cell: str,
        attempts: int = 3,
        wait: wait_base | None = None,
    ) -> None:
        self._spreadsheet = spreadsheet
        self._status_cell = status_cell
        self._retrying = Retrying(
            stop=stop_after_attempt(max(attempts, 1)),
            wait=wait if wait is not None else wait_exponential(multiplier=0.5, max=5),
            reraise=True,
        )

    @classmethod
    def from_service_account(
        cls,
        service_account_info: dict[str, Any],
        spreadsheet_id: str,
        *,
        status_cell: str,
    ) -> "GoogleSheetsSink":
        credentials = Credentials.from_service_account_info(service_account_info, scopes=SCOPES)
        client = gspread.authorize(credentials)
        return cls(client.open_by_key(spreadsheet_id), status_cell=status_cell)

    def _call(self, action: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return self._retrying(fn, *args, **kwargs)
        except Exception as exc:
            raise SinkError(f"{action} failed: {exc}") from exc

    def set_status(self, text: str) -> None:
        self._call(
            "status update",
            self._spreadsheet.values_update,
            self._status_cell,
            params={"valueInputOption": "USER_ENTERED"},
            body={"values": [[text]]},
        )
        LOGGER.info("Status cell %s -> %s", self._status_cell, text)

    def clear_range(self, range_id: str) -> None:
        self._call("clear", self._spreadsheet.values_clear, range_id)
        LOGGER.info("Cleared old data from %s", range_id)

    def write_table(
        self,
        range_id: str,
        header: Sequence[str],
        records: Sequence[ProductRecord],
    ) -> None:
        values = [list(header)] + [record.as_row() for record in records]
        self._call(
            "table write",
            self._spreadsheet.values_update,
            f"{range_id}!A1",
            params={"valueInputOption": "RAW"},
            body={"values": values},
        )
        LOGGER.info("Wrote %d rows (+ header) to %s", len(records), range_id)
