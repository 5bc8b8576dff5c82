"""
access_review_kernel.services.summary_service -- Summary table maintenance.

Responsibility:
    Keeps the derived summary table in step with approved submissions and
    moves it in and out of spreadsheets.  Row derivation, import parsing and
    filtering are pure functions in ``domain/summary.py``; this service adds
    the stores, the clock and the xlsx workbook handling.

Architecture position:
    Kernel > Services.  May import from domain/, stores/.

Invariants enforced:
    - sync only appends; existing rows and source submissions are untouched.
    - import replaces the whole table, and only after the input parsed
      into at least one row.

Failure modes:
    - SummaryImportError for an empty import or an unreadable workbook
      (the table is left unchanged).
"""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Any, Iterable, Mapping

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from access_review_kernel.domain import summary
from access_review_kernel.domain.clock import Clock, SystemClock
from access_review_kernel.domain.summary import SummaryFieldMap, SummaryRow, SyncResult
from access_review_kernel.exceptions import SummaryImportError
from access_review_kernel.logging_config import get_logger
from access_review_kernel.stores.base import RecordStore, SummaryRowStore

logger = get_logger("services.summary")

SHEET_NAME = "SummaryFact"


def _cell(value: Any) -> Any:
    """Normalize an openpyxl cell value (None -> "", integral float -> int)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class SummaryService:
    """Sync, import, export and filter the summary table."""

    def __init__(
        self,
        summary_store: SummaryRowStore,
        record_store: RecordStore,
        field_map: SummaryFieldMap | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._summary = summary_store
        self._records = record_store
        self._field_map = field_map or SummaryFieldMap()
        self._clock = clock or SystemClock()

    def rows(self) -> list[SummaryRow]:
        return self._summary.list_all()

    def sync(self) -> SyncResult:
        """Append a row for every approved submission not yet summarized."""
        result = summary.sync(
            self._summary.list_all(), self._records.list_all(), self._field_map,
        )
        if result.appended:
            self._summary.replace_all(result.rows)
        logger.info(
            "summary_synced",
            extra={"appended": len(result.appended), "total": len(result.rows)},
        )
        return result

    def export_rows(self) -> list[dict[str, str]]:
        return summary.export_rows(self._summary.list_all())

    def import_rows(self, records: Iterable[Mapping[str, Any]]) -> list[SummaryRow]:
        """Replace the table with ``records`` (header or camelCase keys)."""
        try:
            rows = summary.import_rows(records, self._clock.now_millis())
        except SummaryImportError as exc:
            logger.warning("summary_import_refused", extra={"reason": exc.reason})
            raise
        self._summary.replace_all(rows)
        logger.info("summary_imported", extra={"count": len(rows)})
        return rows

    def filter(self, search: str = "", company: str = "", group: str = "") -> list[SummaryRow]:
        return summary.filter_rows(self._summary.list_all(), search, company, group)

    # ------------------------------------------------------------------
    # Spreadsheets
    # ------------------------------------------------------------------

    def export_xlsx(self, path: str | os.PathLike) -> Path:
        """Write the table to a one-sheet workbook at ``path``."""
        path = Path(path)
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = SHEET_NAME
        ws.append(list(summary.EXPORT_HEADERS))
        for record in self.export_rows():
            ws.append([record[header] for header in summary.EXPORT_HEADERS])
        wb.save(path)
        logger.info("summary_exported", extra={"path": str(path), "count": ws.max_row - 1})
        return path

    def import_xlsx(self, path: str | os.PathLike) -> list[SummaryRow]:
        """Replace the table with the first sheet of the workbook at ``path``."""
        return self.import_rows(self._read_first_sheet(Path(path)))

    def _read_first_sheet(self, path: Path) -> list[dict[str, Any]]:
        try:
            wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, FileNotFoundError) as exc:
            logger.warning("summary_import_refused", extra={"path": str(path)})
            raise SummaryImportError(f"unreadable workbook {path.name}: {exc}") from exc
        try:
            rows = wb.worksheets[0].iter_rows(values_only=True)
            header = next(rows, None)
            if header is None:
                return []
            keys = [str(h).strip() if h is not None else "" for h in header]
            records = []
            for values in rows:
                cells = [_cell(v) for v in values]
                if not any(c != "" for c in cells):
                    continue
                records.append(dict(zip(keys, cells)))
            return records
        finally:
            wb.close()
