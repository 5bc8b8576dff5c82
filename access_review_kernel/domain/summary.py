"""
Summary projection (``access_review_kernel.domain.summary``).

Responsibility
--------------
Derives one read-only row per approved access request: the requested
user id, the list of entities (companies) granted and the security
group.  Rows are append-only and deduplicated by user id; the source
submissions are never touched.

Architecture position
---------------------
**Kernel domain layer** -- pure.  Persistence of the rows and the xlsx
round-trip live in ``services/summary_service.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from access_review_kernel.domain.submission import ReviewStatus, Submission
from access_review_kernel.exceptions import SummaryImportError

EXPORT_HEADERS = ("ID", "Company List", "Security Group")

# Tabular header -> accepted aliases, first match wins.
_IMPORT_ALIASES: dict[str, tuple[str, ...]] = {
    "user_id": ("ID", "id"),
    "company_list": ("Company List", "companyList"),
    "security_group": ("Security Group", "securityGroup"),
}


@dataclass(frozen=True)
class SummaryFieldMap:
    """Which payload fields feed the projection."""

    key_field: str = "factUserId"
    list_field: str = "entityName"
    group_field: str = "securityGroupOther"


@dataclass(frozen=True)
class SummaryRow:
    user_id: str
    company_list: str = ""
    security_group: str = ""


@dataclass(frozen=True)
class SyncResult:
    """Rows after a sync and the ones it appended."""

    rows: tuple[SummaryRow, ...]
    appended: tuple[SummaryRow, ...]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _text(value: Any) -> str:
    return _cell(value).strip()


def project_row(submission: Submission, field_map: SummaryFieldMap) -> SummaryRow | None:
    """Build the summary row for one submission; None if it has no key."""
    key = _text(submission.fields.get(field_map.key_field))
    if not key:
        return None
    entities = submission.fields.get(field_map.list_field)
    if isinstance(entities, (list, tuple)):
        company_list = ", ".join(_text(e) for e in entities if _text(e))
    else:
        company_list = _text(entities)
    return SummaryRow(
        user_id=key,
        company_list=company_list,
        security_group=_text(submission.fields.get(field_map.group_field)),
    )


def sync(
    existing: Iterable[SummaryRow],
    submissions: Iterable[Submission],
    field_map: SummaryFieldMap,
) -> SyncResult:
    """Append rows for approved submissions whose user id is not yet present."""
    rows = list(existing)
    seen = {row.user_id for row in rows}
    appended = []
    for submission in submissions:
        if submission.final_status is not ReviewStatus.APPROVED:
            continue
        row = project_row(submission, field_map)
        if row is None or row.user_id in seen:
            continue
        seen.add(row.user_id)
        appended.append(row)
    return SyncResult(rows=tuple(rows + appended), appended=tuple(appended))


def export_rows(rows: Iterable[SummaryRow]) -> list[dict[str, str]]:
    """Rows as dicts keyed by the export headers."""
    return [
        {
            "ID": row.user_id,
            "Company List": row.company_list,
            "Security Group": row.security_group,
        }
        for row in rows
    ]


def _pick(record: Mapping[str, Any], aliases: tuple[str, ...]) -> str:
    # Imported cells keep their padding so export then import is exact.
    for alias in aliases:
        value = _cell(record.get(alias))
        if value.strip():
            return value
    return ""


def import_rows(records: Iterable[Mapping[str, Any]], now_millis: int) -> list[SummaryRow]:
    """Parse tabular records into summary rows (replace-all semantics).

    Rows without an id receive ``AUTO_<millis>_<index>``.

    Raises:
        SummaryImportError: when no rows were found.
    """
    rows = []
    for index, record in enumerate(records):
        user_id = _pick(record, _IMPORT_ALIASES["user_id"]) or f"AUTO_{now_millis}_{index}"
        rows.append(SummaryRow(
            user_id=user_id,
            company_list=_pick(record, _IMPORT_ALIASES["company_list"]),
            security_group=_pick(record, _IMPORT_ALIASES["security_group"]),
        ))
    if not rows:
        raise SummaryImportError("no data found in the imported rows")
    return rows


def filter_rows(
    rows: Iterable[SummaryRow],
    search: str = "",
    company: str = "",
    group: str = "",
) -> list[SummaryRow]:
    """Case-insensitive search over all columns plus exact column filters."""
    term = search.strip().lower()
    result = []
    for row in rows:
        if term and not any(
            term in value.lower()
            for value in (row.user_id, row.company_list, row.security_group)
        ):
            continue
        if company and row.company_list != company:
            continue
        if group and row.security_group != group:
            continue
        result.append(row)
    return result
