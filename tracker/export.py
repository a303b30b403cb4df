from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Iterable, NamedTuple, Optional

import pandas as pd

from tracker.domain import TransactionRecord
from tracker.errors import NothingToExportError
from tracker.functional import validate_snapshot
from tracker.logging_setup import get_logger

logger = get_logger(__name__)

EXPORT_COLUMNS = (
    "S.No",
    "Date (yyyy-mm-dd)",
    "Amount",
    "Type",
    "Category",
    "Reference",
    "Description",
)
SHEET_NAME = "Transactions"


class ExportRow(NamedTuple):
    sno: int
    date: str
    amount: Decimal
    type: str
    category: str
    reference: str
    description: str


def project_rows(records: Iterable[TransactionRecord]) -> tuple[ExportRow, ...]:
    """Flatten records, in the order given, into numbered spreadsheet rows."""
    snapshot = validate_snapshot(records)
    if not snapshot:
        raise NothingToExportError()

    return tuple(
        ExportRow(
            sno=index,
            date=t.date.isoformat(),
            amount=t.amount,
            type=t.type.value,
            category=t.category,
            reference=t.reference,
            description=t.description or "",
        )
        for index, t in enumerate(snapshot, start=1)
    )


def export_filename(today: Optional[date] = None, ext: str = "xlsx") -> str:
    today = today or date.today()
    return f"Transactions({today.strftime('%d-%m-%Y')}).{ext}"


def rows_to_frame(rows: Iterable[ExportRow]) -> pd.DataFrame:
    df = pd.DataFrame([tuple(r) for r in rows], columns=list(EXPORT_COLUMNS))
    df["Amount"] = df["Amount"].astype(float)
    return df


def to_excel_bytes(rows: Iterable[ExportRow]) -> bytes:
    df = rows_to_frame(rows)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="xlsxwriter") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        worksheet = writer.sheets[SHEET_NAME]
        for idx, column in enumerate(df.columns):
            width = max([len(column), *df[column].astype(str).str.len()]) + 2
            worksheet.set_column(idx, idx, width)
    logger.info("exported %d rows to xlsx", len(df))
    return buffer.getvalue()


def to_csv_bytes(rows: Iterable[ExportRow]) -> bytes:
    df = rows_to_frame(rows)
    logger.info("exported %d rows to csv", len(df))
    return df.to_csv(index=False).encode("utf-8")
