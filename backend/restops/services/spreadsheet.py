"""Spreadsheet ingestion: turn an uploaded sales sheet into CSV text."""

import csv
import io
import logging

from openpyxl import load_workbook

from restops.services.errors import ValidationError

logger = logging.getLogger(__name__)

XLSX_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv", ".txt")


def xlsx_to_csv(content: bytes) -> str:
    """CSV text of the first worksheet. Empty trailing rows are dropped."""
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise ValidationError(f"Could not read workbook: {exc}") from exc

    try:
        sheet = workbook.worksheets[0]
        out = io.StringIO()
        writer = csv.writer(out, lineterminator="\n")
        for row in sheet.iter_rows(values_only=True):
            if all(cell is None for cell in row):
                continue
            writer.writerow(["" if cell is None else cell for cell in row])
        return out.getvalue()
    finally:
        workbook.close()


def to_csv_text(filename: str, content: bytes) -> str:
    """Normalise an upload to CSV text based on its extension."""
    name = (filename or "").lower()
    if name.endswith(XLSX_EXTENSIONS):
        text = xlsx_to_csv(content)
    elif name.endswith(CSV_EXTENSIONS):
        text = content.decode("utf-8-sig")
    else:
        raise ValidationError(f"Unsupported file type: {filename}")
    if not text.strip():
        raise ValidationError("The uploaded sheet is empty")
    logger.info("Converted %s to %d characters of CSV", filename, len(text))
    return text
