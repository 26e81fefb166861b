"""Spreadsheet import and export.

Imports accept ``.xlsx`` workbooks (first worksheet, cached values only) and
delimited text files (``.csv``, ``.tsv``, ``.txt``). Delimited files may use
tab, semicolon or comma separators; the first non-empty line decides, checked
in that order. A UTF-8 BOM is stripped.

Every reader returns a plain list of rows with trailing empty cells and
trailing empty rows removed. What row 0 means (header or data) is decided by
the tool that consumes the table.
"""

from __future__ import annotations

import csv
import io
import zipfile
from pathlib import PurePath
from typing import Any, List, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from psychocalc.core.config import settings
from psychocalc.core.errors import ExportError, ImportFormatError
from psychocalc.core.logging import get_logger
from psychocalc.core.metrics import inc_counter, timer

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "XLSX_MEDIA_TYPE",
    "read_table",
    "write_table",
    "detect_delimiter",
]

logger = get_logger("psychocalc.services.spreadsheet", component="io")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SUPPORTED_EXTENSIONS = (".xlsx", ".csv", ".tsv", ".txt")
_MAX_SHEET_TITLE = 31

Table = List[List[Any]]


def _is_blank(cell: Any) -> bool:
    return cell is None or (isinstance(cell, str) and not cell.strip())


def _trim(rows: Sequence[Sequence[Any]]) -> Table:
    trimmed: Table = []
    for row in rows:
        cells = list(row)
        while cells and _is_blank(cells[-1]):
            cells.pop()
        trimmed.append(cells)
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed


def detect_delimiter(sample_line: str) -> str:
    """Pick the field separator from one line: tab, then semicolon, then comma.

    Example:
        >>> detect_delimiter("a;b;c")
        ';'
        >>> detect_delimiter("1,2,3")
        ','
    """
    if "\t" in sample_line:
        return "\t"
    if ";" in sample_line:
        return ";"
    return ","


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("import_decode_fallback", extra={"structured_data": {"encoding": "latin-1"}})
        return content.decode("latin-1")


def _read_delimited(content: bytes) -> Table:
    text = _decode(content)
    first_line = next((line for line in text.splitlines() if line.strip()), "")
    delimiter = detect_delimiter(first_line)
    try:
        rows = list(csv.reader(io.StringIO(text), delimiter=delimiter))
    except csv.Error as exc:
        raise ImportFormatError(detail={"reason": str(exc)}) from exc
    return _trim(rows)


def _read_xlsx(content: bytes) -> Table:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise ImportFormatError(detail={"reason": str(exc)}) from exc
    try:
        if not workbook.worksheets:
            return []
        sheet = workbook.worksheets[0]
        rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()
    return _trim(rows)


def read_table(content: bytes, filename: str) -> Table:
    """Parse an uploaded file into a rectangular-ish list of rows.

    Raises:
        ImportFormatError: unsupported extension, oversized payload,
            unreadable content, or a file with no rows.
    """
    extension = PurePath(filename or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        inc_counter("imports.rejected")
        logger.info("import_rejected", extra={"structured_data": {"filename": filename, "reason": "extension"}})
        raise ImportFormatError(
            "Unsupported file type",
            detail={"filename": filename, "supported": list(SUPPORTED_EXTENSIONS)},
        )
    if len(content) > settings.max_upload_bytes:
        inc_counter("imports.rejected")
        raise ImportFormatError(
            "File is too large",
            detail={"size": len(content), "max_upload_bytes": settings.max_upload_bytes},
        )

    with timer(f"io.read.{extension.lstrip('.')}"):
        table = _read_xlsx(content) if extension == ".xlsx" else _read_delimited(content)

    if not table:
        inc_counter("imports.rejected")
        logger.info("import_rejected", extra={"structured_data": {"filename": filename, "reason": "empty"}})
        raise ImportFormatError("The file contains no rows", detail={"filename": filename})

    inc_counter("imports.total")
    logger.info(
        "import_parsed",
        extra={"structured_data": {"filename": filename, "rows": len(table), "columns": max(len(r) for r in table)}},
    )
    return table


def write_table(headers: Sequence[Any], rows: Sequence[Sequence[Any]], sheet_name: str = "Sheet1") -> bytes:
    """Serialize a header row plus data rows into an in-memory xlsx file.

    Raises:
        ExportError: when the workbook cannot be produced. No partial bytes
            are returned.
    """
    try:
        with timer("io.write.xlsx"):
            workbook = Workbook()
            sheet = workbook.active
            sheet.title = (sheet_name or "Sheet1")[:_MAX_SHEET_TITLE]
            sheet.append(list(headers))
            for cell in sheet[1]:
                cell.font = Font(bold=True)
            for row in rows:
                sheet.append(list(row))
            buffer = io.BytesIO()
            workbook.save(buffer)
    except (TypeError, ValueError) as exc:
        logger.error("export_failed", extra={"structured_data": {"format": "xlsx", "error": str(exc)}})
        raise ExportError(detail={"format": "xlsx", "reason": str(exc)}) from exc
    inc_counter("exports.xlsx")
    return buffer.getvalue()
