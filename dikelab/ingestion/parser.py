"""Source file parsing for the column-mapping importer.

Delimited text and Excel workbooks are read into a raw string matrix; the
caller picks which row holds the headers and every row after it becomes a
data record keyed by header label. JSON sources must be a non-empty array
of objects whose first element supplies the headers.

This is a deterministic service: nothing is committed here, problems are
raised as ``ValueError`` with a message suitable for the user.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import zipfile
from collections.abc import Sequence
from pathlib import PurePath

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from dikelab.models.common import CellValue
from dikelab.models.mapping import (
    ImportedRow,
    ImportedTable,
    ImportFormat,
    ParseOptions,
)

logger = logging.getLogger(__name__)

UNSUPPORTED_FILE_MESSAGE = "Please select a CSV, Excel, or JSON file"

_EXTENSION_FORMATS: dict[str, ImportFormat] = {
    ".json": ImportFormat.JSON,
    ".csv": ImportFormat.DELIMITED,
    ".tsv": ImportFormat.DELIMITED,
    ".txt": ImportFormat.DELIMITED,
    ".xlsx": ImportFormat.EXCEL,
    ".xlsm": ImportFormat.EXCEL,
}

_CONTENT_TYPE_FORMATS: dict[str, ImportFormat] = {
    "application/json": ImportFormat.JSON,
    "text/csv": ImportFormat.DELIMITED,
    "text/plain": ImportFormat.DELIMITED,
    "text/tab-separated-values": ImportFormat.DELIMITED,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        ImportFormat.EXCEL
    ),
    "application/vnd.ms-excel.sheet.macroenabled.12": ImportFormat.EXCEL,
}


def detect_format(filename: str | None, content_type: str | None = None) -> ImportFormat:
    """Pick the import format from the file extension, then the content type.

    Raises:
        ValueError: For legacy ``.xls`` workbooks and unrecognized files.
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix == ".xls":
        msg = "Legacy .xls workbooks are not supported; save the file as .xlsx"
        raise ValueError(msg)
    if suffix in _EXTENSION_FORMATS:
        return _EXTENSION_FORMATS[suffix]

    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type in _CONTENT_TYPE_FORMATS:
        return _CONTENT_TYPE_FORMATS[media_type]
    raise ValueError(UNSUPPORTED_FILE_MESSAGE)


# ----------------------------------------------------------------------
# Header row handling
# ----------------------------------------------------------------------


def rows_to_records(
    rows: Sequence[Sequence[str]],
    header_row_index: int,
) -> tuple[list[str], list[ImportedRow]]:
    """Split a raw matrix into the header row and the data records after it.

    A record only carries a key when the header is non-empty and the row
    has a cell at that position. Empty rows are dropped.

    Raises:
        ValueError: If ``header_row_index`` is past the last row.
    """
    if header_row_index < 0 or header_row_index >= len(rows):
        msg = "Selected header row is out of range"
        raise ValueError(msg)

    headers = list(rows[header_row_index])
    records: list[ImportedRow] = []
    for row in rows[header_row_index + 1:]:
        if not row:
            continue
        records.append(
            {
                header: row[pos]
                for pos, header in enumerate(headers)
                if header and pos < len(row)
            },
        )
    return headers, records


def select_header_row(table: ImportedTable, header_row_index: int) -> ImportedTable:
    """Re-key a parsed matrix source on a different header row.

    JSON sources have fixed headers and cannot be re-keyed.

    Raises:
        ValueError: For JSON sources or an out-of-range index.
    """
    if table.format is ImportFormat.JSON:
        msg = "The header row of a JSON import cannot be changed"
        raise ValueError(msg)
    headers, records = rows_to_records(table.raw_rows, header_row_index)
    return table.model_copy(
        update={
            "headers": headers,
            "records": records,
            "header_row_index": header_row_index,
        },
    )


# ----------------------------------------------------------------------
# Delimited text
# ----------------------------------------------------------------------


def _is_blank(row: Sequence[str]) -> bool:
    return all(cell == "" for cell in row)


def parse_delimited(content: bytes, options: ParseOptions | None = None) -> ImportedTable:
    """Parse delimited text into a raw matrix plus keyed records.

    Raises:
        ValueError: If the text cannot be decoded or parsed, holds no rows,
            or the header row index is out of range.
    """
    options = options or ParseOptions()
    try:
        text = content.decode("utf-8-sig")
        reader = csv.reader(
            io.StringIO(text, newline=""),
            delimiter=str(options.delimiter),
            strict=True,
        )
        rows = list(reader)
    except (UnicodeDecodeError, csv.Error) as exc:
        msg = f"Error parsing file: {exc}"
        raise ValueError(msg) from exc

    if options.skip_empty_lines:
        rows = [row for row in rows if not _is_blank(row)]
    else:
        rows = [row or [""] for row in rows]

    if not rows:
        msg = "No data found in the file"
        raise ValueError(msg)

    headers, records = rows_to_records(rows, options.header_row_index)
    logger.debug("Parsed %d delimited rows, %d records", len(rows), len(records))
    return ImportedTable(
        format=ImportFormat.DELIMITED,
        headers=headers,
        raw_rows=rows,
        records=records,
        header_row_index=options.header_row_index,
    )


# ----------------------------------------------------------------------
# Excel
# ----------------------------------------------------------------------


def parse_excel(content: bytes, options: ParseOptions | None = None) -> ImportedTable:
    """Parse the first worksheet of an ``.xlsx`` workbook.

    Cells are stringified (empty cells become ``""``) and then follow the
    same header-row rules as delimited text.

    Raises:
        ValueError: If the workbook cannot be read, holds no rows, or the
            header row index is out of range.
    """
    options = options or ParseOptions()
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        msg = f"Error parsing file: {exc}"
        raise ValueError(msg) from exc

    try:
        ws = wb.worksheets[0]
        rows: list[list[str]] = []
        for row in ws.iter_rows(values_only=True):
            rows.append([str(v) if v is not None else "" for v in row])
    finally:
        wb.close()

    if options.skip_empty_lines:
        rows = [row for row in rows if not _is_blank(row)]

    if not rows:
        msg = "No data found in the file"
        raise ValueError(msg)

    headers, records = rows_to_records(rows, options.header_row_index)
    return ImportedTable(
        format=ImportFormat.EXCEL,
        headers=headers,
        raw_rows=rows,
        records=records,
        header_row_index=options.header_row_index,
    )


# ----------------------------------------------------------------------
# JSON
# ----------------------------------------------------------------------


def _json_cell(value: object) -> CellValue | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return value
    return json.dumps(value)


def parse_json(content: bytes) -> ImportedTable:
    """Parse a JSON array of objects.

    Headers are the keys of the first element. Records keep native
    numbers; the raw matrix is the header row followed by every record
    stringified in header order (missing values become ``""``).

    Raises:
        ValueError: If the text is not JSON or not a non-empty array of
            objects.
    """
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = "Failed to parse JSON file"
        raise ValueError(msg) from exc

    if (
        not isinstance(data, list)
        or not data
        or not all(isinstance(row, dict) for row in data)
    ):
        msg = "Invalid JSON format. Expected an array of objects."
        raise ValueError(msg)

    headers = [str(key) for key in data[0]]
    records: list[ImportedRow] = []
    raw_rows: list[list[str]] = [list(headers)]
    for row in data:
        record: ImportedRow = {}
        for key, value in row.items():
            cell = _json_cell(value)
            if cell is not None:
                record[str(key)] = cell
        records.append(record)
        raw_rows.append(
            [str(record[h]) if h in record else "" for h in headers],
        )

    return ImportedTable(
        format=ImportFormat.JSON,
        headers=headers,
        raw_rows=raw_rows,
        records=records,
        header_row_index=0,
    )


def parse_source(
    content: bytes,
    fmt: ImportFormat,
    options: ParseOptions | None = None,
) -> ImportedTable:
    """Dispatch to the parser for ``fmt``."""
    if fmt is ImportFormat.JSON:
        return parse_json(content)
    if fmt is ImportFormat.EXCEL:
        return parse_excel(content, options)
    return parse_delimited(content, options)
