"""Import, column-mapping, and merge models.

ImportedTable holds a parsed source file (raw matrix + chosen header row),
ColumnMapping assigns source headers to the nine fixed target fields, and
FinalizedImport carries validated rows ready for the merge engine.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from dikelab.models.common import TARGET_FIELD_LABELS, CellValue, DikeLabBase

ImportedRow = dict[str, CellValue]
MappedRow = dict[str, CellValue]


class ImportFormat(StrEnum):
    """Source file formats accepted by the importer."""

    DELIMITED = "delimited"
    JSON = "json"
    EXCEL = "excel"


class Delimiter(StrEnum):
    """Supported field delimiters for delimited text."""

    COMMA = ","
    SEMICOLON = ";"
    TAB = "\t"
    PIPE = "|"


class MergeMode(StrEnum):
    """How imported rows are aligned with checklist rows."""

    SINGLE = "single"
    BATCH = "batch"


class ParseOptions(DikeLabBase):
    """Parser options for delimited text and spreadsheets."""

    delimiter: Delimiter = Delimiter.COMMA
    skip_empty_lines: bool = Field(default=True, alias="skipEmptyLines")
    header_row_index: int = Field(default=0, ge=0, alias="headerRowIndex")


class ImportedTable(DikeLabBase):
    """A parsed source file.

    ``raw_rows`` keeps every row of the source as strings, including rows
    above the header, so the header row can be re-selected. ``records`` are
    the data rows after the header keyed by header label. JSON sources keep
    their native cell types in ``records``.
    """

    format: ImportFormat
    headers: list[str] = Field(default_factory=list)
    raw_rows: list[list[str]] = Field(default_factory=list, alias="rawRows")
    records: list[ImportedRow] = Field(default_factory=list)
    header_row_index: int = Field(default=0, alias="headerRowIndex")

    def preview_rows(self, limit: int = 10) -> list[ImportedRow]:
        return self.records[:limit]

    def raw_preview(self, limit: int = 20) -> list[list[str]]:
        return self.raw_rows[:limit]


class ColumnMapping(DikeLabBase):
    """Target field -> source header assignments; unset fields are absent."""

    assignments: dict[str, str] = Field(default_factory=dict)

    def get(self, field: str) -> str | None:
        return self.assignments.get(field) or None

    def assign(self, field: str, header: str | None) -> None:
        if field not in TARGET_FIELD_LABELS:
            msg = f"Unknown target field '{field}'."
            raise ValueError(msg)
        if header:
            self.assignments[field] = header
        else:
            self.assignments.pop(field, None)

    def missing_fields(self) -> list[str]:
        """Target field keys with no assigned header, in target order."""
        return [f for f in TARGET_FIELD_LABELS if not self.get(f)]


class MappingSuggestion(DikeLabBase):
    """Auto-mapping result: suggested mapping plus analysis defaults."""

    mapping: ColumnMapping
    numeric_columns: list[str] = Field(default_factory=list, alias="numericColumns")
    analysis_columns: list[str] = Field(default_factory=list, alias="analysisColumns")
    x_axis: str | None = Field(default=None, alias="xAxis")
    y_axis: str | None = Field(default=None, alias="yAxis")


class MappingValidation(DikeLabBase):
    """Outcome of checking a mapping before finalizing an import."""

    missing_fields: list[str] = Field(default_factory=list, alias="missingFields")
    missing_analysis_columns: bool = Field(
        default=False, alias="missingAnalysisColumns",
    )

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields and not self.missing_analysis_columns

    def missing_labels(self) -> list[str]:
        return [TARGET_FIELD_LABELS[f] for f in self.missing_fields]

    def error_message(self) -> str:
        problems: list[str] = []
        if self.missing_fields:
            problems.append(
                "Please map the following required fields: "
                + ", ".join(self.missing_labels()),
            )
        if self.missing_analysis_columns:
            problems.append("Please select at least one column for analysis")
        return ". ".join(problems)


class FinalizedImport(DikeLabBase):
    """Validated, mapped rows ready to merge into the checklist."""

    rows: list[MappedRow] = Field(default_factory=list)
    mapping: ColumnMapping
    analysis_columns: list[str] = Field(default_factory=list, alias="analysisColumns")


class MergeReport(DikeLabBase):
    """Which checklist rows a merge updated."""

    mode: MergeMode
    updated_ids: list[str] = Field(default_factory=list, alias="updatedIds")
    skipped_ids: list[str] = Field(default_factory=list, alias="skippedIds")
    import_source: str = Field(..., alias="importSource")
    import_date: datetime = Field(..., alias="importDate")
