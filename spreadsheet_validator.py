import logging
import time
import uuid
from datetime import date, datetime
from enum import Enum
from http import HTTPStatus
from io import BytesIO
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict

from schema_registry import ColumnType, FileSchema, lookup
from utils.result import Result

logger = logging.getLogger(__name__)

MAX_DISPLAYED_ERRORS = 10

UNKNOWN_FILE_TYPE_MESSAGE = "Unknown file type."
UNREADABLE_FILE_MESSAGE = "The file could not be read as a spreadsheet."
ERROR_SUMMARY_MESSAGE = f"Only the first {MAX_DISPLAYED_ERRORS} errors are displayed out of many."

SheetRow = Dict[str, Any]


class LogContext:
    """Context manager for tracking and logging validation phases"""
    def __init__(self, operation_name: str, **kwargs):
        self.operation_name = operation_name
        self.start_time = None
        self.request_id = kwargs.pop('request_id', str(uuid.uuid4())[:8])
        self.extra = kwargs

    def __enter__(self):
        self.start_time = time.time()
        logger.info(f"Starting {self.operation_name}", extra={"request_id": self.request_id, **self.extra})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type:
            logger.error(
                f"Failed {self.operation_name} in {duration:.2f}s: {str(exc_val)}",
                extra={"request_id": self.request_id, "duration": duration, **self.extra},
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            logger.info(
                f"Completed {self.operation_name} in {duration:.2f}s",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )


class ValidationErrorKind(str, Enum):
    UNKNOWN_FILE_TYPE = "unknown_file_type"
    MISSING_COLUMNS = "missing_columns"
    CELL_TYPE_MISMATCH = "cell_type_mismatch"
    UNREADABLE_FILE = "unreadable_file"


class ValidationResult(BaseModel):
    """
    Outcome of validating one selected file.

    Attributes:
        valid: True when the file may be submitted for upload
        errors: Messages to display, in the order they were found. A summary
            line, when present, is always last.
        total_error_count: Number of failures found, including the ones
            beyond the displayed messages
        error_kind: Kind of failure, None for a valid file
    """
    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: List[str] = []
    total_error_count: int = 0
    error_kind: Optional[ValidationErrorKind] = None

    @classmethod
    def failure(cls, kind: ValidationErrorKind, message: str) -> "ValidationResult":
        return cls(valid=False, errors=[message], total_error_count=1, error_kind=kind)


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def is_number(value: Any) -> bool:
    # Date cells are stored as serial numbers in the workbook.
    if isinstance(value, (datetime, date)):
        return True
    # Empty text coerces to zero and is accepted. Kept intentionally, do not tighten.
    if _is_blank(value):
        return True
    try:
        coerced = pd.to_numeric(value, errors="coerce")
    except (TypeError, ValueError):
        return False
    return not pd.isna(coerced)


def is_date(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    # Plain numbers (e.g. unformatted serial dates) are parsed as text and usually fail.
    try:
        parsed = pd.to_datetime(str(value), errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return False
    return not pd.isna(parsed)


def is_string(value: Any) -> bool:
    # Strict runtime check: a numeric cell fails even if it prints like text.
    return isinstance(value, str)


TYPE_CHECKS = {
    ColumnType.NUMBER: is_number,
    ColumnType.DATE: is_date,
    ColumnType.STRING: is_string,
}


class SpreadsheetValidator:
    """
    Validates the first sheet of a workbook against a file type's schema.

    Validation runs in three phases, each of which may end it early:
    - decode the workbook into header and row records
    - check that every expected column is present in the header
    - check every cell against its column's declared type
    """

    @staticmethod
    def validate(content: bytes, file_type_id: str) -> ValidationResult:
        """
        Validate spreadsheet content for the given file type.

        Args:
            content: Raw bytes of an .xls or .xlsx workbook
            file_type_id: Identifier of the expected FileSchema

        Returns:
            ValidationResult: valid result, or the errors to display
        """
        log_context = {
            "request_id": str(uuid.uuid4())[:8],
            "file_type_id": file_type_id,
            "size_bytes": len(content),
        }

        schema = lookup(file_type_id)
        if schema is None:
            logger.warning("Unknown file type", extra=log_context)
            return ValidationResult.failure(ValidationErrorKind.UNKNOWN_FILE_TYPE, UNKNOWN_FILE_TYPE_MESSAGE)

        with LogContext("workbook decoding", **log_context):
            read_result = SpreadsheetValidator.read_first_sheet(content)

        if read_result.is_failure():
            logger.warning(f"Workbook decoding failed: {read_result.error}", extra=log_context)
            return ValidationResult.failure(ValidationErrorKind.UNREADABLE_FILE, read_result.error)

        frame = read_result.data
        observed_columns = [str(column) for column in frame.columns]
        rows = SpreadsheetValidator.to_rows(frame)
        log_context["row_count"] = len(rows)

        with LogContext("column validation", **log_context):
            missing_columns = SpreadsheetValidator.find_missing_columns(schema, observed_columns)

        if missing_columns:
            logger.warning(f"Missing columns: {missing_columns}", extra=log_context)
            return ValidationResult.failure(
                ValidationErrorKind.MISSING_COLUMNS,
                f"Missing columns: {', '.join(missing_columns)}"
            )

        with LogContext("type validation", **log_context):
            result = SpreadsheetValidator.check_types(schema, rows)

        logger.info(
            f"Validation finished: valid={result.valid}, errors={result.total_error_count}",
            extra=log_context
        )
        return result

    @staticmethod
    def read_first_sheet(content: bytes) -> Result[pd.DataFrame]:
        """
        Decode the first worksheet of a workbook, whatever its name.

        Cells are kept as the objects the reader produces (str, int, float,
        datetime) and unset cells become empty strings.

        Args:
            content: Raw bytes of an .xls or .xlsx workbook

        Returns:
            Result containing the sheet as a DataFrame, or an unreadable file error
        """
        try:
            frame = pd.read_excel(
                BytesIO(content),
                sheet_name=0,
                dtype=object,
                keep_default_na=False,
                na_values=[],
            )
        except Exception as e:
            logger.error(
                "Failed to read workbook",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            return Result.unreadable_file(UNREADABLE_FILE_MESSAGE)

        logger.debug(
            "Read workbook",
            extra={"row_count": len(frame), "column_count": len(frame.columns)}
        )
        return Result.ok(frame, status_code=HTTPStatus.OK)

    @staticmethod
    def to_rows(frame: pd.DataFrame) -> List[SheetRow]:
        """
        Convert the sheet to row records, skipping rows with no cell set.

        Row numbers in error messages count only the rows kept here.
        """
        rows = []
        for record in frame.to_dict(orient="records"):
            row = {
                str(key): ("" if not isinstance(value, str) and pd.isna(value) else value)
                for key, value in record.items()
            }
            if all(value == "" for value in row.values()):
                continue
            rows.append(row)
        return rows

    @staticmethod
    def find_missing_columns(schema: FileSchema, observed_columns: List[str]) -> List[str]:
        """
        Expected columns absent from the sheet header, in schema order.

        Args:
            schema: FileSchema being validated against
            observed_columns: Header cells of the first sheet

        Returns:
            List of missing column keys, empty when all are present
        """
        observed = set(observed_columns)
        return [key for key in schema.column_keys if key not in observed]

    @staticmethod
    def check_types(schema: FileSchema, rows: List[SheetRow]) -> ValidationResult:
        """
        Check every cell of every row against its column's declared type.

        Only the first MAX_DISPLAYED_ERRORS messages are rendered, but every
        failing cell is counted.

        Args:
            schema: FileSchema with the declared column types
            rows: Data rows of the sheet, header excluded

        Returns:
            ValidationResult with the rendered messages and the total count
        """
        errors: List[str] = []
        total_errors = 0

        for row_index, row in enumerate(rows):
            for column in schema.columns:
                value = row.get(column.key, "")
                if TYPE_CHECKS[column.type](value):
                    continue
                total_errors += 1
                if len(errors) < MAX_DISPLAYED_ERRORS:
                    errors.append(f'Row {row_index + 2}: "{column.key}" should be a {column.type.value}.')

        if total_errors > MAX_DISPLAYED_ERRORS:
            errors.append(ERROR_SUMMARY_MESSAGE)

        return ValidationResult(
            valid=not errors,
            errors=errors,
            total_error_count=total_errors,
            error_kind=ValidationErrorKind.CELL_TYPE_MISMATCH if errors else None,
        )
