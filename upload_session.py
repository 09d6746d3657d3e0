import logging
from typing import Awaitable, Callable, Optional

from schema_registry import DEFAULT_FILE_TYPE
from spreadsheet_validator import SpreadsheetValidator, ValidationResult

logger = logging.getLogger(__name__)


class UploadSession:
    """
    State of a single drop zone.

    Every file selection starts a new event. Only the latest event may record
    its validation result; results of superseded events are dropped, so a slow
    validation of an earlier file can never overwrite a newer one.

    Attributes:
        file_type_id: File type used to validate the next selected file
        result: Validation result of the latest completed selection
        accepted_file: Name of the file accepted for upload, if any
    """

    def __init__(self, file_type_id: str = DEFAULT_FILE_TYPE):
        self.file_type_id = file_type_id
        self.result: Optional[ValidationResult] = None
        self.accepted_file: Optional[str] = None
        self._event = 0

    def select_file_type(self, file_type_id: str) -> None:
        # An already accepted file is not re-validated.
        logger.info(f"File type changed from {self.file_type_id} to {file_type_id}")
        self.file_type_id = file_type_id

    def clear(self) -> None:
        self._event += 1
        self.result = None
        self.accepted_file = None

    def begin(self) -> int:
        """Start a new selection event, discarding the previous outcome."""
        self.clear()
        return self._event

    def is_current(self, event: int) -> bool:
        return event == self._event

    def complete(self, event: int, file_name: str, result: ValidationResult) -> bool:
        """
        Record the outcome of a selection event.

        Args:
            event: Identifier returned by begin()
            file_name: Name of the validated file
            result: Outcome of the validation

        Returns:
            bool: False when the event was superseded and its result dropped
        """
        if not self.is_current(event):
            logger.info(
                "Discarding result of superseded selection",
                extra={"file_name": file_name, "event": event, "current_event": self._event}
            )
            return False

        self.result = result
        self.accepted_file = file_name if result.valid else None
        return True

    async def validate(self, file_name: str, read: Callable[[], Awaitable[bytes]]) -> ValidationResult:
        """
        Validate a newly selected file.

        The file type is fixed when the selection starts. The only suspension
        point is reading the file content.

        Args:
            file_name: Name of the selected file
            read: Coroutine function returning the file content

        Returns:
            ValidationResult: Outcome of this selection, recorded only if still current
        """
        event = self.begin()
        file_type_id = self.file_type_id
        content = await read()
        result = SpreadsheetValidator.validate(content, file_type_id)
        self.complete(event, file_name, result)
        return result
