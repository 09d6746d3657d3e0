import logging
import os
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 25 * 1024 * 1024  # 25MB

ACCEPTED_FILE_TYPES: Dict[str, Tuple[str, ...]] = {
    "application/vnd.ms-excel": (".xls",),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (".xlsx",),
}

ACCEPTED_EXTENSIONS = tuple(
    extension for extensions in ACCEPTED_FILE_TYPES.values() for extension in extensions
)

FILE_TYPE_REJECTION = f"File type must be {', '.join(ACCEPTED_EXTENSIONS)}"
FILE_TOO_LARGE_REJECTION = f"File is larger than {MAX_FILE_SIZE} bytes"


def check_file(file_name: Optional[str], content_type: Optional[str], size: int) -> List[str]:
    """
    Decide whether a dropped file may go on to schema validation.

    A file passes the type check when its MIME type or its extension is one
    of the accepted spreadsheet types.

    Args:
        file_name: Name of the file as selected by the user
        content_type: MIME type reported for the file
        size: Size of the file in bytes

    Returns:
        List of rejection messages, empty when the file is accepted
    """
    rejections = []

    extension = os.path.splitext(file_name or "")[1].lower()
    content_type = (content_type or "").split(";")[0].strip().lower()

    if content_type not in ACCEPTED_FILE_TYPES and extension not in ACCEPTED_EXTENSIONS:
        rejections.append(FILE_TYPE_REJECTION)

    if size > MAX_FILE_SIZE:
        rejections.append(FILE_TOO_LARGE_REJECTION)

    if rejections:
        logger.warning(
            "File rejected",
            extra={"file_name": file_name, "content_type": content_type, "size_bytes": size, "rejections": rejections}
        )
    return rejections
