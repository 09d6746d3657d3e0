from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class ColumnType(str, Enum):
    """Declared type of a spreadsheet column."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class ColumnDefinition(BaseModel):
    """
    A single expected column of a file type.

    Attributes:
        key: Header text of the column (case-sensitive)
        type: Declared type every cell in the column must satisfy
    """
    model_config = ConfigDict(frozen=True)

    key: str
    type: ColumnType


class FileSchema(BaseModel):
    """
    Column contract for one file type.

    Attributes:
        file_type_id: Identifier used by the file type selector
        label: Human readable name of the file type
        columns: Expected columns in declared order
    """
    model_config = ConfigDict(frozen=True)

    file_type_id: str
    label: str
    columns: Tuple[ColumnDefinition, ...]

    @property
    def column_keys(self) -> List[str]:
        return [column.key for column in self.columns]


def _schema(file_type_id: str, label: str, *columns: Tuple[str, ColumnType]) -> FileSchema:
    return FileSchema(
        file_type_id=file_type_id,
        label=label,
        columns=tuple(ColumnDefinition(key=key, type=column_type) for key, column_type in columns),
    )


# New file types are added here; the validator needs no change.
FILE_SCHEMAS: Mapping[str, FileSchema] = MappingProxyType({
    "report": _schema(
        "report",
        "Report",
        ("Name", ColumnType.STRING),
        ("Amount", ColumnType.NUMBER),
        ("Date", ColumnType.DATE),
    ),
})

DEFAULT_FILE_TYPE = next(iter(FILE_SCHEMAS))


def lookup(file_type_id: str) -> Optional[FileSchema]:
    """
    Find the schema registered for a file type.

    Args:
        file_type_id: Identifier chosen in the file type selector

    Returns:
        The matching FileSchema, or None when the identifier is unknown
    """
    return FILE_SCHEMAS.get(file_type_id)


def file_type_ids() -> List[str]:
    return list(FILE_SCHEMAS)


def file_type_options() -> List[Dict[str, str]]:
    """Value/label pairs for a file type selection control, in registry order."""
    return [{"value": schema.file_type_id, "label": schema.label} for schema in FILE_SCHEMAS.values()]
