"""
Spreadsheet Upload Validation Application

This package provides an API that checks spreadsheet files against a declared
column schema before they are submitted for upload. It reads the first sheet
of a workbook, reports missing columns and cells that do not match their
column's declared type.

Key modules:
- main.py: FastAPI application with API endpoints
- schema_registry.py: File types and their expected columns
- spreadsheet_validator.py: Workbook decoding and schema validation
- drop_zone.py: File type and size checks applied before validation
- upload_session.py: Drop zone state, discards superseded validations
- utils/result.py: Result pattern implementation for error handling
"""
