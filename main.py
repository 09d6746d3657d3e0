from fastapi import FastAPI, File, Form, UploadFile
import os
from http import HTTPStatus
import logging
from datetime import datetime
from typing import List
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from drop_zone import FILE_TOO_LARGE_REJECTION, check_file
from schema_registry import DEFAULT_FILE_TYPE, file_type_options, lookup
from spreadsheet_validator import SpreadsheetValidator
from utils.result import Result


# Create logs directory if it doesn't exist
log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
os.makedirs(log_dir, exist_ok=True)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Add file handler to write logs to file
log_file_path = os.path.join(log_dir, f"app_{datetime.now().strftime('%Y%m%d')}.log")
file_handler = logging.FileHandler(log_file_path)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
logging.getLogger().addHandler(file_handler)


# Initialize FastAPI app with metadata
app = FastAPI(
    title="Spreadsheet Upload Validation API",
    description="API for validating spreadsheet files against file type schemas before upload",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Or specify the portal's origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_schema(file_type_id: str) -> Result[dict]:
    """
    Look up the column contract of a file type.

    Args:
        file_type_id: Identifier of the file type

    Returns:
        Result containing the schema as a dictionary, or a 404 error
    """
    schema = lookup(file_type_id)
    if schema is None:
        logger.warning(f"Unknown file type requested: {file_type_id}")
        return Result.not_found(f"Unknown file type: {file_type_id}")
    return Result.ok(schema.model_dump(mode="json"))


def rejection_response(file_name: str, rejections: List[str]) -> JSONResponse:
    """
    Build the response for a file rejected by the drop zone checks.

    Args:
        file_name: Name of the uploaded file
        rejections: Rejection messages from check_file

    Returns:
        JSONResponse with status 413 when the file is too large, 415 otherwise
    """
    status_code = (
        HTTPStatus.REQUEST_ENTITY_TOO_LARGE
        if FILE_TOO_LARGE_REJECTION in rejections
        else HTTPStatus.UNSUPPORTED_MEDIA_TYPE
    )
    return JSONResponse(
        status_code=status_code,
        content={"file_name": file_name, "rejections": rejections}
    )


# API Endpoints
@app.get("/file-types", tags=["File Types"])
async def list_file_types():
    """
    List the file types a user can choose from.

    Returns:
        list: value/label pairs in registry order
    """
    return file_type_options()


@app.get("/file-types/{file_type_id}", tags=["File Types"])
async def get_file_type(file_type_id: str):
    """
    Get the expected columns of a file type.

    Returns:
        dict: file_type_id, label and ordered columns, or 404 when unknown
    """
    result = get_schema(file_type_id)
    if result.is_failure():
        return JSONResponse(status_code=result.status_code.value, content=result.to_dict())
    return result.data


@app.post("/validate", tags=["Validation"])
async def validate_upload(
    file: UploadFile = File(..., description="Spreadsheet file (.xls or .xlsx)"),
    file_type: str = Form(DEFAULT_FILE_TYPE, description="Identifier of the expected file type"),
):
    """
    Validate a selected spreadsheet before it is submitted for upload.

    The file first passes the drop zone checks (type and size). Rejected files
    are reported separately from schema validation errors.

    Returns:
        dict: ValidationResult. Status 200 when valid, 422 when the file must
        not be submitted, 413/415 when the drop zone rejected it.
    """
    logger.info(f"Validating {file.filename} as {file_type} ({file.size} bytes)")

    # The spooled size lets oversized uploads be rejected before they are read into memory.
    content = None
    size = file.size
    if size is None:
        content = await file.read()
        size = len(content)

    rejections = check_file(file.filename, file.content_type, size)
    if rejections:
        return rejection_response(file.filename, rejections)

    if content is None:
        content = await file.read()

    result = SpreadsheetValidator.validate(content, file_type)

    if not result.valid:
        return JSONResponse(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            content=result.model_dump(mode="json")
        )
    return result.model_dump(mode="json")


# Run the application if executed directly
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Spreadsheet Upload Validation API in development mode.")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
