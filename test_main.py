from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

import main
from drop_zone import FILE_TOO_LARGE_REJECTION, FILE_TYPE_REJECTION
from main import app, get_schema

# Create TestClient for FastAPI app testing
client = TestClient(app)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
HEADER = ["Name", "Amount", "Date"]


def post_file(content, file_name="report.xlsx", content_type=XLSX_MIME, file_type="report"):
    data = {} if file_type is None else {"file_type": file_type}
    return client.post(
        "/validate",
        files={"file": (file_name, content, content_type)},
        data=data,
    )


class TestGetSchema:
    """
    Tests for the get_schema helper.
    """

    def test_known_file_type_returns_columns(self):
        result = get_schema("report")

        assert result.is_success()
        assert result.data["columns"] == [
            {"key": "Name", "type": "string"},
            {"key": "Amount", "type": "number"},
            {"key": "Date", "type": "date"},
        ]

    def test_unknown_file_type_returns_404(self):
        with patch.object(main.logger, 'warning'):
            result = get_schema("invoice")

        assert result.is_failure()
        assert result.status_code == 404
        assert "invoice" in result.error


class TestFileTypeEndpoints:
    """
    Tests for the file type selection endpoints.
    """

    def test_list_file_types(self):
        response = client.get("/file-types")

        assert response.status_code == 200
        assert response.json() == [{"value": "report", "label": "Report"}]

    def test_get_file_type(self):
        response = client.get("/file-types/report")

        assert response.status_code == 200
        data = response.json()
        assert data["file_type_id"] == "report"
        assert data["label"] == "Report"
        assert [column["key"] for column in data["columns"]] == HEADER

    def test_get_unknown_file_type(self):
        response = client.get("/file-types/invoice")

        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["error"] == "Unknown file type: invoice"


class TestValidateEndpoint:
    """
    Tests for the /validate endpoint.
    """

    def test_valid_file_returns_200(self, valid_report):
        """
        A well-formed report is accepted with no errors.

        Args:
            valid_report: Fixture providing a valid report workbook
        """
        response = post_file(valid_report)

        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "errors": [],
            "total_error_count": 0,
            "error_kind": None,
        }

    def test_file_type_defaults_to_first_registered(self, valid_report):
        response = post_file(valid_report, file_type=None)

        assert response.status_code == 200
        assert response.json()["valid"] is True

    def test_type_errors_return_422(self, make_workbook):
        content = make_workbook(HEADER, [["Bob", "abc", "2025-01-01"]])

        response = post_file(content)

        assert response.status_code == 422
        data = response.json()
        assert data["valid"] is False
        assert data["errors"] == ['Row 2: "Amount" should be a number.']
        assert data["error_kind"] == "cell_type_mismatch"

    def test_missing_columns_return_422(self, make_workbook):
        content = make_workbook(["Name", "Amount"], [])

        response = post_file(content)

        assert response.status_code == 422
        assert response.json()["errors"] == ["Missing columns: Date"]

    def test_unknown_file_type_returns_422(self, valid_report):
        response = post_file(valid_report, file_type="invoice")

        assert response.status_code == 422
        assert response.json()["errors"] == ["Unknown file type."]

    def test_unreadable_file_returns_422(self):
        response = post_file(b"not really a workbook")

        assert response.status_code == 422
        assert response.json()["error_kind"] == "unreadable_file"

    def test_generic_content_type_with_spreadsheet_extension_is_accepted(self, valid_report):
        response = post_file(valid_report, content_type="application/octet-stream")

        assert response.status_code == 200

    @pytest.mark.parametrize(
        "file_name, content_type",
        [
            ("report.csv", "text/csv"),
            ("report.pdf", "application/pdf"),
            ("report.txt", "application/octet-stream"),
        ],
        ids=["csv", "pdf", "generic-wrong-extension"]
    )
    def test_wrong_file_type_is_rejected_with_415(self, valid_report, file_name, content_type):
        response = post_file(valid_report, file_name=file_name, content_type=content_type)

        assert response.status_code == 415
        assert response.json() == {"file_name": file_name, "rejections": [FILE_TYPE_REJECTION]}

    def test_oversized_file_is_rejected_with_413(self, valid_report):
        """
        Files above the size limit are rejected before validation runs.
        """
        with patch('drop_zone.MAX_FILE_SIZE', 10), \
             patch.object(main.SpreadsheetValidator, 'validate') as validate:
            response = post_file(valid_report)

        assert response.status_code == 413
        assert response.json()["rejections"] == [FILE_TOO_LARGE_REJECTION]
        validate.assert_not_called()

    def test_oversized_file_is_rejected_without_reading_it(self, valid_report):
        """
        The size reported for the spooled upload is checked before the
        content is read into memory.
        """
        with patch('drop_zone.MAX_FILE_SIZE', 10), \
             patch('starlette.datastructures.UploadFile.read', new_callable=AsyncMock) as read:
            response = post_file(valid_report)

        assert response.status_code == 413
        assert response.json() == {"file_name": "report.xlsx", "rejections": [FILE_TOO_LARGE_REJECTION]}
        read.assert_not_called()

    def test_spreadsheet_extension_with_other_content_type_is_accepted(self, valid_report):
        response = post_file(valid_report, content_type="text/plain")

        assert response.status_code == 200
        assert response.json()["valid"] is True
