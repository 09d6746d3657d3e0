"""
Pytest configuration file.

This file is automatically loaded by pytest and provides global test configuration.
It ensures the project's source directory is added to the Python path so that
modules can be imported properly during test execution, and provides fixtures
that build spreadsheet files (.xlsx and .xls) in memory.
"""
import os
import sys
from io import BytesIO

import pytest
import xlwt
from openpyxl import Workbook

# Add the current directory to the Python path
# This ensures imports work correctly when running tests
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

REPORT_HEADER = ["Name", "Amount", "Date"]


def build_workbook(header, rows, sheet_title="Sheet1", extra_sheets=()):
    """
    Build an .xlsx workbook in memory.

    Args:
        header: Cells of the header row, or None for a sheet without header
        rows: Data rows, each a list of cell values
        sheet_title: Name of the first worksheet
        extra_sheets: (title, rows) pairs appended after the first worksheet

    Returns:
        bytes: Content of the saved workbook
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    if header is not None:
        sheet.append(header)
    for row in rows:
        sheet.append(row)

    for title, extra_rows in extra_sheets:
        extra = workbook.create_sheet(title)
        for row in extra_rows:
            extra.append(row)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_xls_workbook(header, rows, sheet_title="Sheet1"):
    """
    Build a legacy binary .xls workbook in memory.

    Args:
        header: Cells of the header row
        rows: Data rows, each a list of cell values. None leaves a cell unset.
        sheet_title: Name of the worksheet

    Returns:
        bytes: Content of the saved workbook
    """
    workbook = xlwt.Workbook()
    sheet = workbook.add_sheet(sheet_title)
    for row_index, row in enumerate([header] + list(rows)):
        for column_index, value in enumerate(row):
            if value is not None:
                sheet.write(row_index, column_index, value)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    """Fixture exposing build_workbook to tests."""
    return build_workbook


@pytest.fixture
def make_xls_workbook():
    """Fixture exposing build_xls_workbook to tests."""
    return build_xls_workbook


@pytest.fixture
def valid_report():
    """A report workbook with two well-formed rows."""
    return build_workbook(REPORT_HEADER, [
        ["Alice", 120.5, "2025-01-01"],
        ["Bob", 42, "2025-02-15"],
    ])
