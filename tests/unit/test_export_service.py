"""
Unit tests for export service.

Tests acknowledgment history Excel generation.
"""

import pytest
from datetime import date, datetime, timezone
from openpyxl import load_workbook

from services.export_service import (
    ExportService,
    export_filename,
    HISTORY_HEADERS,
    ITEM_HEADERS,
)
from services.unfulfilled_order_service import score_unfulfilled_rows
from models.unfulfilled_order import AcknowledgmentResponse
from tests.factories import UnfulfilledRowFactory


@pytest.fixture
def acknowledgments():
    items = score_unfulfilled_rows(
        [
            UnfulfilledRowFactory.create(
                due_in_days=-1,
                shortage_quantity=50,
                number_of_sales_orders=2,
                product_code="CHK-BRST",
                product_description="Chicken Breast 10lb",
            ),
            UnfulfilledRowFactory.create(due_in_days=None, shortage_quantity=5, number_of_sales_orders=1),
        ],
        date.today(),
    )
    return [
        AcknowledgmentResponse(
            id="ack-1",
            user_id="user-1",
            acknowledged_at=datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc),
            unfulfilled_items_snapshot=[item.model_dump(mode="json") for item in items],
            work_order_id="wo-1",
            notes='Short on "breast"',
            user_name="Dana Reyes",
            work_order_number="WO-0042",
        ),
        AcknowledgmentResponse(
            id="ack-2",
            user_id="user-2",
            acknowledged_at=datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc),
            unfulfilled_items_snapshot=[],
        ),
    ]


class TestExportFilename:

    def test_uses_date(self):
        assert export_filename(date(2026, 10, 19)) == "acknowledgments_20261019.xlsx"


class TestGenerateAcknowledgmentsExcel:

    def test_history_sheet(self, acknowledgments):
        output = ExportService().generate_acknowledgments_excel(acknowledgments)

        wb = load_workbook(output)
        ws = wb["Acknowledgments"]

        assert [c.value for c in ws[1]] == HISTORY_HEADERS
        assert ws.cell(row=2, column=2).value == "Dana Reyes"
        assert ws.cell(row=2, column=3).value == 2
        assert ws.cell(row=2, column=4).value == "WO-0042"
        assert ws.cell(row=2, column=5).value == 'Short on "breast"'

    def test_missing_enrichment_uses_placeholders(self, acknowledgments):
        output = ExportService().generate_acknowledgments_excel(acknowledgments)

        ws = load_workbook(output)["Acknowledgments"]

        assert ws.cell(row=3, column=2).value == "Unknown"
        assert ws.cell(row=3, column=3).value == 0
        # openpyxl reads empty strings back as None
        assert ws.cell(row=3, column=4).value in ("", None)

    def test_items_sheet_lists_snapshot_in_rank_order(self, acknowledgments):
        output = ExportService().generate_acknowledgments_excel(acknowledgments)

        ws = load_workbook(output)["Items"]

        assert [c.value for c in ws[1]] == ITEM_HEADERS
        assert ws.max_row == 3  # header + 2 items
        assert ws.cell(row=2, column=3).value == 1
        assert ws.cell(row=2, column=4).value == "critical"
        assert ws.cell(row=2, column=6).value == "CHK-BRST"
        assert ws.cell(row=3, column=4).value == "low"

    def test_partial_snapshot_items(self):
        ack = AcknowledgmentResponse(
            id="ack-3",
            user_id="user-1",
            acknowledged_at=datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc),
            unfulfilled_items_snapshot=[{"product_code": "X"}],
        )

        output = ExportService().generate_acknowledgments_excel([ack])

        ws = load_workbook(output)["Items"]
        assert ws.max_row == 2
        assert ws.cell(row=2, column=5).value == 0
        assert ws.cell(row=2, column=6).value == "X"

    def test_empty_history(self):
        output = ExportService().generate_acknowledgments_excel([])

        wb = load_workbook(output)

        assert wb["Acknowledgments"].max_row == 1
        assert wb["Items"].max_row == 1
