"""
Export service: Generate acknowledgment history Excel files.

One row per acknowledgment for audit review, plus a second sheet listing
every snapshot item so the acknowledged list can be reconstructed.
"""

from datetime import date, datetime
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, PatternFill
import structlog

from models.unfulfilled_order import AcknowledgmentResponse, PriorityLevel

logger = structlog.get_logger(__name__)

HISTORY_HEADERS = ["Date/Time", "User", "# Items", "Work Order", "Notes"]

ITEM_HEADERS = [
    "Acknowledged At",
    "User",
    "Rank",
    "Priority",
    "Score",
    "Product Code",
    "Description",
    "Shortage",
    "Earliest Due",
    "# Sales Orders",
    "Sales Orders",
]

# Row fill per priority level (same palette as the printed alert)
PRIORITY_FILLS = {
    PriorityLevel.CRITICAL.value: "FEF2F2",
    PriorityLevel.HIGH.value: "FFF7ED",
    PriorityLevel.MEDIUM.value: "FEFCE8",
    PriorityLevel.LOW.value: "F0FDF4",
}


def export_filename(today: Optional[date] = None) -> str:
    """acknowledgments_YYYYMMDD.xlsx"""
    today = today or date.today()
    return f"acknowledgments_{today.strftime('%Y%m%d')}.xlsx"


def _format_timestamp(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ExportService:
    """Service for generating acknowledgment export files."""

    def generate_acknowledgments_excel(
        self,
        acknowledgments: list[AcknowledgmentResponse],
    ) -> BytesIO:
        """
        Generate Excel file for acknowledgment history.

        Args:
            acknowledgments: History rows, newest first

        Returns:
            BytesIO containing the Excel file
        """
        logger.info("generating_acknowledgments_export", count=len(acknowledgments))

        wb = Workbook()
        ws = wb.active
        ws.title = "Acknowledgments"

        bold_font = Font(bold=True)
        thin_border = Border(bottom=Side(style="thin", color="000000"))

        self._write_header(ws, HISTORY_HEADERS, bold_font, thin_border)
        ws.column_dimensions["A"].width = 20
        ws.column_dimensions["B"].width = 25
        ws.column_dimensions["C"].width = 10
        ws.column_dimensions["D"].width = 15
        ws.column_dimensions["E"].width = 50

        for row, ack in enumerate(acknowledgments, start=2):
            ws.cell(row=row, column=1, value=_format_timestamp(ack.acknowledged_at))
            ws.cell(row=row, column=2, value=ack.user_name or "Unknown")
            ws.cell(row=row, column=3, value=ack.item_count)
            ws.cell(row=row, column=4, value=ack.work_order_number or "")
            ws.cell(row=row, column=5, value=ack.notes or "")

        items_ws = wb.create_sheet("Items")
        self._write_header(items_ws, ITEM_HEADERS, bold_font, thin_border)
        items_ws.column_dimensions["F"].width = 15
        items_ws.column_dimensions["G"].width = 40
        items_ws.column_dimensions["K"].width = 40

        row = 2
        for ack in acknowledgments:
            for rank, item in enumerate(ack.unfulfilled_items_snapshot, start=1):
                level = item.get("priority_level") or ""
                values = [
                    _format_timestamp(ack.acknowledged_at),
                    ack.user_name or "Unknown",
                    rank,
                    level,
                    round(float(item.get("priority_score") or 0), 1),
                    item.get("product_code", ""),
                    item.get("product_description", ""),
                    item.get("shortage_quantity", 0),
                    item.get("earliest_due_date") or "",
                    item.get("number_of_sales_orders", 0),
                    ", ".join(str(n) for n in item.get("sales_order_numbers") or []),
                ]
                color = PRIORITY_FILLS.get(level)
                for col, value in enumerate(values, start=1):
                    cell = items_ws.cell(row=row, column=col, value=value)
                    if color:
                        cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
                row += 1

        output = BytesIO()
        wb.save(output)
        output.seek(0)

        logger.info(
            "acknowledgments_export_generated",
            acknowledgments=len(acknowledgments),
            item_rows=row - 2
        )

        return output

    @staticmethod
    def _write_header(ws, headers: list[str], font: Font, border: Border) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = font
            cell.border = border


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
