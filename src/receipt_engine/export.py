"""Excel export functionality for parsed receipts and review data."""

import logging
from typing import List, Dict, Any, Sequence, Tuple
from pathlib import Path
import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from .models import ParsedReceipt
from .review import ReviewItem

logger = logging.getLogger(__name__)

RECEIPT_HEADERS = ["File Name", "Merchant", "Date", "Total", "Category", "Items",
                   "Review Status", "Review Reason", "Raw Snippet"]
RECEIPT_WIDTHS = [25, 30, 12, 12, 18, 40, 12, 40, 60]

ITEM_HEADERS = ["File Name", "Merchant", "Item", "Price"]
ITEM_WIDTHS = [25, 30, 40, 12]


def clean_cell_value(value: Any) -> Any:
    """Drop control characters openpyxl refuses to write into a worksheet."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub('', value)
    return value


class ExcelExporter:
    """Export parsed receipts and review items to Excel."""

    def __init__(self, output_path: Path):
        """
        Initialize Excel exporter.

        Args:
            output_path: Path for the output Excel file
        """
        self.output_path = Path(output_path)
        self.workbook = Workbook()

    def export_receipts(self,
                        receipts: Sequence[Tuple[str, ParsedReceipt]],
                        review_items: Sequence[ReviewItem] = (),
                        include_summary: bool = False):
        """
        Export receipts to a "Receipts" sheet and their line items to an "Items" sheet.

        Args:
            receipts: (file_path, ParsedReceipt) pairs
            review_items: Items needing review, matched to receipts by file name
            include_summary: Whether to add the summary block above the receipts
        """
        try:
            if "Sheet" in self.workbook.sheetnames:
                self.workbook.remove(self.workbook["Sheet"])

            rows = [self.create_receipt_row(file_path, receipt) for file_path, receipt in receipts]
            self._create_receipts_sheet(rows, list(review_items), include_summary)
            self._create_items_sheet(receipts)

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(str(self.output_path))

            logger.info(f"Excel file exported to: {self.output_path}")

        except Exception as e:
            logger.error(f"Failed to export Excel file: {e}")
            raise

    def _write_headers(self, ws, headers: List[str], widths: List[int], row: int):
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="E6E6E6", end_color="E6E6E6", fill_type="solid")
            cell.alignment = Alignment(horizontal="center")
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _create_receipts_sheet(self, rows: List[Dict[str, Any]], review_items: List[ReviewItem],
                               include_summary: bool):
        """Receipts sheet: OK rows first, then rows flagged for review."""
        ws = self.workbook.create_sheet("Receipts")
        current_row = 1

        if include_summary:
            current_row = self._add_summary_section(ws, rows, current_row)
            current_row += 2

        review_lookup = {Path(item.file_path).name: item for item in review_items}

        self._write_headers(ws, RECEIPT_HEADERS, RECEIPT_WIDTHS, current_row)
        current_row += 1

        ok_rows = [row for row in rows if row['file_name'] not in review_lookup]
        review_rows = [row for row in rows if row['file_name'] in review_lookup]

        for row in ok_rows + review_rows:
            review_item = review_lookup.get(row['file_name'])
            values = [row['file_name'], row['merchant'], row['date'], row['total'],
                      row['category'], row['items'],
                      "REVIEW" if review_item else "OK",
                      review_item.reason if review_item else "",
                      review_item.raw_snippet if review_item else ""]
            for col, value in enumerate(values, 1):
                ws.cell(row=current_row, column=col, value=clean_cell_value(value))
            current_row += 1

        logger.info(f"Created receipts sheet with {len(rows)} receipts, {len(review_rows)} for review")

    def _create_items_sheet(self, receipts: Sequence[Tuple[str, ParsedReceipt]]):
        """Items sheet: one row per extracted line item."""
        ws = self.workbook.create_sheet("Items")
        self._write_headers(ws, ITEM_HEADERS, ITEM_WIDTHS, 1)

        current_row = 2
        for file_path, receipt in receipts:
            for item in receipt.items:
                ws.cell(row=current_row, column=1, value=clean_cell_value(Path(file_path).name))
                ws.cell(row=current_row, column=2, value=clean_cell_value(receipt.merchant))
                ws.cell(row=current_row, column=3, value=clean_cell_value(item.name))
                ws.cell(row=current_row, column=4, value=float(item.price))
                current_row += 1

    def _add_summary_section(self, ws, rows: List[Dict[str, Any]], start_row: int) -> int:
        """Add summary statistics to the top of the receipts sheet."""
        if not rows:
            ws.cell(row=start_row, column=1, value="No receipts to summarize")
            return start_row + 1

        df = pd.DataFrame(rows)

        ws.cell(row=start_row, column=1, value="RECEIPT SUMMARY").font = Font(bold=True, size=14)
        current_row = start_row + 2

        ws.cell(row=current_row, column=1, value="Total Receipts:").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=len(rows))

        ws.cell(row=current_row, column=4, value="Total Amount:").font = Font(bold=True)
        ws.cell(row=current_row, column=5, value=f"{df['total'].sum():,.2f}")

        ws.cell(row=current_row, column=7, value="Average Amount:").font = Font(bold=True)
        ws.cell(row=current_row, column=8, value=f"{df['total'].mean():,.2f}")
        current_row += 2

        ws.cell(row=current_row, column=1, value="Category Breakdown:").font = Font(bold=True)
        current_row += 1
        ws.cell(row=current_row, column=1, value="Category").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value="Count").font = Font(bold=True)
        ws.cell(row=current_row, column=3, value="Amount").font = Font(bold=True)
        current_row += 1

        category_summary = self.summarize_categories(rows)
        for category, data in category_summary.head(5).iterrows():
            ws.cell(row=current_row, column=1, value=clean_cell_value(category))
            ws.cell(row=current_row, column=2, value=int(data['count']))
            ws.cell(row=current_row, column=3, value=f"{data['amount']:,.2f}")
            current_row += 1

        return current_row

    @staticmethod
    def summarize_categories(rows: List[Dict[str, Any]]) -> pd.DataFrame:
        """Receipt count and total amount per category, largest amount first."""
        df = pd.DataFrame(rows, columns=['category', 'total'])
        summary = df.groupby('category')['total'].agg(['count', 'sum'])
        summary = summary.rename(columns={'sum': 'amount'})
        return summary.sort_values('amount', ascending=False)

    @staticmethod
    def create_receipt_row(file_path: str, receipt: ParsedReceipt) -> Dict[str, Any]:
        """
        Flatten a parsed receipt into a spreadsheet row.

        Args:
            file_path: Source OCR file path
            receipt: Parsed receipt

        Returns:
            Row dictionary keyed by column
        """
        return {
            'file_name': Path(file_path).name if file_path else '',
            'merchant': receipt.merchant,
            'date': receipt.date.isoformat(),
            'total': float(receipt.total),
            'category': receipt.category,
            'items': ', '.join(item.name for item in receipt.items),
        }
