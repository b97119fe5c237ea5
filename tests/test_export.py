"""Tests for Excel export."""

from datetime import date
from decimal import Decimal
from openpyxl import load_workbook
from receipt_engine.export import ExcelExporter, RECEIPT_HEADERS, clean_cell_value
from receipt_engine.models import LineItem, ParsedReceipt
from receipt_engine.parse import ReceiptParser
from receipt_engine.review import ReviewQueue

from conftest import JOLLIBEE_RECEIPT, REFERENCE_DATE


class TestExcelExporter:
    """Test suite for ExcelExporter."""

    def setup_method(self):
        """Set up test fixtures."""
        parser = ReceiptParser(today=REFERENCE_DATE)
        self.receipts = [
            ("ocr/blank.txt", parser.parse_receipt("")),
            ("ocr/jollibee.txt", parser.parse_receipt(JOLLIBEE_RECEIPT)),
            ("ocr/pharmacy.txt", parser.parse_receipt(
                "ROSE PHARMACY\n07/22/2024\nVitamin C 150.00\nTOTAL 150.00")),
        ]
        self.queue = ReviewQueue()
        for file_path, receipt in self.receipts:
            self.queue.add_from_receipt(file_path, receipt)

    def test_receipts_and_items_sheets(self, tmp_path):
        """Test sheet layout with review rows last."""
        output = tmp_path / "out" / "receipts.xlsx"

        ExcelExporter(output).export_receipts(self.receipts, self.queue.items)

        workbook = load_workbook(output)
        assert workbook.sheetnames == ["Receipts", "Items"]

        rows = list(workbook["Receipts"].iter_rows(values_only=True))
        assert list(rows[0]) == RECEIPT_HEADERS
        assert [row[0] for row in rows[1:]] == ["jollibee.txt", "pharmacy.txt", "blank.txt"]
        assert rows[1][1:7] == ('JOLLIBEE 123 Main St', '2024-07-20', 130.0, 'Food & Dining',
                                'Burger, Fries', 'OK')
        assert rows[3][6] == "REVIEW"
        assert "missing amount" in rows[3][7]

        items = list(workbook["Items"].iter_rows(values_only=True))
        assert items[1:] == [
            ('jollibee.txt', 'JOLLIBEE 123 Main St', 'Burger', 85.0),
            ('jollibee.txt', 'JOLLIBEE 123 Main St', 'Fries', 45.0),
        ]

    def test_summary_block(self, tmp_path):
        """Test the optional summary above the receipts."""
        output = tmp_path / "receipts.xlsx"

        ExcelExporter(output).export_receipts(self.receipts, self.queue.items, include_summary=True)

        sheet = load_workbook(output)["Receipts"]
        assert sheet.cell(row=1, column=1).value == "RECEIPT SUMMARY"
        assert sheet.cell(row=3, column=2).value == 3
        assert sheet.cell(row=3, column=5).value == "280.00"

    def test_summarize_categories(self):
        """Test per-category counts and amounts."""
        rows = [ExcelExporter.create_receipt_row(path, receipt) for path, receipt in self.receipts]

        summary = ExcelExporter.summarize_categories(rows)

        assert list(summary.index) == ['Healthcare', 'Food & Dining', 'Uncategorized']
        assert summary.loc['Healthcare', 'amount'] == 150.0
        assert summary.loc['Uncategorized', 'count'] == 1

    def test_empty_export(self, tmp_path):
        """Test exporting with no receipts."""
        output = tmp_path / "empty.xlsx"

        ExcelExporter(output).export_receipts([], [], include_summary=True)

        sheet = load_workbook(output)["Receipts"]
        assert sheet.cell(row=1, column=1).value == "No receipts to summarize"

    def test_control_characters_are_removed_from_cells(self, tmp_path):
        """Test that OCR control characters never reach the worksheet."""
        receipt = ParsedReceipt(
            merchant="\x00JOLLIBEE\x1b",
            date=date(2024, 7, 20),
            total=Decimal("130.00"),
            items=(LineItem("Bur\x07ger", Decimal("85.00")),),
            category="Food\x01 & Dining",
            raw_text="\x00JOLLIBEE\x1b\nBur\x07ger 85.00\nTOTAL 130.00",
        )
        output = tmp_path / "receipts.xlsx"

        ExcelExporter(output).export_receipts([("ocr/jolli\x0bbee.txt", receipt)], include_summary=True)

        workbook = load_workbook(output)
        rows = list(workbook["Receipts"].iter_rows(values_only=True))
        assert ('jollibee.txt', 'JOLLIBEE', '2024-07-20', 130.0, 'Food & Dining', 'Burger') in \
            [row[:6] for row in rows]
        items = list(workbook["Items"].iter_rows(values_only=True))
        assert items[1] == ('jollibee.txt', 'JOLLIBEE', 'Burger', 85.0)

    def test_clean_cell_value(self):
        assert clean_cell_value("A\x00B\tC\n") == "AB\tC\n"
        assert clean_cell_value(12.5) == 12.5
        assert clean_cell_value(None) is None
