import io
import unittest
from datetime import datetime, timezone

from openpyxl import Workbook

from stockroom.core.constants import DEFAULT_CATEGORIES, DEFAULT_VENDORS
from stockroom.services import csv_import
from stockroom.services.csv_import import (
    normalize_header,
    parse_product_records,
    parse_products_csv,
    parse_products_workbook,
)

HEADER = (
    "Product Code,Product Name,Category,Vendor,Buying Price,Selling Price,"
    "Profit %,Quantity,Sold,Available Stock,Image URL"
)
KNOWN = {"categories": DEFAULT_CATEGORIES, "vendors": DEFAULT_VENDORS}


def _row(code, name="Widget", buying="10", selling="15", quantity="5", sold="1",
         category="Electronics", vendor="Amazon", profit="", image=""):
    return ",".join(
        [code, name, category, vendor, buying, selling, profit, quantity, sold, "", image]
    )


def _csv(*rows, header=HEADER):
    return "\n".join([header, *rows]) + "\n"


class NormalizeHeaderTest(unittest.TestCase):
    def test_strips_quotes_bom_and_units(self):
        self.assertEqual(normalize_header('"Buying Price (₹)"'), "Buying Price")
        self.assertEqual(normalize_header("\ufeffProduct Code"), "Product Code")
        self.assertEqual(normalize_header("  Profit % "), "Profit %")
        self.assertEqual(normalize_header(None), "")


class ParseProductsCsvTest(unittest.TestCase):
    def test_partial_import_reports_bad_row(self):
        text = _csv(
            _row("A1"),
            _row("A2"),
            _row("A3", buying="0"),
            _row("A4"),
            _row("A5"),
        )
        outcome = parse_products_csv(text, **KNOWN)

        self.assertTrue(outcome.ok)
        self.assertEqual(len(outcome.products), 4)
        self.assertEqual(len(outcome.errors), 1)
        self.assertTrue(outcome.errors[0].startswith("Row 3:"))
        self.assertIn("Buying price must be greater than 0", outcome.errors[0])
        self.assertEqual([p["productCode"] for p in outcome.products], ["A1", "A2", "A4", "A5"])

    def test_missing_vendor_column(self):
        header = HEADER.replace("Vendor,", "")
        outcome = parse_products_csv(_csv("A1,Widget,Electronics,10,15,,5,1,,", header=header))

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.failure.kind, csv_import.SCHEMA_MISMATCH)
        self.assertEqual(outcome.failure.missing_columns, ["Vendor"])
        self.assertEqual(outcome.products, [])

    def test_header_only_is_malformed(self):
        outcome = parse_products_csv(HEADER + "\n\n")
        self.assertEqual(outcome.failure.kind, csv_import.MALFORMED_INPUT)

    def test_all_rows_invalid(self):
        outcome = parse_products_csv(_csv(_row("A1", name=""), _row("A2", quantity="x")))
        self.assertEqual(outcome.failure.kind, csv_import.NO_VALID_ROWS)
        self.assertEqual(len(outcome.failure.errors), 2)

    def test_short_rows_are_counted_and_skipped(self):
        outcome = parse_products_csv(_csv(_row("A1"), "A2,Widget,Electronics"))
        self.assertEqual(len(outcome.products), 1)
        self.assertEqual(outcome.skipped_rows, 1)
        self.assertEqual(outcome.errors, [])

    def test_exported_file_shape_is_accepted(self):
        header = (
            '\ufeff"Product Code","Product Name","Category","Vendor","Buying Price (₹)",'
            '"Selling Price (₹)","Profit %","Quantity","Sold","Available Stock",'
            '"Created Date","Last Updated","Image URL"'
        )
        row = '"N/A","Desk, Large","Home & Garden","Target",120,150,25,3,1,2,"01/02/2026","N/A",""'
        outcome = parse_products_csv(_csv(row, header=header), **KNOWN)

        self.assertTrue(outcome.ok, outcome.failure)
        product = outcome.products[0]
        self.assertEqual(product["name"], "Desk, Large")
        self.assertEqual(product["productCode"], "")
        self.assertIsNone(product["image"])
        self.assertEqual(product["profitPercentage"], 25.0)

    def test_unknown_reference_is_a_row_error(self):
        outcome = parse_products_csv(_csv(_row("A1"), _row("A2", vendor="Corner Shop")), **KNOWN)
        self.assertEqual(len(outcome.products), 1)
        self.assertEqual(outcome.errors, ["Row 2: Unknown vendor: Corner Shop"])

    def test_out_of_range_profit_rejects_row(self):
        outcome = parse_products_csv(_csv(_row("A1"), _row("A2", profit="5000")))
        self.assertEqual(len(outcome.products), 1)
        self.assertIn("Row 2", outcome.errors[0])

    def test_ids_and_timestamps_are_injected(self):
        ids = iter(["first", "second"])
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        outcome = parse_products_csv(
            _csv(_row("A1"), _row("A2")), id_factory=lambda: next(ids), now=now
        )
        self.assertEqual([p["id"] for p in outcome.products], ["first", "second"])
        self.assertEqual(outcome.products[0]["createdAt"], now.isoformat())


class ParseRecordsTest(unittest.TestCase):
    def test_empty_input(self):
        outcome = parse_product_records([])
        self.assertEqual(outcome.failure.kind, csv_import.MALFORMED_INPUT)

    def test_json_records(self):
        outcome = parse_product_records(
            [
                {"name": "Pen", "category": "Books", "vendor": "Amazon",
                 "buyingPrice": 1, "sellingPrice": 2, "quantity": 100},
                "not a product",
            ],
            **KNOWN,
        )
        self.assertEqual(len(outcome.products), 1)
        self.assertTrue(outcome.errors[0].startswith("Row 2:"))


class ParseWorkbookTest(unittest.TestCase):
    def test_first_sheet_is_imported(self):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(HEADER.split(","))
        sheet.append(["W1", "Ball", "Sports", "Walmart", 4.5, 9, None, 20, 0, 20, None])
        buffer = io.BytesIO()
        workbook.save(buffer)

        outcome = parse_products_workbook(buffer.getvalue(), **KNOWN)

        self.assertTrue(outcome.ok, outcome.failure)
        self.assertEqual(outcome.products[0]["buyingPrice"], 4.5)
        self.assertEqual(outcome.products[0]["quantity"], 20)

    def test_not_a_workbook(self):
        outcome = parse_products_workbook(b"Product Code,Product Name\n")
        self.assertEqual(outcome.failure.kind, csv_import.MALFORMED_INPUT)


if __name__ == "__main__":
    unittest.main()
