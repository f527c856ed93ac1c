import unittest

from stockroom.services.validation import (
    clean_company_settings,
    clean_customer,
    clean_product,
    parse_number,
    validate_product,
    validate_profit_percentage,
)


def _raw(**overrides):
    raw = {
        "productCode": "SKU-1",
        "name": "Desk Lamp",
        "category": "Home & Garden",
        "vendor": "Target",
        "buyingPrice": "40",
        "sellingPrice": "55.50",
        "quantity": "12",
        "sold": "",
    }
    raw.update(overrides)
    return raw


class CleanProductTest(unittest.TestCase):
    def test_valid_input_is_typed(self):
        values, errors = clean_product(_raw())
        self.assertEqual(errors, {})
        self.assertEqual(values["buyingPrice"], 40.0)
        self.assertEqual(values["sellingPrice"], 55.5)
        self.assertEqual(values["quantity"], 12)
        self.assertEqual(values["sold"], 0)
        self.assertIsNone(values["image"])

    def test_missing_required_fields(self):
        _, errors = clean_product(_raw(name="  ", vendor=None, quantity=""))
        self.assertEqual(errors["name"], "Product name is required")
        self.assertEqual(errors["vendor"], "Vendor is required")
        self.assertEqual(errors["quantity"], "Quantity is required")

    def test_unparseable_numbers_are_rejected(self):
        _, errors = clean_product(_raw(buyingPrice="abc", quantity="2.5", sold="x"))
        self.assertEqual(errors["buyingPrice"], "Buying price must be a number")
        self.assertEqual(errors["quantity"], "Quantity must be a whole number")
        self.assertEqual(errors["sold"], "Sold quantity must be a whole number")

    def test_prices_must_be_positive(self):
        _, errors = clean_product(_raw(buyingPrice="0", sellingPrice="-3"))
        self.assertEqual(errors["buyingPrice"], "Buying price must be greater than 0")
        self.assertEqual(errors["sellingPrice"], "Selling price must be greater than 0")

    def test_counts_cannot_be_negative(self):
        _, errors = clean_product(_raw(quantity="-1"))
        self.assertEqual(errors["quantity"], "Quantity cannot be negative")

    def test_sold_may_exceed_quantity(self):
        _, errors = clean_product(_raw(quantity="1", sold="5"))
        self.assertEqual(errors, {})

    def test_thousands_separator(self):
        self.assertEqual(parse_number("1,250.75"), 1250.75)
        self.assertIsNone(parse_number("nan"))
        self.assertIsNone(parse_number(True))

    def test_out_of_range_numbers_are_rejected(self):
        self.assertIsNone(parse_number(10**400))
        self.assertIsNone(parse_number("1e400"))
        _, errors = clean_product(_raw(quantity=10**400))
        self.assertIn("quantity", errors)


class ReferenceValidationTest(unittest.TestCase):
    def test_unknown_category_and_vendor(self):
        values, _ = clean_product(_raw(category="Garden Gnomes", vendor="Nobody"))
        errors = validate_product(values, categories=["Books"], vendors=["Amazon"])
        self.assertEqual(errors["category"], "Unknown category: Garden Gnomes")
        self.assertEqual(errors["vendor"], "Unknown vendor: Nobody")

    def test_profit_percentage_range(self):
        self.assertEqual(validate_profit_percentage(""), {})
        self.assertEqual(validate_profit_percentage("250"), {})
        self.assertIn("profitPercentage", validate_profit_percentage("1000.5"))
        self.assertIn("profitPercentage", validate_profit_percentage("-101"))
        self.assertIn("profitPercentage", validate_profit_percentage("lots"))


class CustomerAndSettingsTest(unittest.TestCase):
    def test_customer_product_codes_from_string(self):
        values, errors = clean_customer(
            {
                "name": "Asha",
                "address": "12 Market Road",
                "mobileNumber": "9876543210",
                "productCodes": "SKU-1, SKU-2,,",
                "date": "2026-03-01",
                "time": "10:30",
            }
        )
        self.assertEqual(errors, {})
        self.assertEqual(values["productCodes"], ["SKU-1", "SKU-2"])

    def test_customer_requires_every_field(self):
        _, errors = clean_customer({"name": "Asha"})
        self.assertEqual(
            set(errors), {"address", "mobileNumber", "productCodes", "date", "time"}
        )

    def test_company_name_cannot_be_blanked(self):
        values, errors = clean_company_settings({"companyName": "  "})
        self.assertEqual(values, {})
        self.assertIn("companyName", errors)
        values, errors = clean_company_settings({"companyName": None})
        self.assertEqual((values, errors), ({}, {}))


if __name__ == "__main__":
    unittest.main()
