import tempfile
import unittest

from fastapi.testclient import TestClient

from stockroom.config import Settings
from stockroom.main import create_app

HEADER = (
    "Product Code,Product Name,Category,Vendor,Buying Price,Selling Price,"
    "Profit %,Quantity,Sold,Available Stock,Image URL"
)

PRODUCT_FORM = {
    "productCode": "SP-1",
    "name": "Football",
    "category": "Sports",
    "vendor": "Walmart",
    "buyingPrice": "12",
    "sellingPrice": "18",
    "quantity": "4",
    "sold": "1",
}


class ApiTestCase(unittest.TestCase):
    settings_overrides = {}

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        settings = Settings(
            DATABASE_URL="sqlite://",
            UPLOAD_DIR=self.tmp.name,
            ADMIN_USERNAME="owner",
            ADMIN_PASSWORD="s3cret-pass",
            ADMIN_PASSWORD_HASH=None,
            ADMIN_PASSWORD_SALT=None,
            PBKDF2_ROUNDS=1000,
            SESSION_SECRET="test-secret",
            ENVIRONMENT="local",
            **self.settings_overrides,
        )
        self.client = TestClient(create_app(settings))
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self.tmp.cleanup()

    def login(self):
        response = self.client.post(
            "/api/auth/login", json={"username": "owner", "password": "s3cret-pass"}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()


class AuthApiTest(ApiTestCase):
    def test_products_require_login(self):
        response = self.client.get("/api/products")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Authentication required"})

    def test_bad_credentials(self):
        response = self.client.post(
            "/api/auth/login", json={"username": "owner", "password": "wrong"}
        )
        self.assertEqual(response.status_code, 401)

    def test_login_status_logout(self):
        payload = self.login()
        self.assertEqual(payload["user"]["username"], "owner")
        self.assertNotIn("passwordHash", payload["user"])

        status = self.client.get("/api/auth/status").json()
        self.assertTrue(status["authenticated"])

        self.client.post("/api/auth/logout")
        self.assertFalse(self.client.get("/api/auth/status").json()["authenticated"])
        self.assertEqual(self.client.get("/api/dashboard/stats").status_code, 401)

    def test_health(self):
        self.assertEqual(self.client.get("/health").json()["status"], "ok")


class ProductApiTest(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.login()

    def test_create_list_update_delete(self):
        response = self.client.post("/api/products", data=PRODUCT_FORM)
        self.assertEqual(response.status_code, 200, response.text)
        product = response.json()
        self.assertEqual(product["profitPercentage"], 50.0)
        self.assertEqual(product["availableStock"], 3)

        listed = self.client.get("/api/products").json()
        self.assertEqual([p["id"] for p in listed], [product["id"]])

        response = self.client.put(f"/api/products/{product['id']}", data={"quantity": "20"})
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["availableStock"], 19)

        response = self.client.delete(f"/api/products/{product['id']}")
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get(f"/api/products/{product['id']}").status_code, 404)

    def test_validation_error_payload(self):
        response = self.client.post("/api/products", data={**PRODUCT_FORM, "buyingPrice": "0"})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["fields"], {"buyingPrice": "Buying price must be greater than 0"})

    def test_non_image_upload_rejected(self):
        response = self.client.post(
            "/api/products",
            data=PRODUCT_FORM,
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], {"image": "Only image files are allowed!"})

    def test_image_upload_is_served(self):
        response = self.client.post(
            "/api/products",
            data=PRODUCT_FORM,
            files={"image": ("ball.png", b"\x89PNG fake", "image/png")},
        )
        self.assertEqual(response.status_code, 200, response.text)
        image = response.json()["image"]
        self.assertTrue(image.startswith("/uploads/image-"))
        self.assertEqual(self.client.get(image).content, b"\x89PNG fake")

    def test_bulk_upload_and_export(self):
        csv_text = "\n".join(
            [
                HEADER,
                "B1,Ball,Sports,Walmart,10,15,,5,2,,",
                "B2,Bat,Sports,Walmart,20,18,,3,0,,",
                "B3,Net,Sports,Walmart,0,5,,1,0,,",
            ]
        )
        response = self.client.post(
            "/api/products/bulk-upload",
            files={"csvFile": ("products.csv", csv_text.encode("utf-8"), "text/csv")},
        )
        self.assertEqual(response.status_code, 200, response.text)
        result = response.json()
        self.assertEqual(result["importedCount"], 2)
        self.assertEqual(len(result["errors"]), 1)
        self.assertTrue(result["errors"][0].startswith("Row 3:"))

        stats = self.client.get("/api/dashboard/stats").json()
        self.assertEqual(stats["totalStockQuantity"], 8)
        self.assertEqual(stats["totalValue"], 110)
        self.assertEqual(stats["totalSoldProfit"], 10)

        response = self.client.get("/api/products/export", params={"kind": "summary"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment;", response.headers["content-disposition"])
        self.assertTrue(response.content.startswith("\ufeff".encode("utf-8")))

        response = self.client.get("/api/products/export", params={"format": "xlsx"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.content.startswith(b"PK"))

    def test_bulk_upload_missing_column(self):
        csv_text = HEADER.replace(",Vendor", "") + "\nB1,Ball,Sports,10,15,,5,2,,\n"
        response = self.client.post(
            "/api/products/bulk-upload",
            files={"csvFile": ("products.csv", csv_text.encode("utf-8"), "text/csv")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["missingColumns"], ["Vendor"])
        self.assertEqual(self.client.get("/api/products").json(), [])

    def test_bulk_json(self):
        response = self.client.post(
            "/api/products/bulk",
            json={"products": [{**PRODUCT_FORM, "imageUrl": "https://example.com/ball.png"}]},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["importedCount"], 1)

    def test_search(self):
        self.client.post("/api/products", data=PRODUCT_FORM)
        self.client.post("/api/products", data={**PRODUCT_FORM, "productCode": "SP-2", "name": "Racket"})
        found = self.client.get(
            "/api/products/search", params={"q": "sp-", "sortBy": "name", "sortOrder": "desc"}
        ).json()
        self.assertEqual([p["name"] for p in found], ["Racket", "Football"])


class CatalogApiTest(ApiTestCase):
    def test_open_catalog_endpoints(self):
        self.assertIn("Books", self.client.get("/api/categories").json())

        response = self.client.post("/api/vendors", json={"name": "Local Market"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("Local Market", response.json()["vendors"])

        response = self.client.post("/api/vendors", json={"name": "Local Market"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {"error": "Vendor already exists"})

    def test_delete_category_in_use(self):
        self.login()
        self.client.post("/api/products", data=PRODUCT_FORM)
        self.assertEqual(self.client.delete("/api/categories/Sports").status_code, 409)

        response = self.client.delete("/api/categories/Home & Garden")
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("Home & Garden", response.json()["categories"])

    def test_customers_and_settings(self):
        response = self.client.post(
            "/api/customers",
            json={
                "name": "Meera",
                "address": "7 Hill Street",
                "mobileNumber": "9111111111",
                "productCodes": "SP-1,SP-2",
                "date": "2026-04-10",
                "time": "16:45",
            },
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["productCodes"], ["SP-1", "SP-2"])
        self.assertEqual(self.client.post("/api/customers", json={}).status_code, 400)

        response = self.client.put("/api/settings", json={"companyName": "Meera Stores"})
        self.assertEqual(response.json()["companyName"], "Meera Stores")
        response = self.client.post(
            "/api/settings/logo", files={"logo": ("logo.gif", b"GIF89a", "image/gif")}
        )
        self.assertTrue(response.json()["logo"].startswith("/uploads/logo-"))


class StrictAuthApiTest(ApiTestCase):
    settings_overrides = {"AUTH_REQUIRED_FOR_ALL": True}

    def test_catalog_requires_login(self):
        self.assertEqual(self.client.get("/api/categories").status_code, 401)
        self.login()
        self.assertEqual(self.client.get("/api/categories").status_code, 200)


class UploadLimitApiTest(ApiTestCase):
    settings_overrides = {"IMAGE_MAX_BYTES": 16, "IMPORT_MAX_BYTES": 64}

    def test_oversized_uploads_rejected(self):
        self.login()
        response = self.client.post(
            "/api/products",
            data=PRODUCT_FORM,
            files={"image": ("big.png", b"x" * 17, "image/png")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("image", response.json()["fields"])

        response = self.client.post(
            "/api/products/bulk-upload",
            files={"csvFile": ("products.csv", HEADER.encode("utf-8"), "text/csv")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("csvFile", response.json()["fields"])
        self.assertEqual(self.client.get("/api/products").json(), [])


if __name__ == "__main__":
    unittest.main()
