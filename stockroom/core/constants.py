PRODUCTS = "products"
CATEGORIES = "categories"
VENDORS = "vendors"
CUSTOMERS = "customers"
COMPANY_SETTINGS = "settings"
USERS = "users"

LOW_STOCK_THRESHOLD = 10

PROFIT_PERCENT_MIN = -100
PROFIT_PERCENT_MAX = 1000

DEFAULT_CATEGORIES = (
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Automotive",
    "Health & Beauty",
    "Toys",
)
DEFAULT_VENDORS = (
    "Amazon",
    "Walmart",
    "Target",
    "Best Buy",
    "Costco",
    "Home Depot",
    "Apple",
    "Samsung",
)
DEFAULT_COMPANY_SETTINGS = {"companyName": "Inventory System", "logo": None}

UPLOADS_URL_PREFIX = "/uploads"
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")
IMPORT_EXTENSIONS = (".csv", ".xlsx")
