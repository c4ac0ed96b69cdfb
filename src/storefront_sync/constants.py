"""Shared constants across the application."""

# Admin API
SHOPIFY_ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
DEFAULT_API_VERSION = "2024-01"

PRODUCT_CREATE_MUTATION = """
mutation productCreate($input: ProductInput!) {
  productCreate(input: $input) {
    product {
      id
      title
      variants(first: 1) {
        edges {
          node {
            id
            price
          }
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

# Fixed variant flags for every created product
VARIANT_DEFAULTS = {
    "inventoryManagement": "SHOPIFY",
    "inventoryPolicy": "CONTINUE",
    "requiresShipping": True,
    "taxable": True,
}
PRODUCT_STATUS = "ACTIVE"

IMAGE_FILENAME_EXTENSION = ".jpg"

# Storefront feed
FEED_PATH = "products.json"

# CSV export (Shopify product import format)
CSV_HEADERS = [
    "Handle",
    "Title",
    "Body (HTML)",
    "Vendor",
    "Type",
    "Tags",
    "Published",
    "Option1 Name",
    "Option1 Value",
    "Variant Price",
    "Variant Requires Shipping",
    "Variant Taxable",
    "Image Src",
    "Status",
]
CSV_VENDOR = "EasySync"
CSV_PRODUCT_TYPE = "Default"
CSV_FILENAME = "shopify_products.csv"
