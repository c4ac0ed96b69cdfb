"""Export product records as a Shopify product-import CSV."""

import csv
import io
import re
from collections.abc import Iterable

from storefront_sync.constants import CSV_HEADERS, CSV_PRODUCT_TYPE, CSV_VENDOR
from storefront_sync.models import ProductRecord

_HANDLE_RE = re.compile(r"[^a-z0-9]+")


def product_handle(title: str) -> str:
    """URL handle: lower-cased title with runs of non-alphanumerics collapsed to '-'."""
    return _HANDLE_RE.sub("-", title.lower())


def product_row(record: ProductRecord) -> list[str]:
    return [
        product_handle(record.title),
        record.title,
        "",
        CSV_VENDOR,
        CSV_PRODUCT_TYPE,
        "",
        "true",
        "Title",
        "Default",
        record.price_text,
        "true",
        "true",
        record.image or "",
        "active",
    ]


def products_to_csv(records: Iterable[ProductRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(product_row(record))
    return buffer.getvalue()
