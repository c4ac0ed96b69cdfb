"""Shop domain normalization.

This is the only input-shape gate before credentials leave the process, so
an access token is never sent to a host that is not a myshopify.com store.
"""

import re

from storefront_sync.errors import InvalidDomain

SHOP_DOMAIN_SUFFIX = "myshopify.com"
INVALID_DOMAIN_MESSAGE = f"Shop URL must end with {SHOP_DOMAIN_SUFFIX}"

_SCHEME_RE = re.compile(r"^https?://")
# Path, query, fragment, userinfo, port and whitespace all mean "not a bare host"
_NON_HOST_RE = re.compile(r"[/?#@:\\\s]")


def normalize_shop_domain(raw: str) -> str:
    """
    Normalize a user-supplied shop URL to a bare host.

    ``"https://Foo.MYSHOPIFY.COM/"`` becomes ``"foo.myshopify.com"``.

    Raises:
        InvalidDomain: If the normalized value is not a bare host ending
            with myshopify.com.
    """
    cleaned = _SCHEME_RE.sub("", (raw or "").strip().lower())
    if cleaned.endswith("/"):
        cleaned = cleaned[:-1]

    if _NON_HOST_RE.search(cleaned) or not cleaned.endswith(SHOP_DOMAIN_SUFFIX):
        raise InvalidDomain(INVALID_DOMAIN_MESSAGE)
    return cleaned
