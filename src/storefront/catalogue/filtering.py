"""Catalogue browsing filter.

Pure functions over a product collection. Both accept ``Product`` aggregates
or plain dicts shaped like ``Product.snapshot()``, so the same rules apply to
repository results and to cached product lists.
"""

ALL_CATEGORIES = "All"


def _get(product, name):
    if isinstance(product, dict):
        return product.get(name)
    return getattr(product, name, None)


def _tags(product):
    if isinstance(product, dict):
        return product.get("tags") or []
    return product.tag_list()


def matches_query(product, query: str) -> bool:
    """True when ``query`` is a case-insensitive substring of the title, description or any tag."""
    needle = (query or "").strip().lower()
    if not needle:
        return True

    haystacks = [_get(product, "title") or "", _get(product, "description") or ""]
    haystacks.extend(str(tag) for tag in _tags(product))
    return any(needle in text.lower() for text in haystacks)


def matches_category(product, category: str | None) -> bool:
    if not category or category == ALL_CATEGORIES:
        return True
    return _get(product, "category") == category


def filter_products(products, category: str | None = ALL_CATEGORIES, query: str | None = "") -> list:
    """Products in ``category`` (or every category for ``"All"``) that match ``query``.

    Input order is preserved.
    """
    return [p for p in products if matches_category(p, category) and matches_query(p, query)]


def list_categories(products) -> list[str]:
    """``"All"`` followed by the distinct categories in first-seen order."""
    seen = []
    for product in products:
        category = _get(product, "category")
        if category and category not in seen:
            seen.append(category)
    return [ALL_CATEGORIES, *seen]
