from .matcher import DEFAULT_LIMIT, search, product_matches

__all__ = ["DEFAULT_LIMIT", "search", "product_matches"]
