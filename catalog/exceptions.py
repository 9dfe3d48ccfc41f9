class CatalogError(Exception):
    """Catalog answered with something we cannot use. Not retried."""


class CatalogConfigError(CatalogError):
    """Required catalog or credential configuration is missing."""
