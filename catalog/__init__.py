# catalog/__init__.py
from .auth import issue_service_token
from .client import CatalogClient, create_authorized_client, parse_item_summaries
from .exceptions import CatalogConfigError, CatalogError

__all__ = [
    "CatalogClient",
    "CatalogConfigError",
    "CatalogError",
    "create_authorized_client",
    "issue_service_token",
    "parse_item_summaries",
]
