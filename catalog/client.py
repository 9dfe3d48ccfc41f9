# catalog/client.py
import datetime
import os
from typing import List, Optional, Sequence
from urllib.parse import quote

import requests

from core.logger import get_logger
from core.models import ItemSummary

from .auth import SERVICE_ROLE, SERVICE_TOKEN_MINUTES, TokenIssuer, issue_service_token
from .exceptions import CatalogConfigError, CatalogError

logger = get_logger(__name__)

CATALOG_BASE_URL = os.getenv("CATALOG_BASE_URL", "").strip()
CATALOG_TIMEOUT_SECONDS = float(os.getenv("CATALOG_TIMEOUT_SECONDS", "30"))
ITEMS_PATH = "/api/items"


def build_items_url(base_url: str, item_ids: Sequence[str]) -> str:
    """
    Bulk lookup URL. Ids are joined with bare commas in their original order;
    commas stay literal, anything unsafe inside an id is percent-encoded.
    """
    joined = ",".join(str(i) for i in item_ids)
    return f"{base_url.rstrip('/')}{ITEMS_PATH}?itemIds={quote(joined, safe=',')}"


class CatalogClient:
    """
    HTTP client bound to the catalog service. Every request carries the
    bearer token the client was created with.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = CATALOG_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            }
        )

    def lookup_items(self, item_ids: Sequence[str]) -> requests.Response:
        """One GET against the bulk lookup endpoint. Transport errors propagate."""
        url = build_items_url(self.base_url, item_ids)
        logger.debug("Catalog lookup: %s", url)
        return self.session.get(url, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()


def create_authorized_client(
    base_url: Optional[str] = None,
    token_issuer: Optional[TokenIssuer] = None,
    session: Optional[requests.Session] = None,
) -> CatalogClient:
    """
    Build a CatalogClient with a freshly minted service token.
    One token per client; it is not rotated between retries.
    """
    resolved = (base_url if base_url is not None else CATALOG_BASE_URL).strip()
    if not resolved:
        raise CatalogConfigError("Catalog base URL not found in configuration (CATALOG_BASE_URL).")

    issuer = token_issuer or issue_service_token
    token = issuer(SERVICE_ROLE, datetime.timedelta(minutes=SERVICE_TOKEN_MINUTES))
    return CatalogClient(resolved, token, session=session)


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def parse_item_summaries(response: requests.Response) -> Optional[List[ItemSummary]]:
    """
    Decode a successful lookup response.
    Returns None when the body is absent (empty or JSON null), otherwise the
    list of summaries in response order. Raises CatalogError on anything else.
    """
    if not (response.content or b"").strip():
        return None
    try:
        data = response.json()
    except ValueError as exc:
        raise CatalogError("Catalog response is not valid JSON.") from exc

    if data is None:
        return None
    if not isinstance(data, list):
        raise CatalogError(f"Unexpected catalog payload (expected list, got {type(data).__name__}).")

    summaries: List[ItemSummary] = []
    for entry in data:
        if not isinstance(entry, dict):
            raise CatalogError(f"Unexpected catalog item entry: {entry!r}")
        try:
            summaries.append(ItemSummary.from_payload(entry))
        except ValueError as exc:
            raise CatalogError(str(exc)) from exc
    return summaries
