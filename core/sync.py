# core/sync.py
import datetime
import threading
import time
from typing import Callable, List, Optional, Protocol

from catalog.client import (
    CatalogClient,
    create_authorized_client,
    is_success,
    parse_item_summaries,
)

from . import storage
from .cache import ItemCache, item_cache
from .diff import diff_item_ids
from .logger import get_logger
from .models import Owner
from .retry import SYNC_MAX_ATTEMPTS, call_with_retry

logger = get_logger(__name__)

SYNC_CACHE_TTL = datetime.timedelta(hours=1)

# Process-wide: at most one sync_all run in flight, whichever service instance started it.
_sync_all_lock = threading.Lock()


class OwnerStore(Protocol):
    def find_by_id(self, owner_id: int) -> Optional[Owner]: ...

    def list_all(self) -> List[Owner]: ...

    def save(self, owner: Owner) -> None: ...


class CatalogSyncService:
    """
    Reconciles owners' item ids against the catalog and warms the item cache.

    Only transport failures are retried. A non-2xx answer from the catalog is
    taken at face value: nothing changes and the owner is left for the next run.
    """

    def __init__(
        self,
        store: Optional[OwnerStore] = None,
        cache: Optional[ItemCache] = None,
        client_factory: Callable[[], CatalogClient] = create_authorized_client,
        sleep: Callable[[float], None] = time.sleep,
        attempts: int = SYNC_MAX_ATTEMPTS,
    ):
        self.store = store if store is not None else storage
        self.cache = cache if cache is not None else item_cache
        self.client_factory = client_factory
        self.sleep = sleep
        self.attempts = attempts

    def sync_owner(self, owner_id: int) -> None:
        owner = self.store.find_by_id(owner_id)
        if owner is None:
            logger.debug("Owner %s not found; nothing to sync.", owner_id)
            return

        item_ids = list(owner.items or [])
        if not item_ids:
            logger.debug("Owner %s tracks no items; skipping.", owner_id)
            return

        client = self.client_factory()
        try:
            response = call_with_retry(
                lambda: client.lookup_items(item_ids),
                attempts=self.attempts,
                sleep=self.sleep,
            )
        finally:
            client.close()

        if not is_success(response):
            logger.warning(
                "Catalog returned status %s for owner %s; leaving owner and cache untouched.",
                response.status_code, owner_id,
            )
            return

        summaries = parse_item_summaries(response)
        if summaries is None:
            logger.info("Catalog returned no body for owner %s; nothing to apply.", owner_id)
            return

        added, pruned = diff_item_ids(item_ids, [s.id for s in summaries])
        if added:
            logger.warning(
                "Catalog returned ids never requested for owner %s; ignoring: %s", owner_id, added
            )
            unrequested = set(added)
            summaries = [s for s in summaries if s.id not in unrequested]

        owner.items = [s.id for s in summaries]
        self.cache.set_all({s.id: s for s in summaries}, ttl=SYNC_CACHE_TTL)
        self.store.save(owner)

        if pruned:
            logger.info("Pruned %d stale item ids from owner %s: %s", len(pruned), owner_id, pruned)
        logger.info("Synced owner %s: %d items confirmed.", owner_id, len(owner.items))

    def sync_all(self) -> None:
        """
        Sync every owner in store order. The first exception aborts the run
        and propagates; owners already synced keep their updates.
        """
        if not _sync_all_lock.acquire(blocking=False):
            logger.warning("A sync run is already in progress; skipping this trigger.")
            return

        try:
            owners = self.store.list_all()
            started = time.monotonic()
            logger.info("Starting catalog sync for %d owners.", len(owners))
            for owner in owners:
                self.sync_owner(owner.owner_id)
            logger.info(
                "Catalog sync finished for %d owners in %.1fs.",
                len(owners), time.monotonic() - started,
            )
        finally:
            _sync_all_lock.release()
