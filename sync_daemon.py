import json
import os
import time
from typing import Any, List, Optional

from core.logger import get_logger
from core import storage
from core.cache import item_cache
from core.emailer import send_alert
from core.models import Owner
from core.report import build_failure_alert, build_owner_report
from core.storage import now_utc_iso
from core.sync import CatalogSyncService

logger = get_logger(__name__)

SYNC_INTERVAL_MINUTES = int(os.getenv("SYNC_INTERVAL_MINUTES", "5"))
MODE = os.getenv("MODE", "daemon").lower()  # "daemon" or "once"
SEED_PATH = os.getenv("SEED_PATH", "/data/owners.json")
OWNER_ID = os.getenv("OWNER_ID", "").strip()


def sleep_minutes(minutes: int) -> None:
    total = max(1, minutes)
    logger.info("Sleeping %d minutes before next sync.", total)
    time.sleep(total * 60)


def _owner_from_entry(entry: Any) -> Owner:
    if not isinstance(entry, dict) or "id" not in entry:
        raise ValueError(f"owner entry must be an object with an 'id': {entry!r}")
    items = entry.get("items")
    if items is not None and not isinstance(items, list):
        raise ValueError(f"owner {entry['id']} 'items' must be a list or null")
    return Owner(
        owner_id=int(entry["id"]),
        name=str(entry.get("name", "")).strip(),
        items=[str(i) for i in items] if items is not None else None,
    )


def load_seed(path: str = SEED_PATH) -> List[Owner]:
    """
    Optional owner seed file: {"owners": [{"id": 1, "name": "...", "items": ["111", "215"]}]}
    A missing file is fine; a malformed one stops the process.
    """
    if not os.path.exists(path):
        logger.debug("No seed file at %s; using owners already in the store.", path)
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Failed to load seed file at %s: %s", path, e)
        raise SystemExit(1)

    if not isinstance(data, dict) or not isinstance(data.get("owners"), list):
        logger.error("Seed file must be an object with an 'owners' list.")
        raise SystemExit(1)

    try:
        return [_owner_from_entry(entry) for entry in data["owners"]]
    except (TypeError, ValueError) as e:
        logger.error("Invalid owner in seed file %s: %s", path, e)
        raise SystemExit(1)


def prepare_store(seed_path: Optional[str] = None) -> None:
    storage.ensure_db()
    owners = load_seed(seed_path or SEED_PATH)
    if owners:
        storage.upsert_owners(owners)


def run_sync(service: CatalogSyncService, owner_id: Optional[int] = None) -> bool:
    """
    One scheduled run. Failures are logged and alerted here, never re-raised,
    so the schedule keeps going.
    """
    started_at = now_utc_iso()
    try:
        if owner_id is not None:
            service.sync_owner(owner_id)
        else:
            service.sync_all()
    except Exception as e:
        logger.exception("Catalog sync run failed: %s", e)
        html_body, text_body = build_failure_alert(e, started_at, owner_id)
        try:
            send_alert("Catalog sync failed", html_body, text_body)
        except Exception as mail_err:
            logger.error("Failed to send sync failure alert: %s", mail_err)
        return False
    return True


def run_once(owner_id: Optional[int] = None) -> int:
    prepare_store()
    service = CatalogSyncService()
    ok = run_sync(service, owner_id)

    owners = storage.list_all()
    if owner_id is not None:
        owners = [o for o in owners if o.owner_id == owner_id]
    print(build_owner_report(owners, item_cache))

    return 0 if ok else 1


def run_daemon() -> None:
    logger.info("Starting sync daemon; syncing every %d minutes.", SYNC_INTERVAL_MINUTES)
    prepare_store()
    service = CatalogSyncService()

    while True:
        run_sync(service)
        sleep_minutes(SYNC_INTERVAL_MINUTES)


if __name__ == "__main__":
    try:
        if MODE == "once":
            raise SystemExit(run_once(int(OWNER_ID) if OWNER_ID else None))
        else:
            run_daemon()
    except Exception as e:
        logger.exception("Fatal sync daemon error: %s", e)
        raise SystemExit(2)
