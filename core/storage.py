# core/storage.py
import datetime
import json
import os
import sqlite3
from typing import Iterable, List, Optional

import pytz

from .models import Owner
from .logger import get_logger

logger = get_logger(__name__)

DB_PATH = os.getenv("DB_PATH", "/data/stocksync.sqlite3")


def _connect():
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    return sqlite3.connect(DB_PATH)


def now_utc_iso() -> str:
    return datetime.datetime.now(tz=pytz.UTC).isoformat()


def ensure_db():
    with _connect() as con:
        cur = con.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS owners (
                owner_id INTEGER PRIMARY KEY,
                name TEXT,
                items TEXT,       -- JSON array of catalog item ids, or NULL
                updated_at TEXT
            )
        """
        )
        con.commit()


def _encode_items(items: Optional[List[str]]) -> Optional[str]:
    if items is None:
        return None
    return json.dumps([str(i) for i in items])


def _decode_items(raw: Optional[str], owner_id: int) -> Optional[List[str]]:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.error("Owner %s has unreadable items column %r; treating as empty.", owner_id, raw)
        return []
    if not isinstance(data, list):
        logger.error("Owner %s items column is not a list: %r", owner_id, data)
        return []
    return [str(i) for i in data]


def _row_to_owner(row) -> Owner:
    owner_id, name, items = row
    return Owner(owner_id=owner_id, name=name or "", items=_decode_items(items, owner_id))


def find_by_id(owner_id: int) -> Optional[Owner]:
    with _connect() as con:
        cur = con.cursor()
        cur.execute(
            "SELECT owner_id, name, items FROM owners WHERE owner_id=?",
            (owner_id,),
        )
        row = cur.fetchone()
    return _row_to_owner(row) if row else None


def list_all() -> List[Owner]:
    with _connect() as con:
        cur = con.cursor()
        cur.execute("SELECT owner_id, name, items FROM owners ORDER BY owner_id")
        rows = cur.fetchall()
    return [_row_to_owner(row) for row in rows]


def save(owner: Owner):
    """
    Upsert a single owner row.
    """
    with _connect() as con:
        cur = con.cursor()
        cur.execute(
            """
            INSERT INTO owners (owner_id, name, items, updated_at)
            VALUES (?,?,?,?)
            ON CONFLICT(owner_id) DO UPDATE SET
                name=excluded.name,
                items=excluded.items,
                updated_at=excluded.updated_at
        """,
            (owner.owner_id, owner.name, _encode_items(owner.items), now_utc_iso()),
        )
        con.commit()


def upsert_owners(owners: Iterable[Owner]) -> int:
    count = 0
    for owner in owners:
        save(owner)
        count += 1
    logger.info("Upserted %d owners into %s.", count, DB_PATH)
    return count
