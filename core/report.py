import os
from pathlib import Path
from typing import Iterable, List, Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.cache import ItemCache
from core.models import ItemSummary, Owner

# Resolve template directory relative to this file
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)

EMAIL_THEME = os.getenv("EMAIL_THEME", "dark").strip().lower()
if EMAIL_THEME not in ("light", "dark"):
    EMAIL_THEME = "dark"

THEMES = {
    "light": {
        "page_bg": "#f5f5f5",
        "card_bg": "#ffffff",
        "card_border": "#e0e0e0",
        "text_primary": "#202124",
        "text_secondary": "#555",
        "error": "#c62828",
    },
    "dark": {
        "page_bg": "#121212",
        "card_bg": "#1E1E1E",
        "card_border": "#333333",
        "text_primary": "#F1F1F1",
        "text_secondary": "#BBBBBB",
        "error": "#FF6B6B",
    },
}


def resolve_owner_items(owner: Owner, cache: ItemCache) -> List[ItemSummary]:
    """
    Cached summaries for the owner's item ids, in owner order.
    Ids with no live cache entry are skipped; nothing is fetched.
    """
    resolved: List[ItemSummary] = []
    for item_id in owner.items or []:
        summary = cache.get(item_id)
        if summary is not None:
            resolved.append(summary)
    return resolved


def _item_row(summary: ItemSummary) -> dict:
    return {
        "id": summary.id,
        "name": summary.name,
        "price_str": f"{summary.price:.2f}",
        "stock_quantity": summary.stock_quantity,
        "updated_str": summary.updated_at.isoformat() if summary.updated_at else "unknown",
    }


def build_owner_report(owners: Iterable[Owner], cache: ItemCache) -> str:
    template = env.get_template("owner_report.txt")

    owner_data = []
    for owner in owners:
        tracked = list(owner.items or [])
        items = resolve_owner_items(owner, cache)
        owner_data.append(
            {
                "owner_id": owner.owner_id,
                "name": owner.name,
                "tracked_count": len(tracked),
                "cached_count": len(items),
                "cached_items": [_item_row(s) for s in items],
            }
        )

    return template.render(owners=owner_data)


def build_failure_alert(
    error: BaseException,
    started_at: str,
    owner_id: Optional[int] = None,
) -> tuple[str, str]:
    """
    Render (html_body, text_body) for a failed sync run.
    """
    ctx = {
        "title": "Catalog sync failed",
        "error_type": type(error).__name__,
        "error_message": str(error) or "(no message)",
        "started_at": started_at,
        "scope": f"owner {owner_id}" if owner_id is not None else "all owners",
        "colors": THEMES[EMAIL_THEME],
    }
    html_body = env.get_template("sync_failure.html").render(**ctx)
    text_body = env.get_template("sync_failure.txt").render(**ctx)
    return html_body, text_body
