from decimal import Decimal

from core.models import ItemSummary, Owner
from core.report import build_failure_alert, build_owner_report, resolve_owner_items


def _summary(item_id, name="Bolt"):
    return ItemSummary(id=item_id, name=name, price=Decimal("2.50"), stock_quantity=9)


def test_resolve_owner_items_skips_cache_misses(cache):
    cache.set("1", _summary("1"))
    cache.set("3", _summary("3"))
    owner = Owner(owner_id=1, name="Acme", items=["3", "2", "1"])

    assert [s.id for s in resolve_owner_items(owner, cache)] == ["3", "1"]


def test_resolve_owner_items_without_items(cache):
    assert resolve_owner_items(Owner(owner_id=1, items=None), cache) == []


def test_owner_report_lists_cached_items(cache):
    cache.set("111", _summary("111", name="Hex bolt"))
    owners = [
        Owner(owner_id=1, name="Acme", items=["111", "215"]),
        Owner(owner_id=2, name="Globex", items=[]),
    ]

    report = build_owner_report(owners, cache)

    assert "[1] Acme: 1/2 items cached" in report
    assert "111 Hex bolt | price 2.50 | stock 9 | updated unknown" in report
    assert "[2] Globex: 0/0 items cached" in report


def test_owner_report_without_owners(cache):
    assert "No owners on record." in build_owner_report([], cache)


def test_failure_alert_renders_both_bodies():
    html_body, text_body = build_failure_alert(
        ConnectionError("catalog <down>"), "2025-01-01T00:00:00+00:00", owner_id=4
    )

    assert "Scope: owner 4" in text_body
    assert "ConnectionError: catalog <down>" in text_body
    assert "catalog &lt;down&gt;" in html_body
    assert "catalog <down>" not in html_body


def test_failure_alert_for_full_run():
    _, text_body = build_failure_alert(RuntimeError(""), "2025-01-01T00:00:00+00:00")

    assert "Scope: all owners" in text_body
    assert "(no message)" in text_body
