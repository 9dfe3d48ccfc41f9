"""Shared fakes for sync, client and cache tests."""

import copy
import json

import pytest

from core.cache import ItemCache
from core.models import Owner


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    def json(self):
        return json.loads(self.content)


class FakeStore:
    """In-memory owner store. Hands out copies, like a real DB would."""

    def __init__(self, owners=()):
        self.owners = {o.owner_id: copy.deepcopy(o) for o in owners}
        self.saved = []
        self.list_calls = 0

    def find_by_id(self, owner_id):
        owner = self.owners.get(owner_id)
        return copy.deepcopy(owner) if owner else None

    def list_all(self):
        self.list_calls += 1
        return [copy.deepcopy(o) for o in self.owners.values()]

    def save(self, owner):
        self.saved.append(owner.owner_id)
        self.owners[owner.owner_id] = copy.deepcopy(owner)


class ScriptedClient:
    """
    Stands in for CatalogClient. Each lookup consumes the next scripted
    outcome: a FakeResponse is returned, an exception is raised.
    """

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def lookup_items(self, item_ids):
        self.calls.append(list(item_ids))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


class ClientFactory:
    def __init__(self, *clients):
        self.clients = list(clients)
        self.created = []

    def __call__(self):
        client = self.clients.pop(0)
        self.created.append(client)
        return client


def summary_payload(item_id, name=None, price=10.5, stock=3):
    return {
        "id": item_id,
        "name": name or f"Item {item_id}",
        "price": price,
        "stockQuantity": stock,
        "updatedAt": "2025-09-08T11:40:55Z",
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ItemCache(default_ttl=3600, clock=clock)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_owner():
    def _make(owner_id=1, items=None, name="Acme Supplies"):
        return Owner(owner_id=owner_id, name=name, items=items)

    return _make
