"""
Pytest fixtures for the inventory store test suite.

Provides:
- An in-memory storage double that records every save and can be told to fail
- Stores built on top of it, empty or seeded with the reference catalog
- JSON file storage rooted in a temporary directory
"""

from decimal import Decimal
from typing import Sequence

import pytest

from abc_inventory.data_handler import ItemStorage, JsonItemStorage
from abc_inventory.exceptions import PersistenceError
from abc_inventory.schemas import Item
from abc_inventory.store import ItemStore


class InMemoryStorage(ItemStorage):
    def __init__(self, items: Sequence[Item] = ()):
        self.initial = list(items)
        self.saves: list[list[dict]] = []
        self.fail_on_save = False

    def load_all(self) -> list[Item]:
        return list(self.initial)

    def save_all(self, items: Sequence[Item]) -> None:
        if self.fail_on_save:
            raise PersistenceError("disk full")
        self.saves.append([item.model_dump(by_alias=True) for item in items])

    @property
    def last_saved_codes(self) -> list[str]:
        return [record["code"] for record in self.saves[-1]]


def reference_items() -> list[Item]:
    return [
        Item.create("SKU1", "Widget", 100, Decimal("10.00")),
        Item.create("SKU2", "Gadget", 10, Decimal("5.00")),
        Item.create("SKU3", "Bolt", 1, Decimal("1.00")),
    ]


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> ItemStore:
    return ItemStore(storage)


@pytest.fixture
def seeded_store(storage) -> ItemStore:
    store = ItemStore(storage)
    for item in reference_items():
        store.add(item)
    return store


@pytest.fixture
def json_storage(tmp_path) -> JsonItemStorage:
    return JsonItemStorage(tmp_path / "data" / "products.json")


@pytest.fixture
def catalog() -> list[Item]:
    return reference_items()
