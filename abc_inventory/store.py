import logging
from decimal import Decimal
from typing import Mapping, Optional, Union

from . import settings
from .classifier import ClassificationSummary, classify_items, summarize
from .data_handler import ItemStorage
from .exceptions import DuplicateCodeError, IntegrityError, NotFoundError, PersistenceError
from .schemas import Item, ItemUpdate, normalize_code

logger = logging.getLogger(__name__)


class ItemStore:
    """
    In-memory inventory collection backed by a storage collaborator.

    Every mutation follows the same discipline: change the collection,
    revalidate all of it, roll the change back if anything is invalid,
    then reclassify and persist. A failed write also rolls the change back,
    so memory always matches the last successful save.

    ``find`` returns the live item and ``add`` keeps the object it is given.
    Changing their fields directly bypasses the store; such edits are only
    caught by the next revalidation. ``list_all`` and ``update`` return copies.

    Not safe for concurrent use; callers sharing a store across threads must
    serialize access to it.
    """

    def __init__(
        self,
        storage: ItemStorage,
        a_threshold: Optional[Decimal] = None,
        b_threshold: Optional[Decimal] = None,
    ):
        self._a_threshold = settings.A_THRESHOLD if a_threshold is None else Decimal(a_threshold)
        self._b_threshold = settings.B_THRESHOLD if b_threshold is None else Decimal(b_threshold)
        if self._a_threshold > self._b_threshold:
            raise ValueError(
                f"A threshold ({self._a_threshold}) cannot be above "
                f"B threshold ({self._b_threshold})"
            )

        self._storage = storage

        self._items: list[Item] = list(storage.load_all())
        if self._items:
            self.classify_all()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, code: str) -> bool:
        return self.find(code) is not None

    # --- Queries ---

    def find(self, code: str) -> Optional[Item]:
        """Case-insensitive lookup. Returns None for blank or unknown codes."""
        if not code or not code.strip():
            return None

        key = normalize_code(code)
        return next((item for item in self._items if item.code == key), None)

    def list_all(self) -> list[Item]:
        """Copies of every item, in collection order."""
        return [item.model_copy(deep=True) for item in self._items]

    def summary(self) -> ClassificationSummary:
        return summarize(self._items)

    # --- Mutations ---

    def add(self, item: Item) -> None:
        if self.find(item.code) is not None:
            raise DuplicateCodeError(item.code)

        self._items.append(item)

        try:
            self._check_integrity()
        except IntegrityError as e:
            self._items.pop()
            raise IntegrityError(f"Cannot add item '{item.code}': {e}") from e

        self.classify_all()
        try:
            self._storage.save_all(self._items)
        except PersistenceError:
            self._items.pop()
            self.classify_all()
            raise

        logger.info(f"✅ Item '{item.code}' added")

    def update(self, code: str, changes: Union[ItemUpdate, Mapping]) -> Item:
        """
        Applies new name, moves per month and unit price to an existing item
        and returns a copy of the result.
        The whole collection is reclassified only when a value field changed.
        """
        item = self.find(code)
        if item is None:
            raise NotFoundError(normalize_code(code) if code else code)

        if not isinstance(changes, ItemUpdate):
            changes = ItemUpdate(**changes)

        original_name = item.name
        original_moves = item.moves_per_month
        original_price = item.unit_price

        def restore() -> None:
            item.name = original_name
            item.moves_per_month = original_moves
            item.unit_price = original_price

        if changes.name is not None:
            item.name = changes.name
        if changes.moves_per_month is not None:
            item.moves_per_month = changes.moves_per_month
        if changes.unit_price is not None:
            item.unit_price = changes.unit_price

        try:
            self._check_integrity()
        except IntegrityError as e:
            restore()
            raise IntegrityError(f"Cannot update item '{item.code}': {e}") from e

        value_changed = (
            item.moves_per_month != original_moves or item.unit_price != original_price
        )
        if value_changed:
            self.classify_all()

        try:
            self._storage.save_all(self._items)
        except PersistenceError:
            restore()
            if value_changed:
                self.classify_all()
            raise

        logger.info(f"✅ Item '{item.code}' updated")
        if value_changed:
            logger.info("  → Table reclassified")
        return item.model_copy(deep=True)

    def remove(self, code: str) -> bool:
        """Removes the item with ``code``. Returns False when there is nothing to remove."""
        if not code or not code.strip():
            logger.warning("⚠️ Item code cannot be empty")
            return False

        item = self.find(code)
        if item is None:
            logger.warning(f"⚠️ No item with code '{normalize_code(code)}'")
            return False

        position = next(i for i, candidate in enumerate(self._items) if candidate is item)
        del self._items[position]

        if not self.validate_all():
            self._items.insert(position, item)
            logger.error(f"❌ Integrity error while removing '{item.code}'. Operation cancelled.")
            return False

        self.classify_all()
        try:
            self._storage.save_all(self._items)
        except PersistenceError:
            self._items.insert(position, item)
            self.classify_all()
            raise

        logger.info(f"✅ Item '{item.code}' removed")
        return True

    # --- Classification & integrity ---

    def classify_all(self) -> Decimal:
        """Reclassifies the live items in place. Returns the total inventory value."""
        return classify_items(self._items, self._a_threshold, self._b_threshold)

    def validate_all(self) -> bool:
        """True when every item passes revalidation; logs the first failure otherwise."""
        try:
            self._check_integrity()
        except IntegrityError as e:
            logger.error(f"❌ Data integrity error: {e}")
            return False
        return True

    def _check_integrity(self) -> None:
        for item in self._items:
            item.revalidate()
