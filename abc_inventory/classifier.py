"""
ABC classification of inventory items by cumulative share of total value.

Items are ranked by ``total_value`` (moves per month x unit price) and walked
from the most to the least valuable, accumulating each item's share of the
total inventory value. Items whose running share stays within the A cut-off
(80% by default) are A, within the B cut-off (95%) are B, and the rest are C.
Both cut-offs are inclusive.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Sequence

import pandas as pd

from . import settings
from .schemas import Item

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
CLASSES = ("A", "B", "C")


def rank_by_value(items: Sequence[Item]) -> list[Item]:
    """Items by total value, highest first. Ties keep their collection order."""
    # sorted() is stable, including with reverse=True.
    return sorted(items, key=lambda item: item.total_value, reverse=True)


def classify_items(
    items: Sequence[Item],
    a_threshold: Optional[Decimal] = None,
    b_threshold: Optional[Decimal] = None,
) -> Decimal:
    """
    Writes ``accumulated_percentage`` and ``classification`` onto the given
    items in place and returns the total inventory value.

    When the total value is zero every item becomes C with 0%.
    """
    a_threshold = settings.A_THRESHOLD if a_threshold is None else Decimal(a_threshold)
    b_threshold = settings.B_THRESHOLD if b_threshold is None else Decimal(b_threshold)
    if a_threshold > b_threshold:
        raise ValueError(
            f"A threshold ({a_threshold}) cannot be above B threshold ({b_threshold})"
        )

    if not items:
        logger.info("No items to classify.")
        return Decimal("0")

    total_inventory_value = sum((item.total_value for item in items), Decimal("0"))

    if total_inventory_value == 0:
        logger.warning("⚠️ Total inventory value is 0. Every item is classified as C.")
        for item in items:
            item.classification = "C"
            item.accumulated_percentage = Decimal("0")
        return total_inventory_value

    # The running share is derived from the running value so the last item
    # always lands on exactly 100%.
    running_value = Decimal("0")
    for item in rank_by_value(items):
        running_value += item.total_value
        accumulated = running_value / total_inventory_value * HUNDRED
        item.accumulated_percentage = accumulated

        if accumulated <= a_threshold:
            item.classification = "A"
        elif accumulated <= b_threshold:
            item.classification = "B"
        else:
            item.classification = "C"

    logger.info(
        f"✅ ABC classification completed for {len(items)} items "
        f"(total inventory value: ${total_inventory_value:,.2f})"
    )
    return total_inventory_value


@dataclass
class ClassificationSummary:
    """Item count and value per class after a classification run."""

    total_value: Decimal
    item_count: int
    counts: dict[str, int] = field(default_factory=dict)
    values: dict[str, Decimal] = field(default_factory=dict)

    def share_of_value(self, classification: str) -> Decimal:
        if self.total_value == 0:
            return Decimal("0")
        return self.values.get(classification, Decimal("0")) / self.total_value * HUNDRED

    def as_dict(self) -> dict:
        return {
            "totalValue": str(self.total_value),
            "itemCount": self.item_count,
            "counts": dict(self.counts),
            "values": {cls: str(value) for cls, value in self.values.items()},
        }


def summarize(items: Sequence[Item]) -> ClassificationSummary:
    counts = {cls: 0 for cls in CLASSES}
    values = {cls: Decimal("0") for cls in CLASSES}
    for item in items:
        counts[item.classification] += 1
        values[item.classification] += item.total_value

    return ClassificationSummary(
        total_value=sum(values.values(), Decimal("0")),
        item_count=len(items),
        counts=counts,
        values=values,
    )


def to_frame(items: Sequence[Item]) -> pd.DataFrame:
    """
    The classification table as a DataFrame, ranked by total value with the
    report column order from settings. Used for the console table and the CSV report.
    """
    rows = []
    for item in rank_by_value(items):
        row = item.model_dump(by_alias=True)
        row["totalValue"] = item.total_value
        rows.append(row)

    return pd.DataFrame(rows, columns=settings.REPORT_COLUMNS)
