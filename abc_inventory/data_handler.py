import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import requests

from . import settings
from .classifier import ClassificationSummary, to_frame
from .exceptions import IntegrityError, PersistenceError, ValidationError
from .schemas import Item

logger = logging.getLogger(__name__)


class ItemStorage(ABC):
    """
    The only persistence boundary the store depends on: load every record,
    or overwrite every record.
    """

    @abstractmethod
    def load_all(self) -> list[Item]:
        """
        Returns the persisted items that pass validation. Invalid records are
        dropped with a warning; missing or unreadable storage yields an empty list.
        """
        pass

    @abstractmethod
    def save_all(self, items: Sequence[Item]) -> None:
        """
        Replaces the persisted collection with ``items``.
        Raises PersistenceError when the write does not happen.
        """
        pass


class JsonItemStorage(ItemStorage):
    """Keeps the collection as an indented JSON array in a single file."""

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else settings.PRODUCTS_FILE
        # Number of records rejected by the most recent load_all().
        self.dropped_count = 0

    @property
    def path(self) -> Path:
        return self._path.resolve()

    def exists(self) -> bool:
        return self._path.exists()

    def delete(self) -> bool:
        """Removes the data file. Returns False when there was nothing to delete."""
        if not self._path.exists():
            return False
        try:
            self._path.unlink()
        except OSError as e:
            raise PersistenceError(f"Could not delete '{self._path}': {e}") from e
        logger.info(f"🗑️ Data file '{self._path}' deleted")
        return True

    def load_all(self) -> list[Item]:
        self.dropped_count = 0

        if not self._path.exists():
            logger.warning(f"⚠️ '{self._path}' not found. Starting with an empty inventory.")
            return []

        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"❌ Could not read '{self._path}': {e}. Starting with an empty inventory.")
            return []

        if not raw.strip():
            logger.warning(f"⚠️ '{self._path}' is empty. Starting with an empty inventory.")
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"❌ '{self._path}' is not valid JSON ({e}). Starting with an empty inventory.")
            return []

        if not isinstance(records, list):
            logger.error(f"❌ '{self._path}' does not hold a list of items. Starting with an empty inventory.")
            return []

        items = self._validate_records(records)

        logger.info(f"✅ Loaded {len(items)} valid item(s) from '{self._path}'")
        if self.dropped_count:
            logger.warning(f"⚠️ {self.dropped_count} invalid item(s) ignored")
        return items

    def _validate_records(self, records: list) -> list[Item]:
        items = []
        seen_codes = set()

        for position, record in enumerate(records):
            if not isinstance(record, dict):
                self._drop(position, "record is not an object")
                continue

            try:
                item = Item(**record)
                item.revalidate()
            except (ValidationError, IntegrityError) as e:
                self._drop(position, str(e))
                continue

            if item.code in seen_codes:
                self._drop(position, f"duplicate code '{item.code}'")
                continue

            seen_codes.add(item.code)
            items.append(item)

        return items

    def _drop(self, position: int, reason: str) -> None:
        self.dropped_count += 1
        logger.warning(f"⚠️ Invalid item #{position} ignored: {reason}")

    def save_all(self, items: Sequence[Item]) -> None:
        records = [item.model_dump(by_alias=True) for item in items]
        tmp_path = None

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Write next to the target and swap it in, so a failed write
            # never leaves a truncated data file behind.
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, default=str)
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Could not write '{self._path}': {e}") from e

        logger.info(f"💾 Saved {len(records)} item(s) to '{self._path}'")


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def save_report(
    items: Sequence[Item],
    output_dir: Optional[Path] = None,
    save_json: Optional[bool] = None,
) -> Path:
    """Saves the classification table to a dated CSV and, when enabled, a JSON copy."""
    output_dir = output_dir or settings.OUTPUT_DIR
    save_json = settings.SAVE_JSON_OUTPUT if save_json is None else save_json

    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = get_date_suffix_for_filename()

    csv_path = output_dir / f"{settings.REPORT_FILENAME_BASE}_{date_suffix}.csv"
    json_path = output_dir / f"{settings.REPORT_FILENAME_BASE}_{date_suffix}.json"

    to_frame(items).to_csv(csv_path, index=False)
    logger.info(f"✅ Classification report saved to: {csv_path}")

    if save_json:
        with open(json_path, "w", encoding="utf-8") as f:
            json_data = [item.model_dump(by_alias=True) for item in items]
            json.dump(json_data, f, indent=2, default=str)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(
    items: Sequence[Item],
    summary: ClassificationSummary,
    url: Optional[str] = None,
) -> bool:
    """
    Posts the classified items and the summary to the webhook.
    Returns True when the webhook accepted the payload.
    """
    url = url or settings.WEBHOOK_URL
    if not url:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting classification and summary to webhook: {url}")

    payload = {
        "reportData": [item.model_dump(mode="json", by_alias=True) for item in items],
        "summary": summary.as_dict(),
    }

    try:
        response = requests.post(url, json=payload, timeout=15)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False

    logger.info("✅ Classification successfully posted to webhook.")
    return True
