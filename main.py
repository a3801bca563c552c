import logging

from abc_inventory import data_handler, settings
from abc_inventory.classifier import to_frame
from abc_inventory.data_handler import JsonItemStorage
from abc_inventory.logger import setup_logger
from abc_inventory.store import ItemStore

logger = logging.getLogger("abc_inventory.main")


def run_process(test_mode: bool = settings.TEST_MODE):
    """Loads the inventory, classifies it and publishes the ABC report."""
    setup_logger("abc_inventory")

    logger.info("--- Starting ABC Classification Report ---")
    storage = JsonItemStorage()
    store = ItemStore(storage)

    if not len(store):
        logger.warning("⚠️ No items registered. Nothing to report.")
        return

    items = store.list_all()
    summary = store.summary()

    logger.info(f"\n--- ABC Table ({summary.item_count} items) ---")
    logger.info(to_frame(items).to_string(index=False))

    logger.info("\n--- Classification Summary ---")
    for classification, count in summary.counts.items():
        logger.info(
            f"{classification}: {count} item(s), "
            f"{summary.share_of_value(classification):.2f}% of value"
        )
    logger.info(f"Total inventory value: ${summary.total_value:,.2f}")

    data_handler.save_report(items)

    if not test_mode:
        data_handler.post_to_webhook(items, summary)
    else:
        logger.info("🧪 Test Mode: Skipping webhook post.")

    logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_process()
