import logging
from decimal import Decimal

import pytest

import main
from abc_inventory import data_handler, settings
from abc_inventory.data_handler import JsonItemStorage
from abc_inventory.logger import setup_logger


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "PRODUCTS_FILE", tmp_path / "data" / "products.json")
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")
    yield tmp_path

    package_logger = logging.getLogger("abc_inventory")
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)


def test_run_process_writes_report(workspace, catalog, monkeypatch):
    JsonItemStorage().save_all(catalog)
    posted = []
    monkeypatch.setattr(data_handler, "post_to_webhook", lambda *args: posted.append(args))

    main.run_process(test_mode=True)

    reports = list((workspace / "output").glob("abc_report_*.csv"))
    assert len(reports) == 1
    assert (workspace / "logs" / "app.log").exists()
    assert posted == []


def test_run_process_posts_outside_test_mode(workspace, catalog, monkeypatch):
    JsonItemStorage().save_all(catalog)
    posted = []
    monkeypatch.setattr(
        data_handler, "post_to_webhook", lambda items, summary: posted.append(summary)
    )

    main.run_process(test_mode=False)

    assert len(posted) == 1
    assert posted[0].total_value == Decimal("1051")


def test_run_process_with_empty_inventory(workspace):
    main.run_process(test_mode=True)

    assert not (workspace / "output").exists()


def test_setup_logger_is_idempotent(tmp_path):
    name = "abc_inventory.tests.idempotent"
    first = setup_logger(name, log_dir=tmp_path)
    second = setup_logger(name, log_dir=tmp_path)

    assert first is second
    assert len(first.handlers) == 2

    for handler in list(first.handlers):
        handler.close()
        first.removeHandler(handler)


def test_setup_logger_console_only(tmp_path):
    name = "abc_inventory.tests.console"
    logger = setup_logger(name, log_dir=tmp_path / "unused", to_file=False)

    assert len(logger.handlers) == 1
    assert not (tmp_path / "unused").exists()

    logger.removeHandler(logger.handlers[0])
