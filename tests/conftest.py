"""Pytest configuration for FlagDash tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _no_log_handlers():
    """Keep test runs from writing to ~/.flagdash/logs."""
    logging.getLogger("flagdash").handlers.clear()
    yield
    logging.getLogger("flagdash").handlers.clear()


@pytest.fixture(autouse=True)
def _no_browser(monkeypatch):
    """Never launch a real browser from the device-login flow."""
    monkeypatch.setattr("flagdash.cli.tui.dispatcher.open_browser", lambda url: None)


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))
