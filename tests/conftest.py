"""
FILE: tests/conftest.py
Shared fixtures for rebalance tests.
"""

import pytest

from tests.factories import holding, portfolio, security


def _has_marker(item: pytest.Item, name: str) -> bool:
    return item.get_closest_marker(name) is not None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if not _has_marker(item, "unit"):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def meta():
    return security("META", "150")


@pytest.fixture
def aapl():
    return security("AAPL", "180")


@pytest.fixture
def meta_aapl_portfolio(meta, aapl):
    return portfolio(
        targets=[("40", meta), ("60", aapl)],
        holdings=[holding(meta, 10), holding(aapl, 5)],
    )
