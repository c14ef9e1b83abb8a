import logging

import pytest

logging.getLogger('dbfacade').setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def clear_strategy_cache():
    """Strategies are cached per dialect; reset between tests for isolation."""
    from dbfacade.strategy import get_strategy
    get_strategy.cache_clear()
    yield
    get_strategy.cache_clear()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
    'tests.fixtures.postgres',
]
