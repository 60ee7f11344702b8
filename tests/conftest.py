import pathlib
import site

import pytest
from dbhelpers.columns import clear_column_cache

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear the column cache before and after each test to ensure test isolation."""
    clear_column_cache()
    yield
    clear_column_cache()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
