import pytest

from tendril import _tracking
from tendril.config import reset_config


@pytest.fixture(autouse=True)
def _clean_globals():
    """Each test starts with default config and no thread scheduler."""
    yield
    reset_config()
    _tracking.set_scheduler(None)
