import pytest

from stepbridge.config import reset_config


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test loads configuration from its own environment."""
    reset_config()
    yield
    reset_config()
