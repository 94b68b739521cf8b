"""
Minimal Conftest.
"""

import pytest


@pytest.fixture(autouse=True)
def reset_correlation_context():
    """Reset correlation context before and after each test to prevent pollution."""
    from controller_init.logging.correlation import correlation_id_var, domain_context_var

    correlation_id_var.set("")
    domain_context_var.set({})

    yield

    correlation_id_var.set("")
    domain_context_var.set({})


@pytest.fixture(autouse=True)
def clear_settings_cache():
    from controller_init.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
