"""
Shared pytest fixtures
"""

import pytest

from index_backend.utils.count_cache import count_cache
from index_backend.utils.secrets_manager import secret_resolver


@pytest.fixture(autouse=True)
def reset_process_state():
    """Clear process-wide caches so warm-container state never leaks between tests"""
    count_cache.clear()
    secret_resolver.clear()
    yield
    count_cache.clear()
    secret_resolver.clear()
