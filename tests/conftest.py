import sys
import os

import pytest

# Add backend/ to path so tests can import backend modules directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

# Add scripts/ to path so tests can import script modules directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))

from cache_store import JsonCacheStore


@pytest.fixture
def store(tmp_path):
    """Empty two-scope cache store in a per-test directory."""
    return JsonCacheStore(str(tmp_path))
