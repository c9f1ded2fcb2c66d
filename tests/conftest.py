"""
Shared fixtures: the app runs against an in-memory store, no database needed
"""
import os

os.environ["STORE_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient

from api.main import app
from lib.store import MemoryInfluencerStore, get_influencer_store


@pytest.fixture
def store():
    """Fresh in-memory store wired into the app"""
    memory_store = MemoryInfluencerStore()
    app.dependency_overrides[get_influencer_store] = lambda: memory_store
    yield memory_store
    app.dependency_overrides.pop(get_influencer_store, None)


@pytest.fixture
def client(store):
    """Create test client"""
    return TestClient(app)


@pytest.fixture
def influencer_payload():
    """Factory for valid creation payloads"""
    def make(n: int = 1, **overrides):
        payload = {
            "name": f"Creator {n}",
            "email": f"creator{n}@example.com",
            "phone": "+91 98765 43210",
            "bio": "Lifestyle and travel",
            "affiliate_code": f"CREATOR{n}",
        }
        payload.update(overrides)
        return payload
    return make
