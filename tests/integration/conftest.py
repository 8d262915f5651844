"""
Integration test fixtures
"""

import pytest
from fastapi.testclient import TestClient

from dataportal.api.config import PortalSettings, get_settings
from dataportal.api.dependencies import (
    get_result_transformer,
    get_search_client,
    get_terms_cache,
)
from dataportal.api.main import create_app
from dataportal.api.services.terms_cache import TermsCache
from dataportal.api.services.transform import ResultTransformer


@pytest.fixture
def test_settings():
    """Portal settings with defaults and the terms cache disabled."""
    return PortalSettings(terms_cache_ttl=0)


@pytest.fixture
def test_api_client(fake_search_client, test_settings):
    """Create test API client backed by the fake search service."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_search_client] = lambda: fake_search_client
    app.dependency_overrides[get_result_transformer] = lambda: ResultTransformer(
        test_settings.stylesheet_path
    )
    app.dependency_overrides[get_terms_cache] = lambda: TermsCache(client=None, ttl_seconds=0)

    with TestClient(app) as client:
        yield client
