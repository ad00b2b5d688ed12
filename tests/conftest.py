"""
Shared pytest fixtures and configuration for the TempShare test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory registry, store and clock fixtures
- Wired services over the in-memory adapters
- A Flask test client over the same adapters, with bearer token helpers
"""

import jwt
import pytest
from hypothesis import HealthCheck, Phase, settings

from tempshare.application.admin_service import AdminReportService
from tempshare.application.share_service import ShareService
from tempshare.app_factory import AppConfig, build_container, create_app
from tempshare.domain.sharing import (
    AccessGate,
    OwnershipGuard,
    PasswordHasher,
    ReclamationSweeper,
)
from tests.fixtures.in_memory import (
    FAST_HASH_METHOD,
    FakeClock,
    InMemoryObjectRegistry,
    InMemoryObjectStore,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


# =============================================================================
# Adapter Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> InMemoryObjectRegistry:
    return InMemoryObjectRegistry()


@pytest.fixture
def store(clock) -> InMemoryObjectStore:
    return InMemoryObjectStore(clock=clock)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(method=FAST_HASH_METHOD)


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def access_gate(registry, store, password_hasher, clock) -> AccessGate:
    return AccessGate(registry, store, password_hasher, clock=clock)


@pytest.fixture
def sweeper(registry, store, clock) -> ReclamationSweeper:
    return ReclamationSweeper(registry, store, clock=clock)


@pytest.fixture
def share_service(registry, store, password_hasher, access_gate, clock) -> ShareService:
    return ShareService(
        registry, store, password_hasher, access_gate, OwnershipGuard(), clock=clock
    )


@pytest.fixture
def admin_service(registry, clock) -> AdminReportService:
    return AdminReportService(registry, clock=clock)


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "contract: Contract tests (verify interface compliance)"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (full workflows)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/contracts/* -> @pytest.mark.contract
    - tests/e2e/* -> @pytest.mark.e2e
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/contracts/" in test_path or "\\contracts\\" in test_path:
            item.add_marker(pytest.mark.contract)
        elif "/e2e/" in test_path or "\\e2e\\" in test_path:
            item.add_marker(pytest.mark.e2e)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)


# =============================================================================
# HTTP Fixtures
# =============================================================================

JWT_TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture
def app_config() -> AppConfig:
    config = AppConfig()
    config.share.jwt_secret = JWT_TEST_SECRET
    config.share.jwt_algorithm = "HS256"
    return config


@pytest.fixture
def container(registry, store, password_hasher, clock, app_config):
    return build_container(
        registry, store, app_config.share, password_hasher=password_hasher, clock=clock
    )


@pytest.fixture
def app(app_config, container):
    flask_app = create_app(app_config, container=container)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a caller."""

    def _headers(user_id="alice", is_admin=False):
        token = jwt.encode(
            {"user_id": user_id, "is_admin": is_admin},
            JWT_TEST_SECRET,
            algorithm="HS256",
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
