"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Settings are read from the environment at import time, so every variable
the app needs is set here before anything from ``storefront`` is imported.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from storefront.adapters.rate_limit.login_guard import InMemoryLoginGuard  # noqa: E402
from storefront.adapters.store.in_memory import (  # noqa: E402
    InMemoryOrderStore,
    InMemoryProductStore,
    InMemoryUserStore,
)
from storefront.core.app_factory import create_app  # noqa: E402
from storefront.services.auth_service import AuthService  # noqa: E402


@pytest.fixture
def users() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def products() -> InMemoryProductStore:
    return InMemoryProductStore()


@pytest.fixture
def orders() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def app(users, products, orders):
    """Fresh application per test so limiter and guard tables never leak."""
    return create_app(users=users, products=products, orders=orders, configure_logs=False)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_token(users) -> str:
    """Register an admin directly through the service and return its token."""
    service = AuthService(users, InMemoryLoginGuard())
    session = service.register("Admin", "admin@example.com", "admin-pass", is_admin=True)
    return session.token


@pytest.fixture
def user_token(client: TestClient) -> str:
    resp = client.post(
        "/api/users",
        json={"name": "Jane", "email": "jane@example.com", "password": "secret1"},
    )
    assert resp.status_code == 201
    return resp.json()["token"]
