import os

# Pas de Redis ni de vrais secrets pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any, List
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from storefront.app_setup.factory import create_app
from storefront.auth.security import require_user
from storefront.auth.session import Session
from storefront.cart.models import CartItem

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return create_app()

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    fake_user: Dict[str, Any] = {
        "id": "test-user",
        "email": "test@example.com",
        "metadata": {"full_name": "Test User"},
        "token": "fake-token",
    }
    app.dependency_overrides[require_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

# Aucun accès Supabase réel pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("storefront.infra.supabase_client.get_user_supabase", lambda token: MagicMock())

@pytest.fixture
def session() -> Session:
    return Session(user_id="user-1", email="priya@example.com", display_name="Priya", access_token="tok-1")

@pytest.fixture
def ring() -> CartItem:
    return CartItem(id="ring-1", name="Ring", price=1000, quantity=2, image="ring.jpg")

@pytest.fixture
def necklace() -> CartItem:
    return CartItem(id="neck-1", name="Necklace", price=2500.5, quantity=1, image="neck.jpg")

@pytest.fixture
def address_form() -> Dict[str, str]:
    return {
        "firstName": "Priya",
        "lastName": "Sharma",
        "email": "priya@example.com",
        "phone": "9876543210",
        "houseNumber": "12B",
        "roadName": "MG Road",
        "city": "Kolkata",
        "state": "West Bengal",
        "pinCode": "700001",
    }

@pytest.fixture
def order_payload(address_form) -> Dict[str, Any]:
    return {
        "customer": dict(address_form),
        "paymentMethod": "Cash on Delivery",
        "products": [{"id": "ring-1", "name": "Ring", "price": 1000, "quantity": 2, "image": "ring.jpg"}],
        "orderReference": "AURIC-123456-0042",
        "orderDate": "2026-01-15T10:30:00+00:00",
        "notes": "",
    }

def _table_mock(rows: List[Dict[str, Any]] | None = None) -> MagicMock:
    """Table Supabase simulée: toute chaîne de requête se termine par execute() -> data=rows."""
    table = MagicMock()
    result = MagicMock()
    result.data = rows if rows is not None else []
    for name in ("select", "insert", "update", "upsert", "eq", "order", "limit"):
        getattr(table, name).return_value = table
    table.execute.return_value = result
    return table

@pytest.fixture
def table_mock():
    return _table_mock
