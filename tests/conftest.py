import os
import threading
from dataclasses import replace
from typing import Generator, Dict, Any, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Pas de Redis en tests: doit être posé avant l'import de l'app
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from logistics.app import app as fastapi_app
from logistics.app_setup.dependencies import (
    get_checkout_orchestrator,
    get_confirmation_service,
    get_dispatcher,
    get_order_store,
)
from logistics.errors import OrderNotFound
from logistics.geo.distance import Coordinate
from logistics.orders.models import Order, OrderKind
from logistics.payments.checkout import CheckoutOrchestrator
from logistics.payments.confirmation import PaymentConfirmationService
from logistics.payments.ledger import PaymentSessionLedger
from logistics.payments.stripe_client import CheckoutSession, SessionStatus

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


# --- Faux collaborateurs ---------------------------------------------------

class FakeProvider:
    """Fournisseur de paiement en mémoire (sessions cs_test_1, cs_test_2, ...)."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.status_calls: List[str] = []
        self.statuses: Dict[str, SessionStatus] = {}
        self.fail_create: Optional[Exception] = None
        self.fail_status: Optional[Exception] = None

    def create_checkout_session(self, **kwargs) -> CheckoutSession:
        if self.fail_create:
            raise self.fail_create
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append({**kwargs, "session_id": session_id})
        return CheckoutSession(session_id=session_id, url=f"https://checkout.stripe.test/{session_id}")

    def get_session_status(self, session_id: str) -> SessionStatus:
        self.status_calls.append(session_id)
        if self.fail_status:
            raise self.fail_status
        return self.statuses.get(session_id, SessionStatus.PENDING)


class FakeOrderStore:
    """Store des commandes en mémoire; mark_paid est un compare-and-swap protégé par un verrou."""

    def __init__(self, orders=()):
        self.orders: Dict[str, Order] = {o.id: o for o in orders}
        self.mark_paid_calls: List[str] = []
        self.status_updates: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def get_order(self, order_id: str, kind: Optional[OrderKind] = None) -> Order:
        order = self.orders.get(order_id)
        if order is None or (kind is not None and order.kind is not kind):
            raise OrderNotFound(f"Commande introuvable: {order_id}")
        return order

    def mark_paid(self, order_id: str, kind: Optional[OrderKind] = None) -> bool:
        with self._lock:
            self.mark_paid_calls.append(order_id)
            order = self.orders[order_id]
            if order.paid:
                return False
            self.orders[order_id] = replace(order, paid=True)
            return True

    def update_status(self, order: Order, status: str, proof_image=None) -> Dict[str, Any]:
        self.status_updates.append({"order_id": order.id, "status": status, "proof_image": proof_image})
        self.orders[order.id] = replace(
            order,
            status=status,
            proof_image_url=(proof_image or {}).get("url") or order.proof_image_url,
        )
        return {"id": order.id, "status": status}


class RecordingDispatcher:
    def __init__(self, fail: bool = False):
        self.sent: List[tuple] = []
        self.fail = fail

    def dispatch(self, message: str, to_phone_number: Optional[str]) -> None:
        if self.fail:
            raise RuntimeError("sms down")
        self.sent.append((message, to_phone_number))


def make_order(order_id="d1", kind=OrderKind.DELIVERY, base_amount=19.0, paid=False, **kw) -> Order:
    return Order(
        id=order_id,
        kind=kind,
        base_amount=base_amount,
        seller_coordinate=kw.pop("seller_coordinate", Coordinate(19.0002, 20.0001)),
        buyer_coordinate=kw.pop("buyer_coordinate", Coordinate(19.0002, 20.0001)),
        paid=paid,
        buyer_phone=kw.pop("buyer_phone", "+33600000001"),
        seller_phone=kw.pop("seller_phone", "+33600000002"),
        buyer_name=kw.pop("buyer_name", "Alice"),
        **kw,
    )


# --- Fixtures ----------------------------------------------------------------

@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()

@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()

@pytest.fixture
def order_store() -> FakeOrderStore:
    return FakeOrderStore([
        make_order("d1", OrderKind.DELIVERY),
        make_order("s1", OrderKind.SALE_DELIVERY),
        make_order("b1", OrderKind.BUYER_INTENT, base_amount=40),
    ])

@pytest.fixture
def session_table(monkeypatch) -> Dict[str, Dict[str, Any]]:
    """Table 'payment_sessions' en mémoire (clé unique order_id), branchée sur le repository."""
    table: Dict[str, Dict[str, Any]] = {}

    def fake_fetch(order_id):
        return table.get(order_id)

    def fake_upsert(*, order_id, session_id, created_at):
        table[order_id] = {"order_id": order_id, "session_id": session_id, "created_at": created_at}
        return table[order_id]

    monkeypatch.setattr("logistics.payments.repository.fetch_session", fake_fetch)
    monkeypatch.setattr("logistics.payments.repository.upsert_session", fake_upsert)
    return table

@pytest.fixture
def ledger(session_table) -> PaymentSessionLedger:
    return PaymentSessionLedger()

@pytest.fixture
def orchestrator(provider, ledger, dispatcher) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(provider=provider, ledger=ledger, dispatcher=dispatcher)

@pytest.fixture
def confirmation(provider, ledger, order_store, dispatcher) -> PaymentConfirmationService:
    return PaymentConfirmationService(provider=provider, ledger=ledger, orders=order_store, dispatcher=dispatcher)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app, order_store, orchestrator, confirmation, dispatcher) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_order_store] = lambda: order_store
    app.dependency_overrides[get_checkout_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_confirmation_service] = lambda: confirmation
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


# Aucun accès réseau à Supabase pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("logistics.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("logistics.infra.supabase_client.get_service_supabase", lambda: MagicMock())
