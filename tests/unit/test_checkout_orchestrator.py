import logging

import pytest

from logistics.errors import InvalidArgument, LedgerInconsistency, PaymentProviderError
from logistics.geo.distance import Coordinate
from logistics.payments.checkout import CheckoutOrchestrator, Notification
from logistics.pricing import BUYER_INTENT_PRICING
from conftest import RecordingDispatcher

SAME = Coordinate(19.0002, 20.0001)
PARIS = Coordinate(48.8566, 2.3522)
PARIS_8KM = Coordinate(48.9286, 2.3522)


def test_start_checkout_returns_url_and_records_session(orchestrator, provider, session_table):
    url = orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    assert url == "https://checkout.stripe.test/cs_test_1"
    assert session_table["d1"]["session_id"] == "cs_test_1"

    call = provider.created[0]
    assert call["amount_minor"] == 2400
    assert call["currency"] == "eur"
    assert call["success_url"].endswith("/confirmation/d1")
    assert call["metadata"]["order_id"] == "d1"
    assert call["metadata"]["surcharge_tier"] == "near"
    assert call["idempotency_key"]


def test_second_checkout_replaces_session(orchestrator, session_table):
    orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    url = orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    assert url.endswith("cs_test_2")
    assert list(session_table) == ["d1"]
    assert session_table["d1"]["session_id"] == "cs_test_2"


def test_retry_within_window_reuses_idempotency_key(orchestrator, provider):
    orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    assert provider.created[0]["idempotency_key"] == provider.created[1]["idempotency_key"]


def test_provider_failure_leaves_ledger_unchanged(orchestrator, provider, session_table, dispatcher):
    orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    provider.fail_create = PaymentProviderError("timeout")
    note = Notification("+33600000001", lambda url: f"lien {url}")
    with pytest.raises(PaymentProviderError):
        orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison", notification=note)
    assert session_table["d1"]["session_id"] == "cs_test_1"
    assert dispatcher.sent == []


def test_ledger_failure_raises_and_logs_orphaned_session(orchestrator, monkeypatch, caplog):
    monkeypatch.setattr("logistics.payments.repository.upsert_session", lambda **kw: None)
    with caplog.at_level(logging.ERROR, logger="logistics.payments.checkout"):
        with pytest.raises(LedgerInconsistency) as exc:
            orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison")
    assert exc.value.orphaned_session_id == "cs_test_1"
    assert "cs_test_1" in caplog.text


def test_invalid_amount_never_reaches_provider(orchestrator, provider):
    with pytest.raises(InvalidArgument):
        orchestrator.start_checkout("d1", -5, SAME, SAME, "Frais de livraison")
    assert provider.created == []


def test_pricing_override_per_flow(orchestrator, provider):
    orchestrator.start_checkout("b1", 19, PARIS, PARIS_8KM, "Achat et livraison", pricing=BUYER_INTENT_PRICING)
    orchestrator.start_checkout("d1", 19, PARIS, PARIS_8KM, "Frais de livraison")
    assert provider.created[0]["amount_minor"] == 3100
    assert provider.created[1]["amount_minor"] == 2400


def test_notification_sent_with_checkout_url(orchestrator, dispatcher):
    note = Notification("+33600000001", lambda url: f"Payez ici: {url}")
    url = orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison", notification=note)
    assert dispatcher.sent == [(f"Payez ici: {url}", "+33600000001")]


def test_notification_failure_does_not_break_checkout(provider, ledger, session_table):
    orchestrator = CheckoutOrchestrator(provider=provider, ledger=ledger, dispatcher=RecordingDispatcher(fail=True))
    note = Notification("+33600000001", lambda url: url)
    url = orchestrator.start_checkout("d1", 19, SAME, SAME, "Frais de livraison", notification=note)
    assert url.endswith("cs_test_1")
    assert session_table["d1"]["session_id"] == "cs_test_1"
