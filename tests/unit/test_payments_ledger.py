from datetime import datetime

import pytest

from logistics.errors import LedgerInconsistency, NotFound
from logistics.payments.ledger import PaymentSessionLedger


def test_upsert_then_find(ledger, session_table):
    ledger.upsert("d1", "cs_1")
    rec = ledger.find("d1")
    assert rec.order_id == "d1"
    assert rec.external_session_id == "cs_1"
    assert isinstance(rec.created_at, datetime)


def test_upsert_replaces_previous_session(ledger, session_table):
    ledger.upsert("d1", "cs_1")
    ledger.upsert("d1", "cs_2")
    assert len(session_table) == 1
    assert ledger.find("d1").external_session_id == "cs_2"


def test_find_missing_raises_not_found(ledger):
    with pytest.raises(NotFound):
        ledger.find("unknown")


def test_unconfirmed_write_raises_ledger_inconsistency(monkeypatch):
    monkeypatch.setattr("logistics.payments.repository.upsert_session", lambda **kw: None)
    with pytest.raises(LedgerInconsistency) as exc:
        PaymentSessionLedger().upsert("d1", "cs_orphan")
    assert exc.value.orphaned_session_id == "cs_orphan"


def test_find_tolerates_unparsable_timestamp(monkeypatch):
    monkeypatch.setattr(
        "logistics.payments.repository.fetch_session",
        lambda order_id: {"order_id": order_id, "session_id": "cs_1", "created_at": "n/a"},
    )
    rec = PaymentSessionLedger().find("d1")
    assert rec.external_session_id == "cs_1"
    assert rec.created_at.tzinfo is not None


def test_find_read_failure_is_not_no_checkout(monkeypatch):
    def broken_fetch(order_id):
        raise RuntimeError("db down")
    monkeypatch.setattr("logistics.payments.repository.fetch_session", broken_fetch)
    with pytest.raises(LedgerInconsistency):
        PaymentSessionLedger().find("d1")
