from unittest.mock import MagicMock

import pytest

from logistics.errors import InvalidArgument, OrderNotFound
from logistics.tracking import service, storage


def test_invalid_status_rejected(order_store):
    with pytest.raises(InvalidArgument):
        service.change_status("d1", "lost", orders=order_store)
    assert order_store.status_updates == []


def test_delivered_requires_proof(order_store):
    with pytest.raises(InvalidArgument):
        service.change_status("d1", "delivered", orders=order_store)


def test_picked_notifies_buyer(order_store, dispatcher):
    res = service.change_status("d1", "Picked", orders=order_store, dispatcher=dispatcher)
    assert res["status"] == "picked"
    assert order_store.orders["d1"].status == "picked"
    assert dispatcher.sent[0][1] == "+33600000001"


def test_arrived_notifies_seller(order_store, dispatcher):
    service.change_status("d1", "arrived", orders=order_store, dispatcher=dispatcher)
    assert dispatcher.sent[0][1] == "+33600000002"


def test_delivered_uploads_proof_and_sends_link(order_store, dispatcher, monkeypatch):
    uploads = []

    def fake_upload(order_id, content, filename="", content_type="image/jpeg"):
        uploads.append((order_id, content, filename))
        return {"url": "https://cdn/d1/p.png", "id": "d1/p.png"}

    monkeypatch.setattr("logistics.tracking.storage.upload_proof", fake_upload)
    res = service.change_status(
        "d1", "delivered", orders=order_store, dispatcher=dispatcher, proof=b"img", proof_filename="p.png"
    )
    assert uploads == [("d1", b"img", "p.png")]
    assert res["proof_image_url"] == "https://cdn/d1/p.png"
    assert order_store.status_updates[0]["proof_image"]["id"] == "d1/p.png"
    assert "https://cdn/d1/p.png" in dispatcher.sent[0][0]


def test_unknown_order(order_store):
    with pytest.raises(OrderNotFound):
        service.change_status("nope", "picked", orders=order_store)


def test_get_tracking(order_store):
    info = service.get_tracking("b1", orders=order_store)
    assert info == {
        "order_id": "b1",
        "kind": "buyer-intent",
        "status": "pending",
        "paid": False,
        "proof_image_url": None,
    }


def test_upload_proof_to_storage_bucket(monkeypatch):
    client = MagicMock()
    bucket = client.storage.from_.return_value
    bucket.get_public_url.return_value = "https://x.supabase.co/storage/v1/object/public/delivery-proofs/d1/a.png?"
    monkeypatch.setattr("logistics.infra.supabase_client.get_service_supabase", lambda: client)

    res = storage.upload_proof("d1", b"img", "photo.PNG", "image/png")
    client.storage.from_.assert_called_once_with("delivery-proofs")
    path, content, options = bucket.upload.call_args.args
    assert path.startswith("d1/") and path.endswith(".png")
    assert content == b"img"
    assert options == {"content-type": "image/png"}
    assert res["id"] == path
    assert not res["url"].endswith("?")


def test_upload_proof_failure_propagates(monkeypatch):
    client = MagicMock()
    client.storage.from_.return_value.upload.side_effect = RuntimeError("storage down")
    monkeypatch.setattr("logistics.infra.supabase_client.get_service_supabase", lambda: client)
    with pytest.raises(RuntimeError):
        storage.upload_proof("d1", b"img")
