"""Couche service du suivi de livraison.
Rôles:
- Valider le statut demandé (picked, onroute, arrived, delivered).
- Exiger une preuve image pour 'delivered' et la téléverser (storage).
- Persister le statut puis prévenir le bon destinataire par SMS (best effort):
  acheteur pour onroute/picked/delivered, vendeur pour arrived.
"""
from typing import Any, Dict, Optional
import logging

from logistics.errors import InvalidArgument
from logistics.notifications import messages
from logistics.orders.repository import OrderStore
from . import storage

logger = logging.getLogger(__name__)

ACCEPTED_STATUSES = ("picked", "onroute", "arrived", "delivered")

def _recipient(status: str, order) -> Optional[str]:
    return order.seller_phone if status == "arrived" else order.buyer_phone

def change_status(
    order_id: str,
    status: str,
    *,
    orders: OrderStore,
    dispatcher=None,
    proof: Optional[bytes] = None,
    proof_filename: str = "",
    proof_content_type: str = "image/jpeg",
) -> Dict[str, Any]:
    """Change le statut d'une livraison et renvoie {order_id, status, proof_image_url}."""
    status = (status or "").strip().lower()
    if status not in ACCEPTED_STATUSES:
        raise InvalidArgument(f"Statut de livraison invalide: {status or '-'}")
    if status == "delivered" and not proof:
        raise InvalidArgument("Preuve de livraison (image) requise pour le statut 'delivered'")

    order = orders.get_order(order_id)
    proof_image = None
    if status == "delivered":
        proof_image = storage.upload_proof(order.id, proof, proof_filename, proof_content_type)

    orders.update_status(order, status, proof_image)
    logger.info("tracking.change_status order_id=%s status=%s", order.id, status)

    if dispatcher is not None:
        text = messages.status_changed(
            status,
            order.id,
            name=order.buyer_name,
            proof_url=(proof_image or {}).get("url"),
        )
        dispatcher.dispatch(text, _recipient(status, order))

    return {
        "order_id": order.id,
        "status": status,
        "proof_image_url": (proof_image or {}).get("url") or order.proof_image_url,
    }

def get_tracking(order_id: str, *, orders: OrderStore) -> Dict[str, Any]:
    order = orders.get_order(order_id)
    return {
        "order_id": order.id,
        "kind": order.kind.value,
        "status": order.status,
        "paid": order.paid,
        "proof_image_url": order.proof_image_url,
    }
