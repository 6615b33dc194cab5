"""
Accès aux commandes payables (tables 'buyer_intents', 'deliveries', 'sale_deliveries').
- get_order: cherche l'identifiant dans les tables (ou dans celle du type donné).
- mark_paid: mise à jour conditionnelle paid=false -> true; seul l'appelant qui
  bascule réellement le drapeau reçoit True (idempotent en concurrence).
- update_status: statut de suivi + preuve image éventuelle.
"""
from typing import Any, Dict, Iterable, Optional
import logging

import logistics.infra.supabase_client as supabase_client
from logistics.errors import OrderNotFound
from .models import Order, OrderKind, order_from_row

logger = logging.getLogger(__name__)

def _kinds(kind: Optional[OrderKind]) -> Iterable[OrderKind]:
    return (kind,) if kind else tuple(OrderKind)

def fetch_order_row(order_id: str, kind: OrderKind) -> Optional[Dict[str, Any]]:
    res = (
        supabase_client.get_supabase()
        .table(kind.table)
        .select("*")
        .eq("id", order_id)
        .limit(1)
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else None


class OrderStore:
    def get_order(self, order_id: str, kind: Optional[OrderKind] = None) -> Order:
        """Soulève OrderNotFound si aucune table ne contient l'identifiant."""
        for k in _kinds(kind):
            try:
                row = fetch_order_row(order_id, k)
            except Exception:
                logger.exception("orders.repository.get_order failed order_id=%s table=%s", order_id, k.table)
                raise
            if row:
                return order_from_row(row, k)
        raise OrderNotFound(f"Commande introuvable: {order_id}")

    def mark_paid(self, order_id: str, kind: Optional[OrderKind] = None) -> bool:
        """
        UPDATE ... SET paid=true WHERE id=? AND paid=false.
        Retour: True si cette exécution a effectué la transition, False sinon.
        """
        for k in _kinds(kind):
            res = (
                supabase_client.get_service_supabase()
                .table(k.table)
                .update({"paid": True})
                .eq("id", order_id)
                .eq("paid", False)
                .execute()
            )
            if res.data:
                logger.info("orders.mark_paid order_id=%s table=%s", order_id, k.table)
                return True
        return False

    def update_status(
        self,
        order: Order,
        status: str,
        proof_image: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Met à jour le statut (et la preuve image si fournie), retourne la ligne mise à jour."""
        values: Dict[str, Any] = {"status": status}
        if proof_image:
            values["proof_image_url"] = proof_image.get("url")
            values["proof_image_id"] = proof_image.get("id")
        res = (
            supabase_client.get_service_supabase()
            .table(order.kind.table)
            .update(values)
            .eq("id", order.id)
            .execute()
        )
        rows = res.data or []
        if not rows:
            raise OrderNotFound(f"Commande introuvable: {order.id}")
        return rows[0]
