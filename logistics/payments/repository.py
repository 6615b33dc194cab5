"""
Accès aux données du registre des sessions de paiement (table 'payment_sessions').
- Une ligne par order_id (contrainte unique côté base).
- L'écriture passe par un upsert on_conflict=order_id: remplacement atomique,
  jamais deux lignes vivantes pour la même commande.
"""
from typing import Optional, Dict, Any
import logging
import logistics.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

TABLE = "payment_sessions"

# module logistics.payments.repository
def fetch_session(order_id: str) -> Optional[Dict[str, Any]]:
    """
    Retourne la ligne {order_id, session_id, created_at} ou None si absente.
    - Les erreurs d'accès sont journalisées puis propagées (un échec de lecture
      ne doit pas être confondu avec « aucun checkout »).
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("order_id, session_id, created_at")
            .eq("order_id", order_id)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("payments.repository.fetch_session failed order_id=%s", order_id)
        raise
    rows = res.data or []
    return rows[0] if rows else None

def upsert_session(*, order_id: str, session_id: str, created_at: str) -> Optional[Dict[str, Any]]:
    """
    Remplace (ou crée) la session courante de la commande.
    Retour: la ligne écrite, ou None si l'écriture a échoué.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .upsert(
                {"order_id": order_id, "session_id": session_id, "created_at": created_at},
                on_conflict="order_id",
            )
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("payments.repository.upsert_session failed order_id=%s session_id=%s", order_id, session_id)
        return None
