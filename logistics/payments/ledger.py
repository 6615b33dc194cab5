"""
Registre commande -> session de paiement courante.
Invariant: au plus un enregistrement par order_id à tout instant observable.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from logistics.errors import LedgerInconsistency, NotFound
from . import repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentSessionRecord:
    order_id: str
    external_session_id: str
    created_at: datetime


def _parse_ts(value) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return datetime.now(timezone.utc)


class PaymentSessionLedger:
    def upsert(self, order_id: str, external_session_id: str) -> None:
        """
        Remplace la session de la commande en une seule opération logique.
        Soulève LedgerInconsistency si l'écriture n'est pas confirmée par la base.
        """
        created_at = datetime.now(timezone.utc).isoformat()
        row = repository.upsert_session(order_id=order_id, session_id=external_session_id, created_at=created_at)
        if not row:
            raise LedgerInconsistency(
                f"Session {external_session_id} non enregistrée pour la commande {order_id}",
                orphaned_session_id=external_session_id,
            )
        logger.info("payments.ledger upsert order_id=%s session_id=%s", order_id, external_session_id)

    def find(self, order_id: str) -> PaymentSessionRecord:
        """
        Soulève NotFound si aucune session, LedgerInconsistency si le registre
        est illisible (jamais confondu avec « aucun checkout »).
        """
        try:
            row = repository.fetch_session(order_id)
        except Exception as e:
            raise LedgerInconsistency(f"Registre des sessions illisible pour la commande {order_id}") from e
        if not row:
            raise NotFound(f"Aucune session de paiement pour la commande {order_id}")
        return PaymentSessionRecord(
            order_id=str(row.get("order_id") or order_id),
            external_session_id=str(row.get("session_id") or ""),
            created_at=_parse_ts(row.get("created_at")),
        )
