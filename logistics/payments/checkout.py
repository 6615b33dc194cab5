"""
Cas d'usage « démarrer un paiement »: devis -> session Stripe -> registre -> URL.

Garanties:
- Échec fournisseur: PaymentProviderError, registre inchangé (une session
  précédente reste valide).
- Échec du registre après succès fournisseur: LedgerInconsistency, l'id de
  session orpheline est journalisé pour réconciliation manuelle. Pas de retry.
- La notification SMS éventuelle part après coup, via le dispatcher, et ne peut
  ni bloquer ni annuler le checkout.
"""
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from logistics.config import CHECKOUT_CURRENCY, FRONTEND_URL
from logistics.errors import LedgerInconsistency
from logistics.geo.distance import Coordinate
from logistics.pricing.policy import PricingPolicy, DELIVERY_PRICING
from .idempotency import make_idempotency_key
from .ledger import PaymentSessionLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    to_phone_number: str
    render: Callable[[str], str]  # url de checkout -> texte du SMS


def success_url_for(order_id: str) -> str:
    return f"{FRONTEND_URL}/confirmation/{order_id}"


def cancel_url() -> str:
    return f"{FRONTEND_URL}/"


class CheckoutOrchestrator:
    def __init__(
        self,
        provider,
        ledger: PaymentSessionLedger,
        pricing: PricingPolicy = DELIVERY_PRICING,
        dispatcher=None,
        currency: str = CHECKOUT_CURRENCY,
    ):
        self.provider = provider
        self.ledger = ledger
        self.pricing = pricing
        self.dispatcher = dispatcher
        self.currency = currency

    def start_checkout(
        self,
        order_id: str,
        base_amount,
        source: Coordinate,
        destination: Coordinate,
        product_label: str,
        *,
        pricing: Optional[PricingPolicy] = None,
        notification: Optional[Notification] = None,
    ) -> str:
        """
        Retourne l'URL de checkout du fournisseur.
        Étapes:
          1) devis via la politique (celle du flux appelant si fournie)
          2) création de session (clé d'idempotence dérivée de la commande et du montant)
          3) remplacement de la session courante dans le registre
        """
        quote = (pricing or self.pricing).quote(base_amount, source, destination)

        # PaymentProviderError remonte tel quel: aucun accès au registre
        session = self.provider.create_checkout_session(
            amount_minor=quote.total_amount,
            currency=self.currency,
            success_url=success_url_for(order_id),
            cancel_url=cancel_url(),
            product_label=product_label,
            idempotency_key=make_idempotency_key(order_id, quote.total_amount),
            metadata={"order_id": str(order_id), "surcharge_tier": quote.surcharge_tier.value},
        )

        try:
            self.ledger.upsert(order_id, session.session_id)
        except LedgerInconsistency:
            logger.error(
                "payments.checkout orphaned provider session: order_id=%s session_id=%s (réconciliation manuelle requise)",
                order_id,
                session.session_id,
            )
            raise

        logger.info(
            "payments.checkout started order_id=%s session_id=%s total=%s tier=%s distance_km=%.3f",
            order_id,
            session.session_id,
            quote.total_amount,
            quote.surcharge_tier.value,
            quote.distance_km,
        )

        if notification and self.dispatcher is not None:
            try:
                self.dispatcher.dispatch(notification.render(session.url), notification.to_phone_number)
            except Exception:
                logger.exception("payments.checkout notification failed order_id=%s", order_id)
        return session.url
