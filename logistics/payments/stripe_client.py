"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
- StripeProvider est instancié une seule fois au démarrage (lifespan) puis injecté
  dans CheckoutOrchestrator / PaymentConfirmationService.
- Toute erreur du SDK (réseau, timeout, 4xx/5xx) est convertie en PaymentProviderError.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
import logging
import threading

import stripe
from fastapi import Request

from logistics.config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET, STRIPE_MAX_NETWORK_RETRIES
from logistics.errors import PaymentProviderError

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"
    EXPIRED = "expired"


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


# module logistics.payments.stripe_client
def require_stripe(api_key: str = "") -> stripe:
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key (argument, sinon STRIPE_SECRET_KEY).
    - En absence de clé, les appels Stripe échoueront côté SDK (ex: No API key provided).
    """
    key = api_key or STRIPE_SECRET_KEY
    if key:
        stripe.api_key = key
    stripe.max_network_retries = STRIPE_MAX_NETWORK_RETRIES
    return stripe


def map_session_status(session: Any) -> SessionStatus:
    """
    Traduit une session Checkout en statut de règlement.
    - payment_status 'paid' / 'no_payment_required' -> PAID
    - status 'expired' -> EXPIRED
    - payment_intent annulé -> FAILED
    - sinon (open, ou complete mais paiement asynchrone en attente) -> PENDING
    """
    payment_status = getattr(session, "payment_status", None) or ""
    status = getattr(session, "status", None) or ""
    if payment_status in ("paid", "no_payment_required"):
        return SessionStatus.PAID
    if status == "expired":
        return SessionStatus.EXPIRED
    intent = getattr(session, "payment_intent", None)
    if intent is not None and getattr(intent, "status", None) == "canceled":
        return SessionStatus.FAILED
    return SessionStatus.PENDING


class StripeProvider:
    name = "stripe"

    def __init__(self, api_key: str = ""):
        require_stripe(api_key)
        # clé d'idempotence -> nombre d'échecs serveur (5xx) déjà mémorisés par Stripe
        self._failed_keys: Dict[str, int] = {}
        self._lock = threading.Lock()

    def _effective_key(self, idempotency_key: Optional[str]) -> Optional[str]:
        if not idempotency_key:
            return None
        with self._lock:
            attempt = self._failed_keys.get(idempotency_key, 0)
        return f"{idempotency_key}-r{attempt}" if attempt else idempotency_key

    def _burn_key(self, idempotency_key: str) -> None:
        with self._lock:
            if len(self._failed_keys) > 1024:
                self._failed_keys.clear()
            self._failed_keys[idempotency_key] = self._failed_keys.get(idempotency_key, 0) + 1

    def create_checkout_session(
        self,
        *,
        amount_minor: int,
        currency: str,
        success_url: str,
        cancel_url: str,
        product_label: str,
        idempotency_key: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> CheckoutSession:
        """
        Crée une session Stripe Checkout à une seule ligne (montant total en centimes).
        Retour: CheckoutSession(session_id, url).
        - Stripe rejoue le résultat mémorisé pour une clé d'idempotence, erreurs 5xx
          comprises: après un 5xx, la clé reçoit un suffixe de tentative pour que
          le « réessayez » suivant parte réellement chez Stripe. Les 4xx et les
          erreurs réseau gardent la clé (une session peut déjà exister).
        """
        effective_key = self._effective_key(idempotency_key)
        try:
            session = stripe.checkout.Session.create(
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": product_label},
                            "unit_amount": int(amount_minor),
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata or {},
                payment_method_types=["card"],
                idempotency_key=effective_key,
            )
        except stripe.StripeError as e:
            logger.warning("stripe.create_checkout_session rejected: %s", e)
            if idempotency_key and (getattr(e, "http_status", None) or 0) >= 500:
                self._burn_key(idempotency_key)
            raise PaymentProviderError(f"Stripe a refusé la création de session: {e}") from e
        except Exception as e:
            logger.exception("stripe.create_checkout_session failed")
            raise PaymentProviderError(f"Stripe injoignable: {e}") from e

        session_id = getattr(session, "id", None)
        url = getattr(session, "url", None)
        if not session_id or not url:
            raise PaymentProviderError("Session Stripe invalide (id ou url manquant)")
        return CheckoutSession(session_id=str(session_id), url=str(url))

    def get_session_status(self, session_id: str) -> SessionStatus:
        try:
            session = stripe.checkout.Session.retrieve(session_id, expand=["payment_intent"])
        except stripe.StripeError as e:
            logger.warning("stripe.get_session_status rejected session_id=%s: %s", session_id, e)
            raise PaymentProviderError(f"Lecture de session Stripe refusée: {e}") from e
        except Exception as e:
            logger.exception("stripe.get_session_status failed session_id=%s", session_id)
            raise PaymentProviderError(f"Stripe injoignable: {e}") from e
        return map_session_status(session)


async def parse_event(request: Request):
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    Retour: l’objet event si la signature est valide.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or request.headers.get("Stripe-Signature")
    return stripe.Webhook.construct_event(payload, sig_header, STRIPE_WEBHOOK_SECRET or "")


def extract_order_id(event: Any) -> Optional[str]:
    """Extrait metadata.order_id depuis un event checkout.session.completed."""
    data = event.get("data") if isinstance(event, dict) else getattr(event, "data", None)
    obj = (data.get("object") if isinstance(data, dict) else getattr(data, "object", None)) or {}
    meta = (obj.get("metadata") if isinstance(obj, dict) else getattr(obj, "metadata", None)) or {}
    order_id = meta.get("order_id") if isinstance(meta, dict) else getattr(meta, "order_id", None)
    return str(order_id) if order_id else None


def event_type(event: Any) -> str:
    if isinstance(event, dict):
        return str(event.get("type") or "")
    return str(getattr(event, "type", "") or "")
