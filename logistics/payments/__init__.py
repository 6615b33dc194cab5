"""
Module 'payments' (feature-first): point d'entrée public.
Réunit l'adaptateur Stripe, la clé d'idempotence, le registre des sessions
et les deux cas d'usage (checkout, confirmation).
"""

from .stripe_client import (
    SessionStatus,
    CheckoutSession,
    StripeProvider,
    require_stripe,
    map_session_status,
    parse_event,
)
from .idempotency import make_idempotency_key
from .ledger import PaymentSessionRecord, PaymentSessionLedger
from .checkout import CheckoutOrchestrator, Notification
from .confirmation import PaymentConfirmationService, ConfirmationResult

__all__ = [
    # stripe
    "SessionStatus",
    "CheckoutSession",
    "StripeProvider",
    "require_stripe",
    "map_session_status",
    "parse_event",
    # idempotence
    "make_idempotency_key",
    # registre
    "PaymentSessionRecord",
    "PaymentSessionLedger",
    # services
    "CheckoutOrchestrator",
    "Notification",
    "PaymentConfirmationService",
    "ConfirmationResult",
]
