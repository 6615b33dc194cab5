"""
Dépendances FastAPI: exposent aux vues les collaborateurs construits au démarrage
(app.state, voir lifespan). Les tests remplacent ces fonctions via
app.dependency_overrides.
"""
from fastapi import Request

from logistics.payments.checkout import CheckoutOrchestrator
from logistics.payments.confirmation import PaymentConfirmationService

def get_order_store(request: Request):
    return request.app.state.orders

def get_dispatcher(request: Request):
    return request.app.state.dispatcher

def get_checkout_orchestrator(request: Request) -> CheckoutOrchestrator:
    state = request.app.state
    return CheckoutOrchestrator(
        provider=state.payment_provider,
        ledger=state.ledger,
        dispatcher=state.dispatcher,
    )

def get_confirmation_service(request: Request) -> PaymentConfirmationService:
    state = request.app.state
    return PaymentConfirmationService(
        provider=state.payment_provider,
        ledger=state.ledger,
        orders=state.orders,
        dispatcher=state.dispatcher,
    )
