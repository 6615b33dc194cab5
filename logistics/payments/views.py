# module logistics.payments.views

"""Endpoints paiement.
- /api/v1/checkout/{kind}/{order_id}: devis + session Stripe, renvoie l'URL (rate-limité).
- /api/v1/payments/confirm/{order_id}: polling de confirmation -> {"settled": bool}.
- /api/v1/payments/webhook: checkout.session.completed -> confirmation de la commande.
Les erreurs métier sont traduites par les handlers de logistics.app_setup.exceptions.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from logistics.app_setup.dependencies import (
    get_checkout_orchestrator,
    get_confirmation_service,
    get_order_store,
)
from logistics.errors import InvalidArgument, NotFound
from logistics.notifications import messages
from logistics.orders.models import OrderKind
from logistics.payments import stripe_client
from logistics.payments.checkout import CheckoutOrchestrator, Notification
from logistics.payments.confirmation import PaymentConfirmationService
from logistics.pricing.policy import BUYER_INTENT_PRICING, DELIVERY_PRICING
from logistics.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
checkout_router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

# Seuil de distance propre à chaque flux
PRICING_BY_KIND = {
    OrderKind.BUYER_INTENT: BUYER_INTENT_PRICING,
    OrderKind.DELIVERY: DELIVERY_PRICING,
    OrderKind.SALE_DELIVERY: DELIVERY_PRICING,
}


@checkout_router.post("/{kind}/{order_id}", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def start_checkout(
    kind: OrderKind,
    order_id: str,
    orders=Depends(get_order_store),
    orchestrator: CheckoutOrchestrator = Depends(get_checkout_orchestrator),
):
    """
    Démarre (ou relance) le paiement d'une commande.
    Étapes:
      1) Charger la commande (404 si absente, 409 si déjà payée)
      2) Devis avec la politique du flux + session Stripe + registre (orchestrateur)
      3) Envoyer le lien par SMS à l'acheteur (hors chemin critique)
    Réponse: {"url": "<checkout stripe>"}
    """
    order = orders.get_order(order_id, kind)
    if order.paid:
        raise HTTPException(status_code=409, detail="Paiement déjà effectué")

    notification = None
    if order.buyer_phone:
        notification = Notification(
            to_phone_number=order.buyer_phone,
            render=lambda url: messages.checkout_link(order.id, url),
        )

    url = orchestrator.start_checkout(
        order.id,
        order.base_amount,
        order.seller_coordinate,
        order.buyer_coordinate,
        order.product_label,
        pricing=PRICING_BY_KIND[kind],
        notification=notification,
    )
    return {"url": url}


@router.get("/confirm/{order_id}")
def confirm_payment(order_id: str, service: PaymentConfirmationService = Depends(get_confirmation_service)):
    """Polling: {"settled": true} si payé, {"settled": false} sinon (pas une erreur)."""
    result = service.confirm(order_id)
    return {"order_id": order_id, "settled": result.settled}


@router.post("/confirm/{order_id}")
def confirm_payment_post(order_id: str, service: PaymentConfirmationService = Depends(get_confirmation_service)):
    """Variante POST (retour de la page de succès du front)."""
    return confirm_payment(order_id, service)


@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, service: PaymentConfirmationService = Depends(get_confirmation_service)):
    """
    Webhook Stripe: checkout.session.completed -> confirm(metadata.order_id).
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Idempotent: un événement rejoué ne rebascule pas la commande.
    - Réponses: {"status": "ok", "settled": bool} ou {"status": "ignored"}
    - Échec transitoire (Stripe, registre): 502/500, Stripe renverra l'événement.
    """
    try:
        event = await stripe_client.parse_event(request)
    except Exception:
        logger.exception("Erreur webhook_stripe (signature/payload)")
        raise HTTPException(status_code=400, detail="Invalid Stripe webhook payload")

    if stripe_client.event_type(event) != "checkout.session.completed":
        return JSONResponse({"status": "ignored"})
    order_id = stripe_client.extract_order_id(event)
    if not order_id:
        return JSONResponse({"status": "ignored"})
    try:
        result = await run_in_threadpool(service.confirm, order_id)
    except (NotFound, InvalidArgument) as e:
        # Erreur définitive: Stripe ne doit pas réessayer indéfiniment
        logger.warning("payments.webhook order_id=%s not confirmed: %s (%s)", order_id, e, e.code)
        return JSONResponse({"status": "ignored", "code": e.code})
    return JSONResponse({"status": "ok", "settled": result.settled})
