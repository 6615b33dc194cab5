# module logistics.tracking.views

"""Endpoints de suivi de livraison.
- PATCH /api/v1/deliveries/{order_id}/status: change le statut (multipart: status, proof).
- GET /api/v1/deliveries/{order_id}/tracking: statut courant, paiement, preuve.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from logistics.app_setup.dependencies import get_dispatcher, get_order_store
from logistics.tracking import service as tracking_service

router = APIRouter(prefix="/api/v1/deliveries", tags=["Tracking API"])


@router.patch("/{order_id}/status")
async def change_delivery_status(
    order_id: str,
    status: str = Form(...),
    proof: Optional[UploadFile] = File(None),
    orders=Depends(get_order_store),
    dispatcher=Depends(get_dispatcher),
):
    """Le statut 'delivered' exige un fichier image 'proof' (400 sinon)."""
    content = await proof.read() if proof is not None else None
    # Supabase (table + storage) et Twilio sont synchrones: hors de la boucle
    return await run_in_threadpool(
        tracking_service.change_status,
        order_id,
        status,
        orders=orders,
        dispatcher=dispatcher,
        proof=content,
        proof_filename=(proof.filename if proof is not None else "") or "",
        proof_content_type=(proof.content_type if proof is not None else "") or "image/jpeg",
    )


@router.get("/{order_id}/tracking")
def get_delivery_tracking(order_id: str, orders=Depends(get_order_store)):
    return tracking_service.get_tracking(order_id, orders=orders)
