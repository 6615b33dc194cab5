"""
Stockage des preuves de livraison (Supabase Storage, bucket PROOF_BUCKET).
Chemin: <order_id>/<uuid><ext>. Retour: {"url": <url publique>, "id": <chemin>}.
"""
from pathlib import PurePath
from typing import Dict
from uuid import uuid4
import logging

import logistics.infra.supabase_client as supabase_client
from logistics.config import PROOF_BUCKET

logger = logging.getLogger(__name__)

def upload_proof(order_id: str, content: bytes, filename: str = "", content_type: str = "image/jpeg") -> Dict[str, str]:
    ext = PurePath(filename or "").suffix.lower() or ".jpg"
    path = f"{order_id}/{uuid4().hex}{ext}"
    bucket = supabase_client.get_service_supabase().storage.from_(PROOF_BUCKET)
    try:
        bucket.upload(path, content, {"content-type": content_type or "image/jpeg"})
    except Exception:
        logger.exception("tracking.storage.upload_proof failed order_id=%s path=%s", order_id, path)
        raise
    url = bucket.get_public_url(path)
    return {"url": str(url).rstrip("?"), "id": path}
