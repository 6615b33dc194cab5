"""
Clé d'idempotence côté client pour la création de session Stripe.
Deux appels pour la même commande, le même montant et la même fenêtre de temps
produisent la même clé: Stripe renvoie alors la session déjà créée au lieu
d'en ouvrir une seconde (réponse perdue puis retry).
Stripe mémorise aussi les échecs 5xx sous la clé: StripeProvider suffixe alors la
clé d'un numéro de tentative (voir create_checkout_session).
"""
import hashlib
import time
from typing import Optional

from logistics.config import CHECKOUT_IDEMPOTENCY_WINDOW_SECONDS

def make_idempotency_key(
    order_id: str,
    amount_minor: int,
    now: Optional[float] = None,
    window_seconds: int = CHECKOUT_IDEMPOTENCY_WINDOW_SECONDS,
) -> str:
    ts = time.time() if now is None else now
    bucket = int(ts // max(1, window_seconds))
    raw = f"checkout|{order_id}|{int(amount_minor)}|{bucket}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()[:48]
