"""Textes SMS (non normatifs) envoyés aux acheteurs et vendeurs."""
from logistics.config import FRONTEND_URL

def checkout_link(order_id: str, url: str) -> str:
    return f"Bonjour, votre lien de paiement pour la commande {order_id}: {url}"

def payment_settled(order_id: str) -> str:
    return (
        f"Bonne nouvelle ! Le paiement de la commande {order_id} est confirmé. "
        "Un livreur va être planifié pour l'enlèvement."
    )

def status_changed(status: str, order_id: str, name: str | None = None, proof_url: str | None = None) -> str:
    hello = f"Bonjour {name}," if name else "Bonjour,"
    if status == "onroute":
        return f"{hello} votre livreur est en route pour récupérer l'article."
    if status == "arrived":
        return f"{hello} votre livreur est arrivé pour l'enlèvement. Merci de préparer l'article."
    if status == "picked":
        return f"{hello} votre colis a été récupéré. Suivi: {FRONTEND_URL}/track/{order_id}"
    if status == "delivered":
        return (
            f"{hello} votre colis a été livré ! Preuve de livraison: {proof_url or '-'}. "
            f"Votre avis nous intéresse: {FRONTEND_URL}/testimony/{order_id}"
        )
    return f"{hello} la commande {order_id} est passée au statut {status}."
