# module logistics.orders.models
"""Modèle des commandes payables (intention d'achat, livraison, livraison de vente)."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from logistics.errors import InvalidArgument
from logistics.geo.distance import Coordinate


class OrderKind(str, Enum):
    BUYER_INTENT = "buyer-intent"
    DELIVERY = "delivery"
    SALE_DELIVERY = "sale-delivery"

    @property
    def table(self) -> str:
        return {
            OrderKind.BUYER_INTENT: "buyer_intents",
            OrderKind.DELIVERY: "deliveries",
            OrderKind.SALE_DELIVERY: "sale_deliveries",
        }[self]


@dataclass(frozen=True)
class Order:
    id: str
    kind: OrderKind
    base_amount: float
    seller_coordinate: Coordinate  # point d'enlèvement
    buyer_coordinate: Coordinate   # point de dépôt
    paid: bool = False
    status: str = "pending"
    buyer_phone: Optional[str] = None
    seller_phone: Optional[str] = None
    buyer_name: Optional[str] = None
    proof_image_url: Optional[str] = None

    @property
    def product_label(self) -> str:
        if self.kind is OrderKind.BUYER_INTENT:
            return "Achat et livraison"
        return "Frais de livraison"


PRICING_COLUMNS = ("base_amount", "pickup_lat", "pickup_lng", "dropoff_lat", "dropoff_lng")


def order_from_row(row: Dict[str, Any], kind: OrderKind) -> Order:
    """
    Construit un Order à partir d'une ligne Supabase (colonnes pickup_* / dropoff_*).
    - Soulève InvalidArgument si une colonne nécessaire au devis est absente:
      une commande incomplète n'est jamais tarifée.
    """
    missing = [c for c in PRICING_COLUMNS if row.get(c) is None]
    if missing:
        raise InvalidArgument(f"Commande {row.get('id')} incomplète: {', '.join(missing)} manquant(s)")
    try:
        base_amount, pickup_lat, pickup_lng, dropoff_lat, dropoff_lng = (float(row[c]) for c in PRICING_COLUMNS)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"Commande {row.get('id')}: valeur de tarification illisible") from e
    return Order(
        id=str(row.get("id")),
        kind=kind,
        base_amount=base_amount,
        seller_coordinate=Coordinate(pickup_lat, pickup_lng),
        buyer_coordinate=Coordinate(dropoff_lat, dropoff_lng),
        paid=bool(row.get("paid")),
        status=str(row.get("status") or "pending"),
        buyer_phone=row.get("buyer_phone"),
        seller_phone=row.get("seller_phone"),
        buyer_name=row.get("buyer_name"),
        proof_image_url=row.get("proof_image_url"),
    )
