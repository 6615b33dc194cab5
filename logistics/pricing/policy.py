"""
Tarification des frais de livraison par palier de distance (NEAR / FAR).

- Le montant de base est exprimé en unités majeures (ex: euros).
- Le supplément est forfaitaire: NEAR si distance <= seuil, FAR sinon.
- total_amount (centimes) = round(base + supplément) * 100, arrondi "half-up"
  APRÈS l'addition pour ne pas cumuler d'erreur d'arrondi entre lignes.
- Le seuil dépend du flux appelant: une politique nommée par flux
  (DELIVERY_PRICING, BUYER_INTENT_PRICING) plutôt qu'une constante globale.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from math import isfinite
from typing import Union

from logistics.config import (
    DELIVERY_FAR_THRESHOLD_KM,
    BUYER_INTENT_FAR_THRESHOLD_KM,
    NEAR_SURCHARGE,
    FAR_SURCHARGE,
)
from logistics.errors import InvalidArgument
from logistics.geo.distance import Coordinate, distance

Amount = Union[int, float, Decimal]


class SurchargeTier(str, Enum):
    NEAR = "near"
    FAR = "far"


@dataclass(frozen=True)
class PriceQuote:
    base_amount: Amount
    distance_km: float
    surcharge_tier: SurchargeTier
    total_amount: int  # centimes


@dataclass(frozen=True)
class PricingPolicy:
    threshold_km: float
    near_surcharge: int = NEAR_SURCHARGE
    far_surcharge: int = FAR_SURCHARGE

    def tier_for(self, distance_km: float) -> SurchargeTier:
        return SurchargeTier.FAR if distance_km > self.threshold_km else SurchargeTier.NEAR

    def surcharge_for(self, tier: SurchargeTier) -> int:
        return self.far_surcharge if tier is SurchargeTier.FAR else self.near_surcharge

    def quote(self, base_amount: Amount, source: Coordinate, destination: Coordinate) -> PriceQuote:
        """
        Calcule le devis pour un trajet source -> destination.
        - Soulève InvalidArgument si base_amount est négatif ou non numérique.
        """
        if isinstance(base_amount, bool) or not isinstance(base_amount, (int, float, Decimal)):
            raise InvalidArgument(f"montant de base invalide: {base_amount!r}")
        if isinstance(base_amount, float) and not isfinite(base_amount):
            raise InvalidArgument(f"montant de base invalide: {base_amount!r}")
        if base_amount < 0:
            raise InvalidArgument(f"montant de base négatif: {base_amount}")

        km = distance(source, destination)
        tier = self.tier_for(km)
        gross = Decimal(str(base_amount)) + Decimal(self.surcharge_for(tier))
        total = int(gross.quantize(Decimal("1"), rounding=ROUND_HALF_UP)) * 100
        return PriceQuote(base_amount=base_amount, distance_km=km, surcharge_tier=tier, total_amount=total)


# Politiques nommées par flux
DELIVERY_PRICING = PricingPolicy(threshold_km=DELIVERY_FAR_THRESHOLD_KM)
BUYER_INTENT_PRICING = PricingPolicy(threshold_km=BUYER_INTENT_FAR_THRESHOLD_KM)
