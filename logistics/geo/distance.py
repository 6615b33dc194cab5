"""Distance orthodromique (haversine) entre deux coordonnées GPS."""

from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt

from logistics.errors import InvalidArgument

# Rayon terrestre moyen en kilomètres.
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidArgument(f"latitude hors bornes: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidArgument(f"longitude hors bornes: {self.longitude}")


def distance(a: Coordinate, b: Coordinate) -> float:
    """Retourne la distance en km entre a et b (0 si les points sont identiques)."""
    if a.latitude == b.latitude and a.longitude == b.longitude:
        return 0.0
    lat1, lon1, lat2, lon2 = map(radians, [a.latitude, a.longitude, b.latitude, b.longitude])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    # Borné à 1 pour les points quasi antipodaux (erreur d'arrondi)
    h = min(1.0, sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))
