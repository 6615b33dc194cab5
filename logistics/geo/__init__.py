from .distance import Coordinate, distance, EARTH_RADIUS_KM

__all__ = ["Coordinate", "distance", "EARTH_RADIUS_KM"]
