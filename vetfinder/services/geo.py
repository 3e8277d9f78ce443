"""Distance helpers: bounding box and haversine as a SQL expression"""
import math

from sqlalchemy import func

EARTH_RADIUS_M = 6371000.0
METERS_PER_DEGREE = 111000.0


def bounding_box(lat: float, lng: float, radius_m: float) -> dict:
    """Rectangle around a point, used as a cheap prefilter before the exact distance"""
    dlat = radius_m / METERS_PER_DEGREE
    dlng = radius_m / (METERS_PER_DEGREE * max(math.cos(math.radians(lat)), 1e-6))
    return {
        "min_lat": lat - dlat,
        "max_lat": lat + dlat,
        "min_lng": lng - dlng,
        "max_lng": lng + dlng,
    }


def distance_expression(lat_col, lng_col, lat: float, lng: float):
    """SQL expression for the distance in metres from (lat, lng) to a row's coordinates

    Uses radians/sin/cos/asin/sqrt/power; database.py registers them on SQLite.
    """
    dlat = (func.radians(lat_col) - math.radians(lat)) / 2
    dlng = (func.radians(lng_col) - math.radians(lng)) / 2
    a = (
        func.power(func.sin(dlat), 2)
        + math.cos(math.radians(lat)) * func.cos(func.radians(lat_col)) * func.power(func.sin(dlng), 2)
    )
    return 2 * EARTH_RADIUS_M * func.asin(func.sqrt(a))
