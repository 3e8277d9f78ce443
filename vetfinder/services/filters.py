"""Search predicates

SearchCriteria is turned into a list of tagged clauses by build_clauses();
each clause renders itself as a SQLAlchemy expression and compose() ANDs
them into the final WHERE condition. Absent criteria add no clause.
"""
from dataclasses import dataclass
from typing import List, Tuple

from sqlalchemy import and_, or_, true

from ..config import DEFAULT_MAX_DISTANCE_M
from ..models import Veterinarian
from .geo import bounding_box, distance_expression

# Columns searched by the free-text filter
TEXT_FIELDS = ("title", "category_name", "address", "neighborhood")


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring match on one column"""
    field: str
    value: str

    def to_expression(self):
        return getattr(Veterinarian, self.field).icontains(self.value, autoescape=True)


@dataclass(frozen=True)
class RangeMatch:
    """Numeric lower bound (inclusive) on one column"""
    field: str
    minimum: float

    def to_expression(self):
        return getattr(Veterinarian, self.field) >= self.minimum


@dataclass(frozen=True)
class ProximityMatch:
    """Listings within max_distance_m metres of a point"""
    latitude: float
    longitude: float
    max_distance_m: float

    def to_expression(self):
        bbox = bounding_box(self.latitude, self.longitude, self.max_distance_m)
        distance = distance_expression(
            Veterinarian.latitude, Veterinarian.longitude, self.latitude, self.longitude
        )
        return and_(
            Veterinarian.latitude.isnot(None),
            Veterinarian.longitude.isnot(None),
            Veterinarian.latitude.between(bbox["min_lat"], bbox["max_lat"]),
            Veterinarian.longitude.between(bbox["min_lng"], bbox["max_lng"]),
            distance <= self.max_distance_m,
        )


@dataclass(frozen=True)
class DisjunctiveMatch:
    """OR of its member clauses"""
    clauses: Tuple

    def to_expression(self):
        return or_(*(c.to_expression() for c in self.clauses))


def build_clauses(criteria) -> List:
    """Clauses for the criteria fields that are set (pagination and open_now excluded)"""
    clauses = []

    if criteria.text:
        clauses.append(DisjunctiveMatch(tuple(TextMatch(f, criteria.text) for f in TEXT_FIELDS)))

    if criteria.category:
        clauses.append(TextMatch("category_name", criteria.category))

    if criteria.neighborhood:
        clauses.append(TextMatch("neighborhood", criteria.neighborhood))

    if criteria.min_rating:
        clauses.append(RangeMatch("google_score", criteria.min_rating))

    # Proximity only when both coordinates are given
    if criteria.longitude is not None and criteria.latitude is not None:
        clauses.append(ProximityMatch(
            latitude=criteria.latitude,
            longitude=criteria.longitude,
            max_distance_m=criteria.max_distance_m or DEFAULT_MAX_DISTANCE_M,
        ))

    return clauses


def compose(clauses: List):
    """AND all clauses into one condition (no clauses: always true)"""
    if not clauses:
        return true()
    return and_(*(c.to_expression() for c in clauses))
