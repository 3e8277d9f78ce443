"""Search service"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from ..config import (
    BUSINESS_TIMEZONE, DEFAULT_PAGE_SIZE, DEFAULT_MAX_DISTANCE_M,
    HIGH_RATING_THRESHOLD, OPEN_NOW_MAX_SCAN,
)
from ..database import translate_store_errors
from ..models import Veterinarian
from ..schemas import SearchCriteria
from .filters import ProximityMatch, build_clauses, compose
from .geo import distance_expression
from .open_now import is_open_at

logger = logging.getLogger(__name__)

# Best rated first; equal ratings keep insertion order
SORT_ORDER = (Veterinarian.google_score.desc().nulls_last(), Veterinarian.pk)


@dataclass
class PagedResult:
    items: List[Veterinarian]
    total: int
    page: int
    page_size: int
    # open_now only: the candidate window was full, more matches may exist
    is_approximate: bool = False


def normalize_pagination(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int, int]:
    """(page, page_size, skip) with page >= 1 and a positive page size"""
    page_size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    page = page if page and page > 0 else 1
    return page, page_size, (page - 1) * page_size


def search_veterinarians(
    db: Session,
    criteria: SearchCriteria,
    now: Optional[datetime] = None,
    max_scan: Optional[int] = None,
) -> PagedResult:
    """Filtered, rating-sorted page of listings plus the total match count.

    Without open_now the store does the counting and slicing (two round
    trips, not in one transaction). With open_now the first `max_scan`
    matches are fetched, filtered in memory with is_open_at and sliced here,
    so `total` only covers that candidate window.
    """
    page, page_size, skip = normalize_pagination(criteria.page, criteria.page_size)
    condition = compose(build_clauses(criteria))
    query = db.query(Veterinarian).filter(condition).order_by(*SORT_ORDER)

    if not criteria.open_now:
        with translate_store_errors():
            total = db.query(func.count(Veterinarian.pk)).filter(condition).scalar()
            items = query.offset(skip).limit(page_size).all()
        return PagedResult(items=items, total=total, page=page, page_size=page_size)

    max_scan = max_scan or OPEN_NOW_MAX_SCAN
    with translate_store_errors():
        candidates = query.limit(max_scan).all()

    if now is None:
        now = datetime.now(timezone.utc)
    survivors = [v for v in candidates if is_open_at(v.opening_hours, now, BUSINESS_TIMEZONE)]
    is_approximate = len(candidates) >= max_scan
    if is_approximate:
        logger.info(f"open_now scan window full ({max_scan} candidates); total is approximate")

    return PagedResult(
        items=survivors[skip:skip + page_size],
        total=len(survivors),
        page=page,
        page_size=page_size,
        is_approximate=is_approximate,
    )


def search_nearby(
    db: Session,
    lat: float,
    lng: float,
    max_distance_m: float = DEFAULT_MAX_DISTANCE_M,
    limit: int = 20,
) -> List[Tuple[Veterinarian, float]]:
    """Nearby search: bounding box + exact distance in SQL, nearest first"""
    distance = distance_expression(Veterinarian.latitude, Veterinarian.longitude, lat, lng)
    proximity = ProximityMatch(latitude=lat, longitude=lng, max_distance_m=max_distance_m)

    with translate_store_errors():
        rows = (
            db.query(Veterinarian, distance.label("distance_m"))
            .filter(proximity.to_expression())
            .order_by(distance, Veterinarian.pk)
            .limit(limit)
            .all()
        )
    return [(vet, round(dist, 1)) for vet, dist in rows]


def get_veterinarian(db: Session, veterinarian_id: str) -> Optional[Veterinarian]:
    """Listing detail by its Google Maps id"""
    with translate_store_errors():
        return (
            db.query(Veterinarian)
            .filter(Veterinarian.google_maps_id == veterinarian_id)
            .first()
        )


def _distinct_values(db: Session, column) -> List[str]:
    with translate_store_errors():
        rows = (
            db.query(distinct(column))
            .filter(column.isnot(None), column != "")
            .order_by(column)
            .all()
        )
    return [r[0] for r in rows]


def list_categories(db: Session) -> List[str]:
    return _distinct_values(db, Veterinarian.category_name)


def list_neighborhoods(db: Session) -> List[str]:
    return _distinct_values(db, Veterinarian.neighborhood)


def get_stats(db: Session) -> dict:
    """Statistics"""
    def count(*conditions):
        return db.query(func.count(Veterinarian.pk)).filter(*conditions).scalar()

    with translate_store_errors():
        total = count()
        high_rated = count(Veterinarian.google_score >= HIGH_RATING_THRESHOLD)
        with_reviews = count(Veterinarian.google_review.isnot(None))
        with_images = count(Veterinarian.image_url.isnot(None), Veterinarian.image_url != "")

    categories = list_categories(db)
    neighborhoods = list_neighborhoods(db)

    return {
        "total_veterinarians": total,
        "high_rated_veterinarians": high_rated,
        "veterinarians_with_reviews": with_reviews,
        "veterinarians_with_images": with_images,
        "unique_categories": len(categories),
        "unique_neighborhoods": len(neighborhoods),
        "categories": categories[:10],
        "neighborhoods": neighborhoods[:10],
    }
