"""Veterinarian endpoints"""
import math
import time
from datetime import datetime, timezone
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.orm import Session

from ..config import DEFAULT_PAGE_SIZE, DEFAULT_MAX_DISTANCE_M, MAX_PAGE_SIZE
from ..database import get_db
from ..schemas import (
    SearchCriteria, VeterinarianListOut, VeterinarianDetailOut,
    VeterinarianListResponse, PaginationOut, OpeningHoursOut, ReviewOut, StatsOut,
)
from ..services.open_now import is_open_now, format_opening_hours
from ..services.search import (
    search_veterinarians, search_nearby, get_veterinarian,
    list_categories, list_neighborhoods, get_stats,
)

# Cache: read-mostly aggregate data (with TTL)
_cache = {}
CACHE_TTL = 3600  # 1 hour


def _cached(key, fn):
    """Simple TTL cache"""
    now = time.time()
    if key in _cache and now - _cache[key][1] < CACHE_TTL:
        return _cache[key][0]
    result = fn()
    _cache[key] = (result, now)
    return result


router = APIRouter(prefix="/api/v1", tags=["veterinarians"])


def _to_list(vet, now: datetime, distance_m=None) -> VeterinarianListOut:
    return VeterinarianListOut(
        id=vet.google_maps_id,
        title=vet.title,
        category_name=vet.category_name,
        neighborhood=vet.neighborhood,
        address=vet.address,
        latitude=vet.latitude,
        longitude=vet.longitude,
        rating=vet.google_score,
        image_url=vet.image_url,
        open_now=is_open_now(vet, now),
        distance_m=distance_m,
    )


@router.get("/veterinarians", response_model=VeterinarianListResponse)
def list_veterinarians(
    text: Optional[str] = Query(None, description="Free text (title, category, address, neighborhood)"),
    category: Optional[str] = Query(None, description="Category name (partial match)"),
    neighborhood: Optional[str] = Query(None, description="Neighborhood (partial match)"),
    min_rating: Optional[float] = Query(None, ge=0, le=5, description="Minimum Google rating"),
    lng: Optional[float] = Query(None, description="Longitude"),
    lat: Optional[float] = Query(None, description="Latitude"),
    max_distance: Optional[float] = Query(None, gt=0, description="Radius in metres (default 10000)"),
    open_now: bool = Query(False, description="Only listings open right now"),
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    criteria = SearchCriteria(
        text=text, category=category, neighborhood=neighborhood,
        min_rating=min_rating, longitude=lng, latitude=lat,
        max_distance_m=max_distance, open_now=open_now,
        page=page, page_size=page_size,
    )
    now = datetime.now(timezone.utc)
    result = search_veterinarians(db, criteria, now=now)

    return VeterinarianListResponse(
        data=[_to_list(v, now) for v in result.items],
        pagination=PaginationOut(
            page=result.page,
            page_size=result.page_size,
            total=result.total,
            pages=max(1, math.ceil(result.total / result.page_size)),
            is_approximate=result.is_approximate,
        ),
    )


@router.get("/veterinarians/nearby", response_model=List[VeterinarianListOut])
def nearby_veterinarians(
    lat: float = Query(..., description="Latitude"),
    lng: float = Query(..., description="Longitude"),
    max_distance: float = Query(DEFAULT_MAX_DISTANCE_M, gt=0, le=50000, description="Radius in metres"),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    results = search_nearby(db, lat=lat, lng=lng, max_distance_m=max_distance, limit=limit)
    now = datetime.now(timezone.utc)
    return [_to_list(vet, now, dist) for vet, dist in results]


@router.get("/veterinarians/{veterinarian_id}", response_model=VeterinarianDetailOut)
def veterinarian_detail(veterinarian_id: str, db: Session = Depends(get_db)):
    vet = get_veterinarian(db, veterinarian_id)
    if not vet:
        raise HTTPException(status_code=404, detail="Veterinarian not found")

    return VeterinarianDetailOut(
        id=vet.google_maps_id,
        title=vet.title,
        category_name=vet.category_name,
        categories=vet.categories or [],
        neighborhood=vet.neighborhood,
        address=vet.address,
        street=vet.street,
        postal_code=vet.postal_code,
        website=vet.website,
        phone=vet.phone,
        latitude=vet.latitude,
        longitude=vet.longitude,
        rating=vet.google_score,
        image_url=vet.image_url,
        open_now=is_open_now(vet),
        opening_hours=[OpeningHoursOut(**h) for h in format_opening_hours(vet.opening_hours)],
        review=ReviewOut.model_validate(vet.google_review) if vet.google_review else None,
    )


@router.get("/categories", response_model=List[str])
def categories(db: Session = Depends(get_db)):
    return _cached("categories", lambda: list_categories(db))


@router.get("/neighborhoods", response_model=List[str])
def neighborhoods(db: Session = Depends(get_db)):
    return _cached("neighborhoods", lambda: list_neighborhoods(db))


@router.get("/stats", response_model=StatsOut)
def stats(db: Session = Depends(get_db)):
    return _cached("stats", lambda: get_stats(db))


@router.get("/health")
def health():
    return {"status": "ok"}
