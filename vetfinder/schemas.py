"""Pydantic schema definitions"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_PAGE_SIZE


# === Input ===

class SearchCriteria(BaseModel):
    """Search filters; every field is optional and pagination is clamped by the engine"""
    text: Optional[str] = None
    category: Optional[str] = None
    neighborhood: Optional[str] = None
    min_rating: Optional[float] = None
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    max_distance_m: Optional[float] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    open_now: bool = False


# === Responses ===

class ReviewOut(BaseModel):
    text: Optional[str] = None
    published_at: Optional[str] = Field(None, alias="publishedAtDate")
    stars: Optional[float] = None
    model_config = ConfigDict(populate_by_name=True)


class OpeningHoursOut(BaseModel):
    day: str
    hours: str
    display: str


class VeterinarianListOut(BaseModel):
    """List view (lightweight)"""
    id: str
    title: str
    category_name: str
    neighborhood: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: Optional[float] = None
    image_url: Optional[str] = None
    open_now: bool = False
    distance_m: Optional[float] = None  # nearby search only


class VeterinarianDetailOut(BaseModel):
    """Detail view"""
    id: str
    title: str
    category_name: str
    categories: List[str] = []
    neighborhood: Optional[str] = None
    address: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: Optional[float] = None
    image_url: Optional[str] = None
    open_now: bool = False
    opening_hours: List[OpeningHoursOut] = []
    review: Optional[ReviewOut] = None


class PaginationOut(BaseModel):
    page: int
    page_size: int
    total: int
    pages: int
    is_approximate: bool = False


class VeterinarianListResponse(BaseModel):
    data: List[VeterinarianListOut]
    pagination: PaginationOut


class StatsOut(BaseModel):
    total_veterinarians: int
    high_rated_veterinarians: int
    veterinarians_with_reviews: int
    veterinarians_with_images: int
    unique_categories: int
    unique_neighborhoods: int
    categories: List[str]
    neighborhoods: List[str]
