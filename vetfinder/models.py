"""SQLAlchemy model definitions"""
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, Float, DateTime, JSON, Index

from .database import Base


class Veterinarian(Base):
    """Veterinary clinic listing (imported from Google Maps data)"""
    __tablename__ = "veterinarians"

    pk = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    google_maps_id = Column(String(64), nullable=False, unique=True, index=True)
    title = Column(Text, nullable=False)
    category_name = Column(Text, nullable=False, index=True)
    categories = Column(JSON(none_as_null=True))  # ["Veterinarian", "Pet groomer", ...]
    neighborhood = Column(Text, index=True)
    address = Column(Text)
    street = Column(Text)
    postal_code = Column(String(16))
    website = Column(Text)
    phone = Column(String(64))
    latitude = Column(Float)
    longitude = Column(Float)
    google_score = Column(Float)         # 0-5
    opening_hours = Column(JSON(none_as_null=True))  # [{"day": "Monday", "hours": "9 AM to 6 PM"}, ...]
    image_url = Column(Text)
    google_review = Column(JSON(none_as_null=True))  # {"text", "publishedAtDate", "stars"}
    source = Column(String(32))
    migrated_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_veterinarians_score", "google_score"),
        Index("idx_veterinarians_latlng", "latitude", "longitude"),
    )
