#!/usr/bin/env python3
"""Import a Google Maps places JSON export into the DB

Accepts both the raw scraper export (placeId, totalScore, location {lat, lng},
reviews [...]) and the migrated document shape (googleMapsId, googleScore,
GeoJSON location, googleReview).

    python scripts/import_data.py data/raw/vet-places.json [more.json ...]
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from vetfinder.database import database
from vetfinder.models import Veterinarian

logger = logging.getLogger("import_data")

SOURCE = "google-maps"
BATCH = 500


def safe_float(v):
    if v is None or (isinstance(v, str) and v.strip() == ""):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def parse_location(place):
    """(lat, lng) from {"lat", "lng"} or GeoJSON {"coordinates": [lng, lat]}"""
    loc = place.get("location") or {}
    if "coordinates" in loc:
        coords = loc.get("coordinates") or []
        if len(coords) == 2:
            return safe_float(coords[1]), safe_float(coords[0])
        return None, None
    return safe_float(loc.get("lat")), safe_float(loc.get("lng"))


def parse_opening_hours(place):
    """[{"day", "hours"}] keeping only well-formed entries"""
    result = []
    for entry in place.get("openingHours") or []:
        if isinstance(entry, dict) and entry.get("day"):
            result.append({"day": str(entry["day"]), "hours": str(entry.get("hours") or "")})
    return result


def parse_review(place):
    """Single review shown on the detail page (first one of the export)"""
    review = place.get("googleReview")
    if not review:
        reviews = place.get("reviews") or []
        review = next((r for r in reviews if isinstance(r, dict) and r.get("text")), None)
    if not review:
        return None
    return {
        "text": review.get("text"),
        "publishedAtDate": review.get("publishedAtDate"),
        "stars": safe_float(review.get("stars")),
    }


def to_row(place):
    """Column values for one place, or None if it cannot be identified"""
    place_id = place.get("googleMapsId") or place.get("placeId")
    title = (place.get("title") or "").strip()
    if not place_id or not title:
        return None

    lat, lng = parse_location(place)
    score = place.get("googleScore", place.get("totalScore"))
    image = place.get("imageUrl")

    return {
        "google_maps_id": str(place_id),
        "title": title,
        "category_name": place.get("categoryName") or "",
        "categories": place.get("categories") or [],
        "neighborhood": place.get("neighborhood") or None,
        "address": place.get("address") or None,
        "street": place.get("street") or None,
        "postal_code": place.get("postalCode") or None,
        "website": place.get("website") or None,
        "phone": place.get("phone") or None,
        "latitude": lat,
        "longitude": lng,
        "google_score": safe_float(score),
        "opening_hours": parse_opening_hours(place),
        "image_url": image if isinstance(image, str) and image else None,
        "google_review": parse_review(place),
        "source": SOURCE,
        "migrated_at": datetime.utcnow(),
    }


def load_places(path: Path) -> list:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    return []


def import_places(session, places) -> tuple:
    """Upsert places by google_maps_id. Returns (inserted, updated, skipped)"""
    inserted = updated = skipped = 0
    # rows added since the last commit; the session does not autoflush
    pending = {}
    for i, place in enumerate(places, 1):
        row = to_row(place) if isinstance(place, dict) else None
        if row is None:
            skipped += 1
            continue

        key = row["google_maps_id"]
        existing = pending.get(key) or (
            session.query(Veterinarian)
            .filter(Veterinarian.google_maps_id == key)
            .first()
        )
        if existing:
            for field, value in row.items():
                setattr(existing, field, value)
            updated += 1
        else:
            vet = Veterinarian(**row)
            session.add(vet)
            pending[key] = vet
            inserted += 1

        if i % BATCH == 0:
            session.commit()
            pending.clear()
    session.commit()
    return inserted, updated, skipped


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import Google Maps places JSON into the veterinarians table")
    parser.add_argument("files", nargs="+", type=Path)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    database.create_all()
    session = database.session()
    try:
        for path in args.files:
            places = load_places(path)
            inserted, updated, skipped = import_places(session, places)
            logger.info(f"{path.name}: {inserted:,} inserted, {updated:,} updated, {skipped:,} skipped")
    finally:
        session.close()


if __name__ == "__main__":
    main()
