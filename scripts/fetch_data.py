#!/usr/bin/env python3
"""Download the Google Maps places export (JSON) for import_data.py

    python scripts/fetch_data.py <export-url> [filename]

The URL can also come from PLACES_EXPORT_URL, e.g. a scraper dataset's
"items?format=json" endpoint.
"""

import os
import sys
import requests
from pathlib import Path

RAW_DIR = Path(__file__).parent.parent / "data" / "raw"
DEFAULT_FILENAME = "vet-places.json"
TIMEOUT = 60


def fetch(url: str, filename: str = DEFAULT_FILENAME, force: bool = False) -> Path:
    """Stream the export into data/raw/<filename>; existing files are kept unless force"""
    RAW_DIR.mkdir(parents=True, exist_ok=True)
    dest = RAW_DIR / filename

    if dest.exists() and not force:
        print(f"⏭️  {filename} already exists, skipping")
        return dest

    print(f"⬇️  Downloading {filename}...")
    r = requests.get(url, stream=True, timeout=TIMEOUT)
    r.raise_for_status()

    tmp = dest.with_suffix(dest.suffix + ".part")
    try:
        with open(tmp, "wb") as f:
            for chunk in r.iter_content(chunk_size=8192):
                f.write(chunk)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    tmp.replace(dest)

    print(f"   {dest.stat().st_size:,} bytes")
    return dest


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("PLACES_EXPORT_URL")
    if not url:
        sys.exit("usage: fetch_data.py <export-url> [filename]  (or set PLACES_EXPORT_URL)")
    filename = sys.argv[2] if len(sys.argv) > 2 else DEFAULT_FILENAME
    fetch(url, filename)
    print("\n✅ Export downloaded, run scripts/import_data.py next")
