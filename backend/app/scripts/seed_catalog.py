# backend/app/scripts/seed_catalog.py

"""
Seed the service, product and podcast catalogs from a JSON file.

Usage examples:

  cd backend
  python -m app.scripts.seed_catalog

  # Seed a specific file
  python -m app.scripts.seed_catalog --file app/data/catalog_seed.json
"""

import argparse
import json
from pathlib import Path

from sqlalchemy.orm import Session

from app.database import SessionLocal, init_db
from app import models

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_FILE = BASE_DIR / "data" / "catalog_seed.json"


def _upsert(db: Session, model, key_field: str, entry: dict) -> str:
    """
    Insert or update one catalog row matched on ``key_field``.

    Returns "created", "updated" or "skipped".
    """
    key = entry.get(key_field)
    if not key:
        return "skipped"

    columns = {c.name for c in model.__table__.columns}
    values = {k: v for k, v in entry.items() if k in columns and k != "id"}

    existing = db.query(model).filter(getattr(model, key_field) == key).first()
    if existing:
        for field, value in values.items():
            setattr(existing, field, value)
        return "updated"

    db.add(model(**values))
    return "created"


def seed_catalog(path: Path, db: Session) -> dict:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    counts = {}
    for section, model, key_field in (
        ("services", models.Service, "name"),
        ("products", models.Product, "name"),
        ("podcasts", models.Podcast, "title"),
    ):
        tally = {"created": 0, "updated": 0, "skipped": 0}
        for entry in data.get(section, []):
            tally[_upsert(db, model, key_field, entry)] += 1
        counts[section] = tally

    db.commit()
    return counts


def main():
    parser = argparse.ArgumentParser(
        description="Seed the wellness catalogs (services, products, podcasts) from JSON."
    )
    parser.add_argument(
        "--file",
        "-f",
        dest="file",
        default=str(DEFAULT_FILE),
        help="Path to a JSON file with services/products/podcasts arrays.",
    )
    args = parser.parse_args()

    path = Path(args.file).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")

    print(f"[seed_catalog] Using file: {path}")
    init_db()
    db = SessionLocal()
    try:
        counts = seed_catalog(path, db)
    finally:
        db.close()

    for section, tally in counts.items():
        print(
            f"[seed_catalog] {section}: Created={tally['created']}, "
            f"Updated={tally['updated']}, Skipped={tally['skipped']}"
        )


if __name__ == "__main__":
    main()
