"""
Seed data script for the plot monitor database.
Populates the location and crop type lookups used by the dashboard map.
"""
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from app.config import settings
from app.database import Base
from app.models import CropType, Location

LOCATIONS = [
    {"name": "Cancún", "latitude": 21.0367, "longitude": -86.8742},
    {"name": "Playa del Carmen", "latitude": 20.6296, "longitude": -87.0739},
    {"name": "Tulum", "latitude": 20.2114, "longitude": -87.4654},
    {"name": "Chetumal", "latitude": 18.5001, "longitude": -88.2961},
]

CROP_TYPES = ["Maíz", "Frijol", "Chile", "Tomate", "Calabaza"]


def seed_lookups(session: Session) -> int:
    """Insert missing lookup rows. Returns the number of rows added."""
    added = 0
    for item in LOCATIONS:
        if session.execute(select(Location).where(Location.name == item["name"])).scalar_one_or_none() is None:
            session.add(Location(**item))
            added += 1
    for name in CROP_TYPES:
        if session.execute(select(CropType).where(CropType.name == name)).scalar_one_or_none() is None:
            session.add(CropType(name=name))
            added += 1
    session.commit()
    return added


def seed_database():
    """Seed the database with the known locations and crop types."""
    engine = create_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    try:
        print("Seeding database...")
        added = seed_lookups(session)
        print(f"✓ Seeded {added} lookup rows")
        print(f"✓ {session.query(Location).count()} locations, {session.query(CropType).count()} crop types")
        print("Database seeding complete!")
    finally:
        session.close()


if __name__ == "__main__":
    seed_database()
