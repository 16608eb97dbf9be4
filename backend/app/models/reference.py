"""Lookup tables resolved by name when plots are upserted."""
from sqlalchemy import Column, Float, Integer, String

from app.database import Base


class Location(Base):
    __tablename__ = "location"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, unique=True, index=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    def __repr__(self):
        return f"<Location(id={self.id}, name='{self.name}')>"


class CropType(Base):
    __tablename__ = "crop_type"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, unique=True, index=True)

    def __repr__(self):
        return f"<CropType(id={self.id}, name='{self.name}')>"
