"""Active and archived plot models."""
from typing import Optional

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import relationship

from app.database import Base


class Plot(Base):
    """A plot currently reported by the upstream feed."""

    __tablename__ = "plot"

    # Identifier comes from the feed, never generated locally
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("location.id", ondelete="SET NULL"), nullable=True, index=True)
    crop_type_id = Column(Integer, ForeignKey("crop_type.id", ondelete="SET NULL"), nullable=True, index=True)
    responsible = Column(String(200), nullable=False)
    last_irrigation = Column(DateTime(timezone=True), nullable=True)
    temperature = Column(Float, nullable=False, default=0.0)
    humidity = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    location = relationship("Location", lazy="joined")
    crop_type = relationship("CropType", lazy="joined")

    @property
    def location_name(self) -> str:
        return self.location.name if self.location else ""

    @property
    def latitude(self) -> Optional[float]:
        return self.location.latitude if self.location else None

    @property
    def longitude(self) -> Optional[float]:
        return self.location.longitude if self.location else None

    @property
    def crop_type_name(self) -> str:
        return self.crop_type.name if self.crop_type else ""

    def __repr__(self):
        return f"<Plot(id={self.id}, name='{self.name}')>"


class ArchivedPlot(Base):
    """Last known state of a plot that disappeared from the feed."""

    __tablename__ = "archived_plot"

    archive_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False, index=True)
    location = Column(String(200), nullable=False)
    responsible = Column(String(200), nullable=False)
    crop_type = Column(String(200), nullable=False)
    last_irrigation = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    sensor_data = Column(Text, nullable=False)  # JSON of the last reading, never parsed here

    def __repr__(self):
        return f"<ArchivedPlot(id={self.id}, name='{self.name}', deleted_at={self.deleted_at})>"
