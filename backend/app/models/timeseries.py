"""Timeseries models: per-plot sensor history and global weather readings."""
from sqlalchemy import Column, DateTime, Float, Integer, String

from app.database import Base

SAMPLE_KINDS = ("temperatura", "humedad")


class SensorSample(Base):
    """One historical sensor value for a plot."""
    __tablename__ = "sensor_sample"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No FK constraint: history outlives archived plots
    plot_id = Column(Integer, nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # "temperatura" / "humedad"
    value = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)


class WeatherReading(Base):
    """Global weather reading stored once per successful poll."""
    __tablename__ = "weather_reading"

    id = Column(Integer, primary_key=True, autoincrement=True)
    temperature = Column(Float, nullable=False)
    humidity = Column(Float, nullable=False)
    rain = Column(Float, nullable=False, default=0.0)
    sun = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
