"""Pydantic schemas for API request/response validation."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from app.schemas.feed import (
    FeedPlot,
    FeedSnapshot,
    SensorReading,
    WeatherReading,
    default_snapshot,
)


# === Plot Schemas ===
class PlotResponse(BaseModel):
    id: int
    name: str
    location_name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    responsible: str
    crop_type_name: str
    last_irrigation: Optional[datetime] = None
    temperature: float
    humidity: float
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ArchivedPlotResponse(BaseModel):
    id: int
    name: str
    location: str
    responsible: str
    crop_type: str
    last_irrigation: Optional[datetime] = None
    deleted_at: datetime
    sensor_data: str

    class Config:
        from_attributes = True


# === History Schemas ===
class SensorSampleResponse(BaseModel):
    id: int
    plot_id: int
    kind: str
    value: float
    timestamp: datetime
    plot_name: Optional[str] = None
    location_name: Optional[str] = None


class WeatherReadingResponse(BaseModel):
    id: int
    temperature: float
    humidity: float
    rain: float
    sun: float
    created_at: datetime

    class Config:
        from_attributes = True


# === Poller Schemas ===
class PollResultResponse(BaseModel):
    status: Literal["ok", "failed", "coalesced"]
    trigger: str
    upserted: int = 0
    archived: int = 0
    unarchived: int = 0
    superseded: int = 0
    errors: int = 0
    error: Optional[str] = None


class DashboardResponse(BaseModel):
    state: str
    loading: bool
    snapshot: Optional[FeedSnapshot] = None
    last_update: Optional[datetime] = None
    error: Optional[str] = None
    archived: List[ArchivedPlotResponse] = []


__all__ = [
    "FeedPlot", "FeedSnapshot", "SensorReading", "WeatherReading", "default_snapshot",
    "PlotResponse", "ArchivedPlotResponse",
    "SensorSampleResponse", "WeatherReadingResponse",
    "PollResultResponse", "DashboardResponse",
]
