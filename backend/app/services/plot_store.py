"""
Plot Store

Persistence operations used by the poller, archival writer and API, on top
of a single SQLAlchemy session. Methods only flush; callers own the unit of
work through transaction().
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, desc, select
from sqlalchemy.orm import Session

from app.models import ArchivedPlot, CropType, Location, Plot, SensorSample, WeatherReading
from app.schemas.feed import FeedPlot
from app.schemas.feed import WeatherReading as FeedWeather

logger = logging.getLogger(__name__)


class PlotStore:
    def __init__(self, db: Session) -> None:
        self.db = db
        self._locations: Dict[str, Location] = {}
        self._crop_types: Dict[str, CropType] = {}

    @contextmanager
    def transaction(self):
        """Commit on success, roll back and re-raise on any error."""
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            self._locations.clear()
            self._crop_types.clear()
            raise

    # --- Reads ---

    def read_active(self) -> List[Plot]:
        return list(self.db.execute(select(Plot).order_by(Plot.id)).unique().scalars())

    def get_active(self, plot_id: int) -> Optional[Plot]:
        return self.db.get(Plot, plot_id)

    def archived_names(self) -> List[str]:
        return list(self.db.execute(select(ArchivedPlot.name).distinct()).scalars())

    def list_archived(self) -> List[ArchivedPlot]:
        query = select(ArchivedPlot).order_by(desc(ArchivedPlot.deleted_at), desc(ArchivedPlot.archive_id))
        return list(self.db.execute(query).scalars())

    def list_samples(self, limit: int = 100) -> List[Tuple[SensorSample, Optional[str], Optional[str]]]:
        """Newest samples first, joined with the plot name and location when still active."""
        query = (
            select(SensorSample, Plot.name, Location.name)
            .outerjoin(Plot, Plot.id == SensorSample.plot_id)
            .outerjoin(Location, Location.id == Plot.location_id)
            .order_by(desc(SensorSample.timestamp), desc(SensorSample.id))
            .limit(limit)
        )
        return [tuple(row) for row in self.db.execute(query).all()]

    def list_weather(self, limit: int = 100) -> List[WeatherReading]:
        query = select(WeatherReading).order_by(desc(WeatherReading.created_at), desc(WeatherReading.id)).limit(limit)
        return list(self.db.execute(query).scalars())

    # --- Lookups ---

    def _location(self, name: str) -> Location:
        if name not in self._locations:
            location = self.db.execute(select(Location).where(Location.name == name)).scalar_one_or_none()
            if location is None:
                location = Location(name=name)
                self.db.add(location)
                self.db.flush()
            self._locations[name] = location
        return self._locations[name]

    def _crop_type(self, name: str) -> CropType:
        if name not in self._crop_types:
            crop_type = self.db.execute(select(CropType).where(CropType.name == name)).scalar_one_or_none()
            if crop_type is None:
                crop_type = CropType(name=name)
                self.db.add(crop_type)
                self.db.flush()
            self._crop_types[name] = crop_type
        return self._crop_types[name]

    # --- Writes ---

    def upsert_plot(self, plot: FeedPlot, now: datetime) -> Plot:
        # Lookups may flush, so resolve them before a new row joins the session
        location = self._location(plot.location)
        crop_type = self._crop_type(plot.crop_type)
        row = self.db.get(Plot, plot.id)
        is_new = row is None
        if is_new:
            row = Plot(id=plot.id)
        row.name = plot.name
        row.location = location
        row.crop_type = crop_type
        row.responsible = plot.responsible
        row.last_irrigation = plot.last_irrigation
        row.temperature = plot.sensor.temperature
        row.humidity = plot.sensor.humidity
        row.updated_at = now
        if is_new:
            self.db.add(row)
        self.db.flush()
        return row

    def insert_archived(self, record: ArchivedPlot) -> ArchivedPlot:
        self.db.add(record)
        self.db.flush()
        return record

    def delete_archived_by_name(self, name: str) -> int:
        result = self.db.execute(delete(ArchivedPlot).where(ArchivedPlot.name == name))
        return result.rowcount or 0

    def delete_active_by_id(self, plot_id: int) -> int:
        row = self.db.get(Plot, plot_id)
        if row is None:
            return 0
        self.db.delete(row)
        self.db.flush()
        return 1

    def append_sample(self, plot_id: int, kind: str, value: float, timestamp: datetime) -> SensorSample:
        sample = SensorSample(plot_id=plot_id, kind=kind, value=value, timestamp=timestamp)
        self.db.add(sample)
        self.db.flush()
        return sample

    def record_weather(self, weather: FeedWeather, timestamp: datetime) -> WeatherReading:
        reading = WeatherReading(
            temperature=weather.temperature,
            humidity=weather.humidity,
            rain=weather.rain,
            sun=weather.sun,
            created_at=timestamp,
        )
        self.db.add(reading)
        self.db.flush()
        return reading
