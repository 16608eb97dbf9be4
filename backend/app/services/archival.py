"""Archival of plots that disappeared from the feed."""
import json
import logging
from datetime import datetime, timezone
from typing import Callable

from app.models import ArchivedPlot, Plot
from app.services.plot_store import PlotStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def serialize_reading(plot: Plot) -> str:
    return json.dumps({"temperatura": plot.temperature, "humedad": plot.humidity})


class ArchivalWriter:
    """
    Moves plots between the active and archived stores.

    The archived insert and the active delete share one transaction, so a
    failure leaves both stores untouched and the next poll retries.
    """

    def __init__(self, store: PlotStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self.store = store
        self.clock = clock

    def archive(self, plot: Plot) -> ArchivedPlot:
        record = ArchivedPlot(
            id=plot.id,
            name=plot.name,
            location=plot.location_name,
            responsible=plot.responsible,
            crop_type=plot.crop_type_name,
            last_irrigation=plot.last_irrigation,
            deleted_at=self.clock(),
            sensor_data=serialize_reading(plot),
        )
        with self.store.transaction():
            self.store.insert_archived(record)
            self.store.delete_active_by_id(plot.id)
        logger.info("Archived plot %s (%s)", plot.id, plot.name)
        return record

    def unarchive(self, name: str) -> None:
        with self.store.transaction():
            removed = self.store.delete_archived_by_name(name)
        if removed:
            logger.info("Plot '%s' reappeared, removed %d archived record(s)", name, removed)

    def supersede(self, plot_id: int) -> None:
        with self.store.transaction():
            self.store.delete_active_by_id(plot_id)
        logger.info("Dropped active plot %s, its name is now reported under another id", plot_id)
