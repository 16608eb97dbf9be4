"""
Plot Poller

Runs the fetch -> reconcile -> write cycle on a fixed interval (APScheduler)
and on manual refresh. Only one cycle runs at a time; triggers that arrive
while a cycle is in flight collapse into a single follow-up run.
"""
import enum
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models import SAMPLE_KINDS
from app.schemas.feed import FeedSnapshot, default_snapshot
from app.services.archival import ArchivalWriter
from app.services.feed_client import FeedClient, FeedError
from app.services.plot_store import PlotStore
from app.services.reconciler import reconcile

logger = logging.getLogger(__name__)

JOB_ID = "plot_poller"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PollState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RECONCILING = "reconciling"


@dataclass
class PollerContext:
    """Collaborators shared by the poller and the API."""
    settings: Settings
    session_factory: Callable[[], Session]
    feed_client: FeedClient


@dataclass
class PollResult:
    status: str
    trigger: str
    upserted: int = 0
    archived: int = 0
    unarchived: int = 0
    superseded: int = 0
    errors: int = 0
    error: Optional[str] = None


@dataclass
class DashboardView:
    state: PollState
    loading: bool
    snapshot: Optional[FeedSnapshot] = None
    last_update: Optional[datetime] = None
    error: Optional[str] = None


class Poller:
    def __init__(
        self,
        context: PollerContext,
        scheduler=None,
        clock: Callable[[], datetime] = _utcnow,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.context = context
        self.scheduler = scheduler if scheduler is not None else BackgroundScheduler()
        self.clock = clock
        self.monotonic = monotonic

        self.state = PollState.IDLE
        self.last_snapshot: Optional[FeedSnapshot] = None
        self.last_update: Optional[datetime] = None
        self.last_error: Optional[str] = None

        self._guard = threading.Lock()
        self._running = False
        self._pending = False
        self._started_at: Optional[float] = None

    # --- Lifecycle ---

    @property
    def started(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        """Schedule the interval job; the first run fires immediately. Idempotent."""
        if self._started_at is None:
            self._started_at = self.monotonic()
        if self.scheduler.running:
            return
        interval = self.context.settings.poll_interval_seconds
        self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=interval),
            kwargs={"trigger": "interval"},
            id=JOB_ID,
            name="Plot feed poll",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=_utcnow(),
        )
        self.scheduler.start()
        logger.info("Poller started (interval: %s seconds)", interval)

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Poller stopped")

    # --- Cycle ---

    def run_once(self, trigger: str = "manual") -> PollResult:
        with self._guard:
            if self._running:
                self._pending = True
                logger.info("Poll already in progress, %s trigger collapsed into a follow-up run", trigger)
                return PollResult(status="coalesced", trigger=trigger)
            self._running = True

        try:
            while True:
                result = self._cycle(trigger)
                with self._guard:
                    if not self._pending:
                        self._running = False
                        return result
                    self._pending = False
                trigger = "follow-up"
        except BaseException:
            with self._guard:
                self._running = False
                self._pending = False
            raise
        finally:
            self.state = PollState.IDLE

    def _cycle(self, trigger: str) -> PollResult:
        logger.info("Poll cycle started (%s)", trigger)
        self.state = PollState.FETCHING
        try:
            snapshot = self.context.feed_client.fetch()
        except FeedError as exc:
            self.last_error = f"Feed unavailable: {exc}"
            logger.error("Poll cycle failed, keeping last good data: %s", exc)
            return PollResult(status="failed", trigger=trigger, error=self.last_error)

        self.state = PollState.RECONCILING
        db = self.context.session_factory()
        try:
            result = self._apply(PlotStore(db), snapshot, trigger)
        except SQLAlchemyError as exc:
            db.rollback()
            self.last_error = f"Store unavailable: {exc}"
            logger.error("Poll cycle failed while reading the store: %s", exc)
            return PollResult(status="failed", trigger=trigger, error=self.last_error)
        finally:
            db.close()

        self.last_snapshot = snapshot
        self.last_update = self.clock()
        self.last_error = f"{result.errors} record(s) failed to persist" if result.errors else None
        result.error = self.last_error
        logger.info(
            "Poll cycle complete: %d upserted, %d archived, %d unarchived, %d superseded, %d errors",
            result.upserted, result.archived, result.unarchived, result.superseded, result.errors,
        )
        return result

    def _apply(self, store: PlotStore, snapshot: FeedSnapshot, trigger: str) -> PollResult:
        plan = reconcile(store.read_active(), snapshot, store.archived_names())
        # Ids are read up front; a rolled-back write expires the loaded rows
        to_archive = [(plot.id, plot) for plot in plan.to_archive]
        to_supersede = [plot.id for plot in plan.to_supersede]
        writer = ArchivalWriter(store, clock=self.clock)
        result = PollResult(status="ok", trigger=trigger)
        now = self.clock()

        def attempt(description: str, action: Callable[[], None]) -> bool:
            try:
                action()
                return True
            except SQLAlchemyError as exc:
                result.errors += 1
                logger.error("Failed to persist %s: %s", description, exc)
                return False

        def record_weather() -> None:
            with store.transaction():
                store.record_weather(snapshot.weather, now)

        attempt("weather reading", record_weather)

        for name in plan.to_unarchive:
            if attempt(f"unarchive of '{name}'", lambda: writer.unarchive(name)):
                result.unarchived += 1

        for plot_id, plot in to_archive:
            if attempt(f"archive of plot {plot_id}", lambda: writer.archive(plot)):
                result.archived += 1

        for plot_id in to_supersede:
            if attempt(f"removal of superseded plot {plot_id}", lambda: writer.supersede(plot_id)):
                result.superseded += 1

        for feed_plot in plan.to_upsert:
            def upsert() -> None:
                with store.transaction():
                    store.upsert_plot(feed_plot, now)
                    for kind, value in zip(SAMPLE_KINDS, (feed_plot.sensor.temperature, feed_plot.sensor.humidity)):
                        store.append_sample(feed_plot.id, kind, value, now)

            if attempt(f"upsert of plot {feed_plot.id}", upsert):
                result.upserted += 1

        return result

    # --- Presentation ---

    def view(self) -> DashboardView:
        timed_out = (
            self._started_at is not None
            and self.monotonic() - self._started_at >= self.context.settings.startup_timeout_seconds
        )
        loading = self.last_snapshot is None and self.last_error is None and not timed_out
        snapshot = self.last_snapshot
        if snapshot is None and not loading:
            snapshot = default_snapshot()
        return DashboardView(
            state=self.state,
            loading=loading,
            snapshot=snapshot,
            last_update=self.last_update,
            error=self.last_error,
        )
