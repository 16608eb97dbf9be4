"""
Plot Reconciliation

Compares a fresh feed snapshot with the persisted active plots and decides
what has to be written. Pure function: no I/O, no clock.

Rules:
- Identity is the plot id; a plot present in the snapshot is always upserted
- Previously active ids missing from the snapshot are archived
- A missing id whose name is present under a new id is superseded instead
  (dropped from the active set without archiving)
- Archived names present in the snapshot are un-archived
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Protocol

from app.schemas.feed import FeedPlot, FeedSnapshot


class ActivePlot(Protocol):
    id: int
    name: str


@dataclass
class ReconcilePlan:
    to_upsert: List[FeedPlot] = field(default_factory=list)
    to_archive: List[ActivePlot] = field(default_factory=list)
    to_unarchive: List[str] = field(default_factory=list)
    to_supersede: List[ActivePlot] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not (self.to_archive or self.to_unarchive or self.to_supersede)


def reconcile(
    previous_active: Iterable[ActivePlot],
    snapshot: FeedSnapshot,
    archived_names: Iterable[str] = (),
) -> ReconcilePlan:
    # Duplicate ids in one snapshot: last occurrence wins
    current = {}
    for plot in snapshot.plots:
        current.pop(plot.id, None)
        current[plot.id] = plot
    current_names = {plot.name for plot in current.values()}

    plan = ReconcilePlan(to_upsert=list(current.values()))

    seen_ids = set()
    for plot in previous_active:
        if plot.id in current or plot.id in seen_ids:
            continue
        seen_ids.add(plot.id)
        if plot.name in current_names:
            plan.to_supersede.append(plot)
        else:
            plan.to_archive.append(plot)

    for name in dict.fromkeys(archived_names):
        if name in current_names:
            plan.to_unarchive.append(name)

    return plan
