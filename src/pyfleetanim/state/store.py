"""Buffered vehicle data and the merge engine.

This is the only component allowed to fold fetched batches into the buffer.
Merging is deterministic and pure: given the same buffer, batch and
animation time it produces the same records, and it never mutates its inputs.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from pyfleetanim.models.vehicle import VehicleRecord, VehicleUpdate
from pyfleetanim.state.policy import TRIM_HORIZON
from pyfleetanim.state.window import BufferWindow

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Buffer:
    """Snapshot of the fetch window and the vehicle records buffered for it."""

    window: BufferWindow
    data: tuple[VehicleRecord, ...] = ()

    @property
    def start(self) -> datetime:
        return self.window.start

    @property
    def end(self) -> datetime:
        return self.window.end


def trim_updates(updates: Iterable[VehicleUpdate], animation_time: datetime) -> list[VehicleUpdate]:
    """Keep only updates strictly newer than ``animation_time - TRIM_HORIZON``."""
    lower_bound = animation_time - TRIM_HORIZON
    return [update for update in updates if update.time > lower_bound]


def _in_time_order(record: VehicleRecord) -> VehicleRecord:
    """Return *record* with its updates stable-sorted by time.

    Records that are already ordered are returned as-is.
    """
    updates = record.updates
    if all(a.time <= b.time for a, b in zip(updates, updates[1:])):
        return record
    return record.model_copy(update={"updates": sorted(updates, key=lambda update: update.time)})


def _combine_duplicates(records: Iterable[VehicleRecord]) -> list[VehicleRecord]:
    """Fold repeated ids within one batch into a single record each."""
    combined: dict[str, VehicleRecord] = {}
    for record in records:
        prior = combined.get(record.vehicle_id)
        if prior is None:
            combined[record.vehicle_id] = record
            continue
        combined[record.vehicle_id] = prior.model_copy(
            update={
                "schedule": record.schedule if record.schedule is not None else prior.schedule,
                "updates": [*prior.updates, *record.updates],
            }
        )
    return list(combined.values())


def merge_batch(
    existing: Sequence[VehicleRecord],
    incoming: Sequence[VehicleRecord],
    animation_time: datetime,
) -> list[VehicleRecord]:
    """Fold a fetched batch into the buffered records.

    The first populated fetch (empty *existing*) becomes the buffer as-is.
    Afterwards every buffered record is trimmed of stale updates, takes the
    schedule of its counterpart in the batch (none when absent), gets the
    counterpart's updates appended, and is dropped when nothing remains.
    Vehicles seen for the first time are appended at the end.
    """
    batch = [_in_time_order(record) for record in _combine_duplicates(incoming)]
    if not existing:
        return [record for record in batch if record.has_content]

    by_id = {record.vehicle_id: record for record in batch}
    merged: list[VehicleRecord] = []
    for record in existing:
        updates = trim_updates(record.updates, animation_time)
        match = by_id.get(record.vehicle_id)
        # Schedule from the latest fetch is authoritative; absent vehicles lose theirs.
        schedule = match.schedule if match is not None else None
        if match is not None:
            updates.extend(match.updates)
        candidate = record.model_copy(update={"schedule": schedule, "updates": updates})
        if candidate.has_content:
            merged.append(_in_time_order(candidate))

    known = {record.vehicle_id for record in existing}
    merged.extend(record for record in batch if record.vehicle_id not in known and record.has_content)

    _logger.debug(
        "Merged batch existing=%d incoming=%d result=%d",
        len(existing),
        len(batch),
        len(merged),
    )
    return merged
