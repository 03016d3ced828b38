from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from pyfleetanim.models.vehicle import VehicleRecord, VehicleUpdate
from pyfleetanim.state.store import merge_batch, trim_updates

T = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _at(seconds: float) -> datetime:
    return T + timedelta(seconds=seconds)


def _record(vehicle_id: str, *offsets: float, schedule: list[Any] | None = None) -> VehicleRecord:
    return VehicleRecord(
        vehicle_id=vehicle_id,
        schedule=schedule,
        updates=[VehicleUpdate(time=_at(offset), payload={"lat": 52.0, "lng": 4.0}) for offset in offsets],
    )


def _times(record: VehicleRecord) -> list[datetime]:
    return [update.time for update in record.updates]


def test_first_populated_fetch_is_taken_verbatim() -> None:
    v1 = _record("V1", 5)

    merged = merge_batch([], [v1], T)

    assert merged == [v1]
    assert merged[0] is v1


def test_existing_updates_trimmed_and_new_updates_appended() -> None:
    existing = [_record("V1", -30, -5)]
    incoming = [_record("V1", 2)]

    merged = merge_batch(existing, incoming, T)

    assert len(merged) == 1
    assert _times(merged[0]) == [_at(-5), _at(2)]


def test_departed_vehicle_dropped_once_its_updates_are_stale() -> None:
    existing = [_record("V1", -40, -20), _record("V2", -5)]
    incoming = [_record("V2", 3)]

    merged = merge_batch(existing, incoming, T)

    assert [record.vehicle_id for record in merged] == ["V2"]


def test_departed_scheduled_vehicle_dropped_once_its_updates_are_stale() -> None:
    existing = [_record("V1", -60, schedule=[{"trip": 1}])]
    incoming = [_record("V2", 1)]

    merged = merge_batch(existing, incoming, T)

    assert [record.vehicle_id for record in merged] == ["V2"]


def test_empty_batch_trims_and_clears_schedules() -> None:
    existing = [
        _record("V1", -30, -5, schedule=[{"trip": "T1"}]),
        _record("V2", -30, schedule=[{"trip": "T2"}]),
        _record("V3", -30),
    ]

    merged = merge_batch(existing, [], T)

    assert [record.vehicle_id for record in merged] == ["V1"]
    assert _times(merged[0]) == [_at(-5)]
    assert merged[0].schedule is None


def test_trim_boundary_is_exclusive() -> None:
    updates = _record("V1", -10, -9.999).updates

    assert [u.time for u in trim_updates(updates, T)] == [_at(-9.999)]


def test_schedule_replaced_by_latest_fetch() -> None:
    existing = [_record("V1", -1, schedule=[{"trip": "old"}]), _record("V2", -1, schedule=[{"trip": "keep"}])]
    incoming = [_record("V1", 1, schedule=[{"trip": "new"}])]

    merged = {record.vehicle_id: record for record in merge_batch(existing, incoming, T)}

    assert merged["V1"].schedule == [{"trip": "new"}]
    # Not in the batch: kept for its recent update, schedule dropped.
    assert merged["V2"].schedule is None


def test_schedule_cleared_when_matching_record_has_none() -> None:
    existing = [_record("V1", -30, schedule=[{"trip": "old"}])]
    incoming = [VehicleRecord(vehicle_id="V1", schedule=[])]

    assert merge_batch(existing, incoming, T) == []


def test_new_vehicles_appended_after_existing() -> None:
    existing = [_record("V1", -1)]
    incoming = [_record("V2", 1), _record("V1", 2)]

    merged = merge_batch(existing, incoming, T)

    assert [record.vehicle_id for record in merged] == ["V1", "V2"]


def test_at_most_one_record_per_vehicle() -> None:
    existing: list[VehicleRecord] = []
    batches = [
        [_record("V1", 1), _record("V1", 2), _record("V2", 1)],
        [_record("V2", 3), _record("V3", 3), _record("V3", 4)],
        [_record("V1", 5), _record("V3", 5)],
    ]
    for batch in batches:
        existing = merge_batch(existing, batch, T)
        ids = [record.vehicle_id for record in existing]
        assert len(ids) == len(set(ids))

    by_id = {record.vehicle_id: record for record in existing}
    assert _times(by_id["V1"]) == [_at(1), _at(2), _at(5)]
    assert _times(by_id["V3"]) == [_at(3), _at(4), _at(5)]


def test_out_of_order_batches_end_up_sorted() -> None:
    existing = [_record("V1", 4)]
    incoming = [_record("V1", 2, 1)]

    merged = merge_batch(existing, incoming, T)

    assert _times(merged[0]) == [_at(1), _at(2), _at(4)]


def test_records_without_content_pruned_from_batch() -> None:
    incoming = [VehicleRecord(vehicle_id="V1"), _record("V2", 1)]

    merged = merge_batch([], incoming, T)

    assert [record.vehicle_id for record in merged] == ["V2"]


def test_merge_does_not_mutate_inputs() -> None:
    existing = [_record("V1", -30, -5)]
    incoming = [_record("V1", 2)]

    merge_batch(existing, incoming, T)

    assert _times(existing[0]) == [_at(-30), _at(-5)]
    assert _times(incoming[0]) == [_at(2)]
