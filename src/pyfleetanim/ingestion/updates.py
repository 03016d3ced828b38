"""Parse raw update batches into typed vehicle records.

Malformed entries are dropped here, silently apart from a DEBUG log line:
a batch is never rejected as a whole because one vehicle is broken.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyfleetanim.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)


def parse_batch(raw: Any) -> list[VehicleRecord]:
    """Parse a raw batch (list of record dicts) into :class:`VehicleRecord` objects.

    Non-list input yields an empty batch. Entries without an id or
    with neither updates nor a schedule are skipped.
    """
    if not isinstance(raw, list):
        if raw is not None:
            _logger.debug("Ignoring non-list update batch of type %s", type(raw).__name__)
        return []

    records: list[VehicleRecord] = []
    for item in raw:
        if isinstance(item, VehicleRecord):
            record = item
        else:
            try:
                record = VehicleRecord.model_validate(item)
            except ValidationError:
                _logger.debug("Skipping malformed vehicle record", exc_info=True)
                continue
        if not record.has_content:
            _logger.debug("Skipping empty vehicle record vehicle_id=%s", record.vehicle_id)
            continue
        records.append(record)
    return records
