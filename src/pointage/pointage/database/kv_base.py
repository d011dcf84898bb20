"""Record helpers shared by the key-value repositories."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..common.datetime_utils import to_iso_timestamp
from .kv_store import KeyValueStore, read_json

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Fields a patch may not overwrite.
PROTECTED_FIELDS = ("id", "createdAt")


def new_record_id() -> str:
    return str(uuid.uuid4())


def stamp_new(data: Record, now: datetime) -> Record:
    """Copy of data with id, createdAt and updatedAt filled in."""
    record = dict(data)
    record["id"] = record.get("id") or new_record_id()
    stamp = to_iso_timestamp(now)
    record["createdAt"] = record.get("createdAt") or stamp
    record["updatedAt"] = stamp
    return record


def merge_patch(existing: Record, patch: Record, now: datetime) -> Record:
    merged = dict(existing)
    merged.update({k: v for k, v in patch.items() if k not in PROTECTED_FIELDS})
    merged["updatedAt"] = to_iso_timestamp(now)
    return merged


def fetch_records(
    store: KeyValueStore,
    ids: Iterable[str],
    key_fn: Callable[[str], str],
    *,
    keep: Optional[Callable[[Record], bool]] = None,
) -> List[Record]:
    """Resolve index ids to primary records, skipping stale entries."""
    out: List[Record] = []
    for record_id in ids:
        record = read_json(store, key_fn(record_id))
        if record is None:
            logger.debug("Skipping stale index entry %s", record_id)
            continue
        if keep is not None and not keep(record):
            logger.debug("Skipping index entry %s that no longer matches", record_id)
            continue
        out.append(record)
    return out
