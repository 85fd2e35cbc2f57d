"""Persistence of the planner state as a single versioned JSON blob."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from planner.core.config import get_settings
from planner.core.errors import StateVersionError, ValidationFailedError
from planner.models.app_state import AppStateRecord
from planner.schemas.state import AppState
from planner.services import planner_state

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1

# Serializes every read-modify-write of the planner state. Route handlers run
# in FastAPI's thread pool, so mutations must not interleave.
state_lock = threading.RLock()


def _migrate_v0(payload: dict[str, Any]) -> dict[str, Any]:
    """v0 is the unversioned browser blob: clamp estimates, drop orphaned plan blocks."""
    migrated = dict(payload)
    tasks = []
    for task in payload.get("tasks") or []:
        if not isinstance(task, dict):
            continue
        task = dict(task)
        task.pop("spentMins", None)
        task["estimateMins"] = planner_state.clamp_estimate(task.get("estimateMins"))
        tasks.append(task)
    migrated["tasks"] = tasks
    task_ids = {t.get("id") for t in tasks}
    migrated["plannedBlocks"] = [
        block
        for block in payload.get("plannedBlocks") or []
        if isinstance(block, dict) and (not block.get("taskId") or block.get("taskId") in task_ids)
    ]
    return migrated


MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _migrate_v0,
}


def migrate_payload(payload: dict[str, Any], version: int) -> dict[str, Any]:
    if version > CURRENT_SCHEMA_VERSION:
        raise StateVersionError(
            f"Stored state version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}."
        )
    while version < CURRENT_SCHEMA_VERSION:
        logger.warning(f"Migrating planner state from v{version} to v{version + 1}")
        payload = MIGRATIONS[version](payload)
        version += 1
    return payload


def parse_state(payload: dict[str, Any], version: int) -> AppState:
    return AppState.model_validate(migrate_payload(payload, version))


def dump_state(state: AppState) -> dict[str, Any]:
    return state.model_dump(mode="json", by_alias=True)


class StateStore:
    """Owner of the persisted planner state row."""

    def __init__(self, db: Session, key: str | None = None):
        self.db = db
        self.key = key or get_settings().state_key

    def _record(self) -> AppStateRecord | None:
        return self.db.get(AppStateRecord, self.key)

    def load(self) -> AppState:
        record = self._record()
        if record is None:
            return planner_state.default_state()
        try:
            return parse_state(record.payload or {}, record.schema_version)
        except ValidationError as exc:
            logger.warning(f"Stored planner state is unreadable, using defaults: {exc}")
        return self._quarantine(record)

    def _quarantine(self, record: AppStateRecord) -> AppState:
        """Move an unreadable payload to a backup row and reset the live row."""
        backup_key = f"{self.key}.unreadable.{datetime.utcnow():%Y%m%dT%H%M%S%f}"
        with state_lock:
            self.db.add(
                AppStateRecord(
                    key=backup_key,
                    schema_version=record.schema_version,
                    payload=record.payload,
                )
            )
            state = self.save(planner_state.default_state())
        logger.warning(f"Unreadable planner state kept under key {backup_key}")
        return state

    def save(self, state: AppState) -> AppState:
        record = self._record()
        payload = dump_state(state)
        if record is None:
            record = AppStateRecord(
                key=self.key, schema_version=CURRENT_SCHEMA_VERSION, payload=payload
            )
        else:
            record.payload = payload
            record.schema_version = CURRENT_SCHEMA_VERSION
        self.db.add(record)
        self.db.commit()
        return state

    def import_payload(self, payload: dict[str, Any], version: int = 0) -> AppState:
        """Replace the stored state with an exported blob, migrating it first."""
        try:
            state = parse_state(payload, version)
        except ValidationError as exc:
            raise ValidationFailedError(f"Imported state is invalid: {exc.error_count()} error(s).") from exc
        return self.save(state)
