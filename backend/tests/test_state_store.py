import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from planner.core.errors import StateVersionError, ValidationFailedError
from planner.db.base import Base
from planner.models.app_state import AppStateRecord
from planner.services import planner_state
from planner.services.state_store import CURRENT_SCHEMA_VERSION, StateStore, migrate_payload

LEGACY_BLOB = {
    "preferences": {"workBlockMins": 45, "maxBlocksPerDay": 2, "startHour": 7, "endHour": 21},
    "busyBlocks": [{"id": "busy_1", "day": "Mon", "startMin": 540, "endMin": 600, "label": "Class"}],
    "plannedBlocks": [
        {"id": "plan_1", "day": "Mon", "startMin": 420, "endMin": 465, "type": "plan", "taskId": "task_1"},
        {"id": "plan_2", "day": "Tue", "startMin": 420, "endMin": 465, "type": "plan", "taskId": "task_gone"},
    ],
    "tasks": [
        {
            "id": "task_1",
            "title": "Essay",
            "dueDate": "2026-10-23",
            "priority": "high",
            "estimateMins": 4000,
            "done": False,
            "createdAt": 1760000000000,
            "spentMins": 0,
        }
    ],
}


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine):
    with Session(engine) as session:
        yield session
        session.rollback()


def test_missing_row_loads_default_state(db_session: Session):
    state = StateStore(db_session, key="test").load()
    assert state == planner_state.default_state()
    assert state.preferences.work_block_mins == 50
    assert state.preferences.max_blocks_per_day == 3


def test_saved_state_is_versioned(db_session: Session):
    store = StateStore(db_session, key="test")
    state = store.import_payload(LEGACY_BLOB, version=0)

    record = db_session.get(AppStateRecord, "test")
    assert record.schema_version == CURRENT_SCHEMA_VERSION
    assert record.payload["preferences"]["workBlockMins"] == 45
    assert store.load() == state


def test_legacy_blob_is_migrated():
    migrated = migrate_payload(LEGACY_BLOB, 0)
    assert migrated["tasks"][0]["estimateMins"] == 1440
    assert "spentMins" not in migrated["tasks"][0]
    assert [b["id"] for b in migrated["plannedBlocks"]] == ["plan_1"]
    # The input blob is left as it was
    assert LEGACY_BLOB["tasks"][0]["estimateMins"] == 4000


def test_newer_versions_are_refused():
    with pytest.raises(StateVersionError):
        migrate_payload({}, CURRENT_SCHEMA_VERSION + 1)


def test_unreadable_payload_is_kept_aside(db_session: Session):
    broken = {"tasks": [{"id": 1}]}
    db_session.add(AppStateRecord(key="test", schema_version=1, payload=broken))
    db_session.commit()
    store = StateStore(db_session, key="test")

    assert store.load() == planner_state.default_state()
    store.save(planner_state.default_state())

    backups = (
        db_session.query(AppStateRecord)
        .filter(AppStateRecord.key.like("test.unreadable.%"))
        .all()
    )
    assert [b.payload for b in backups] == [broken]
    assert backups[0].schema_version == 1
    assert db_session.get(AppStateRecord, "test").payload["tasks"] == []
    # The live row is readable again, so no further backups are made
    store.load()
    assert db_session.query(AppStateRecord).count() == 2


def test_invalid_import_is_rejected(db_session: Session):
    with pytest.raises(ValidationFailedError):
        StateStore(db_session, key="test").import_payload({"busyBlocks": [{"day": "Someday"}]})
