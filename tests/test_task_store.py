"""Tests for the JSON task store."""

import json
from datetime import datetime, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from taskminder.adapters.json_task_store import JsonTaskStore
from taskminder.core.tasks import Priority, ReminderKind, TaskStatus
from taskminder.errors import StorageError

IST = ZoneInfo("Asia/Kolkata")


def reopen(store: JsonTaskStore) -> JsonTaskStore:
    return JsonTaskStore(store.path, clock=store.clock, timezone=store.timezone)


class TestCreate:
    def test_assigns_increasing_ids(self, store):
        first = store.create("42", "Buy groceries")
        second = store.create("42", "Call Mini")
        assert (first.id, second.id) == (1, 2)
        assert first.status == TaskStatus.OPEN
        assert not first.due_reminded and not first.early_reminded

    def test_sets_created_at_from_clock(self, store, clock):
        task = store.create("42", "Buy groceries")
        assert task.created_at == clock.now()

    def test_strips_title_and_rejects_empty(self, store):
        assert store.create("42", "  Pay rent ").title == "Pay rent"
        with pytest.raises(ValueError):
            store.create("42", "   ")

    def test_due_at_stored_as_utc(self, store):
        task = store.create("42", "Pay rent", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST))
        assert task.due_at == datetime(2024, 11, 6, 4, 30, tzinfo=timezone.utc)
        assert task.due_at.tzinfo == timezone.utc

    def test_persists_before_returning(self, store, tasks_file):
        store.create("42", "Pay rent", category="payment", priority=Priority.HIGH)
        data = json.loads(tasks_file.read_text())
        assert data["next_id"] == 2
        assert data["tasks"][0]["title"] == "Pay rent"
        assert data["tasks"][0]["priority"] == "high"
        assert data["tasks"][0]["category"] == "payment"

    def test_ids_never_reused_after_delete(self, store):
        store.create("42", "one")
        two = store.create("42", "two")
        store.delete(two.id)
        assert store.create("42", "three").id == 3
        assert reopen(store).create("42", "four").id == 4


class TestLoad:
    def test_missing_file_starts_empty(self, store, tasks_file):
        assert not tasks_file.exists()
        assert store.snapshot() == []
        assert store.next_id == 1

    def test_round_trip(self, store):
        store.create("42", "Pay rent", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST), priority=Priority.HIGH)
        store.create("7", "Walk dog")
        assert reopen(store).snapshot() == store.snapshot()

    def test_corrupt_file_loads_empty(self, tasks_file, clock):
        tasks_file.parent.mkdir(parents=True)
        tasks_file.write_text("{not json")
        store = JsonTaskStore(tasks_file, clock=clock)
        assert store.snapshot() == []
        assert store.next_id == 1
        # Left alone until the next successful write
        assert tasks_file.read_text() == "{not json"

    def test_counter_raised_above_max_id(self, tasks_file, clock):
        tasks_file.parent.mkdir(parents=True)
        tasks_file.write_text(
            json.dumps(
                {
                    "tasks": [
                        {
                            "id": 5,
                            "owner_id": "42",
                            "title": "Legacy",
                            "due_at": None,
                            "created_at": "2024-11-01T00:00:00+00:00",
                        }
                    ],
                    "next_id": 2,
                }
            )
        )
        store = JsonTaskStore(tasks_file, clock=clock)
        assert store.next_id == 6
        assert store.create("42", "New").id == 6

    def test_instants_without_offset_read_as_utc(self, tasks_file, clock):
        tasks_file.parent.mkdir(parents=True)
        tasks_file.write_text(
            json.dumps(
                {
                    "tasks": [
                        {
                            "id": 1,
                            "owner_id": "42",
                            "title": "Hand edited",
                            "due_at": "2024-11-06T10:00:00",
                            "created_at": "2024-11-01T00:00:00",
                        }
                    ],
                    "next_id": 2,
                }
            )
        )
        [task] = JsonTaskStore(tasks_file, clock=clock).snapshot()
        assert task.due_at == datetime(2024, 11, 6, 10, 0, tzinfo=timezone.utc)
        assert task.created_at.tzinfo is not None


class TestQuery:
    @pytest.fixture
    def populated(self, store):
        store.create("42", "Undated")
        store.create("42", "Tomorrow", due_at=datetime(2024, 11, 7, 9, 0, tzinfo=IST))
        store.create("42", "Tonight", due_at=datetime(2024, 11, 6, 19, 0, tzinfo=IST))
        store.create("7", "Someone else", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST))
        store.create("42", "Last minute", due_at=datetime(2024, 11, 6, 23, 59, 59, 999999, tzinfo=IST))
        store.create("42", "Also undated")
        return store

    def test_owner_scoped_and_ordered(self, populated):
        titles = [t.title for t in populated.query("42")]
        assert titles == ["Tonight", "Last minute", "Tomorrow", "Undated", "Also undated"]

    def test_owner_id_compared_as_string(self, populated):
        assert [t.title for t in populated.query(7)] == ["Someone else"]

    def test_due_today(self, populated):
        titles = [t.title for t in populated.query("42", due_today=True)]
        assert titles == ["Tonight", "Last minute"]

    def test_status_filter(self, populated):
        populated.mark_done(3)
        assert [t.id for t in populated.query("42", status=TaskStatus.OPEN)] == [5, 2, 1, 6]
        assert [t.id for t in populated.query("42", status=TaskStatus.DONE)] == [3]

    def test_unknown_owner(self, populated):
        assert populated.query("nobody") == []


class TestMutations:
    def test_mark_done_idempotent(self, store):
        task = store.create("42", "Pay rent")
        assert store.mark_done(task.id) is True
        assert store.mark_done(task.id) is True
        assert store.get(task.id).status == TaskStatus.DONE

    def test_mark_done_missing(self, store):
        assert store.mark_done(99) is False

    def test_delete(self, store):
        task = store.create("42", "Pay rent")
        assert store.delete(task.id) is True
        assert store.get(task.id) is None
        assert store.delete(task.id) is False

    def test_set_due_at_resets_flags(self, store):
        task = store.create("42", "Pay rent", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST), priority=Priority.HIGH)
        store.mark_reminded(task.id, ReminderKind.DUE)
        store.mark_reminded(task.id, ReminderKind.EARLY)

        updated = store.set_due_at(task.id, datetime(2024, 11, 6, 12, 0, tzinfo=IST))
        assert updated.due_at == datetime(2024, 11, 6, 6, 30, tzinfo=timezone.utc)
        assert not updated.due_reminded
        assert not updated.early_reminded
        assert reopen(store).get(task.id) == updated

    def test_set_due_at_missing(self, store):
        assert store.set_due_at(99, datetime(2024, 11, 6, 12, 0, tzinfo=IST)) is None

    def test_update_fields_keeps_due_and_flags(self, store):
        task = store.create("42", "Pay rent", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST))
        store.mark_reminded(task.id, ReminderKind.DUE)

        updated = store.update_fields(task.id, title="Pay rent online", category="payment", priority=Priority.HIGH)
        assert updated.title == "Pay rent online"
        assert updated.category == "payment"
        assert updated.priority == Priority.HIGH
        assert updated.due_at == task.due_at
        assert updated.due_reminded is True

    def test_mark_reminded_sets_one_flag(self, store):
        task = store.create("42", "Pay rent", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST))
        updated = store.mark_reminded(task.id, ReminderKind.EARLY)
        assert updated.early_reminded is True
        assert updated.due_reminded is False

    def test_mark_reminded_refuses_changed_task(self, store):
        due = datetime(2024, 11, 6, 10, 0, tzinfo=IST)
        task = store.create("42", "Pay rent", due_at=due)
        store.set_due_at(task.id, datetime(2024, 11, 6, 12, 0, tzinfo=IST))

        assert store.mark_reminded(task.id, ReminderKind.DUE, expected_due_at=task.due_at) is None
        assert store.get(task.id).due_reminded is False

    def test_mark_reminded_with_matching_due(self, store):
        task = store.create("42", "Pay rent", due_at=datetime(2024, 11, 6, 10, 0, tzinfo=IST))
        updated = store.mark_reminded(task.id, ReminderKind.DUE, expected_due_at=task.due_at)
        assert updated.due_reminded is True
        # A second guarded commit finds the flag already set
        assert store.mark_reminded(task.id, ReminderKind.DUE, expected_due_at=task.due_at) is None

    def test_snapshot_returns_copies(self, store):
        store.create("42", "Pay rent")
        snapshot = store.snapshot()
        snapshot[0].title = "tampered"
        assert store.get(1).title == "Pay rent"


class TestWriteFailures:
    def test_failed_create_rolls_back(self, store, tasks_file):
        store.create("42", "Existing")
        before = tasks_file.read_bytes()

        with patch("taskminder.adapters.json_task_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                store.create("42", "Lost")

        assert tasks_file.read_bytes() == before
        assert [t.title for t in store.snapshot()] == ["Existing"]
        assert store.next_id == 2
        assert store.diverged is False
        # No temp files left behind
        assert [p.name for p in tasks_file.parent.iterdir()] == ["tasks.json"]

    def test_failed_mutation_marks_diverged(self, store, tasks_file):
        task = store.create("42", "Pay rent")
        before = tasks_file.read_bytes()

        with patch("taskminder.adapters.json_task_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                store.mark_done(task.id)

        assert store.diverged is True
        assert store.get(task.id).status == TaskStatus.DONE
        assert tasks_file.read_bytes() == before
