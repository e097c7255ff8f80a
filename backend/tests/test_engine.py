import copy

import pytest

from estate.services.persistence_service import load_state_from_store
from estate.services.record_store import UnknownCollectionError
from estate.services.settings_service import LockError, SettingsValidationError


def test_upsert_persists_and_records(engine):
    record = engine.upsert_record("customers", {"name": "Ali"}, description="Added customer")

    assert record["id"].startswith("C-")
    assert engine.history.index == 1
    assert load_state_from_store()["customers"] == [record]
    assert engine.state["auditLog"][-1]["description"] == "Added customer"
    assert engine.state["auditLog"][-1]["id"].startswith("LOG-")


def test_upsert_replaces_in_place(engine):
    engine.upsert_record("customers", {"id": "C-1", "name": "Ali"})
    engine.upsert_record("customers", {"id": "C-2", "name": "Mona"})
    engine.upsert_record("customers", {"id": "C-1", "name": "Ali Hassan"})

    assert engine.state["customers"] == [
        {"id": "C-1", "name": "Ali Hassan"},
        {"id": "C-2", "name": "Mona"},
    ]


def test_undo_redo_inverse_through_store(engine):
    s0 = copy.deepcopy(engine.state)
    for n in range(4):
        engine.upsert_record("units", {"id": f"U-{n}", "code": f"A-10{n}"})
    latest = copy.deepcopy(engine.state)

    for _ in range(4):
        assert engine.undo() is True
    assert engine.state == s0
    assert load_state_from_store()["units"] == []

    for _ in range(4):
        assert engine.redo() is True
    assert engine.state == latest
    assert [u["id"] for u in load_state_from_store()["units"]] == ["U-0", "U-1", "U-2", "U-3"]


def test_undo_rerenders_current_view(engine):
    engine.presentation.nav("units", "U-1")
    rendered = []
    engine.presentation.renderer = lambda view, param: rendered.append((view, param))
    engine.upsert_record("units", {"id": "U-1"})

    engine.undo()

    assert rendered == [("units", "U-1")]


def test_failed_mutation_restores_tree(engine):
    before = copy.deepcopy(engine.state)

    with pytest.raises(RuntimeError):
        with engine.mutation("broken") as state:
            state["customers"].append({"id": "C-1"})
            raise RuntimeError("validation failed")

    assert engine.state == before
    assert engine.history.index == 0


def test_delete_record(engine):
    engine.upsert_record("brokers", {"id": "B-1", "name": "Samir"})

    assert engine.delete_record("brokers", "B-1") is True
    assert engine.delete_record("brokers", "B-1") is False
    assert engine.state["brokers"] == []
    assert load_state_from_store()["brokers"] == []


def test_unknown_collection(engine):
    with pytest.raises(UnknownCollectionError):
        engine.upsert_record("settings", {"id": "X"})
    assert engine.history.index == 0


def test_reading_an_absent_collection_does_not_create_it(engine):
    del engine.state["brokers"]

    assert engine.collection("brokers") == []
    assert engine.find_record("brokers", "B-1") is None
    assert engine.list_records("brokers") == []
    assert "brokers" not in engine.state


def test_record_reads_return_copies(engine):
    engine.upsert_record("customers", {"id": "C-1", "name": "Ali"})

    listed = engine.list_records("customers")
    listed[0]["name"] = "Changed"
    single = engine.get_record("customers", "C-1")
    single["name"] = "Changed"

    assert engine.state["customers"] == [{"id": "C-1", "name": "Ali"}]
    assert engine.get_record("customers", "C-404") is None


def test_settings_update_is_not_an_undo_step(engine):
    engine.update_settings(theme="light", font=20)

    assert engine.presentation.theme == "light"
    assert engine.presentation.font == 20
    assert load_state_from_store()["settings"]["theme"] == "light"
    assert engine.history.index == 0


def test_invalid_settings_leave_tree_untouched(engine):
    with pytest.raises(SettingsValidationError):
        engine.update_settings(theme="light", font="huge")

    assert engine.state["settings"]["theme"] == "dark"


def test_wrong_passcode_reloads(engine):
    engine.set_lock("1234")
    engine.reload()
    assert engine.session_locked is True

    with pytest.raises(LockError):
        engine.unlock("0000")

    assert engine.session_locked is True
    assert engine.ready is True


def test_clear_lock(engine):
    engine.set_lock("1234")
    engine.set_lock("")

    assert engine.state["locked"] is False
    assert engine.state["settings"]["pass"] is None
