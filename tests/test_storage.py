import json
import logging
import sys
import types
from datetime import date, datetime

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import insert

import storage
from registry import MealRecord
from storage import StoredState, app_state, load_state, parse_stored_state, save_state


def _put_raw(engine, payload: str, key: str = "dinner-decider:v1") -> None:
    with engine.begin() as conn:
        conn.execute(insert(app_state).values(state_key=key, payload=payload, updated_at=datetime.now()))


def test_load_without_saved_row_is_absent(memory_engine):
    assert load_state() is None


def test_save_then_load_round_trip(memory_engine):
    state = StoredState(
        meals=[
            MealRecord("Tacos", date(2024, 3, 1), 2),
            MealRecord("Pasta"),
            MealRecord("Curry", None, 1),
        ],
        avoid_recent=False,
    )
    save_state(state)
    assert load_state() == state


def test_second_save_overwrites_first(memory_engine):
    save_state(StoredState(meals=[MealRecord("Tacos")], avoid_recent=True))
    save_state(StoredState(meals=[MealRecord("Soup", date(2024, 1, 1), 1)], avoid_recent=False))
    assert load_state() == StoredState(meals=[MealRecord("Soup", date(2024, 1, 1), 1)], avoid_recent=False)


def test_states_are_keyed(memory_engine):
    save_state(StoredState(meals=[MealRecord("A")]), state_key="one")
    save_state(StoredState(meals=[MealRecord("B")]), state_key="two")
    assert load_state("one").meals == [MealRecord("A")]
    assert load_state("two").meals == [MealRecord("B")]


def test_corrupt_json_is_absent(memory_engine):
    _put_raw(memory_engine, "{not json")
    assert load_state() is None


def test_wrong_shape_is_absent():
    assert parse_stored_state(json.dumps([1, 2, 3])) is None
    assert parse_stored_state(json.dumps({"meals": "Tacos", "avoid_recent": True})) is None
    assert parse_stored_state(json.dumps({"meals": [], "avoid_recent": "yes"})) is None
    assert parse_stored_state(json.dumps({"meals": []})) is None
    assert parse_stored_state("") is None


def test_corrupt_records_are_sanitized_not_fatal(memory_engine):
    _put_raw(memory_engine, json.dumps({
        "meals": [
            {"last_picked": "2024-01-01", "pick_count": 1},
            {"name": "Pasta", "last_picked": "2024-13-40", "pick_count": 3},
            {"name": "Curry", "last_picked": "2024-02-10", "pick_count": -2},
            {"name": "Soup", "last_picked": "2024/02/29", "pick_count": 1},
        ],
        "avoid_recent": True,
    }))
    assert load_state() == StoredState(
        meals=[
            MealRecord("Pasta", None, 3),
            MealRecord("Curry", date(2024, 2, 10), 0),
            MealRecord("Soup", date(2024, 2, 29), 1),
        ],
        avoid_recent=True,
    )


def test_missing_table_reads_absent_and_write_is_swallowed():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    storage.set_engine(engine)
    try:
        assert load_state() is None
        save_state(StoredState(meals=[MealRecord("Tacos")]))
    finally:
        storage.set_engine(None)
        engine.dispose()


def test_payload_shape():
    payload = StoredState(meals=[MealRecord("Tacos", date(2024, 3, 1), 2)], avoid_recent=True).to_payload()
    assert payload == {
        "meals": [{"name": "Tacos", "last_picked": "2024-03-01", "pick_count": 2}],
        "avoid_recent": True,
    }


def test_unreadable_secrets_are_logged_and_fall_back(monkeypatch, caplog):
    class BrokenSecrets:
        def get(self, key, default=None):
            raise RuntimeError("no secrets.toml")

    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setitem(sys.modules, "streamlit", types.SimpleNamespace(secrets=BrokenSecrets()))

    with caplog.at_level(logging.DEBUG, logger="storage"):
        assert storage._get_db_url() == ""

    assert "no secrets.toml" in caplog.text
