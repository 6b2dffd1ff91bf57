# storage.py
import os
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    create_engine, MetaData, Table, Column,
    String, DateTime, Text
)
from sqlalchemy.engine import Engine
from sqlalchemy.sql import select, insert, update
from sqlalchemy.pool import NullPool

from config import STORAGE
from registry import MealRecord, record_to_dict, sanitize_meals

logger = logging.getLogger(__name__)


@dataclass
class StoredState:
    meals: List[MealRecord] = field(default_factory=list)
    avoid_recent: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {
            "meals": [record_to_dict(m) for m in self.meals],
            "avoid_recent": self.avoid_recent,
        }


def _get_db_url() -> str:
    url = os.getenv("DATABASE_URL", "").strip()
    if not url:
        try:
            import streamlit as st
            url = str(st.secrets.get("DATABASE_URL", "")).strip()
        except Exception as exc:
            logger.debug("No DATABASE_URL in Streamlit secrets: %s", exc)
    return url

_engine: Optional[Engine] = None

def get_engine() -> Engine:
    global _engine
    if _engine is None:
        db_url = _get_db_url()
        if db_url:
            _engine = create_engine(db_url, pool_pre_ping=True, poolclass=NullPool)
        else:
            _engine = create_engine(STORAGE["sqlite_url"], connect_args={"check_same_thread": False})
    return _engine

def set_engine(engine: Optional[Engine]) -> None:
    """Swap the cached engine (tests point this at in-memory SQLite)."""
    global _engine
    _engine = engine

metadata = MetaData()

app_state = Table(
    "app_state", metadata,
    Column("state_key", String(80), primary_key=True),
    Column("payload", Text, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

def init_db() -> None:
    metadata.create_all(get_engine())

def parse_stored_state(raw: Optional[str]) -> Optional[StoredState]:
    """Decodes a stored payload. Anything malformed reads as no state at all."""
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Stored state is not valid JSON; falling back to defaults")
        return None

    if not isinstance(parsed, dict):
        return None
    meals = parsed.get("meals")
    avoid_recent = parsed.get("avoid_recent")
    if not isinstance(meals, list) or not isinstance(avoid_recent, bool):
        logger.warning("Stored state has unexpected shape; falling back to defaults")
        return None

    return StoredState(meals=sanitize_meals(meals), avoid_recent=avoid_recent)

def load_state(state_key: str = STORAGE["state_key"]) -> Optional[StoredState]:
    try:
        with get_engine().begin() as conn:
            row = conn.execute(
                select(app_state.c.payload).where(app_state.c.state_key == state_key)
            ).fetchone()
    except Exception as exc:
        logger.warning("Could not read stored state: %s", exc)
        return None
    if not row:
        return None
    return parse_stored_state(row[0])

def save_state(state: StoredState, state_key: str = STORAGE["state_key"]) -> None:
    payload = {
        "payload": json.dumps(state.to_payload()),
        "updated_at": datetime.now(),
    }
    try:
        with get_engine().begin() as conn:
            exists = conn.execute(
                select(app_state.c.state_key).where(app_state.c.state_key == state_key)
            ).fetchone()

            if exists:
                conn.execute(
                    update(app_state).where(app_state.c.state_key == state_key).values(**payload)
                )
            else:
                payload["state_key"] = state_key
                conn.execute(insert(app_state).values(**payload))
    except Exception as exc:
        # storage full / unavailable: the in-memory session stays authoritative
        logger.warning("Could not save state: %s", exc)
