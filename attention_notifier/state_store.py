"""Durable storage for the worker state record.

Worker instances are created and destroyed by the host at any time, so nothing
held on an instance survives between invocations. The latest update timestamp
is therefore read from the store at the start of every activation and written
back as soon as a check cycle starts.
"""

import asyncio
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import closing
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StoreUnavailableError
from .models import NEVER, WorkerState

logger = logging.getLogger(__name__)

STATE_KEY = "worker_state"


class StateStore(ABC):
    """Single-record key-value store."""

    @abstractmethod
    def read(self) -> Optional[WorkerState]:
        """
        Read the record.

        Returns:
            The stored state, or None if no record exists.

        Raises:
            StoreUnavailableError: If the store cannot be reached.
        """

    @abstractmethod
    def write(self, state: WorkerState) -> None:
        """
        Overwrite the record.

        Raises:
            StoreUnavailableError: If the store cannot be reached.
        """

    @abstractmethod
    def clear(self) -> None:
        """Delete the record."""


def init_db(db_path: str) -> sqlite3.Connection:
    """
    Open the database and create the meta table if it doesn't exist.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        A connection to the database.
    """
    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)
    conn.commit()
    return conn


class SQLiteStateStore(StateStore):
    """Keeps the record as a JSON value in a local SQLite meta table."""

    def __init__(self, db_path: str, origin: str):
        self.db_path = db_path
        self.key = f"{STATE_KEY}:{origin}"

    def read(self) -> Optional[WorkerState]:
        try:
            with closing(init_db(self.db_path)) as conn:
                row = conn.execute(
                    "SELECT value FROM meta WHERE key = ?", (self.key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot read {self.key} from {self.db_path}: {e}") from e
        if not row:
            return None
        try:
            return WorkerState.from_dict(json.loads(row[0]))
        except (ValueError, TypeError, AttributeError) as e:
            raise StoreUnavailableError(f"Corrupt worker state {row[0]!r}: {e}") from e

    def write(self, state: WorkerState) -> None:
        try:
            with closing(init_db(self.db_path)) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
                    (self.key, json.dumps(state.to_dict())),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot write {self.key} to {self.db_path}: {e}") from e

    def clear(self) -> None:
        try:
            with closing(init_db(self.db_path)) as conn:
                conn.execute("DELETE FROM meta WHERE key = ?", (self.key,))
                conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot clear {self.key} in {self.db_path}: {e}") from e


class DynamoDBStateStore(StateStore):
    """Keeps the record as one DynamoDB item keyed by origin."""

    def __init__(self, table_name: str, origin: str, region: str = "us-east-1", table=None):
        self.origin = origin
        if table is None:
            dynamodb = boto3.resource("dynamodb", region_name=region)
            table = dynamodb.Table(table_name)
        self.table = table

    def read(self) -> Optional[WorkerState]:
        try:
            response = self.table.get_item(Key={"origin": self.origin})
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(f"Cannot read worker state for {self.origin}: {e}") from e
        if "Item" not in response:
            return None
        value = response["Item"].get("latest_update_timestamp_ms", NEVER)
        return WorkerState(latest_update_timestamp_ms=int(value))

    def write(self, state: WorkerState) -> None:
        try:
            self.table.put_item(
                Item={
                    "origin": self.origin,
                    "latest_update_timestamp_ms": state.latest_update_timestamp_ms,
                }
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(f"Cannot write worker state for {self.origin}: {e}") from e

    def clear(self) -> None:
        try:
            self.table.delete_item(Key={"origin": self.origin})
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(f"Cannot clear worker state for {self.origin}: {e}") from e


class StateManager:
    """Best-effort access to the worker state. Never raises."""

    def __init__(self, store: StateStore):
        self.store = store

    async def load(self) -> int:
        """Return the persisted timestamp, or NEVER if missing or unreadable."""
        try:
            state = await asyncio.to_thread(self.store.read)
        except Exception as e:
            # A stale default costs at most one extra reported change
            logger.error(f"Could not load worker state, using default: {e}")
            return NEVER
        if state is None:
            logger.info("No worker state stored yet")
            return NEVER
        return state.latest_update_timestamp_ms

    async def save(self, timestamp_ms: int) -> bool:
        """Persist the timestamp. Returns False if the write failed."""
        try:
            await asyncio.to_thread(
                self.store.write, WorkerState(latest_update_timestamp_ms=timestamp_ms)
            )
        except Exception as e:
            logger.error(f"Could not save worker state {timestamp_ms}: {e}")
            return False
        logger.debug(f"Saved worker state {timestamp_ms}")
        return True
