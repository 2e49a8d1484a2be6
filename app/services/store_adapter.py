import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator

from sqlalchemy import delete, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, select

from app.core.exceptions.exceptions import StoreError
from app.models.kv_entry import KVEntry
from app.services.database import build_session_factory
from app.utils.log import app_logger

Entry = Dict[str, Any]


class BaseStoreAdapter(ABC):
    """Read contract of the ordered key-value store.

    `scan()` yields `{"key", "value"}` dicts in ascending key order, one at a
    time, covering the whole keyspace at call time. Failures surface as
    `StoreError`.
    """

    @abstractmethod
    def scan(self) -> Iterator[Entry]:
        ...

    def init_schema(self) -> None:
        """prepare the backing store (no-op by default)"""
        pass


class SQLStoreAdapter(BaseStoreAdapter):
    """Store adapter over the `kv_entries` table.

    Scans stream rows with `yield_per` so the table is never buffered in
    full; the session lives as long as the iterator and is closed when the
    iterator is exhausted or closed early by the caller.
    """

    def __init__(self, engine: Engine, batch_size: int = 500):
        self.engine = engine
        self.session_factory = build_session_factory(engine)
        self.batch_size = batch_size

    def init_schema(self) -> None:
        database = self.engine.url.database
        if self.engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)
        try:
            SQLModel.metadata.create_all(self.engine, tables=[KVEntry.__table__])
        except SQLAlchemyError as e:
            raise StoreError("init_schema", str(e)) from e

    def scan(self) -> Iterator[Entry]:
        session = self.session_factory()
        stmt = (
            select(KVEntry.key, KVEntry.value)
            .order_by(KVEntry.key.asc())
            .execution_options(yield_per=self.batch_size)
        )
        result = None
        try:
            result = session.execute(stmt)
            for key, value in result:
                yield {"key": key, "value": value}
        except SQLAlchemyError as e:
            app_logger.error("store.scan_failed", exc_type=type(e).__name__, error=str(e))
            raise StoreError("scan", str(e)) from e
        finally:
            if result is not None:
                result.close()
            session.close()

    def put(self, key: str, value: Any) -> None:
        self.put_many([{"key": key, "value": value}])

    def put_many(self, entries: Iterable[Entry]) -> int:
        """upsert `entries` in a single transaction, returns how many were written"""
        written = 0
        with self.session_factory() as session:
            try:
                for entry in entries:
                    session.merge(KVEntry(key=entry["key"], value=entry["value"]))
                    written += 1
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StoreError("put", str(e)) from e
        return written

    def clear(self) -> int:
        with self.session_factory() as session:
            try:
                result = session.execute(delete(KVEntry))
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StoreError("clear", str(e)) from e
        return result.rowcount

    def count(self) -> int:
        with self.session_factory() as session:
            try:
                return int(session.execute(select(func.count()).select_from(KVEntry)).scalar_one())
            except SQLAlchemyError as e:
                raise StoreError("count", str(e)) from e
