from typing import Any

from sqlmodel import Field, Column, SQLModel
from sqlalchemy import JSON


class KVEntry(SQLModel, table=True):
    __tablename__ = "kv_entries"

    # scans are ordered by this column, the primary key index serves them
    key: str = Field(primary_key=True)
    # any JSON document: object, array, string, number, bool
    value: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
