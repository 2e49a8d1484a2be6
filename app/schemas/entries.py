from typing import Any, List
from pydantic import BaseModel, Field


class EntryOut(BaseModel):
    key: str
    value: Any


class CacheStatsOut(BaseModel):
    """Response model for cache statistics."""
    size: int = Field(..., description="Number of cached windows, stale ones included until swept")
    keys: List[str] = Field(..., description="Cache keys in insertion order")
    ttl: int = Field(..., description="Time-to-live of a cached window in milliseconds")


class ClearCacheOut(BaseModel):
    message: str


class ValidationErrorItem(BaseModel):
    msg: str
    param: str
    value: Any = None
    location: str = "query"


class ValidationErrorOut(BaseModel):
    errors: List[ValidationErrorItem]


class ErrorOut(BaseModel):
    error: str
