from typing import Optional

from fastapi import Depends, Query, Request

from app.middleware.validation import PaginationValidator
from app.services.entry_service import EntryService
from app.services.store_adapter import BaseStoreAdapter
from app.services.ttl_cache import TTLCache


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_store(request: Request) -> BaseStoreAdapter:
    return request.app.state.store


def get_entry_service(
    store: BaseStoreAdapter = Depends(get_store),
    cache: TTLCache = Depends(get_cache),
) -> EntryService:
    return EntryService(store, cache)


def pagination_params(
    limit: Optional[str] = Query(None, description="Number of entries to return (1-100)"),
    offset: Optional[str] = Query(None, description="Number of leading entries to skip"),
) -> tuple:
    # raw strings on purpose, PaginationValidator owns the parsing and messages
    return PaginationValidator().validate(limit, offset)
