from fastapi import APIRouter, Depends

from app.api.deps import get_entry_service, pagination_params
from app.schemas.entries import EntryOut, ErrorOut, ValidationErrorOut
from app.services.entry_service import EntryService
from app.services.streaming import EntryStreamResponse

router = APIRouter(tags=["Entries"])


@router.get(
    "/entries",
    response_class=EntryStreamResponse,
    summary="Stream store entries",
    description="Streams a window of the store, ordered by key, as a JSON array. "
                "Windows are cached per (limit, offset) for the configured TTL.",
    responses={
        200: {"description": "JSON array of entries", "model": list[EntryOut]},
        400: {"description": "Invalid limit/offset", "model": ValidationErrorOut},
        500: {"description": "Store failure before streaming started", "model": ErrorOut},
    },
)
def list_entries(
    window: tuple = Depends(pagination_params),
    service: EntryService = Depends(get_entry_service),
) -> EntryStreamResponse:
    """Runs in the threadpool: the store scan is blocking, the streaming is not.

    A StoreError raised while materializing the window propagates to the
    app-level handler and becomes a 500 before any byte is written.
    """
    limit, offset = window
    page = service.list_entries(limit=limit, offset=offset)
    headers = {
        "X-Cache": "HIT" if page.cache_hit else "MISS",
        "X-Cache-Key": page.cache_key,
    }
    return EntryStreamResponse(page.entries, headers=headers)
