import sys
from itertools import islice
from typing import Any, Dict, Iterable, List, Optional


def paginate(
    scan: Iterable[Dict[str, Any]], limit: Optional[int] = None, offset: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Materialize the `[offset, offset + limit)` window of `scan`.

    `offset` defaults to 0 and an unset `limit` collects everything left.
    The scan is walked once and is not pulled past the window; generator
    scans are closed afterwards so they can release their session. An
    offset past the end yields an empty list.

    Inputs are trusted to be range-checked already (limit >= 1, offset >= 0)
    but may be arbitrarily large; islice bounds are capped at sys.maxsize.
    """
    start = min(offset or 0, sys.maxsize)
    stop = None if limit is None else min(start + limit, sys.maxsize)
    try:
        return list(islice(scan, start, stop))
    finally:
        close = getattr(scan, "close", None)
        if close is not None:
            close()
