import re
from typing import Dict, List, Optional, Tuple

from app.core.exceptions.exceptions import PaginationValidationError

MAX_LIMIT = 100

# plain ASCII digits with an optional sign; rejects "1_0", "+5", "1e3" and non-ASCII digits
INTEGER_RE = re.compile(r"-?\d+", re.ASCII)

LIMIT_MESSAGE = f"Limit must be between 1 and {MAX_LIMIT}"
OFFSET_MESSAGE = "Offset must be a non-negative number"


class PaginationValidator:
    """Query-string validator for `limit`/`offset`.

    Behavior:
    - Missing or blank params are valid and stay `None` (unspecified).
    - `limit` must parse as an integer in [1, MAX_LIMIT].
    - `offset` must parse as an integer >= 0.
    - Every failing param is reported, not only the first one.
    """

    def __init__(self, max_limit: int = MAX_LIMIT):
        self.max_limit = max_limit

    @staticmethod
    def _to_int(raw: Optional[str]) -> Tuple[bool, Optional[int]]:
        if raw is None or not raw.strip():
            return True, None
        value = raw.strip()
        if not INTEGER_RE.fullmatch(value):
            return False, None
        try:
            return True, int(value)
        except ValueError:
            # beyond the int string conversion limit
            return False, None

    def validate(self, limit: Optional[str], offset: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
        errors: List[Dict] = []

        ok, parsed_limit = self._to_int(limit)
        if not ok or (parsed_limit is not None and not 1 <= parsed_limit <= self.max_limit):
            errors.append(_error(LIMIT_MESSAGE, "limit", limit))

        ok, parsed_offset = self._to_int(offset)
        if not ok or (parsed_offset is not None and parsed_offset < 0):
            errors.append(_error(OFFSET_MESSAGE, "offset", offset))

        if errors:
            raise PaginationValidationError(errors)
        return parsed_limit, parsed_offset


def _error(msg: str, param: str, value: Optional[str]) -> Dict:
    return {"msg": msg, "param": param, "value": value, "location": "query"}
