from typing import Dict, List


class AppError(Exception):
    """Base class for all application-level errors."""
    pass


class DomainError(AppError):
    """Base for domain logic errors."""
    pass


class PaginationValidationError(DomainError):
    """Raised when `limit`/`offset` query params fail validation.

    `errors` keeps one dict per failed parameter so the handler can render
    them as-is in the 400 body.
    """

    def __init__(self, errors: List[Dict]):
        self.errors = errors
        self.message = "; ".join(e["msg"] for e in errors) or "invalid pagination params"
        super().__init__(self.message)


class InfrastructureError(AppError):
    """Base for infrastructure-related errors (DB, API, etc)."""
    pass


class StoreError(InfrastructureError):
    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        self.message = f"Store operation '{operation}' failed: {detail}"
        super().__init__(self.message)


class StreamAbort(AppError):
    """The client went away while a response was being streamed.

    Normal termination path, never reported to the client.
    """

    def __init__(self, written_chunks: int = 0):
        self.written_chunks = written_chunks
        self.message = f"Client disconnected after {written_chunks} chunks"
        super().__init__(self.message)
