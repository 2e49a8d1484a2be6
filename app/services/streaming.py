import asyncio
import json
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from fastapi.responses import JSONResponse, Response
from starlette.background import BackgroundTask
from starlette.types import Receive, Scope, Send

from app.core.exceptions.exceptions import StreamAbort
from app.utils.log import app_logger

INTERNAL_ERROR_BODY = {"error": "Internal server error"}


def serialize_entry(entry: Dict[str, Any]) -> bytes:
    return json.dumps(entry, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def iter_json_array(entries: Iterable[Dict[str, Any]]) -> Iterator[bytes]:
    """Yield a JSON array of `entries` chunk by chunk.

    The first chunk carries the opening bracket together with the first
    entry, every following entry is prefixed with its separating comma and
    the last chunk closes the array. Entries are pulled one at a time, so a
    lazy iterable is never read ahead of what has been yielded.
    """
    first = True
    for entry in entries:
        if first:
            first = False
            yield b"[" + serialize_entry(entry)
        else:
            yield b"," + serialize_entry(entry)
    yield b"[]" if first else b"]"


class EntryStreamResponse(Response):
    """Streams entries to the client as a JSON array.

    Flow control comes from the ASGI server: `await send(...)` does not
    return while the transport is paused, and the next entry is serialized
    only after the previous chunk was accepted. A watcher task reads
    `receive()` concurrently; when the client disconnects the writer is
    cancelled and nothing more is written. That is a normal end of the
    request, logged at info.

    The first chunk is produced before the headers are committed, so a
    failure to obtain the first entry still becomes a 500 JSON response.
    Once the headers are out, a failure can only be logged and re-raised,
    which makes the server drop the connection.
    """

    media_type = "application/json"

    def __init__(
        self,
        entries: Iterable[Dict[str, Any]],
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        background: Optional[BackgroundTask] = None,
    ) -> None:
        self.entries = entries
        self.status_code = status_code
        self.background = background
        self.init_headers(headers)
        self.chunks_sent = 0
        self.completed = False

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # "[" goes out with the first entry, so a failure to produce it can still become a 500
        chunks = iter_json_array(self.entries)
        try:
            first = next(chunks)
        except Exception as e:
            app_logger.error("stream.prepare_failed", exc_type=type(e).__name__, error=str(e))
            await JSONResponse(INTERNAL_ERROR_BODY, status_code=500)(scope, receive, send)
            return

        writer = asyncio.ensure_future(self._write(send, first, chunks))
        watcher = asyncio.ensure_future(self._wait_for_disconnect(receive))
        try:
            done, _ = await asyncio.wait({writer, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (writer, watcher):
                if not task.done():
                    task.cancel()
            await asyncio.gather(writer, watcher, return_exceptions=True)
            chunks.close()
            close = getattr(self.entries, "close", None)
            if close is not None:
                close()

        if writer in done:
            try:
                writer.result()
            except StreamAbort as e:
                self._log_abort(e)
            except Exception as e:
                app_logger.error(
                    "stream.failed", chunks_sent=self.chunks_sent, exc_type=type(e).__name__, error=str(e)
                )
                raise
        elif not self.completed:
            self._log_abort(StreamAbort(self.chunks_sent))

        if self.background is not None:
            await self.background()

    async def _write(self, send: Send, first: bytes, chunks: Iterator[bytes]) -> None:
        try:
            await send({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})
            await self._send_chunk(send, first)
            for chunk in chunks:
                await self._send_chunk(send, chunk)
            await send({"type": "http.response.body", "body": b"", "more_body": False})
        except OSError as e:
            # the transport reports a closed connection on write
            raise StreamAbort(self.chunks_sent) from e
        self.completed = True

    async def _send_chunk(self, send: Send, chunk: bytes) -> None:
        await send({"type": "http.response.body", "body": chunk, "more_body": True})
        self.chunks_sent += 1

    @staticmethod
    async def _wait_for_disconnect(receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return

    @staticmethod
    def _log_abort(abort: StreamAbort) -> None:
        app_logger.info("stream.client_disconnected", chunks_sent=abort.written_chunks)
