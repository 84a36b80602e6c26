import logging
import time
import uuid
from contextvars import ContextVar

from sqlalchemy import event
from starlette.types import ASGIApp, Receive, Scope, Send

# ---------------------------------------------------------------------------
# Per-request context variables
# ---------------------------------------------------------------------------

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _QueryCounter:
    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = 0


# Holds a fresh counter object per request.  The listener mutates the object
# rather than re-setting the variable, so the increment is visible to the
# middleware even when the statement ran in a copied context.
_query_counter_var: ContextVar[_QueryCounter | None] = ContextVar("query_counter", default=None)


def install_query_counter(engine) -> None:
    """
    Register a ``before_cursor_execute`` event listener on *engine* that
    counts every SQL statement executed during the current request.

    Must be called once per engine (``create_engine`` does it for the
    application engine; tests call it for theirs).
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        counter = _query_counter_var.get()
        if counter is not None:
            counter.value += 1


# ---------------------------------------------------------------------------
# Middleware (pure ASGI, avoids BaseHTTPMiddleware ContextVar isolation)
# ---------------------------------------------------------------------------

class RequestContextMiddleware:
    """
    Pure ASGI middleware that tags and times every HTTP request.

    Response headers added:

    - ``X-Request-ID``: the caller's value when supplied, otherwise a new
      random id.  Also exposed to log records through ``request_id_var``.
    - ``X-Response-Time-Ms``: wall-clock time until the response started.
    - ``X-Query-Count``: SQL statements executed for the request, counted
      by the listener registered with ``install_query_counter``.

    One access log line is written per request.
    """

    def __init__(self, app: ASGIApp, logger: logging.Logger | None = None) -> None:
        self.app = app
        self.logger = logger or logging.getLogger("article_api.access")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope) or uuid.uuid4().hex
        request_id_token = request_id_var.set(request_id)
        counter = _QueryCounter()
        counter_token = _query_counter_var.set(counter)
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                headers.append((b"x-response-time-ms", str(duration_ms).encode()))
                headers.append((b"x-query-count", str(counter.value).encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            self.logger.info(
                "%s %s -> %d (%.2f ms, %d queries)",
                scope["method"],
                scope["path"],
                status_code,
                (time.perf_counter() - start) * 1000,
                counter.value,
            )
            _query_counter_var.reset(counter_token)
            request_id_var.reset(request_id_token)


def _incoming_request_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"x-request-id":
            # Cap the length so a client cannot bloat every log line.
            return value.decode("latin-1").strip()[:128] or None
    return None
