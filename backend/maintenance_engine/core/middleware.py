import time
import traceback
import uuid

from maintenance_engine.core.logger import logger

REQUEST_ID_HEADER = b"x-request-id"


def generate_request_id() -> str:
    return str(uuid.uuid4())


def _incoming_request_id(scope) -> str:
    for name, value in scope.get("headers", []):
        if name.lower() == REQUEST_ID_HEADER and value:
            return value.decode("latin-1")
    return generate_request_id()


class RequestLoggingMiddleware:
    """
    ASGI middleware that tags every HTTP request with a request id
    (reusing the caller's X-Request-ID when present), echoes it on the
    response and logs the status code and duration.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request_id = _incoming_request_id(scope)
        scope["request_id"] = request_id
        context = {
            "request_id": request_id,
            "method": scope.get("method", ""),
            "path": scope.get("path", ""),
        }

        start = time.perf_counter()
        status = {"code": None}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status["code"] = message.get("status", 0)
                headers = [
                    (k, v) for k, v in message.get("headers", [])
                    if k.lower() != REQUEST_ID_HEADER
                ]
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            # status_code stays None when the app raised before responding
            logger.info(
                "Request completed",
                extra={
                    **context,
                    "status_code": status["code"],
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )


class ExceptionLoggingMiddleware:
    """
    Logs unhandled exceptions with the request context, then re-raises so
    Starlette can still produce the 500 response.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        try:
            await self.app(scope, receive, send)
        except Exception:
            logger.error(
                "Unhandled exception in request: %s",
                traceback.format_exc(limit=20),
                extra={
                    "request_id": scope.get("request_id"),
                    "method": scope.get("method"),
                    "path": scope.get("path"),
                },
            )
            raise
