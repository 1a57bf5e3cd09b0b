# COMPONENT: API REQUEST / RESPONSE LOGGING MIDDLEWARE
# REQUIREMENTS SATISFIED: backend observability and debugging support
"""
door_catalog/api/middleware/log_requests.py

Defines a custom ASGI middleware for HTTP request and response logging.

This middleware intercepts incoming HTTP requests and outgoing responses
to capture the method, path, status code and end-to-end latency. Each
request is tagged with a short request ID (also returned to the client
as X-Request-ID) to make tracing across logs easier.

Key features:
    - Logs method, path, status and latency at INFO
    - Logs request and response bodies at DEBUG (LOG_LEVEL=2),
      pretty-printed when they are JSON
    - Safely passes through non-HTTP ASGI events

It does not modify request or response bodies.
"""
import json
import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from door_catalog.utils.logging import get_logger

logger = get_logger("requests")

_MAX_LOGGED_BODY = 4096


def _render_body(raw: bytes) -> str:
    text = raw[:_MAX_LOGGED_BODY].decode("utf-8", errors="replace")
    try:
        return json.dumps(json.loads(text), indent=2)
    except ValueError:
        return text


class RequestLogger:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        rid = str(uuid.uuid4())[:8]
        method = scope.get("method")
        path = scope.get("path")

        body_bytes = b""

        async def recv_wrapper() -> Message:
            nonlocal body_bytes
            msg = await receive()
            if msg["type"] == "http.request":
                body_bytes += msg.get("body", b"")
            return msg

        resp_body = b""
        status_code = None

        async def send_wrapper(message: Message):
            nonlocal resp_body, status_code

            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", rid.encode("ascii")))
                message = {**message, "headers": headers}

            if message["type"] == "http.response.body":
                resp_body += message.get("body", b"")

            await send(message)

        start = time.time()
        try:
            await self.app(scope, recv_wrapper, send_wrapper)
        finally:
            duration_ms = round((time.time() - start) * 1000, 2)
            logger.info("[RID %s] %s %s -> %s in %sms", rid, method, path, status_code, duration_ms)
            if body_bytes:
                logger.debug("[RID %s] Request body:\n%s", rid, _render_body(body_bytes))
            if resp_body:
                logger.debug("[RID %s] Response body:\n%s", rid, _render_body(resp_body))
