import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Per-request values read by log processors and the portal dependency
request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
portal_ctx_var: ContextVar[Optional[int]] = ContextVar("portal_id", default=None)

MAX_REQUEST_ID_LENGTH = 128


def parse_portal_id(raw: Optional[str]) -> Optional[int]:
    """Parse a portal id header value; anything but a non-negative integer is ignored."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.isdigit():
        return None
    return int(raw)


class RequestContextMiddleware:
    """Bind the request id and the addressed portal for the duration of a request.

    X-Request-ID is taken from the client when present (truncated) or generated.
    The portal comes from X-Portal-ID, falling back to the configured default;
    a verified identity can still override it in `portal_dependency`. Both
    values are echoed back as response headers.
    """

    def __init__(self, app: ASGIApp, default_portal_id: int = 0):
        self.app = app
        self.default_portal_id = default_portal_id

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in scope.get("headers", [])}
        request_id = (headers.get("x-request-id") or uuid.uuid4().hex)[:MAX_REQUEST_ID_LENGTH]
        portal_id = parse_portal_id(headers.get("x-portal-id"))
        if portal_id is None:
            portal_id = self.default_portal_id

        request_token = request_id_ctx_var.set(request_id)
        portal_token = portal_ctx_var.set(portal_id)

        async def send_with_context(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", []).extend([
                    (b"x-request-id", request_id.encode("latin-1")),
                    (b"x-portal-id", str(portal_id).encode()),
                ])
            await send(message)

        try:
            await self.app(scope, receive, send_with_context)
        finally:
            portal_ctx_var.reset(portal_token)
            request_id_ctx_var.reset(request_token)
