"""Request ID middleware.

Propagates an incoming ``X-Request-Id`` header or assigns a fresh one, and
echoes it on the response so client-side notifications can be correlated
with server logs.
"""

from __future__ import annotations

import logging
import uuid

logger = logging.getLogger(__name__)


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = "X-Request-Id") -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = None
        for key, value in scope.get("headers") or []:
            if key.lower() == self._header_key and value:
                request_id = value.decode("latin-1")
                break
        if not request_id:
            request_id = str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                headers = list(message.get("headers") or [])
                if not any(k.lower() == self._header_key for k, _ in headers):
                    headers.append((self.header_name.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        logger.debug("request_start method=%s path=%s request_id=%s", scope.get("method"), scope.get("path"), request_id)
        await self.app(scope, receive, send_wrapper)


__all__ = ["RequestIdMiddleware"]
