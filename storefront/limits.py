# storefront/limits.py
from fastapi import HTTPException
from fastapi.responses import JSONResponse


class BodySizeLimitMiddleware:
    """Reject request bodies above ``max_body_bytes`` with 413.

    A declared Content-Length over the limit is answered before the app runs.
    Chunked bodies are counted while the endpoint reads them.
    """

    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    def _message(self) -> str:
        return f"Request body exceeds {self.max_body_bytes} bytes"

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        declared = headers.get(b"content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            response = JSONResponse(status_code=413, content={"message": self._message()})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise HTTPException(status_code=413, detail=self._message())
            return message

        await self.app(scope, limited_receive, send)
