"""Cancellation tokens tied to the lifetime of the view (HTTP request) that started an operation."""
from typing import Awaitable, Callable, Optional

from starlette.requests import Request


class CancellationToken:
    """
    Cooperative cancellation flag.

    Long-running loops call ``is_cancelled()`` before each step and stop
    touching shared state once it returns True. An optional async
    ``disconnected`` check lets the token follow a client disconnect.
    """

    def __init__(self, disconnected: Optional[Callable[[], Awaitable[bool]]] = None):
        self._cancelled = False
        self._disconnected = disconnected

    @classmethod
    def for_request(cls, request: Request) -> "CancellationToken":
        return cls(disconnected=request.is_disconnected)

    def cancel(self) -> None:
        self._cancelled = True

    async def is_cancelled(self) -> bool:
        if not self._cancelled and self._disconnected is not None:
            if await self._disconnected():
                self._cancelled = True
        return self._cancelled
