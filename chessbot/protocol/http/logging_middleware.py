from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"
GAMES_PREFIX = "/api/games/"


def _game_id_from_path(path: str) -> Optional[str]:
    # /api/games/{game_id}[/...]
    if not path.startswith(GAMES_PREFIX):
        return None
    game_id = path[len(GAMES_PREFIX):].split("/", 1)[0]
    return game_id or None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log it with the game it touches.

    A client-supplied ``x-request-id`` is reused so the moves of one game
    session can be traced across requests. The ID is echoed in the response
    header and is what error envelopes report.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "game_id": _game_id_from_path(request.url.path),
        }
        logger.debug("request", extra=context)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        status_code = response.status_code
        if status_code >= 500:
            level = logging.WARNING
        elif status_code >= 400:
            level = logging.INFO
        else:
            level = logging.DEBUG if request.url.path == "/healthz" else logging.INFO
        logger.log(
            level,
            "response",
            extra={
                **context,
                "status_code": status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
