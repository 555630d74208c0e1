"""HTTP API: liveness, wake echo and watch registration."""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from . import __version__
from .store import InvalidInput, WatchRegistry

logger = logging.getLogger(__name__)

OTHER_METHODS = ["GET", "PUT", "PATCH", "DELETE"]


async def _json_object(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _non_empty_str(body: Dict[str, Any], name: str) -> Optional[str]:
    value = body.get(name)
    if isinstance(value, str) and value:
        return value
    return None


def _bad_request() -> Response:
    return Response(status_code=400)


def create_app(registry: WatchRegistry) -> FastAPI:
    app = FastAPI(title="Steam Play Watch", version=__version__)
    app.state.registry = registry

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "Server is online!"

    @app.post("/wake")
    async def wake(request: Request) -> Response:
        body = await _json_object(request)
        identifier = _non_empty_str(body, "identifier") if body is not None else None
        if identifier is None:
            return _bad_request()
        return PlainTextResponse(identifier)

    @app.post("/lookup")
    async def lookup(request: Request) -> Response:
        body = await _json_object(request)
        if body is None:
            return _bad_request()

        page = _non_empty_str(body, "page")
        token = _non_empty_str(body, "token")
        callback = _non_empty_str(body, "callback")
        if page is None or token is None or callback is None:
            return _bad_request()

        try:
            app.state.registry.register(page, callback, token)
        except InvalidInput as e:
            logger.debug("Rejected registration: %s", e)
            return _bad_request()

        return JSONResponse({"success": True})

    @app.api_route("/wake", methods=OTHER_METHODS, include_in_schema=False)
    @app.api_route("/lookup", methods=OTHER_METHODS, include_in_schema=False)
    async def wrong_method() -> Response:
        return _bad_request()

    return app
