"""
Sheetlog HTTP server.

Exposes one spreadsheet as a row-oriented data store behind a single
endpoint. Every request names a method, a sheet tab and a key:

    GET  /?method=GET&sheet=logs&key=...            query-string request
    POST /  {"method": "POST", "sheet": "logs", ...}  JSON request
    POST /  [{...}, {...}]                           batch, one response per item

The response body is always an envelope whose `status` field carries the
outcome; the HTTP status is 200 for every handled request.
"""
import asyncio
import json
from typing import Any

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

import env_loader
from core.dispatcher import Dispatcher
from core.memory_grid import MemoryWorkbook
from core.permissions import PermissionEngine
from lib import errors
from lib.common import log
from lib.input_parser import decode_query_params

# Singleton dispatcher for the application
_dispatcher: Dispatcher | None = None


def build_dispatcher() -> Dispatcher:
    """Build a dispatcher from environment settings."""
    engine = PermissionEngine.from_config(env_loader.get_users_config())
    if env_loader.uses_default_users():
        log("WARNING: no user table configured; anonymous access to every method is enabled")

    backend = env_loader.get_backend()
    if backend == "memory":
        workbook = MemoryWorkbook()
        workbook.add_sheet("Sheet1")
    else:
        from sheets_client import get_sheets_client
        workbook = get_sheets_client().workbook(env_loader.get_spreadsheet_id())

    log(f"Sheetlog backend={backend} spreadsheet={workbook.id} users={len(engine.users)}")
    return Dispatcher(workbook, engine, tz=env_loader.get_timezone())


def get_dispatcher() -> Dispatcher:
    """Get or create the dispatcher singleton."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_dispatcher()
    return _dispatcher


def run_request(dispatcher: Dispatcher, params: Any) -> dict[str, Any]:
    """Run one request; unexpected failures become internal_error envelopes."""
    if not isinstance(params, dict):
        return errors.invalid_payload("request must be a JSON object")
    try:
        response = dispatcher.handle(params)
    except Exception as e:
        log("ERROR", params.get("method"), params.get("sheet"), repr(e))
        response = errors.internal_error(str(e))
    log(str(params.get("method") or "GET").upper(), params.get("sheet") or "", response.get("status"))
    return response


def create_app(dispatcher: Dispatcher | None = None) -> Starlette:
    """
    Create the Starlette application.

    Args:
        dispatcher: Dispatcher to serve (default: built from the environment
                    on first request)

    Returns:
        ASGI application
    """
    # One request at a time against the grid
    lock = asyncio.Lock()

    def current() -> Dispatcher:
        return dispatcher if dispatcher is not None else get_dispatcher()

    async def handle_get(request: Request) -> JSONResponse:
        params = decode_query_params(dict(request.query_params))
        async with lock:
            response = await run_in_threadpool(run_request, current(), params)
        return JSONResponse(response)

    async def handle_post(request: Request) -> JSONResponse:
        raw = (await request.body()).decode("utf-8", errors="replace")
        try:
            body = json.loads(raw)
        except json.JSONDecodeError:
            return JSONResponse(
                errors.invalid_post_payload(raw, request.headers.get("content-type"))
            )

        target = current()
        async with lock:
            if isinstance(body, list):
                result: Any = [await run_in_threadpool(run_request, target, item) for item in body]
            else:
                result = await run_in_threadpool(run_request, target, body)
        return JSONResponse(result)

    async def endpoint(request: Request) -> JSONResponse:
        if request.method == "POST":
            return await handle_post(request)
        return await handle_get(request)

    async def healthz(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return Starlette(
        routes=[
            Route("/", endpoint, methods=["GET", "POST"]),
            Route("/exec", endpoint, methods=["GET", "POST"]),
            Route("/healthz", healthz),
        ],
    )


app = create_app()


# ===== Server Entry Point =====

if __name__ == "__main__":
    import uvicorn

    port = env_loader.get_port()
    log(f"Starting server on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
