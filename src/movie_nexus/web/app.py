from __future__ import annotations

"""HTTP surface: the manifest at ``/`` and served files under ``/file/``."""

from dataclasses import dataclass
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from movie_nexus.catalogue.served_files import ServedFileIndex
from movie_nexus.models.catalogue import CatalogueItem
from movie_nexus.util.byte_range import RangeSyntaxError, parse_range, single_range
from movie_nexus.util.paths import decode_request_path
from movie_nexus.web.range_serving import FileServeError, prepare_file_response

LOGGER = logging.getLogger(__name__)

PATH_MANIFEST = "/"
PATH_FILE_PREFIX = "/file/"

ALLOWED_ORIGIN = "*"
MAX_AGE = 48 * 60 * 60


@dataclass(frozen=True)
class CatalogueState:
    root_path: Path
    catalogue: tuple[CatalogueItem, ...]
    manifest: bytes
    served_files: ServedFileIndex


def common_file_headers() -> dict[str, str]:
    return {
        "Accept-Ranges": "bytes",
        "Access-Control-Allow-Origin": ALLOWED_ORIGIN,
        "Access-Control-Expose-Headers": "Content-Type, Accept-Encoding, Range",
        "Access-Control-Max-Age": str(MAX_AGE),
    }


def _is_visible_ascii(value: str) -> bool:
    return all(ch == "\t" or " " <= ch <= "~" for ch in value)


def _requested_path(request: Request) -> str:
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        raw_path = request.url.path.encode("utf-8")
    decoded = decode_request_path(raw_path.partition(b"?")[0])
    return decoded[len(PATH_FILE_PREFIX):]


def serve_file(state: CatalogueState, request: Request) -> Response:
    headers = common_file_headers()

    range_header = request.headers.get("range")
    if range_header is not None and not _is_visible_ascii(range_header):
        LOGGER.warning("Invalid range: header is not visible ASCII")
        return PlainTextResponse("Invalid range", status_code=400, headers=headers)

    try:
        requested_path = _requested_path(request)
    except UnicodeDecodeError:
        return PlainTextResponse(
            "Path is not a valid file path", status_code=400, headers=headers
        )

    served = state.served_files.lookup(requested_path)
    if served is None:
        return Response(status_code=404, headers=headers)

    byte_range = None
    if range_header is not None:
        try:
            byte_range = single_range(parse_range(range_header))
        except RangeSyntaxError as exc:
            LOGGER.warning("Error while parsing the byte range: %s", exc)
            return PlainTextResponse(
                "Malformed Range header", status_code=400, headers=headers
            )

    try:
        plan = prepare_file_response(served.path, byte_range)
    except FileServeError as exc:
        LOGGER.error("%s", exc)
        return PlainTextResponse(
            "Couldn't read the file", status_code=500, headers=headers
        )

    headers.update(plan.headers)
    if plan.body is None:
        return Response(status_code=plan.status_code, headers=headers)
    # Runs after a client disconnect too, so the handle never waits for GC.
    return StreamingResponse(
        plan.body,
        status_code=plan.status_code,
        headers=headers,
        background=BackgroundTask(plan.body.close),
    )


def create_app(state: CatalogueState) -> FastAPI:
    app = FastAPI(
        title="MovieNexus",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.catalogue = state

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return Response(status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.get(PATH_MANIFEST)
    async def manifest() -> Response:
        return Response(content=state.manifest, media_type="application/json")

    @app.get(PATH_FILE_PREFIX + "{file_path:path}")
    def get_file(file_path: str, request: Request) -> Response:
        return serve_file(state, request)

    @app.options(PATH_FILE_PREFIX + "{file_path:path}")
    async def options_file(file_path: str) -> Response:
        headers = common_file_headers()
        headers["Access-Control-Allow-Methods"] = "GET"
        return Response(status_code=200, headers=headers)

    return app
