from __future__ import annotations

import json
from typing import Any, List, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..domain.parser import RecordValidationError
from ..logging import get_logger
from ..export.dialects import DIALECTS, JSON_MIME, RecordKind, UnknownDialectError, get_dialect, get_record_kind
from ..export.serialize import render, to_json


LOG = get_logger("frontend")


def _attachment(content: str, file_name: str, mime_type: str) -> Response:
    return Response(
        content,
        media_type=mime_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


def _empty_notice() -> JSONResponse:
    return JSONResponse(
        {"status": "empty", "title": "No data", "description": "There is no data to export."},
        status_code=422,
    )


async def _read_records(request: Request, kind: RecordKind) -> List[Any]:
    try:
        payload = json.loads(await request.body() or b"null")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Request body must be JSON") from exc
    try:
        return kind.parse(payload)
    except RecordValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def create_app(*, allow_origins: Optional[List[str]] = None) -> Starlette:
    """Create a Starlette app that turns posted records into file downloads."""

    async def health(_: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    async def dialects(_: Request) -> JSONResponse:
        items = [
            {
                "name": d.name,
                "kind": d.kind,
                "header": d.header,
                "file_name": d.file_name,
                "mime_type": d.mime_type,
            }
            for d in DIALECTS.values()
        ]
        return JSONResponse({"items": items})

    async def export_dialect(request: Request) -> Response:
        try:
            dialect = get_dialect(request.path_params["dialect"])
        except UnknownDialectError as exc:
            raise HTTPException(status_code=404, detail="Unknown dialect") from exc
        records = await _read_records(request, get_record_kind(dialect.kind))
        if not records:
            return _empty_notice()
        LOG.info(f"Serving {dialect.file_name} for {len(records)} record(s)")
        return _attachment(render(records, dialect), dialect.file_name, dialect.mime_type)

    async def export_json(request: Request) -> Response:
        try:
            kind = get_record_kind(request.path_params["kind"])
        except UnknownDialectError as exc:
            raise HTTPException(status_code=404, detail="Unknown record kind") from exc
        records = await _read_records(request, kind)
        if not records:
            return _empty_notice()
        LOG.info(f"Serving {kind.json_file_name} for {len(records)} record(s)")
        return _attachment(to_json(records, kind), kind.json_file_name, JSON_MIME)

    routes = [
        Route("/api/health", health, methods=["GET"]),
        Route("/api/dialects", dialects, methods=["GET"]),
        Route("/api/export/{dialect:str}", export_dialect, methods=["POST"]),
        Route("/api/json/{kind:str}", export_json, methods=["POST"]),
    ]

    app = Starlette(debug=False, routes=routes)

    origins = allow_origins or ["http://localhost:3000", "http://127.0.0.1:3000"]
    if "*" in origins:
        cors_allow_origins = ["*"]
    else:
        cors_allow_origins = origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )
    return app


__all__ = ["create_app"]
