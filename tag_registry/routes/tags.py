from __future__ import annotations

import logging
from datetime import datetime
from urllib.parse import unquote

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, Field

from ..domain.tag_key import KeyFormatError, parse_limit, parse_read_name, parse_write_key
from ..logs import LogContext
from ..services.tag_svc import StoreError, TagStore

logger = logging.getLogger(__name__)


class TagRecordOut(BaseModel):
    name: str
    tag: str
    updated_at: datetime = Field(serialization_alias="UpdatedAt")


def get_store(request: Request) -> TagStore:
    return request.app.state.store


def path_key(request: Request, key: str) -> str:
    """
    The {key} segment, checked against the undecoded path so that an escaped
    slash (`library%2Fnginx:1.25`) stays inside one segment while a literal
    slash (`library/nginx:1.25`) does not route.
    """
    raw = request.scope.get("raw_path")
    if raw:
        segment = raw.decode("latin-1").split("?", 1)[0].rsplit("/", 1)[-1]
        single = unquote(segment) == key
    else:
        single = "/" not in key
    if not key or not single:
        raise HTTPException(status_code=404, detail="Not Found")
    return key


def api_tags_list(
    key: str = Depends(path_key),
    limit: str | None = Query(None, description="最多返回条数；缺省、非整数或 <=0 表示不限"),
    store: TagStore = Depends(get_store),
):
    name = parse_read_name(key)
    n = parse_limit(limit)
    log = LogContext("LIST_TAGS")
    log.set_entity("name", name)
    log.set_payload({"limit": n})
    try:
        records = store.list_by_name(name, n)
    except Exception as e:
        if not isinstance(e, StoreError):
            logger.exception("list %s failed", name)
        log.write("ERROR", str(e))
        return PlainTextResponse("server database error", status_code=500)
    try:
        items = [
            TagRecordOut(name=r.name, tag=r.tag, updated_at=r.updated_at).model_dump(by_alias=True, mode="json")
            for r in records
        ]
    except Exception as e:
        logger.exception("serialize %s failed", name)
        log.write("ERROR", str(e))
        return PlainTextResponse("server error", status_code=500)
    log.write("OK")
    return JSONResponse(items)


def api_tags_upsert(key: str = Depends(path_key), store: TagStore = Depends(get_store)):
    log = LogContext("UPSERT_TAG")
    log.set_entity("key", key)
    try:
        name, tag = parse_write_key(key)
    except KeyFormatError as ve:
        log.write("REJECTED", str(ve))
        return PlainTextResponse("format error", status_code=400)
    try:
        rec = store.upsert(name, tag)
    except Exception as e:
        if not isinstance(e, StoreError):
            logger.exception("upsert %s failed", key)
        log.write("ERROR", str(e))
        return PlainTextResponse("server error", status_code=500)
    log.set_payload({"id": rec.id, "updated_at": rec.updated_at.isoformat()})
    log.write("OK")
    return Response(status_code=200)


def build_router(prefix: str) -> APIRouter:
    """Routes for /{prefix}/{key}; prefix is fixed for the life of the app."""
    router = APIRouter()
    path = f"/{prefix}/{{key:path}}"
    router.add_api_route(path, api_tags_list, methods=["GET"])
    router.add_api_route(path, api_tags_upsert, methods=["POST", "PUT"])
    return router
