# toddler_fun/main.py
import os
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from databases import Database
from sqlalchemy import create_engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from toddler_fun import models, schemas
from toddler_fun.config import Settings, load_env
from toddler_fun.logs import setup_logging
from toddler_fun.middleware import WriteGateMiddleware
from toddler_fun.store import ActivityStore, ErrorKind, StoreError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.CONSTRAINT: 409,
}

router = APIRouter()


def get_store(request: Request) -> ActivityStore:
    return request.app.state.store


def _parse_id(raw):
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid activity id: {raw!r}")


def _storable(activity_id):
    # Ids outside the column's range can't match any row
    return 1 <= activity_id <= models.MAX_INTEGER


def _not_found():
    return HTTPException(status_code=404, detail="Activity not found")


@router.get("/activities", response_model=List[schemas.ActivityOut], summary="List all activities")
async def list_activities(store: ActivityStore = Depends(get_store)):
    return await store.list()


@router.post("/activities", response_model=schemas.ActivityOut, status_code=201, summary="Create an activity")
async def create_activity(activity: schemas.ActivityIn, store: ActivityStore = Depends(get_store)):
    return await store.create(activity.category, activity.title, activity.description)


@router.put("/activities", response_model=schemas.ActivityOut, summary="Update fields or overwrite the counter")
async def update_activity(payload: schemas.ActivityUpdate, store: ActivityStore = Depends(get_store)):
    if not _storable(payload.id):
        raise _not_found()
    if payload.completion_count is not None:
        record = await store.update_counter(payload.id, payload.completion_count)
    else:
        record = await store.update_fields(
            payload.id,
            category=payload.category,
            title=payload.title,
            description=payload.description,
        )
    if record is None:
        raise _not_found()
    return record


@router.delete("/activities", response_model=schemas.DeleteResult, summary="Delete by id or title")
async def delete_activity(
    activity_id: Optional[str] = Query(None, alias="id"),
    title: Optional[str] = Query(None),
    store: ActivityStore = Depends(get_store),
):
    if activity_id:
        parsed = _parse_id(activity_id)
        deleted = await store.delete(activity_id=parsed) if _storable(parsed) else None
        identifier = activity_id
    elif title:
        deleted = await store.delete(title=title)
        identifier = title
    else:
        raise HTTPException(status_code=400, detail="Activity id or title is required")
    if deleted is None:
        raise _not_found()
    return {"success": True, "identifier": identifier}


@router.post(
    "/activities/{activity_id}/completions",
    response_model=schemas.ActivityOut,
    summary="Record that an activity was done",
)
async def record_completion(activity_id: int, store: ActivityStore = Depends(get_store)):
    record = await store.increment_counter(activity_id) if _storable(activity_id) else None
    if record is None:
        raise _not_found()
    return record


@router.get("/env-check", response_model=schemas.EnvCheck, summary="Write-gate configuration")
async def env_check(request: Request):
    settings: Settings = request.app.state.settings
    return {
        "environment": settings.environment,
        "allow_production_writes": settings.allow_production_writes,
        "writes_enabled": settings.writes_enabled,
    }


def _error_fields(exc: RequestValidationError) -> List[dict]:
    return [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")), "message": err.get("msg")}
        for err in exc.errors()
    ]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        load_env()
        settings = Settings.from_env()

    database = Database(settings.database_url)

    app = FastAPI(title="Toddler Fun API")
    app.state.settings = settings
    app.state.database = database
    app.state.store = ActivityStore(database)

    app.add_middleware(WriteGateMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        fields = _error_fields(exc)
        names = ", ".join(f["field"] for f in fields if f["field"]) or "request"
        return JSONResponse(
            status_code=400,
            content={"error": f"Missing or invalid field(s): {names}", "details": fields},
        )

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        status = STATUS_BY_KIND.get(exc.kind, 500)
        return JSONResponse(status_code=status, content={"error": exc.message, "details": exc.details})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})

    # Startup / Shutdown events
    @app.on_event("startup")
    async def startup():
        connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
        engine = create_engine(settings.database_url, connect_args=connect_args)
        try:
            models.metadata.create_all(engine)
        finally:
            engine.dispose()
        if not database.is_connected:
            await database.connect()
        logger.info(
            f"Started in {settings.environment} mode (writes {'enabled' if settings.writes_enabled else 'blocked'})"
        )

    @app.on_event("shutdown")
    async def shutdown():
        if database.is_connected:
            await database.disconnect()

    return app


app = create_app()


def run():
    import uvicorn

    setup_logging(logging.INFO)
    uvicorn.run(
        "toddler_fun.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
