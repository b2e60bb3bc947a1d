"""FastAPI application exposing the cost manager endpoints."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, crud, database, schemas
from .config import load_settings
from .logging import configure_logging
from .store import SqlRecordStore

LOG = logging.getLogger(__name__)

settings = load_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings)
    database.init_db()
    LOG.info("Cost manager %s ready", __version__)
    yield


app = FastAPI(title="Cost Manager", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store(db: Session = Depends(database.get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ()) if item not in ("body", "query", "path"))
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, _describe_validation(exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOG.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        LOG.info(
            "%s %s -> %d",
            request.method,
            request.url.path,
            status_code,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "process_time_ms": round(elapsed_ms, 3),
            },
        )


def _errors(*codes: int) -> dict:
    return {code: {"model": schemas.ErrorRead} for code in codes}


@app.post(
    "/users",
    response_model=schemas.UserRead,
    responses=_errors(status.HTTP_400_BAD_REQUEST, status.HTTP_409_CONFLICT),
)
def create_user(user_in: schemas.UserCreate, store: SqlRecordStore = Depends(get_store)) -> schemas.UserRead:
    try:
        return crud.create_user(store, user_in)
    except crud.EntityConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@app.get("/users/{user_id}", response_model=schemas.UserSummary, responses=_errors(status.HTTP_404_NOT_FOUND))
def get_user(user_id: str, store: SqlRecordStore = Depends(get_store)) -> schemas.UserSummary:
    try:
        return crud.get_user_summary(store, user_id)
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@app.post(
    "/costs",
    response_model=schemas.CostRead,
    responses=_errors(status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND),
)
def create_cost(cost_in: schemas.CostCreate, store: SqlRecordStore = Depends(get_store)) -> schemas.CostRead:
    try:
        return crud.create_cost(store, cost_in)
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@app.get(
    "/report",
    response_model=schemas.ReportRead,
    responses=_errors(status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND),
)
def get_report(
    user_id: str = Query(..., alias="id", min_length=1),
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    store: SqlRecordStore = Depends(get_store),
) -> schemas.ReportRead:
    try:
        return crud.get_monthly_report(store, user_id, year, month)
    except crud.NoReportDataError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@app.get("/about", response_model=List[schemas.TeamMember])
def about() -> List[schemas.TeamMember]:
    return [schemas.TeamMember(**member) for member in settings.team_members]


@app.get("/health", tags=["system"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
