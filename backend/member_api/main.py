"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the member search backend.
Controllers are intentionally thin: they translate query parameters
into a `MemberSearchCondition` and a `PageRequest`, delegate to
`services.MemberService`, and return JSON responses.

Endpoints implemented:
- GET /v1/members              (unpaged search)
- GET /v2/members              (paged, count query always issued)
- GET /v3/members              (paged, count query only when needed)
- POST /v1/members/bulk-update
- POST /v1/members/bulk-delete
- GET /health
"""

from fastapi import FastAPI, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlmodel import Session
from typing import List, Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import repositories, services
from .config import settings
from .schemas import BulkResult, BulkUpdateIn, MemberSearchCondition, MemberTeamDto, Page, PageRequest

app = FastAPI(title="Member Search API")
logger = logging.getLogger("member_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


def search_condition(
    username: Optional[str] = None,
    team_name: Optional[str] = Query(default=None, alias="teamName"),
    age_goe: Optional[int] = Query(default=None, alias="ageGoe"),
    age_loe: Optional[int] = Query(default=None, alias="ageLoe"),
) -> MemberSearchCondition:
    return MemberSearchCondition(username=username, team_name=team_name, age_goe=age_goe, age_loe=age_loe)


def page_request(
    page: int = 0,
    size: Optional[int] = None,
    sort: Optional[List[str]] = Query(default=None),
) -> PageRequest:
    """Build a `PageRequest` from `page`, `size` and repeated `sort` params.

    `sort` values look like `age,desc` or `username,asc,nulls_last`.
    """
    if size is None:
        size = settings.DEFAULT_PAGE_SIZE
    if size > settings.MAX_PAGE_SIZE:
        raise HTTPException(status_code=400, detail=f"size must be <= {settings.MAX_PAGE_SIZE}")
    try:
        return PageRequest.of(page, size, services.parse_sort(sort))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get('/v1/members', response_model=List[MemberTeamDto])
def search_members_v1(condition: MemberSearchCondition = Depends(search_condition), db: Session = Depends(get_session)):
    """Return every member matching the optional filters, joined with its team."""
    return services.MemberService(db).search(condition)


@app.get('/v2/members', response_model=Page[MemberTeamDto])
def search_members_v2(
    condition: MemberSearchCondition = Depends(search_condition),
    pageable: PageRequest = Depends(page_request),
    db: Session = Depends(get_session),
):
    """Return one page of matches; the total is always counted."""
    return services.MemberService(db).search_page(condition, pageable, strategy='simple')


@app.get('/v3/members', response_model=Page[MemberTeamDto])
def search_members_v3(
    condition: MemberSearchCondition = Depends(search_condition),
    pageable: PageRequest = Depends(page_request),
    db: Session = Depends(get_session),
):
    """Return one page of matches; the count query is skipped on a provably last page."""
    return services.MemberService(db).search_page(condition, pageable, strategy='complex')


@app.post('/v1/members/bulk-update', response_model=BulkResult)
def bulk_update_members(payload: BulkUpdateIn, db: Session = Depends(get_session)):
    """Update all matching members in one statement.

    `username` sets the name; `age_add` or `age_multiply` (not both) is
    applied to the stored age by the database.
    """
    assignments = {}
    if payload.username is not None:
        assignments.update(repositories.set_username(payload.username))
    if payload.age_add is not None and payload.age_multiply is not None:
        raise HTTPException(status_code=400, detail="age_add and age_multiply are mutually exclusive")
    if payload.age_add is not None:
        assignments.update(repositories.add_age(payload.age_add))
    elif payload.age_multiply is not None:
        assignments.update(repositories.multiply_age(payload.age_multiply))
    if not assignments:
        raise HTTPException(status_code=400, detail='nothing to update')
    count = services.MemberService(db).bulk_update(assignments, payload.condition)
    return {'count': count}


@app.post('/v1/members/bulk-delete', response_model=BulkResult)
def bulk_delete_members(condition: MemberSearchCondition, db: Session = Depends(get_session)):
    """Delete all matching members in one statement; an empty condition deletes every member."""
    count = services.MemberService(db).bulk_delete(condition)
    return {'count': count}


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
