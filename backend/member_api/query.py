"""Query composition over the Schema Model.

Builds the SELECT / COUNT statements shared by the member search
operations: a LEFT OUTER JOIN from `member` to `team` (teamless members
stay in the result with empty team columns), caller-supplied ordering
with a deterministic tie-breaker, and OFFSET/LIMIT paging. Sort keys
that arrive as text are resolved through `SORT_COLUMNS`; anything
outside that mapping is rejected.
"""

from typing import Iterable, List
from sqlalchemy import func
from sqlmodel import select
from .models import Member, Team
from .schemas import PageRequest, SortOrder

SORT_COLUMNS = {
    "memberId": Member.id,
    "username": Member.username,
    "age": Member.age,
    "teamId": Team.id,
    "teamName": Team.name,
}


def member_team_columns():
    return (
        Member.id.label("member_id"),
        Member.username.label("username"),
        Member.age.label("age"),
        Team.id.label("team_id"),
        Team.name.label("team_name"),
    )


def member_team_select(predicates: Iterable = ()):
    """SELECT the member/team projection columns, filtered by `predicates`."""
    stmt = select(*member_team_columns()).select_from(Member).outerjoin(Team, Member.team_id == Team.id)
    return stmt.where(*predicates)


def member_team_count(predicates: Iterable = ()):
    """COUNT the rows `member_team_select` would return; no other columns are read."""
    stmt = select(func.count(Member.id)).select_from(Member).outerjoin(Team, Member.team_id == Team.id)
    return stmt.where(*predicates)


def order_clause(order: SortOrder):
    column = SORT_COLUMNS.get(order.property)
    if column is None:
        raise ValueError(f"unsupported sort property: {order.property}")
    clause = column.desc() if order.direction == "desc" else column.asc()
    if order.nulls == "first":
        clause = clause.nulls_first()
    elif order.nulls == "last":
        clause = clause.nulls_last()
    return clause


def apply_sort(stmt, orders: List[SortOrder]):
    """Apply `orders` then `member.id ASC` unless the caller already sorts by id.

    The trailing id keeps row order total, so the same offset/limit
    always selects the same rows from unchanged data.
    """
    clauses = [order_clause(o) for o in orders]
    if not any(o.property == "memberId" for o in orders):
        clauses.append(Member.id.asc())
    return stmt.order_by(*clauses)


def apply_paging(stmt, page_request: PageRequest):
    return stmt.offset(page_request.offset).limit(page_request.limit)
