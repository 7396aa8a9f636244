"""Predicate builder for member searches.

Each builder takes one criterion and returns a SQLAlchemy boolean
clause, or `None` when the criterion is absent. Absent criteria are
dropped from the result of `build_predicates` rather than replaced
with a vacuous `TRUE`, so an empty condition yields an empty list and
the statement carries no WHERE clause at all.
"""

from typing import List, Optional
from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement
from .models import Member, Team
from .schemas import MemberSearchCondition


def has_text(value: Optional[str]) -> bool:
    """Return True if `value` contains at least one non-whitespace character."""
    return value is not None and value.strip() != ""


def username_eq(username: Optional[str]) -> Optional[ColumnElement]:
    return Member.username == username if has_text(username) else None


def team_name_eq(team_name: Optional[str], joined: bool = True) -> Optional[ColumnElement]:
    """Match members whose team is named `team_name`.

    With `joined=True` the clause compares the joined `team.name` column.
    Statements without a join to `team` (bulk UPDATE/DELETE) need
    `joined=False`, which renders an EXISTS subquery over the relationship.
    """
    if not has_text(team_name):
        return None
    if joined:
        return Team.name == team_name
    return Member.team.has(Team.name == team_name)


def age_goe(age: Optional[int]) -> Optional[ColumnElement]:
    return Member.age >= age if age is not None else None


def age_loe(age: Optional[int]) -> Optional[ColumnElement]:
    return Member.age <= age if age is not None else None


def build_predicates(condition: Optional[MemberSearchCondition], joined: bool = True) -> List[ColumnElement]:
    """Return one clause per populated field of `condition`, in a fixed order."""
    if condition is None:
        return []
    candidates = [
        username_eq(condition.username),
        team_name_eq(condition.team_name, joined=joined),
        age_goe(condition.age_goe),
        age_loe(condition.age_loe),
    ]
    return [p for p in candidates if p is not None]


def conjunction(predicates: List[ColumnElement]) -> ColumnElement:
    """AND the predicates together; the empty conjunction matches every row."""
    if not predicates:
        return true()
    return and_(*predicates)
