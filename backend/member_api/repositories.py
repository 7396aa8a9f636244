"""Repository classes encapsulating database operations.

`MemberRepository` owns every member query: the search operations
(list and paged), bulk mutations, and a handful of join, aggregate,
subquery and SQL-function queries. `TeamRepository` is plain CRUD.

Search methods never commit. Bulk mutations run inside the caller's
transaction and leave commit/rollback to the caller (see
`services.MemberService`).
"""

import json
import logging
from typing import Any, List, Mapping, Optional, Tuple
from sqlalchemy import and_, delete, func, update
from sqlalchemy.orm import aliased, joinedload
from sqlmodel import Session, select
from . import models, paging, projections, query
from .predicates import build_predicates
from .schemas import MemberDto, MemberSearchCondition, MemberStats, MemberTeamDto, Page, PageRequest

logger = logging.getLogger("member_api.repository")


def set_username(value: Optional[str]) -> dict:
    """Assignment setting `username` to a constant."""
    return {models.Member.username: value}


def add_age(n: int) -> dict:
    """Assignment adding `n` to the stored age (computed by the database)."""
    return {models.Member.age: models.Member.age + n}


def multiply_age(n: int) -> dict:
    """Assignment multiplying the stored age by `n`."""
    return {models.Member.age: models.Member.age * n}


class MemberRepository:
    """Queries and bulk mutations over `Member` joined with `Team`."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, member: models.Member) -> models.Member:
        """Persist a new member and return the managed instance."""
        self.session.add(member)
        self.session.commit()
        self.session.refresh(member)
        return member

    def search(self, condition: Optional[MemberSearchCondition]) -> List[MemberTeamDto]:
        """Return every matching member/team row, ordered by member id."""
        stmt = query.apply_sort(query.member_team_select(build_predicates(condition)), [])
        return [projections.to_member_team_dto(row) for row in self.session.exec(stmt).all()]

    def _fetch_page_content(self, condition, page_request: PageRequest) -> List[MemberTeamDto]:
        stmt = query.member_team_select(build_predicates(condition))
        stmt = query.apply_paging(query.apply_sort(stmt, page_request.sort), page_request)
        return [projections.to_member_team_dto(row) for row in self.session.exec(stmt).all()]

    def count(self, condition: Optional[MemberSearchCondition]) -> int:
        """Count matching rows without loading them."""
        return self.session.exec(query.member_team_count(build_predicates(condition))).one()

    def search_page_simple(self, condition: Optional[MemberSearchCondition], page_request: PageRequest) -> Page[MemberTeamDto]:
        """Fetch one page and always run a separate count query."""
        content = self._fetch_page_content(condition, page_request)
        total = self.count(condition)
        return Page[MemberTeamDto].create(content, page_request, total)

    def search_page_complex(self, condition: Optional[MemberSearchCondition], page_request: PageRequest) -> Page[MemberTeamDto]:
        """Fetch one page; run the count query only if the page does not imply the total."""
        content = self._fetch_page_content(condition, page_request)
        return paging.build_page(content, page_request, lambda: self.count(condition), page_cls=Page[MemberTeamDto])

    def bulk_update(self, assignments: Mapping[Any, Any], condition: Optional[MemberSearchCondition]) -> int:
        """Apply `assignments` to all matching rows in one UPDATE and return the row count.

        Rows are not loaded and `synchronize_session` is off: `Member`
        instances already held by the session keep their old attribute
        values until the caller expires or re-fetches them.
        """
        if not assignments:
            raise ValueError("at least one assignment is required")
        values = {}
        for column, value in assignments.items():
            # plain columns only; relationships like `Member.team` are not assignable
            key = getattr(column, "key", None)
            if getattr(column, "class_", None) is not models.Member or key not in models.Member.__table__.c.keys() or key == "id":
                raise ValueError(f"cannot assign to {column!r}")
            values[column] = value
        stmt = (
            update(models.Member)
            .where(*build_predicates(condition, joined=False))
            .values(values)
            .execution_options(synchronize_session=False)
        )
        count = self.session.execute(stmt).rowcount
        logger.info("bulk_update %s", json.dumps({"columns": sorted(c.key for c in values), "count": count}))
        return count

    def bulk_delete(self, condition: Optional[MemberSearchCondition]) -> int:
        """Delete all matching rows in one DELETE and return the row count.

        Deleted `Member` instances already held by the session are not
        evicted; callers must not use them afterwards.
        """
        stmt = (
            delete(models.Member)
            .where(*build_predicates(condition, joined=False))
            .execution_options(synchronize_session=False)
        )
        count = self.session.execute(stmt).rowcount
        logger.info("bulk_delete %s", json.dumps({"count": count}))
        return count

    def find_by_username(self, username: str) -> List[models.Member]:
        """Return all members with exactly this username."""
        stmt = select(models.Member).where(models.Member.username == username).order_by(models.Member.id)
        return self.session.exec(stmt).all()

    def find_with_team(self, username: str) -> Optional[models.Member]:
        """Return the first member named `username` with its team loaded in the same query."""
        stmt = (
            select(models.Member)
            .options(joinedload(models.Member.team))
            .where(models.Member.username == username)
            .order_by(models.Member.id)
        )
        return self.session.exec(stmt).first()

    def member_dtos(self, condition: Optional[MemberSearchCondition] = None) -> List[MemberDto]:
        """Project matching members to (username, age) only."""
        stmt = (
            select(models.Member.username.label("username"), models.Member.age.label("age"))
            .select_from(models.Member)
            .outerjoin(models.Team, models.Member.team_id == models.Team.id)
            .where(*build_predicates(condition))
            .order_by(models.Member.id)
        )
        return [projections.to_member_dto(row) for row in self.session.exec(stmt).all()]

    def age_statistics(self, condition: Optional[MemberSearchCondition] = None, having_age_gt: Optional[int] = None) -> List[MemberStats]:
        """Aggregate matching members grouped by (username, age).

        Groups are ordered by age descending, then username ascending
        with absent usernames last.
        """
        stmt = (
            select(
                models.Member.username.label("username"),
                models.Member.age.label("age"),
                func.count(models.Member.id).label("count"),
                func.sum(models.Member.age).label("age_sum"),
                func.avg(models.Member.age).label("age_avg"),
                func.max(models.Member.age).label("age_max"),
                func.min(models.Member.age).label("age_min"),
            )
            .select_from(models.Member)
            .outerjoin(models.Team, models.Member.team_id == models.Team.id)
            .where(*build_predicates(condition))
            .group_by(models.Member.username, models.Member.age)
        )
        if having_age_gt is not None:
            stmt = stmt.having(models.Member.age > having_age_gt)
        stmt = stmt.order_by(models.Member.age.desc(), models.Member.username.asc().nulls_last())
        return [projections.to_member_stats(row) for row in self.session.exec(stmt).all()]

    def members_with_team_on(self, team_name: str) -> List[Tuple[models.Member, Optional[models.Team]]]:
        """Left join every member to its team, keeping the team only if it is named `team_name`.

        The team filter sits in the ON clause, so members of other teams
        (and teamless members) are returned with `None` in place of the team.
        """
        stmt = (
            select(models.Member, models.Team)
            .outerjoin(models.Team, and_(models.Member.team_id == models.Team.id, models.Team.name == team_name))
            .order_by(models.Member.id)
        )
        return [(m, t) for m, t in self.session.exec(stmt).all()]

    def members_with_team_on_username(self) -> List[Tuple[models.Member, Optional[models.Team]]]:
        """Left join on an unrelated column: pair each member with the team named like it.

        Every member is returned; the team is `None` unless some team's
        name equals the member's username.
        """
        stmt = (
            select(models.Member, models.Team)
            .outerjoin(models.Team, models.Member.username == models.Team.name)
            .order_by(models.Member.id)
        )
        return [(m, t) for m, t in self.session.exec(stmt).all()]

    def members_named_after_teams(self) -> List[models.Member]:
        """Theta join: members whose username equals some team's name."""
        stmt = select(models.Member).where(models.Member.username == models.Team.name).order_by(models.Member.id)
        return self.session.exec(stmt).all()

    def oldest_members(self) -> List[models.Member]:
        sub = aliased(models.Member)
        stmt = select(models.Member).where(models.Member.age == select(func.max(sub.age)).scalar_subquery()).order_by(models.Member.id)
        return self.session.exec(stmt).all()

    def members_at_or_above_average_age(self) -> List[models.Member]:
        sub = aliased(models.Member)
        stmt = select(models.Member).where(models.Member.age >= select(func.avg(sub.age)).scalar_subquery()).order_by(models.Member.id)
        return self.session.exec(stmt).all()

    def members_with_age_in_subquery(self, age_gt: int) -> List[models.Member]:
        """Members whose age appears among ages strictly greater than `age_gt`."""
        sub = aliased(models.Member)
        stmt = select(models.Member).where(models.Member.age.in_(select(sub.age).where(sub.age > age_gt))).order_by(models.Member.id)
        return self.session.exec(stmt).all()

    def usernames_with_average_age(self) -> List[Tuple[Optional[str], float]]:
        """Select-clause subquery: each username next to the average age of all members."""
        sub = aliased(models.Member)
        avg_age = select(func.avg(sub.age)).scalar_subquery().label("avg_age")
        stmt = select(models.Member.username, avg_age).order_by(models.Member.id)
        return [(username, avg) for username, avg in self.session.exec(stmt).all()]

    def usernames_replaced(self, old: str, new: str) -> List[Optional[str]]:
        """Return usernames with `old` replaced by `new` using the SQL `replace` function."""
        stmt = select(func.replace(models.Member.username, old, new)).order_by(models.Member.id)
        return self.session.exec(stmt).all()

    def usernames_already_lowercase(self) -> List[str]:
        stmt = select(models.Member.username).where(models.Member.username == func.lower(models.Member.username)).order_by(models.Member.id)
        return self.session.exec(stmt).all()


class TeamRepository:
    """CRUD operations for `Team` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, team: models.Team) -> models.Team:
        """Persist a new team and return the managed instance."""
        self.session.add(team)
        self.session.commit()
        self.session.refresh(team)
        return team

    def get_by_name(self, name: str) -> Optional[models.Team]:
        """Return the first `Team` with this name or `None`."""
        stmt = select(models.Team).where(models.Team.name == name).order_by(models.Team.id)
        return self.session.exec(stmt).first()

    def list_all(self) -> List[models.Team]:
        return self.session.exec(select(models.Team).order_by(models.Team.id)).all()
