"""Business logic services used by HTTP controllers.

`MemberService` coordinates the member repository for the web layer:
it picks the paging strategy, parses sort parameters, and owns the
transaction boundary for bulk mutations.
"""

import json
import logging
from typing import Any, List, Mapping, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from . import repositories
from .schemas import MemberSearchCondition, MemberTeamDto, Page, PageRequest, SortOrder

logger = logging.getLogger("member_api.service")

PAGE_STRATEGIES = ("simple", "complex")


def parse_sort(values: Optional[List[str]]) -> List[SortOrder]:
    """Parse `property[,direction[,nulls_first|nulls_last]]` strings into sort orders.

    Raises ValueError for unknown properties, directions or null
    placements.
    """
    orders = []
    for raw in values or []:
        parts = [p.strip() for p in raw.split(',') if p.strip()]
        if not parts or len(parts) > 3:
            raise ValueError(f"invalid sort: {raw!r}")
        prop = parts[0]
        direction = parts[1].lower() if len(parts) > 1 else 'asc'
        nulls = None
        if len(parts) > 2:
            placement = parts[2].lower()
            if placement not in ('nulls_first', 'nulls_last'):
                raise ValueError(f"invalid null placement: {parts[2]!r}")
            nulls = placement[len('nulls_'):]
        # pydantic ValidationError is a ValueError
        orders.append(SortOrder(property=prop, direction=direction, nulls=nulls))
    return orders


class MemberService:
    """Member search and bulk mutation operations."""
    def __init__(self, session: Session):
        self.session = session
        self.member_repo = repositories.MemberRepository(session)

    def search(self, condition: MemberSearchCondition) -> List[MemberTeamDto]:
        return self.member_repo.search(condition)

    def search_page(self, condition: MemberSearchCondition, page_request: PageRequest, strategy: str = 'simple') -> Page[MemberTeamDto]:
        """Return one page using the `simple` (always count) or `complex` (count when needed) strategy."""
        if strategy == 'simple':
            return self.member_repo.search_page_simple(condition, page_request)
        if strategy == 'complex':
            return self.member_repo.search_page_complex(condition, page_request)
        raise ValueError(f"unknown paging strategy: {strategy}")

    def bulk_update(self, assignments: Mapping[Any, Any], condition: MemberSearchCondition) -> int:
        """Run a bulk UPDATE and commit it.

        On a store error the transaction is rolled back and the error is
        re-raised unchanged; with SQLite no row is left modified. Objects
        loaded through this session before the call are expired by the
        commit and reload on next access.
        """
        try:
            count = self.member_repo.bulk_update(assignments, condition)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("bulk_update_failed %s", json.dumps({"error": type(e).__name__}))
            raise
        return count

    def bulk_delete(self, condition: MemberSearchCondition) -> int:
        """Run a bulk DELETE and commit it; store errors roll back and propagate."""
        try:
            count = self.member_repo.bulk_delete(condition)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("bulk_delete_failed %s", json.dumps({"error": type(e).__name__}))
            raise
        return count
