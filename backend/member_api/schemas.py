"""Pydantic request/response schemas used by the API and repositories.

Schemas keep query inputs and result shapes stable: search criteria,
page requests, sort orders, the flattened member/team projection and
the generic `Page` envelope.
"""

from math import ceil
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Generic, List, Literal, Optional, TypeVar
from .config import settings

T = TypeVar("T")

SortProperty = Literal["memberId", "username", "age", "teamId", "teamName"]


class MemberSearchCondition(BaseModel):
    """Optional search criteria; every absent field leaves the query unconstrained."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_camel)

    username: Optional[str] = None
    team_name: Optional[str] = None
    age_goe: Optional[int] = None
    age_loe: Optional[int] = None


class SortOrder(BaseModel):
    """One ORDER BY term addressed by projection property name."""
    model_config = ConfigDict(frozen=True)

    property: SortProperty
    direction: Literal["asc", "desc"] = "asc"
    nulls: Optional[Literal["first", "last"]] = None


class PageRequest(BaseModel):
    """A bounded window `[offset, offset + limit)` plus its sort orders."""
    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    limit: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE, ge=1)
    sort: List[SortOrder] = Field(default_factory=list)

    @classmethod
    def of(cls, page: int, size: int, sort: Optional[List[SortOrder]] = None) -> "PageRequest":
        """Build a request from a zero-based page number and page size."""
        if page < 0:
            raise ValueError("page must be >= 0")
        if size < 1:
            raise ValueError("size must be >= 1")
        return cls(offset=page * size, limit=size, sort=sort or [])

    @property
    def page_number(self) -> int:
        return self.offset // self.limit


class MemberTeamDto(BaseModel):
    """Flattened read-only view of a member joined with its team."""
    model_config = ConfigDict(frozen=True)

    member_id: int
    username: Optional[str] = None
    age: int
    team_id: Optional[int] = None
    team_name: Optional[str] = None


class MemberDto(BaseModel):
    """Member-only projection (username and age)."""
    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    age: int


class MemberStats(BaseModel):
    """Aggregates for one (username, age) group."""
    username: Optional[str] = None
    age: int
    count: int
    age_sum: int
    age_avg: float
    age_max: int
    age_min: int


class Page(BaseModel, Generic[T]):
    """An ordered slice of a result set plus the size of the whole set."""
    content: List[T]
    total_elements: int
    offset: int
    size: int
    number: int
    number_of_elements: int
    total_pages: int
    first: bool
    last: bool
    has_next: bool

    @classmethod
    def create(cls, content: List[T], page_request: PageRequest, total: int) -> "Page[T]":
        size = page_request.limit
        total_pages = ceil(total / size) if total else 0
        has_next = page_request.offset + len(content) < total
        return cls(
            content=content,
            total_elements=total,
            offset=page_request.offset,
            size=size,
            number=page_request.page_number,
            number_of_elements=len(content),
            total_pages=total_pages,
            first=page_request.offset == 0,
            last=not has_next,
            has_next=has_next,
        )


class BulkUpdateIn(BaseModel):
    """Request body for a bulk member update.

    At least one of `username`, `age_add` or `age_multiply` must be set.
    """
    model_config = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_camel)

    condition: MemberSearchCondition = Field(default_factory=MemberSearchCondition)
    username: Optional[str] = None
    age_add: Optional[int] = None
    age_multiply: Optional[int] = None


class BulkResult(BaseModel):
    """Number of rows touched by a bulk mutation."""
    count: int
