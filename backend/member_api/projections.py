"""Row-to-DTO mapping for joined member/team queries.

The mappers are pure: one result row in, one frozen DTO out. Rows are
read through their labelled mapping, so the column order of the select
does not matter, only the labels produced by `query.member_team_columns`.
"""

from .schemas import MemberDto, MemberStats, MemberTeamDto


def to_member_team_dto(row) -> MemberTeamDto:
    """Map a member/team row; team fields are `None` for a teamless member."""
    m = row._mapping
    return MemberTeamDto(
        member_id=m["member_id"],
        username=m["username"],
        age=m["age"],
        team_id=m["team_id"],
        team_name=m["team_name"],
    )


def to_member_dto(row) -> MemberDto:
    m = row._mapping
    return MemberDto(username=m["username"], age=m["age"])


def to_member_stats(row) -> MemberStats:
    m = row._mapping
    return MemberStats(
        username=m["username"],
        age=m["age"],
        count=m["count"],
        age_sum=m["age_sum"],
        age_avg=float(m["age_avg"]),
        age_max=m["age_max"],
        age_min=m["age_min"],
    )
