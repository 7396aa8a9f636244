"""SQLModel data models.

This module defines the Schema Model used by every query in the
package. Queries reference the mapped attributes (`Member.age`,
`Team.name`) directly so no SQL text is ever assembled from strings.
"""

from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship


class Team(SQLModel, table=True):
    """A named team owning zero or more members.

    `members` is the inverse side of `Member.team`; the foreign key on
    `Member` is authoritative.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    members: List['Member'] = Relationship(back_populates='team')


class Member(SQLModel, table=True):
    """A member record.

    Fields:
    - `username`: display name; may be absent
    - `age`: integer age
    - `team_id`: owning team, `None` for a teamless member
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: Optional[str] = Field(default=None, index=True)
    age: int = 0
    team_id: Optional[int] = Field(default=None, foreign_key='team.id', index=True)
    team: Optional[Team] = Relationship(back_populates='members')

    def change_team(self, team: Optional[Team]) -> None:
        """Move the member to `team`.

        `back_populates` moves the member between the `members`
        collections of the old and new team in memory.
        """
        self.team = team
