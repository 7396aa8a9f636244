"""CLI script to seed the local database with demo teams and members.
Usage: python scripts/seed_members.py [--count N]
"""
import sys
import argparse
import pathlib
# Ensure `backend/` is on sys.path so `member_api` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from member_api.database import engine, create_db_and_tables
from member_api import models, repositories


def main(count: int = 100):
    """Create `teamA`/`teamB` and `count` members alternating between them.

    Member `i` is named `member{i}` and aged `i`. Existing teams with the
    same names are reused.
    """
    create_db_and_tables()
    with Session(engine) as session:
        team_repo = repositories.TeamRepository(session)
        teams = []
        for name in ('teamA', 'teamB'):
            team = team_repo.get_by_name(name) or team_repo.create(models.Team(name=name))
            teams.append(team)
        for i in range(count):
            session.add(models.Member(username=f'member{i}', age=i, team_id=teams[i % 2].id))
        session.commit()
        print(f"Seeded {count} members into teams {', '.join(t.name for t in teams)}")


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--count', type=int, default=100, help='Number of members to create')
    args = parser.parse_args()
    main(count=args.count)
