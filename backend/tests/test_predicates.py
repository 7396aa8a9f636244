from sqlalchemy.sql.elements import True_

from member_api.predicates import (
    age_goe,
    age_loe,
    build_predicates,
    conjunction,
    has_text,
    team_name_eq,
    username_eq,
)
from member_api.schemas import MemberSearchCondition


def test_empty_condition_builds_no_predicates():
    assert build_predicates(MemberSearchCondition()) == []
    assert build_predicates(None) == []


def test_blank_text_counts_as_absent():
    assert not has_text(None)
    assert not has_text("")
    assert not has_text("   ")
    assert has_text("member1")
    assert username_eq("  ") is None
    assert team_name_eq("") is None


def test_zero_age_is_a_real_bound():
    assert age_goe(None) is None
    assert age_loe(None) is None
    assert "member.age >=" in str(age_goe(0))
    assert "member.age <=" in str(age_loe(0))


def test_one_predicate_per_populated_field_in_fixed_order():
    cond = MemberSearchCondition(username="member1", team_name="teamA", age_goe=10, age_loe=40)
    preds = [str(p) for p in build_predicates(cond)]
    assert len(preds) == 4
    assert preds[0].startswith("member.username =")
    assert preds[1].startswith("team.name =")
    assert preds[2].startswith("member.age >=")
    assert preds[3].startswith("member.age <=")


def test_partial_condition_only_emits_populated_fields():
    preds = build_predicates(MemberSearchCondition(age_loe=30))
    assert len(preds) == 1
    assert "member.age <=" in str(preds[0])


def test_unjoined_team_predicate_uses_exists():
    pred = team_name_eq("teamA", joined=False)
    assert "EXISTS" in str(pred)


def test_conjunction_identity_matches_all():
    assert isinstance(conjunction([]), True_)
    combined = str(conjunction(build_predicates(MemberSearchCondition(age_goe=10, age_loe=20))))
    assert "AND" in combined
