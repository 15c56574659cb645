"""Tests for ballot validation and submission."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from decider.engine.ballots import submit_ballot, validate_ballot
from decider.engine.constraints import submit_constraint
from decider.engine.lifecycle import advance_phase
from decider.engine.options import submit_option
from decider.exceptions import ConflictError, IllegalTransitionError, PermissionDeniedError, ValidationError
from decider.extensions import db
from decider.models import AuditLog, Member, Vote

POINTS = "point_allocation"
RANKING = "forced_ranking"
ELIGIBLE = ["a", "b", "c"]


def _lines(**values) -> list[dict]:
    return [{"option_id": k, "value": v} for k, v in values.items()]


class TestValidatePoints:
    def test_accepts_exact_budget_and_drops_zero_lines(self) -> None:
        accepted = validate_ballot(POINTS, ELIGIBLE, _lines(a=6, b=4, c=0))
        assert accepted == [("a", 6), ("b", 4)]
        assert sum(v for _, v in accepted) == 10

    @pytest.mark.parametrize("values", [dict(a=5, b=4), dict(a=6, b=5), dict(a=11, b=-1), dict(a=10.0)])
    def test_rejects_anything_but_ten_non_negative_integer_points(self, values) -> None:
        with pytest.raises(ValidationError):
            validate_ballot(POINTS, ELIGIBLE, _lines(**values))

    def test_custom_budget(self) -> None:
        assert validate_ballot(POINTS, ELIGIBLE, _lines(a=3, b=2), point_budget=5) == [("a", 3), ("b", 2)]

    def test_rejects_bool_values(self) -> None:
        with pytest.raises(ValidationError):
            validate_ballot(POINTS, ["a", "b"], [{"option_id": "a", "value": True}, {"option_id": "b", "value": 9}])


class TestValidateRanking:
    def test_accepts_permutation(self) -> None:
        accepted = validate_ballot(RANKING, ELIGIBLE, _lines(a=2, b=3, c=1))
        assert sorted(v for _, v in accepted) == [1, 2, 3]

    def test_every_option_must_be_ranked(self) -> None:
        with pytest.raises(ValidationError) as exc:
            validate_ballot(RANKING, ELIGIBLE, _lines(a=1, b=2))
        assert exc.value.details == {"missing_option_ids": ["c"]}

    @pytest.mark.parametrize("values", [dict(a=1, b=1, c=2), dict(a=1, b=2, c=4), dict(a=0, b=1, c=2)])
    def test_ranks_must_be_one_to_n(self, values) -> None:
        with pytest.raises(ValidationError):
            validate_ballot(RANKING, ELIGIBLE, _lines(**values))


class TestValidateShape:
    def test_empty_ballot(self) -> None:
        with pytest.raises(ValidationError):
            validate_ballot(POINTS, ELIGIBLE, [])

    def test_duplicate_option(self) -> None:
        lines = [{"option_id": "a", "value": 5}, {"option_id": "a", "value": 5}]
        with pytest.raises(ValidationError) as exc:
            validate_ballot(POINTS, ELIGIBLE, lines)
        assert exc.value.details == {"duplicate_option_ids": ["a"]}

    def test_ineligible_option(self) -> None:
        with pytest.raises(ValidationError) as exc:
            validate_ballot(POINTS, ELIGIBLE, _lines(a=5, z=5))
        assert exc.value.details == {"ineligible_option_ids": ["z"]}


class TestSubmitBallot:
    def test_stores_lines_and_marks_voter(self, in_voting, users) -> None:
        org, voter = users(2)
        decision, (a, b, c) = in_voting(org, [voter])

        votes = submit_ballot(decision.id, voter, [
            {"option_id": a.id, "value": 7},
            {"option_id": b.id, "value": 3},
            {"option_id": c.id, "value": 0},
        ])

        assert sorted(v.value for v in votes) == [3, 7]
        member = db.session.execute(select(Member).filter_by(decision_id=decision.id, user_id=voter)).scalar_one()
        assert member.has_voted is True
        assert db.session.execute(
            select(AuditLog).filter_by(decision_id=decision.id, action="BALLOT_SUBMITTED")
        ).scalar_one().actor_user_id == voter

    def test_second_ballot_rejected(self, in_voting, users) -> None:
        org, voter = users(2)
        decision, (a, _, _) = in_voting(org, [voter])
        submit_ballot(decision.id, voter, [{"option_id": a.id, "value": 10}])

        with pytest.raises(ConflictError):
            submit_ballot(decision.id, voter, [{"option_id": a.id, "value": 10}])
        votes = db.session.execute(select(Vote).filter_by(decision_id=decision.id)).scalars().all()
        assert len(votes) == 1

    def test_invalid_ballot_writes_nothing(self, in_voting, users) -> None:
        org, voter = users(2)
        decision, (a, b, _) = in_voting(org, [voter])
        with pytest.raises(ValidationError):
            submit_ballot(decision.id, voter, [{"option_id": a.id, "value": 6}, {"option_id": b.id, "value": 6}])

        member = db.session.execute(select(Member).filter_by(decision_id=decision.id, user_id=voter)).scalar_one()
        assert member.has_voted is False
        assert db.session.execute(select(Vote).filter_by(decision_id=decision.id)).first() is None

    def test_ranking_covers_only_eligible_options(self, make_decision, users) -> None:
        org, voter = users(2)
        decision = make_decision(org, [voter], voting_mechanism=RANKING)
        submit_constraint(decision.id, org, "budget_max", {"max": 30})
        advance_phase(decision.id, org)
        cheap = submit_option(decision.id, org, "Cheap", metadata={"price": 10})
        dear = submit_option(decision.id, org, "Dear", metadata={"price": 45})
        other = submit_option(decision.id, org, "Free")
        advance_phase(decision.id, org)

        with pytest.raises(ValidationError):
            submit_ballot(decision.id, voter, [
                {"option_id": cheap.id, "value": 1},
                {"option_id": other.id, "value": 2},
                {"option_id": dear.id, "value": 3},
            ])

        votes = submit_ballot(decision.id, voter, [
            {"option_id": cheap.id, "value": 2},
            {"option_id": other.id, "value": 1},
        ])
        assert len(votes) == 2

    def test_not_in_voting_phase(self, make_decision, users) -> None:
        org, voter = users(2)
        decision = make_decision(org, [voter])
        with pytest.raises(IllegalTransitionError):
            submit_ballot(decision.id, voter, [{"option_id": "x", "value": 10}])

    def test_non_member(self, in_voting, users) -> None:
        org, stranger = users(2)
        decision, (a, _, _) = in_voting(org)
        with pytest.raises(PermissionDeniedError):
            submit_ballot(decision.id, stranger, [{"option_id": a.id, "value": 10}])

    def test_late_ballot_accepted_until_swept(self, in_voting, users, clock) -> None:
        org, voter = users(2)
        decision, (a, _, _) = in_voting(org, [voter])
        clock.advance(timedelta(days=5))
        assert len(submit_ballot(decision.id, voter, [{"option_id": a.id, "value": 10}])) == 1
