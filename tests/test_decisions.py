"""Tests for creating, renaming, duplicating and deleting decisions."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from decider.engine.ballots import submit_ballot
from decider.engine.constraints import submit_constraint
from decider.engine.decisions import (
    create_decision,
    decisions_for_user,
    delete_decision,
    duplicate_decision,
    rename_decision,
)
from decider.engine.sweep import tally_and_lock_expired
from decider.exceptions import IllegalTransitionError, PermissionDeniedError, ValidationError
from decider.extensions import db
from decider.models import AuditLog, Constraint, Decision, Member, Option, Vote
from decider.utils.invite_code import INVITE_ALPHABET


class TestCreate:
    def test_defaults(self, app, users, clock) -> None:
        (org,) = users()
        decision = create_decision(org, "  Team lunch ", clock.now() + timedelta(days=1))

        assert decision.title == "Team lunch"
        assert decision.status == "constraints"
        assert decision.voting_mechanism == "point_allocation"
        assert decision.max_options == 7
        assert decision.option_submission == "anyone"
        assert len(decision.invite_code) == 6
        assert set(decision.invite_code) <= set(INVITE_ALPHABET)
        assert decision.created_by == org

        members = db.session.execute(select(Member).filter_by(decision_id=decision.id)).scalars().all()
        assert [(m.user_id, m.role) for m in members] == [(org, "organizer")]
        assert db.session.execute(
            select(AuditLog).filter_by(decision_id=decision.id, action="DECISION_CREATED")
        ).scalar_one().actor_user_id == org

    @pytest.mark.parametrize(
        "field, offset, settings",
        [
            ("lock_time", timedelta(hours=-1), {}),
            ("voting_mechanism", timedelta(days=1), {"voting_mechanism": "approval"}),
            ("option_submission", timedelta(days=1), {"option_submission": "nobody"}),
            ("max_options", timedelta(days=1), {"max_options": 1}),
            ("max_options", timedelta(days=1), {"max_options": 21}),
        ],
    )
    def test_rejects_bad_settings(self, app, users, clock, field, offset, settings) -> None:
        (org,) = users()
        with pytest.raises(ValidationError) as exc:
            create_decision(org, "Lunch", clock.now() + offset, **settings)
        assert field in exc.value.details
        assert db.session.execute(select(Decision)).first() is None

    def test_blank_title(self, app, users, clock) -> None:
        (org,) = users()
        with pytest.raises(ValidationError):
            create_decision(org, "   ", clock.now() + timedelta(days=1))

    def test_decisions_for_user(self, make_decision, users) -> None:
        org, member, stranger = users(3)
        first = make_decision(org, [member], title="First")
        second = make_decision(org, title="Second")
        assert {d.id for d in decisions_for_user(org)} == {first.id, second.id}
        assert [d.id for d in decisions_for_user(member)] == [first.id]
        assert decisions_for_user(stranger) == []


class TestRename:
    def test_organizer_renames(self, make_decision, users) -> None:
        (org,) = users()
        decision = make_decision(org)
        renamed = rename_decision(decision.id, org, title="Saturday brunch", description="Somewhere sunny")
        assert renamed.title == "Saturday brunch"
        assert renamed.description == "Somewhere sunny"

    def test_timestamps_follow_the_app_clock(self, make_decision, users, clock) -> None:
        (org,) = users()
        decision = make_decision(org)
        assert decision.created_at == clock.now()
        assert decision.updated_at == clock.now()

        later = clock.advance(timedelta(hours=2))
        renamed = rename_decision(decision.id, org, title="Saturday brunch")
        assert renamed.updated_at == later
        assert renamed.created_at == later - timedelta(hours=2)

    def test_member_cannot_rename(self, make_decision, users) -> None:
        org, member = users(2)
        decision = make_decision(org, [member])
        with pytest.raises(PermissionDeniedError):
            rename_decision(decision.id, member, title="Mine now")

    def test_locked_cannot_be_renamed(self, in_voting, users, clock) -> None:
        (org,) = users()
        decision, _ = in_voting(org)
        clock.advance(timedelta(days=4))
        tally_and_lock_expired()
        with pytest.raises(IllegalTransitionError):
            rename_decision(decision.id, org, title="Too late")


class TestDelete:
    def test_delete_removes_everything(self, in_voting, users) -> None:
        org, voter = users(2)
        decision, (a, _, _) = in_voting(org, [voter])
        submit_ballot(decision.id, voter, [{"option_id": a.id, "value": 10}])

        delete_decision(decision.id, org)

        assert db.session.get(Decision, decision.id) is None
        for model in (Member, Option, Vote):
            assert db.session.execute(select(model).filter_by(decision_id=decision.id)).first() is None
        assert db.session.execute(
            select(AuditLog).filter_by(decision_id=decision.id, action="DECISION_DELETED")
        ).scalar_one() is not None

    def test_member_cannot_delete(self, make_decision, users) -> None:
        org, member = users(2)
        decision = make_decision(org, [member])
        with pytest.raises(PermissionDeniedError):
            delete_decision(decision.id, member)
        assert db.session.get(Decision, decision.id) is not None


class TestDuplicate:
    def test_copies_settings_and_constraints(self, make_decision, users, clock) -> None:
        org, member = users(2)
        source = make_decision(
            org, [member], voting_mechanism="forced_ranking", max_options=4, silent_voting=True,
        )
        submit_constraint(source.id, member, "budget_max", {"max": 40})

        copy = duplicate_decision(source.id, member, clock.now() + timedelta(days=7))

        assert copy.id != source.id
        assert copy.invite_code != source.invite_code
        assert copy.status == "constraints"
        assert copy.title == source.title
        assert (copy.voting_mechanism, copy.max_options, copy.silent_voting) == ("forced_ranking", 4, True)
        assert copy.created_by == member
        constraints = db.session.execute(select(Constraint).filter_by(decision_id=copy.id)).scalars().all()
        assert [(c.type, c.value, c.user_id) for c in constraints] == [("budget_max", {"max": 40}, member)]
        members = db.session.execute(select(Member).filter_by(decision_id=copy.id)).scalars().all()
        assert [m.user_id for m in members] == [member]

    def test_non_member_cannot_duplicate(self, make_decision, users, clock) -> None:
        org, stranger = users(2)
        source = make_decision(org)
        with pytest.raises(PermissionDeniedError):
            duplicate_decision(source.id, stranger, clock.now() + timedelta(days=7))
