"""Tests for the option submission gate and frozen verdicts."""

import pytest

from decider.engine.constraints import remove_constraint, submit_constraint
from decider.engine.lifecycle import advance_phase
from decider.engine.options import eligible_options, remove_option, submit_option
from decider.exceptions import IllegalTransitionError, NotFoundError, PermissionDeniedError, ValidationError
from decider.extensions import db
from decider.models import Decision, Option


def _in_options(make_decision, org, members=(), **settings):
    decision = make_decision(org, members, **settings)
    advance_phase(decision.id, org)
    return decision


class TestSubmissionGate:
    def test_over_budget_option_is_stored_but_not_eligible(self, make_decision, users) -> None:
        org, member = users(2)
        decision = make_decision(org, [member])
        constraint = submit_constraint(decision.id, member, "budget_max", {"max": 30})
        advance_phase(decision.id, org)

        option = submit_option(decision.id, member, "Steakhouse", metadata={"price": 45})

        assert option.passes_constraints is False
        assert option.constraint_violations == [
            {"constraint_id": str(constraint.id), "reason": "Price $45 exceeds budget of $30"}
        ]
        assert eligible_options(db.session.get(Decision, decision.id)) == []

    def test_positions_follow_submission_order(self, make_decision, users) -> None:
        (org,) = users()
        decision = _in_options(make_decision, org)
        titles = ["First", "Second", "Third"]
        for title in titles:
            submit_option(decision.id, org, title)
        options = db.session.get(Decision, decision.id).options
        assert [(o.position, o.title) for o in options] == [(1, "First"), (2, "Second"), (3, "Third")]

    def test_only_in_options_phase(self, make_decision, users) -> None:
        (org,) = users()
        decision = make_decision(org)
        with pytest.raises(IllegalTransitionError):
            submit_option(decision.id, org, "Early")

    def test_organizer_only_submission(self, make_decision, users) -> None:
        org, member = users(2)
        decision = _in_options(make_decision, org, [member], option_submission="organizer_only")
        with pytest.raises(PermissionDeniedError):
            submit_option(decision.id, member, "Mine")
        assert submit_option(decision.id, org, "Theirs").position == 1

    def test_max_options(self, make_decision, users) -> None:
        (org,) = users()
        decision = _in_options(make_decision, org, max_options=2)
        submit_option(decision.id, org, "A")
        submit_option(decision.id, org, "B")
        with pytest.raises(IllegalTransitionError) as exc:
            submit_option(decision.id, org, "C")
        assert "maximum of 2" in exc.value.message

    def test_non_member(self, make_decision, users) -> None:
        org, stranger = users(2)
        decision = _in_options(make_decision, org)
        with pytest.raises(PermissionDeniedError):
            submit_option(decision.id, stranger, "Sneaky")

    def test_bad_metadata(self, make_decision, users) -> None:
        (org,) = users()
        decision = _in_options(make_decision, org)
        with pytest.raises(ValidationError):
            submit_option(decision.id, org, "Odd", metadata={"price": "cheap"})
        with pytest.raises(ValidationError):
            submit_option(decision.id, org, "   ")


class TestFrozenVerdict:
    def test_removing_constraint_does_not_revalidate(self, make_decision, users) -> None:
        org, member = users(2)
        decision = _in_options(make_decision, org, [member])
        constraint = submit_constraint(decision.id, member, "exclusion", {"text": "meat"})
        option = submit_option(decision.id, org, "Meatballs")
        assert option.passes_constraints is False

        remove_constraint(decision.id, constraint.id, member)

        stored = db.session.get(Option, option.id)
        assert stored.passes_constraints is False
        assert len(stored.constraint_violations) == 1

    def test_constraint_added_later_applies_only_to_new_options(self, make_decision, users) -> None:
        (org,) = users()
        decision = _in_options(make_decision, org)
        before = submit_option(decision.id, org, "Far", metadata={"distance": 50})
        submit_constraint(decision.id, org, "distance", {"max": 10})
        after = submit_option(decision.id, org, "Also far", metadata={"distance": 50})
        assert db.session.get(Option, before.id).passes_constraints is True
        assert after.passes_constraints is False


class TestRemoveOption:
    def test_submitter_or_organizer(self, make_decision, users) -> None:
        org, author, other = users(3)
        decision = _in_options(make_decision, org, [author, other])
        first = submit_option(decision.id, author, "One")
        second = submit_option(decision.id, author, "Two")

        with pytest.raises(PermissionDeniedError):
            remove_option(decision.id, first.id, other)

        remove_option(decision.id, first.id, author)
        remove_option(decision.id, second.id, org)
        assert db.session.get(Decision, decision.id).options == []

    def test_unknown_option(self, make_decision, users) -> None:
        (org,) = users()
        decision = _in_options(make_decision, org)
        other = _in_options(make_decision, org)
        foreign = submit_option(other.id, org, "Elsewhere")
        with pytest.raises(NotFoundError):
            remove_option(decision.id, foreign.id, org)


class TestConstraints:
    def test_weight_requires_weighting(self, make_decision, users) -> None:
        (org,) = users()
        plain = make_decision(org)
        with pytest.raises(ValidationError):
            submit_constraint(plain.id, org, "budget_max", {"max": 10}, weight=3)

        weighted = make_decision(org, constraint_weighting_enabled=True)
        assert submit_constraint(weighted.id, org, "budget_max", {"max": 10}, weight=3).weight == 3
        with pytest.raises(ValidationError):
            submit_constraint(weighted.id, org, "budget_max", {"max": 10}, weight=9)

    def test_only_owner_removes(self, make_decision, users) -> None:
        org, member = users(2)
        decision = make_decision(org, [member])
        constraint = submit_constraint(decision.id, member, "duration", {"max": 2})
        with pytest.raises(PermissionDeniedError):
            remove_constraint(decision.id, constraint.id, org)

    def test_closed_once_voting(self, in_voting, users) -> None:
        (org,) = users()
        decision, _ = in_voting(org)
        with pytest.raises(IllegalTransitionError):
            submit_constraint(decision.id, org, "budget_max", {"max": 10})

    def test_value_is_normalised(self, make_decision, users) -> None:
        (org,) = users()
        decision = make_decision(org)
        constraint = submit_constraint(decision.id, org, "date_range", {"start": "2026-05-01T09:00:00Z", "end": "2026-05-02"})
        assert constraint.value == {"start": "2026-05-01", "end": "2026-05-02"}
