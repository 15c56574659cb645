"""Shared fixtures: an in-memory app on a frozen clock, users and tokens."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from decider import create_app
from decider.config import TestConfig
from decider.engine import decisions as decisions_engine
from decider.engine import lifecycle, membership
from decider.engine.clock import FrozenClock
from decider.engine.options import submit_option
from decider.extensions import db

NOW = datetime(2026, 3, 2, 12, 0, 0)
LOCK_TIME = NOW + timedelta(days=3)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def app(clock):
    app = create_app(TestConfig, clock=clock)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users():
    """Factory for fresh user ids."""
    return lambda n=1: [uuid.uuid4() for _ in range(n)]


@pytest.fixture
def auth(app):
    def _headers(user_id) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(identity=str(user_id))}"}
    return _headers


@pytest.fixture
def make_decision(app):
    """Create a decision owned by ``organizer`` with ``member_ids`` joined."""
    def _make(organizer, member_ids=(), **settings):
        settings.setdefault("lock_time", LOCK_TIME)
        decision = decisions_engine.create_decision(organizer, settings.pop("title", "Friday dinner"), **settings)
        for user_id in member_ids:
            membership.join_decision(decision.id, user_id)
        return decision
    return _make


@pytest.fixture
def in_voting(make_decision):
    """A decision already in the voting phase with the given option titles."""
    def _make(organizer, member_ids=(), titles=("A", "B", "C"), metadata=None, **settings):
        decision = make_decision(organizer, member_ids, **settings)
        lifecycle.advance_phase(decision.id, organizer)
        options = [
            submit_option(decision.id, organizer, title, metadata=(metadata or {}).get(title))
            for title in titles
        ]
        lifecycle.advance_phase(decision.id, organizer)
        return decision, options
    return _make
