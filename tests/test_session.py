from __future__ import annotations

from finance_tracker import config
from finance_tracker.session import claim_seeding, current_owner_id


def test_owner_from_session_state() -> None:
    assert current_owner_id({"owner_id": "  user-42 "}) == "user-42"


def test_falls_back_to_configured_owner() -> None:
    assert current_owner_id() == config.DEFAULT_OWNER_ID
    assert current_owner_id({"owner_id": ""}) == config.DEFAULT_OWNER_ID
    assert current_owner_id({"owner_id": None}) == config.DEFAULT_OWNER_ID


def test_seeding_is_claimed_once_per_owner() -> None:
    state = {}
    assert claim_seeding(state, "alice") is True
    assert claim_seeding(state, "alice") is False
    assert claim_seeding(state, "bob") is True
    assert state["seeded_owners"] == {"alice", "bob"}
