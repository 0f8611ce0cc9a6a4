"""Identity of the current user as seen by the data layer."""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional

from . import config

OWNER_KEY = 'owner_id'
SEEDED_KEY = 'seeded_owners'


def current_owner_id(state: Optional[Mapping[str, Any]] = None) -> str:
    """Opaque owner id from the session, falling back to the configured default.

    The tracker never authenticates; whoever fronts the app is expected to
    put the authenticated user's id in ``state['owner_id']``.
    """
    if state is not None:
        owner = state.get(OWNER_KEY)
        if isinstance(owner, str) and owner.strip():
            return owner.strip()
    return config.DEFAULT_OWNER_ID


def claim_seeding(state: MutableMapping[str, Any], owner_id: str) -> bool:
    """True the first time ``owner_id`` is seen in this session, False after."""
    seeded = state.setdefault(SEEDED_KEY, set())
    if owner_id in seeded:
        return False
    seeded.add(owner_id)
    return True
