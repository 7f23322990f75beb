"""Role-label helpers.

TMDb marks voice work inside the free-text character field, e.g.
``"Bart Simpson (voice)"`` or ``"Voice of the Narrator"``.  A case-insensitive
substring test on ``voice`` covers both conventions.
"""

from __future__ import annotations

from collections.abc import Sequence

_VOICE_MARKER = "voice"


def is_voice_role(role: str | None) -> bool:
    """Return True if *role* is a voice-acting credit."""
    if not role:
        return False
    return _VOICE_MARKER in role.lower()


def is_mostly_voice(roles: Sequence[str | None]) -> bool:
    """Return True if strictly more than half of *roles* are voice roles.

    An empty sequence is never considered voice work.
    """
    if not roles:
        return False
    voice_count = sum(1 for role in roles if is_voice_role(role))
    return voice_count > len(roles) / 2
