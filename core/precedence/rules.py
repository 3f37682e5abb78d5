#!/usr/bin/env python3
"""
Precedence Rules - which submission channel counts for one identity/period.

Default rule:
- Any identified submissions for the period are authoritative.
- Otherwise a single eligible claimed guest set is active.
- Otherwise nothing is active.

A sticky admin override forces the named channel (and, for guests, the named
guest set) while that channel still has eligible submissions; when it has
none the default rule applies.

Eligible guest rows are claimed, visible and validated. Hidden or
unvalidated guest rows are never active.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from core.exceptions import PrecedenceConflictException

IDENTIFIED = 'identified'
GUEST = 'guest'
CHANNELS = (IDENTIFIED, GUEST)


@dataclass
class PrecedenceDecision:
    """Outcome of one arbitration for (user, season, week)."""
    user_id: Any
    week: int
    season: int
    active_channel: Optional[str] = None
    active_guest_email: Optional[str] = None
    overridden: bool = False
    reason: str = ''
    activated: int = 0
    deactivated: int = 0
    guest_sets: Dict[str, int] = field(default_factory=dict)
    identified_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': str(self.user_id),
            'week': self.week,
            'season': self.season,
            'active_channel': self.active_channel,
            'active_guest_email': self.active_guest_email,
            'overridden': self.overridden,
            'reason': self.reason,
            'activated': self.activated,
            'deactivated': self.deactivated,
            'identified_count': self.identified_count,
            'guest_sets': dict(self.guest_sets),
        }


def decide_active_channel(
    user_id: Any,
    week: int,
    season: int,
    identified_count: int,
    guest_sets: Dict[str, int],
    override_channel: Optional[str] = None,
    override_guest_email: Optional[str] = None
) -> PrecedenceDecision:
    """
    Decide the active channel from scratch.

    Args:
        identified_count: Identified submissions for the period
        guest_sets: guest_email -> eligible row count, for claimed sets only
        override_channel: Sticky admin choice, if any
        override_guest_email: Guest set named by the override, if any

    Raises:
        PrecedenceConflictException: several guest sets compete and neither
            an identified set nor an override settles it
    """
    guest_sets = {email: count for email, count in guest_sets.items() if count > 0}
    decision = PrecedenceDecision(
        user_id=user_id,
        week=week,
        season=season,
        guest_sets=guest_sets,
        identified_count=identified_count
    )

    if override_channel == IDENTIFIED and identified_count > 0:
        decision.active_channel = IDENTIFIED
        decision.overridden = True
        decision.reason = 'admin override: identified'
        return decision

    if override_channel == GUEST and guest_sets:
        if override_guest_email:
            email = override_guest_email if override_guest_email in guest_sets else None
        elif len(guest_sets) == 1:
            email = next(iter(guest_sets))
        else:
            email = None
        if email is not None:
            decision.active_channel = GUEST
            decision.active_guest_email = email
            decision.overridden = True
            decision.reason = 'admin override: guest'
            return decision

    if identified_count > 0:
        decision.active_channel = IDENTIFIED
        decision.reason = 'identified submissions take precedence'
        if override_channel:
            decision.reason += f' (override to {override_channel} has no eligible submissions)'
        return decision

    if len(guest_sets) > 1:
        raise PrecedenceConflictException(user_id, week, season, guest_sets.keys())

    if not guest_sets:
        decision.reason = 'no eligible submissions'
        return decision

    decision.active_channel = GUEST
    decision.active_guest_email = next(iter(guest_sets))
    decision.reason = 'claimed guest set active (no identified submissions)'
    return decision
