#!/usr/bin/env python3
"""
Precedence Service - keeps exactly one submission set active per identity/period.

Every operation is one short transaction that:
1. locks the pick_set_precedence row for (user, season, week),
2. applies its own channel write (claim, visibility, retraction, override),
3. recomputes the decision from the ledger and writes only is_active flags.

Once that transaction commits, cached standings for the period are dropped
if any row moved in or out of the counted set.

Because the decision is recomputed from scratch under the lock, the last
committed arbitration wins regardless of the order writes arrived in.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.config_loader import PrecedenceConfig
from core.exceptions import IdentityNotFoundException, InvalidOverrideException
from core.precedence.rules import (
    PrecedenceDecision,
    decide_active_channel,
    CHANNELS,
    IDENTIFIED,
    GUEST,
)
from database.uow import ledger_uow

logger = logging.getLogger(__name__)

# (contest_id, selected_side, is_lock)
PickSpec = Tuple[Any, str, bool]


def _eligible_guest_sets(guest_rows) -> Dict[str, List[Any]]:
    sets = defaultdict(list)
    for row in guest_rows:
        if row.show_on_leaderboard and row.is_validated:
            sets[row.guest_email].append(row)
    return dict(sets)


class PrecedenceService:
    def __init__(self, config: Optional[PrecedenceConfig] = None, leaderboard=None):
        self.config = config or PrecedenceConfig()
        self.leaderboard = leaderboard

    def _after_commit(self, decision: PrecedenceDecision, ledger_changed: bool = False) -> PrecedenceDecision:
        """Drop cached standings for the period when the committed write changed what counts."""
        if self.leaderboard is not None and (ledger_changed or decision.activated or decision.deactivated):
            self.leaderboard.invalidate(decision.week, decision.season)
        return decision

    def _require_user(self, repo, user_id: Any) -> None:
        if repo.users.get_by_id(user_id) is None:
            raise IdentityNotFoundException(user_id)

    def _arbitrate_locked(self, repo, record, user_id: Any, week: int, season: int) -> PrecedenceDecision:
        """Recompute and apply the decision. Caller holds the precedence row lock."""
        repo.db.flush()
        identified_count = repo.submissions.count_for_user_period(user_id, week, season)
        guest_sets = _eligible_guest_sets(repo.guest_submissions.list_claimed(user_id, week, season))

        decision = decide_active_channel(
            user_id,
            week,
            season,
            identified_count,
            {email: len(rows) for email, rows in guest_sets.items()},
            override_channel=record.override_channel,
            override_guest_email=record.override_guest_email
        )

        identified_changed = repo.submissions.set_active(
            user_id, week, season, decision.active_channel == IDENTIFIED
        )
        active_emails = {decision.active_guest_email} if decision.active_channel == GUEST else set()
        guest_activated, guest_deactivated = repo.guest_submissions.set_active_emails(
            user_id, week, season, active_emails
        )

        if decision.active_channel == IDENTIFIED:
            decision.activated += identified_changed
        else:
            decision.deactivated += identified_changed
        decision.activated += guest_activated
        decision.deactivated += guest_deactivated

        previous_channel = record.active_channel
        repo.precedence.record_decision(record, decision.active_channel)

        if previous_channel != decision.active_channel:
            logger.info(
                f"Precedence for user {user_id} week {week} season {season}: "
                f"{previous_channel} -> {decision.active_channel} ({decision.reason})"
            )
        return decision

    def arbitrate(self, user_id: Any, week: int, season: int) -> PrecedenceDecision:
        with ledger_uow() as repo:
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision)

    def submit_identified_picks(
        self,
        user_id: Any,
        week: int,
        season: int,
        picks: Sequence[PickSpec],
        show_on_leaderboard: bool = True
    ) -> PrecedenceDecision:
        """Record an identified submission set, then arbitrate."""
        with ledger_uow() as repo:
            self._require_user(repo, user_id)
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            for contest_id, side, is_lock in picks:
                repo.submissions.create(
                    user_id, contest_id, week, season, side,
                    is_lock=is_lock, show_on_leaderboard=show_on_leaderboard
                )
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision)

    def claim_guest_submissions(self, guest_email: str, week: int, season: int, user_id: Any) -> PrecedenceDecision:
        with ledger_uow() as repo:
            self._require_user(repo, user_id)
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            claimed = repo.guest_submissions.claim(guest_email, week, season, user_id)
            if not claimed:
                logger.warning(f"No guest submissions from {guest_email} for week {week}, season {season}")
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision)

    def set_guest_visibility(self, user_id: Any, week: int, season: int, visible: bool) -> PrecedenceDecision:
        with ledger_uow() as repo:
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            repo.guest_submissions.set_visibility(user_id, week, season, visible)
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision)

    def retract_submissions(self, user_id: Any, week: int, season: int) -> PrecedenceDecision:
        """Delete the identified set for a period; a claimed guest set takes over if one exists."""
        with ledger_uow() as repo:
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            removed = repo.submissions.delete_for_user_period(user_id, week, season)
            logger.info(f"Retracted {removed} identified submissions for user {user_id} week {week} season {season}")
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision, ledger_changed=removed > 0)

    def _validate_override_set(self, repo, user_id: Any, week: int, season: int,
                               channel: str, guest_email: Optional[str]) -> Optional[str]:
        """Check the chosen set exists and is well-formed. Returns the guest email for guest overrides."""
        if channel == IDENTIFIED:
            rows = repo.submissions.list_for_user_period(user_id, week, season)
        else:
            guest_sets = _eligible_guest_sets(repo.guest_submissions.list_claimed(user_id, week, season))
            if guest_email:
                guest_email = guest_email.strip().lower()
                rows = guest_sets.get(guest_email, [])
            elif len(guest_sets) > 1:
                raise InvalidOverrideException(
                    f"User {user_id} has {len(guest_sets)} guest sets for week {week}; name one with guest_email"
                )
            else:
                guest_email, rows = next(iter(guest_sets.items()), (None, []))

        if not rows:
            raise InvalidOverrideException(
                f"No eligible {channel} submissions for user {user_id} week {week} season {season}"
            )

        expected = self.config.picks_per_period
        if len(rows) != expected:
            raise InvalidOverrideException(
                f"Chosen {channel} set has {len(rows)} submissions; expected exactly {expected}"
            )

        locks = sum(1 for row in rows if row.is_lock)
        if locks != self.config.locks_per_period:
            raise InvalidOverrideException(
                f"Chosen {channel} set has {locks} locks; expected exactly {self.config.locks_per_period}"
            )
        return guest_email

    def override_precedence(
        self,
        user_id: Any,
        week: int,
        season: int,
        chosen_channel: str,
        reason: str,
        admin_id: Optional[Any] = None,
        guest_email: Optional[str] = None
    ) -> PrecedenceDecision:
        """
        Force a channel for one identity/period. Sticky until clear_override().

        Raises:
            InvalidOverrideException: unknown channel, empty reason, or the
                chosen set is missing or malformed
            IdentityNotFoundException: unknown user
        """
        if chosen_channel not in CHANNELS:
            raise InvalidOverrideException(
                f"Unknown channel '{chosen_channel}'; expected one of {', '.join(CHANNELS)}"
            )
        if not reason or not reason.strip():
            raise InvalidOverrideException("An override requires a reason")

        with ledger_uow() as repo:
            self._require_user(repo, user_id)
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            chosen_email = self._validate_override_set(repo, user_id, week, season, chosen_channel, guest_email)

            repo.precedence.set_override(
                record,
                chosen_channel,
                reason.strip(),
                admin_id=admin_id,
                guest_email=chosen_email if chosen_channel == GUEST else None
            )
            logger.warning(
                f"Precedence override for user {user_id} week {week} season {season}: "
                f"{chosen_channel}{f' ({chosen_email})' if chosen_email else ''} by {admin_id or 'admin'}, "
                f"reason: {reason.strip()}"
            )
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision)

    def clear_override(self, user_id: Any, week: int, season: int) -> PrecedenceDecision:
        with ledger_uow() as repo:
            record = repo.precedence.get_or_create_for_update(user_id, week, season)
            if repo.precedence.clear_override(record):
                logger.info(f"Cleared precedence override for user {user_id} week {week} season {season}")
            decision = self._arbitrate_locked(repo, record, user_id, week, season)
        return self._after_commit(decision)

    def detect_conflicts(self, season: Optional[int] = None) -> List[Dict[str, Any]]:
        """Identity/periods with both channels present, flagged resolved when exactly one is active."""
        with ledger_uow(read_only=True) as repo:
            periods = repo.precedence.find_dual_channel_periods(season)
            results = []
            for period in periods:
                record = repo.precedence.get(period['user_id'], period['week'], period['season'])
                identified_active = (period['identified_active'] or 0) > 0
                guest_active = (period['guest_active'] or 0) > 0
                results.append({
                    'user_id': str(period['user_id']),
                    'display_name': period['display_name'],
                    'season': period['season'],
                    'week': period['week'],
                    'identified_count': period['identified_count'],
                    'guest_count': period['guest_count'],
                    'active_channel': IDENTIFIED if identified_active and not guest_active
                    else GUEST if guest_active and not identified_active
                    else None,
                    'override_channel': record.override_channel if record else None,
                    'resolved': identified_active != guest_active,
                })
            return results
