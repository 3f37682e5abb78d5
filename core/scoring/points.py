#!/usr/bin/env python3
"""
Point awards - result and points for one submission given a frozen outcome.

- win:  base_points + margin_bonus, plus margin_bonus again on a lock
- push: push_points for every submission regardless of side or lock
- loss: 0
"""

from typing import Dict, Tuple

from core.scoring.models import SIDES, PUSH, WIN, LOSS, PENDING


def award_points(
    covering_side: str,
    margin_bonus: int,
    selected_side: str,
    is_lock: bool,
    base_points: int = 20,
    push_points: int = 10
) -> Tuple[str, int]:
    if covering_side == PUSH:
        return PUSH, push_points

    if selected_side == covering_side:
        bonus = margin_bonus or 0
        points = base_points + bonus
        if is_lock:
            points += bonus
        return WIN, points

    return LOSS, 0


def build_targets(
    covering_side: str,
    margin_bonus: int,
    base_points: int = 20,
    push_points: int = 10
) -> Dict[Tuple[str, bool], Tuple[str, int]]:
    """(selected_side, is_lock) -> (result, points) for all four pick shapes of a contest."""
    return {
        (side, is_lock): award_points(covering_side, margin_bonus, side, is_lock, base_points, push_points)
        for side in SIDES
        for is_lock in (False, True)
    }


def pending_targets() -> Dict[Tuple[str, bool], Tuple[str, int]]:
    """Targets that return every submission of a contest to unscored."""
    return {
        (side, is_lock): (PENDING, 0)
        for side in SIDES
        for is_lock in (False, True)
    }
