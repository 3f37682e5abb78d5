#!/usr/bin/env python3
"""
Standings aggregation and ranking.

Pure functions over counted submission rows (dicts with user_id,
display_name, week, result, points_awarded, is_lock). Nothing here reads the
database, so the same rows always produce the same standings.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from core.leaderboard.models import StandingEntry, WeeklyDetail, DEFAULT_SETTLEMENT_STATUS


def _tally(target, result: str, is_lock: bool) -> None:
    if result == 'win':
        target.wins += 1
        if is_lock:
            target.lock_wins += 1
    elif result == 'loss':
        target.losses += 1
        if is_lock:
            target.lock_losses += 1
    elif result == 'push':
        target.pushes += 1
        if is_lock:
            target.lock_pushes += 1


def aggregate_standings(
    rows: Iterable[Mapping[str, Any]],
    settlement_statuses: Optional[Mapping[Any, str]] = None,
    settlement_filter: Optional[Iterable[str]] = None
) -> List[StandingEntry]:
    """
    Sum counted rows into one StandingEntry per identity (unranked).

    Args:
        rows: Counted submission rows
        settlement_statuses: user_id -> status; missing users default to 'unpaid'
        settlement_filter: Keep only identities whose status is in this set

    Returns:
        Unordered list of StandingEntry
    """
    settlement_statuses = settlement_statuses or {}
    allowed = set(settlement_filter) if settlement_filter is not None else None

    entries: Dict[str, StandingEntry] = {}
    week_points: Dict[str, Dict[int, int]] = defaultdict(lambda: defaultdict(int))

    for row in rows:
        user_id = row['user_id']
        key = str(user_id)
        status = settlement_statuses.get(user_id) or settlement_statuses.get(key) or DEFAULT_SETTLEMENT_STATUS
        if allowed is not None and status not in allowed:
            continue

        entry = entries.get(key)
        if entry is None:
            entry = StandingEntry(
                user_id=key,
                display_name=row.get('display_name') or key,
                settlement_status=status
            )
            entries[key] = entry

        points = row.get('points_awarded') or 0
        entry.submissions += 1
        entry.total_points += points
        _tally(entry, row['result'], bool(row.get('is_lock')))
        week_points[key][row['week']] += points

    for key, entry in entries.items():
        weeks = week_points[key]
        entry.weeks_included = sorted(weeks)
        entry.worst_week_score = min(weeks.values()) if weeks else None

    return list(entries.values())


def _dense_rank(entries: List[StandingEntry], key: Callable[[StandingEntry], Tuple]) -> List[StandingEntry]:
    # user_id only fixes output order among entries sharing a rank
    ordered = sorted(entries, key=lambda e: (key(e), e.user_id))
    rank = 0
    previous = None
    for entry in ordered:
        current = key(entry)
        if current != previous:
            rank += 1
            previous = current
        entry.rank = rank
    return ordered


def standings_sort_key(entry: StandingEntry) -> Tuple:
    return (-entry.total_points, -entry.wins, entry.display_name)


def best_finish_sort_key(entry: StandingEntry) -> Tuple:
    return (-entry.total_points, -entry.win_percentage, -entry.lock_win_percentage, entry.display_name)


def rank_standings(entries: List[StandingEntry], limit: Optional[int] = None) -> List[StandingEntry]:
    """Dense rank by total points desc, wins desc, display name asc."""
    ranked = _dense_rank(entries, standings_sort_key)
    return ranked[:limit] if limit else ranked


def rank_best_finish(entries: List[StandingEntry], limit: Optional[int] = None) -> List[StandingEntry]:
    """Dense rank by total points desc, win % desc, lock win % desc, display name asc.

    Identities without points are left out.
    """
    ranked = _dense_rank([e for e in entries if e.total_points > 0], best_finish_sort_key)
    return ranked[:limit] if limit else ranked


def best_finish_weeks(final_week: int, weeks: int) -> List[int]:
    """The last `weeks` weeks of a season ending at final_week."""
    first = max(1, final_week - weeks + 1)
    return list(range(first, final_week + 1))


def weekly_details(rows: Iterable[Mapping[str, Any]]) -> List[WeeklyDetail]:
    """Per-week breakdown of one identity's counted rows."""
    details: Dict[int, WeeklyDetail] = {}
    for row in rows:
        week = row['week']
        detail = details.get(week)
        if detail is None:
            detail = details[week] = WeeklyDetail(week=week)
        detail.submissions += 1
        detail.points += row.get('points_awarded') or 0
        _tally(detail, row['result'], bool(row.get('is_lock')))
    return [details[week] for week in sorted(details)]
