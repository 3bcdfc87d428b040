from typing import List

from hunt.models import ClueAssignment, Round, Team, isoformat
from .progression import is_qualified


def build_leaderboard() -> List[dict]:
    """Teams ranked by progress, then total time, then latest activity."""
    teams = Team.query.order_by(
        Team.current_round_number.desc(),
        Team.total_time_seconds.asc(),
        Team.updated_at.desc(),
    ).all()
    return [
        {
            'rank': index + 1,
            'teamId': team.id,
            'teamName': team.name,
            'currentRound': team.current_round_number,
            'status': team.status,
            'lastScanTime': isoformat(team.last_scan_time),
            'totalTimeSeconds': team.total_time_seconds,
        }
        for index, team in enumerate(teams)
    ]


def game_stats() -> dict:
    return {
        'totalRounds': Round.query.count(),
        'activeTeams': Team.query.filter(Team.status.in_(['playing', 'locked'])).count(),
        'completedHunts': Team.query.filter_by(status='completed').count(),
    }


def unlock_code_board() -> List[dict]:
    """Per round: ``active`` while a team waits on it, ``used`` once unlocked."""
    rounds = Round.query.order_by(Round.round_number.asc()).all()
    teams = Team.query.all()

    board = []
    for rnd in rounds:
        locked = any(t.status == 'locked' and t.current_round_number == rnd.round_number for t in teams)
        unlocked = any(
            p.round_number == rnd.round_number and p.status == 'unlocked'
            for t in teams for p in t.progress
        )
        if locked:
            status = 'active'
        elif unlocked:
            status = 'used'
        else:
            status = 'pending'
        board.append({'round': rnd.round_number, 'code': rnd.unlock_code, 'status': status})
    return board


def assignment_results(assignment: ClueAssignment) -> List[dict]:
    """Scan-to-unlock times of the assignment's teams, fastest first.

    Teams without both timestamps for the round are left out.
    """
    results = []
    for team in assignment.teams:
        entry = team.progress_for(assignment.round_number)
        if not entry:
            continue
        duration = entry.duration_seconds()
        if duration is None:
            continue
        qualified = entry.qualified
        if qualified is None:
            qualified = is_qualified(duration, assignment.time_limit_seconds) if assignment.time_limit_seconds else True
        results.append({
            'teamId': team.id,
            'teamName': team.name,
            'durationSeconds': duration,
            'qualified': qualified,
        })
    results.sort(key=lambda r: r['durationSeconds'])
    return results
