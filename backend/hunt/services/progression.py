"""Round progression for teams: start, QR scan, unlock.

A team moves ``not_started -> playing -> locked -> playing ... -> completed``.
Scanning the QR code of the active round locks the team until an
instructor hands over the unlock code; entering it either opens the next
round or completes the hunt.
"""
from datetime import datetime
from typing import Iterable, Optional, Tuple

from flask import current_app

from hunt.errors import InvalidState, NotFound, ValidationError
from hunt.models import ClueAssignment, ProgressEntry, Round, Team, TEAM_STATUSES, utcnow
from .persistence import commit


def find_team_or_raise(team_id) -> Team:
    team = Team.query.filter_by(id=team_id).first()
    if not team:
        raise NotFound('Team not found')
    return team


def find_round_or_raise(round_number: int) -> Round:
    rnd = Round.query.filter_by(round_number=round_number).first()
    if not rnd:
        raise NotFound(f'Round {round_number} not found')
    return rnd


def next_round_after(round_number: int) -> Optional[Round]:
    """The round that follows ``round_number`` in round-number order."""
    return (
        Round.query
        .filter(Round.round_number > round_number)
        .order_by(Round.round_number.asc())
        .first()
    )


def is_qualified(duration_seconds: float, time_limit_seconds: int) -> bool:
    return duration_seconds <= time_limit_seconds


def compute_total_time(entries: Iterable[ProgressEntry]) -> float:
    """Sum of scan-to-unlock durations over entries that have both times."""
    total = 0.0
    for entry in entries:
        duration = entry.duration_seconds()
        if duration is not None:
            total += duration
    return total


def start_hunt(start_code: str) -> Tuple[Team, ClueAssignment, int]:
    code = (start_code or '').strip().upper()
    team = Team.query.filter_by(start_code=code).first()
    if not team:
        raise NotFound('Invalid start code')
    # Restarting a finished team would reopen scans on its last round
    if team.status == 'completed':
        raise InvalidState('Treasure hunt already completed')

    assignment = ClueAssignment.for_team(team.current_round_number, team.id)
    if not assignment:
        raise ValidationError('No clue assignment configured for this team and round')

    find_round_or_raise(team.current_round_number)
    team.ensure_progress(team.current_round_number)
    # A locked team re-entering keeps waiting for its unlock code
    if team.status != 'locked':
        team.status = 'playing'
    commit(team)

    total_rounds = Round.query.count()
    current_app.logger.info(f"[start] team={team.id} round={team.current_round_number} status={team.status}")
    return team, assignment, total_rounds


def verify_qr_scan(team_id, qr_id: str, now: Optional[datetime] = None) -> Team:
    team = find_team_or_raise(team_id)
    if team.status != 'playing':
        raise InvalidState('Team is not currently playing')

    assignment = (
        ClueAssignment.query
        .filter(ClueAssignment.qr_id == (qr_id or '').strip())
        .filter(ClueAssignment.teams.any(Team.id == team.id))
        .first()
    )
    if not assignment or assignment.round_number != team.current_round_number:
        current_app.logger.info(f"[qr-scan] team={team.id} round={team.current_round_number} mismatch qr={qr_id}")
        raise ValidationError('QR code does not match the active round for this team')

    now = now or utcnow()
    entry = team.ensure_progress(assignment.round_number)
    entry.status = 'qr_found'
    entry.qr_scan_time = now
    team.status = 'locked'
    team.last_scan_time = now
    commit(team)

    current_app.logger.info(f"[qr-scan] team={team.id} round={assignment.round_number} locked")
    return team


def unlock_next_round(team_id, unlock_code: str, now: Optional[datetime] = None) -> Tuple[Team, Optional[dict]]:
    """Check the unlock code and advance the team.

    Returns the team and the payload for the next round, or ``None`` when
    the hunt is over.
    """
    team = find_team_or_raise(team_id)
    if team.status != 'locked':
        raise InvalidState('Team is not waiting for unlock')

    active_round = find_round_or_raise(team.current_round_number)
    assignment = ClueAssignment.for_team(active_round.round_number, team.id)
    # Assignment codes take precedence over the round-level code
    expected_code = assignment.unlock_code if assignment else active_round.unlock_code
    if expected_code.upper() != (unlock_code or '').strip().upper():
        current_app.logger.info(f"[unlock] team={team.id} round={active_round.round_number} wrong code")
        raise ValidationError('Unlock code is incorrect')

    now = now or utcnow()
    entry = team.ensure_progress(active_round.round_number)
    entry.status = 'unlocked'
    entry.unlock_time = now
    if entry.qr_scan_time and assignment and assignment.time_limit_seconds:
        entry.qualified = is_qualified(entry.duration_seconds(), assignment.time_limit_seconds)

    next_round = next_round_after(active_round.round_number)
    if next_round:
        team.current_round_number = next_round.round_number
        team.ensure_progress(next_round.round_number)
        team.status = 'playing'
    else:
        team.status = 'completed'
        team.total_time_seconds = compute_total_time(team.progress)
    commit(team)

    if next_round:
        current_app.logger.info(
            f"[unlock] team={team.id} round {active_round.round_number} -> {next_round.round_number} qualified={entry.qualified}"
        )
    else:
        current_app.logger.info(f"[complete] team={team.id} total_time={team.total_time_seconds:.1f}s")
    return team, next_round_payload(team, next_round)


def next_round_payload(team: Team, next_round: Optional[Round]) -> Optional[dict]:
    if not next_round:
        return None
    assignment = ClueAssignment.for_team(next_round.round_number, team.id)
    if assignment:
        return assignment.to_dict(include_hint=False)
    # No assignment provisioned for the team yet; fall back to round data
    return {
        'roundNumber': next_round.round_number,
        'clueText': next_round.clue_text,
        'description': next_round.description,
    }


def override_team_progress(team: Team, round_number: Optional[int] = None, status: Optional[str] = None) -> Team:
    """Admin correction of a team's round pointer and/or status."""
    if round_number is not None:
        if not Round.query.filter_by(round_number=round_number).first():
            raise ValidationError('Target round does not exist')
        team.current_round_number = round_number
        team.ensure_progress(round_number)
    if status is not None:
        if status not in TEAM_STATUSES:
            raise ValidationError(f'Invalid team status: {status}')
        team.status = status
    commit(team)
    current_app.logger.info(
        f"[override] team={team.id} round={team.current_round_number} status={team.status}"
    )
    return team
