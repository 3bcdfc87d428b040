from datetime import datetime
from typing import List, Optional, Tuple

from flask import current_app

from hunt.errors import InvalidState, NotFound
from hunt.models import ClueAssignment, HintRequest, HINT_STATUSES, isoformat, utcnow
from .persistence import commit
from .progression import find_team_or_raise


def request_hint(team_id, round_number: int) -> HintRequest:
    team = find_team_or_raise(team_id)

    pending = HintRequest.query.filter_by(team_id=team.id, round_number=round_number, status='pending').first()
    if pending:
        raise InvalidState('You already have a pending hint request for this round')

    assignment = ClueAssignment.for_team(round_number, team.id)
    if not assignment:
        raise NotFound('No assignment found for this team and round')

    hint_request = HintRequest(
        team_id=team.id,
        round_number=round_number,
        assignment_id=assignment.id,
        status='pending',
    )
    # The partial unique index catches a concurrent duplicate
    commit(hint_request, conflict_message='You already have a pending hint request for this round')
    current_app.logger.info(f"[hint-request] team={team.id} round={round_number} request={hint_request.id}")
    return hint_request


def latest_hint_request(team_id, round_number: int) -> Tuple[Optional[HintRequest], Optional[str]]:
    """Most recent request for the team and round, with the hint if approved."""
    hint_request = (
        HintRequest.query
        .filter_by(team_id=team_id, round_number=round_number)
        .order_by(HintRequest.created_at.desc(), HintRequest.id.desc())
        .first()
    )
    if not hint_request:
        return None, None

    hint = None
    if hint_request.status == 'approved' and hint_request.assignment_id:
        assignment = ClueAssignment.query.filter_by(id=hint_request.assignment_id).first()
        if assignment and assignment.hint:
            hint = assignment.hint
    return hint_request, hint


def list_hint_requests(status: Optional[str] = None, round_number: Optional[int] = None) -> List[HintRequest]:
    query = HintRequest.query
    if status in HINT_STATUSES:
        query = query.filter_by(status=status)
    if round_number:
        query = query.filter_by(round_number=round_number)
    return query.order_by(HintRequest.created_at.desc(), HintRequest.id.desc()).all()


def review_hint_request(request_id, approve: bool, reviewer: str, now: Optional[datetime] = None) -> HintRequest:
    hint_request = HintRequest.query.filter_by(id=request_id).first()
    if not hint_request:
        raise NotFound('Hint request not found')
    if hint_request.status != 'pending':
        raise InvalidState('This hint request has already been reviewed')

    hint_request.status = 'approved' if approve else 'rejected'
    hint_request.reviewed_at = now or utcnow()
    hint_request.reviewed_by = reviewer
    commit(hint_request)
    current_app.logger.info(
        f"[hint-review] request={hint_request.id} team={hint_request.team_id} "
        f"round={hint_request.round_number} status={hint_request.status} by={reviewer}"
    )
    return hint_request


def hint_request_admin_view(hint_request: HintRequest) -> dict:
    team = hint_request.team
    assignment = hint_request.assignment
    return {
        'id': hint_request.id,
        'team': {
            'id': hint_request.team_id,
            'name': team.name if team else 'Unknown',
            'email': team.email if team else 'Unknown',
        },
        'roundNumber': hint_request.round_number,
        'assignment': {
            'id': assignment.id,
            'roundNumber': assignment.round_number,
            'clueText': assignment.clue_text,
        } if assignment else None,
        'status': hint_request.status,
        'requestedAt': isoformat(hint_request.requested_at),
        'reviewedAt': isoformat(hint_request.reviewed_at),
        'reviewedBy': hint_request.reviewed_by,
    }
