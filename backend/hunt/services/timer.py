"""Admin-operated stopwatch attached to each round.

``accumulated_seconds`` holds every completed running segment; while the
timer runs, the open segment starts at ``timer_start_at``.
"""
from datetime import datetime
from typing import Optional

from flask import current_app

from hunt.errors import InvalidState, ValidationError
from hunt.models import Round, utcnow

TIMER_ACTIONS = ('start', 'pause', 'resume', 'finish')


def _open_segment_seconds(rnd: Round, now: datetime) -> float:
    if rnd.timer_status == 'running' and rnd.timer_start_at:
        return (now - rnd.timer_start_at).total_seconds()
    return 0.0


def compute_elapsed_seconds(rnd: Round, now: Optional[datetime] = None) -> float:
    now = now or utcnow()
    return (rnd.accumulated_seconds or 0.0) + _open_segment_seconds(rnd, now)


def apply_timer_action(rnd: Round, action: str, now: Optional[datetime] = None) -> Round:
    """Apply ``action`` to the round's timer in place. The caller commits."""
    if action not in TIMER_ACTIONS:
        raise ValidationError('Invalid timer action')

    now = now or utcnow()
    previous = rnd.timer_status
    rnd.accumulated_seconds = rnd.accumulated_seconds or 0.0

    if action == 'start':
        # Restart from zero, whatever the current state
        rnd.accumulated_seconds = 0.0
        rnd.timer_start_at = now
        rnd.timer_status = 'running'
    elif action == 'pause':
        if previous in ('idle', 'finished'):
            raise InvalidState(f'Cannot pause a timer that is {previous}')
        if previous == 'running':
            rnd.accumulated_seconds += _open_segment_seconds(rnd, now)
            rnd.timer_start_at = None
            rnd.timer_status = 'paused'
    elif action == 'resume':
        if previous == 'finished':
            raise InvalidState('Cannot resume a finished timer')
        if previous != 'running':
            rnd.timer_start_at = now
            rnd.timer_status = 'running'
    elif action == 'finish':
        if previous == 'finished':
            raise InvalidState('Timer already finished')
        rnd.accumulated_seconds += _open_segment_seconds(rnd, now)
        rnd.timer_start_at = None
        rnd.timer_status = 'finished'

    current_app.logger.info(
        f"[timer] round={rnd.round_number} action={action} {previous} -> {rnd.timer_status} "
        f"accumulated={rnd.accumulated_seconds:.1f}s"
    )
    return rnd
