from datetime import datetime, timedelta

import pytest

from hunt.errors import InvalidState, ValidationError
from hunt.services.timer import apply_timer_action, compute_elapsed_seconds


T0 = datetime(2026, 5, 1, 9, 0, 0)


def at(seconds):
    return T0 + timedelta(seconds=seconds)


@pytest.fixture()
def rnd(make_round):
    return make_round(1)


def test_idle_round_reports_zero(rnd):
    assert rnd.timer_status == 'idle'
    assert compute_elapsed_seconds(rnd, now=at(100)) == 0


def test_running_timer_counts_open_segment(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    assert rnd.timer_status == 'running'
    assert compute_elapsed_seconds(rnd, now=at(42)) == pytest.approx(42)


def test_pause_resume_sums_running_segments(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'pause', now=at(30))
    assert rnd.timer_start_at is None
    assert compute_elapsed_seconds(rnd, now=at(500)) == pytest.approx(30)

    apply_timer_action(rnd, 'resume', now=at(100))
    assert compute_elapsed_seconds(rnd, now=at(145)) == pytest.approx(75)


def test_finish_freezes_elapsed(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'finish', now=at(60))

    assert rnd.timer_status == 'finished'
    assert compute_elapsed_seconds(rnd, now=at(61)) == pytest.approx(60)
    assert compute_elapsed_seconds(rnd, now=at(9999)) == pytest.approx(60)


def test_finish_from_paused_keeps_accumulated(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'pause', now=at(20))
    apply_timer_action(rnd, 'finish', now=at(80))
    assert compute_elapsed_seconds(rnd, now=at(90)) == pytest.approx(20)


def test_start_restarts_from_zero(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'pause', now=at(50))
    apply_timer_action(rnd, 'start', now=at(60))
    assert rnd.accumulated_seconds == 0
    assert compute_elapsed_seconds(rnd, now=at(70)) == pytest.approx(10)


def test_start_after_finish_restarts(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'finish', now=at(10))
    apply_timer_action(rnd, 'start', now=at(20))
    assert rnd.timer_status == 'running'
    assert compute_elapsed_seconds(rnd, now=at(25)) == pytest.approx(5)


def test_resume_while_running_is_a_no_op(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'resume', now=at(30))
    assert rnd.timer_start_at == at(0)
    assert compute_elapsed_seconds(rnd, now=at(40)) == pytest.approx(40)


def test_pause_while_paused_is_a_no_op(rnd):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'pause', now=at(10))
    apply_timer_action(rnd, 'pause', now=at(20))
    assert rnd.accumulated_seconds == pytest.approx(10)


@pytest.mark.parametrize('action', ['pause', 'resume', 'finish'])
def test_actions_after_finish_are_rejected(rnd, action):
    apply_timer_action(rnd, 'start', now=at(0))
    apply_timer_action(rnd, 'finish', now=at(10))
    with pytest.raises(InvalidState):
        apply_timer_action(rnd, action, now=at(20))
    assert compute_elapsed_seconds(rnd, now=at(30)) == pytest.approx(10)


def test_pause_from_idle_is_rejected(rnd):
    with pytest.raises(InvalidState):
        apply_timer_action(rnd, 'pause', now=at(0))


def test_unknown_action_is_a_validation_error(rnd):
    with pytest.raises(ValidationError):
        apply_timer_action(rnd, 'rewind', now=at(0))
