from datetime import datetime, timedelta

from hunt import db
from hunt.services import progression, views


T0 = datetime(2026, 5, 1, 10, 0, 0)


def test_leaderboard_orders_by_round_then_time(make_team):
    make_team('Team C', round_number=2, total_time_seconds=50)
    make_team('Team B', round_number=3, total_time_seconds=200)
    make_team('Team A', round_number=3, total_time_seconds=120)

    board = views.build_leaderboard()

    assert [row['teamName'] for row in board] == ['Team A', 'Team B', 'Team C']
    assert [row['rank'] for row in board] == [1, 2, 3]
    assert board[0]['currentRound'] == 3
    assert board[0]['totalTimeSeconds'] == 120


def test_leaderboard_breaks_ties_by_latest_activity(make_team):
    older = make_team('Older', round_number=1)
    newer = make_team('Newer', round_number=1)
    older.updated_at = T0
    newer.updated_at = T0 + timedelta(minutes=5)
    db.session.commit()

    board = views.build_leaderboard()
    assert [row['teamName'] for row in board] == ['Newer', 'Older']


def test_stats_counts_active_and_completed(make_round, make_team):
    make_round(1)
    make_round(2)
    make_team('Idle')
    make_team('Playing', status='playing')
    make_team('Locked', status='locked')
    make_team('Done', status='completed')

    assert views.game_stats() == {'totalRounds': 2, 'activeTeams': 2, 'completedHunts': 1}


def test_unlock_code_board_statuses(make_round, make_team, make_assignment):
    make_round(1, unlock_code='ONE111')
    make_round(2, unlock_code='TWO222')
    make_round(3, unlock_code='THREE3')
    runner = make_team('Runner')
    waiting = make_team('Waiting')
    first = make_assignment(1, [runner], 'AAA111')
    second = make_assignment(2, [runner, waiting], 'BBB222')

    # Runner unlocks round 1 and moves to round 2
    progression.start_hunt(runner.start_code)
    progression.verify_qr_scan(runner.id, first.qr_id, now=T0)
    progression.unlock_next_round(runner.id, 'AAA111', now=T0 + timedelta(seconds=60))
    # Waiting sits locked on round 2
    progression.override_team_progress(waiting, round_number=2, status='playing')
    progression.verify_qr_scan(waiting.id, second.qr_id, now=T0)

    board = views.unlock_code_board()

    assert board == [
        {'round': 1, 'code': 'ONE111', 'status': 'used'},
        {'round': 2, 'code': 'TWO222', 'status': 'active'},
        {'round': 3, 'code': 'THREE3', 'status': 'pending'},
    ]


def test_assignment_results_sorted_and_filtered(make_round, make_team, make_assignment):
    make_round(1)
    make_round(2)
    slow = make_team('Slow')
    fast = make_team('Fast')
    absent = make_team('Absent')
    assignment = make_assignment(1, [slow, fast, absent], 'RES111', time_limit_seconds=100)

    for team, seconds in ((slow, 150), (fast, 40)):
        progression.start_hunt(team.start_code)
        progression.verify_qr_scan(team.id, assignment.qr_id, now=T0)
        progression.unlock_next_round(team.id, 'RES111', now=T0 + timedelta(seconds=seconds))
    # Absent scanned but never unlocked
    progression.start_hunt(absent.start_code)
    progression.verify_qr_scan(absent.id, assignment.qr_id, now=T0)

    results = views.assignment_results(assignment)

    assert [r['teamName'] for r in results] == ['Fast', 'Slow']
    assert results[0]['durationSeconds'] == 40
    assert results[0]['qualified'] is True
    assert results[1]['qualified'] is False


def test_assignment_results_without_limit_count_as_qualified(make_round, make_team, make_assignment):
    make_round(1)
    team = make_team()
    assignment = make_assignment(1, [team], 'NOLIMIT', time_limit_seconds=None)
    progression.start_hunt(team.start_code)
    progression.verify_qr_scan(team.id, assignment.qr_id, now=T0)
    progression.unlock_next_round(team.id, 'NOLIMIT', now=T0 + timedelta(seconds=9000))

    results = views.assignment_results(assignment)
    assert results[0]['qualified'] is True
