from flask import Blueprint, jsonify
from flask_login import login_required
from hunt.services import progression, views
from hunt.socketio_events import broadcast_hunt_update
from .validation import get_payload, require_int, require_string


game = Blueprint('game', __name__)


@game.route('/start', methods=['POST'])
def start_game():
    data = get_payload()
    start_code = require_string(data, 'startCode', min_length=3)

    team, assignment, total_rounds = progression.start_hunt(start_code)
    broadcast_hunt_update('start', team_id=team.id)

    # Hints are only released through an approved hint request
    return jsonify({
        'team': team.summary(),
        'round': assignment.to_dict(include_hint=False),
        'totalRounds': total_rounds,
    })


@game.route('/qr-scan', methods=['POST'])
def qr_scan():
    data = get_payload()
    team_id = require_int(data, 'teamId')
    qr_id = require_string(data, 'qrId', min_length=3)

    team = progression.verify_qr_scan(team_id, qr_id)
    broadcast_hunt_update('qr_scan', team_id=team.id)

    return jsonify({
        'message': 'Location verified. Await unlock code.',
        'team': team.summary(),
    })


@game.route('/unlock', methods=['POST'])
def unlock():
    data = get_payload()
    team_id = require_int(data, 'teamId')
    unlock_code = require_string(data, 'unlockCode', min_length=3)

    team, next_round = progression.unlock_next_round(team_id, unlock_code)
    broadcast_hunt_update('unlock' if next_round else 'complete', team_id=team.id)

    return jsonify({
        'message': 'Next round unlocked' if team.status != 'completed' else 'Treasure hunt completed',
        'team': team.summary(),
        'nextRound': next_round,
    })


@game.route('/leaderboard', methods=['GET'])
def leaderboard():
    return jsonify(views.build_leaderboard())


@game.route('/stats', methods=['GET'])
def stats():
    return jsonify(views.game_stats())


@game.route('/unlock-codes', methods=['GET'])
@login_required
def unlock_codes():
    return jsonify(views.unlock_code_board())
