import re

from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from hunt.errors import Conflict, NotFound, Unauthorized, ValidationError
from hunt.models import Round, Team, TEAM_STATUSES, generate_start_code
from hunt.services.persistence import commit
from hunt.services.progression import override_team_progress
from .validation import (
    get_payload,
    optional_int,
    optional_string,
    require_choice,
    require_email,
    require_int,
    require_string,
)


teams = Blueprint('teams', __name__)
team_auth = Blueprint('team_auth', __name__)

START_CODE_RE = re.compile(r'^[A-Z0-9]{4,10}$', re.IGNORECASE)
FIRST_ROUND = 1


def _get_team_or_404(team_id: int) -> Team:
    team = Team.query.filter_by(id=team_id).first()
    if not team:
        raise NotFound('Team not found')
    return team


@teams.route('', methods=['GET'])
@login_required
def list_teams():
    items = Team.query.order_by(Team.created_at.desc(), Team.id.desc()).all()
    return jsonify([t.to_dict() for t in items])


@teams.route('', methods=['POST'])
@login_required
def create_team():
    data = get_payload()
    name = require_string(data, 'name', min_length=2)
    starting_round = optional_int(data, 'startingRound', default=FIRST_ROUND)

    if not Round.query.filter_by(round_number=starting_round).first():
        raise ValidationError(f'Round {starting_round} does not exist yet')

    start_code = optional_string(data, 'startCode', min_length=3)
    if data.get('autoGenerateStartCode') or not start_code:
        start_code = generate_start_code()
    start_code = start_code.upper()

    if Team.query.filter_by(start_code=start_code).first():
        raise Conflict('Start code already in use')

    team = Team(name=name, start_code=start_code, current_round_number=starting_round)
    team.ensure_progress(starting_round)
    commit(team, conflict_message='Start code already in use')
    current_app.logger.info(f"[team-create] team={team.id} round={starting_round}")
    return jsonify(team.to_dict()), 201


@teams.route('/<int:team_id>', methods=['GET'])
@login_required
def get_team(team_id):
    return jsonify(_get_team_or_404(team_id).to_dict())


@teams.route('/<int:team_id>', methods=['PATCH'])
@login_required
def update_team(team_id):
    team = _get_team_or_404(team_id)
    data = get_payload()

    if 'name' in data:
        team.name = require_string(data, 'name', min_length=2)
    round_number = require_int(data, 'currentRoundNumber') if 'currentRoundNumber' in data else None
    status = require_choice(data, 'status', TEAM_STATUSES) if 'status' in data else None

    # Round pointer and status belong to the progression engine
    team = override_team_progress(team, round_number=round_number, status=status)
    return jsonify(team.to_dict())


@teams.route('/<int:team_id>/start-code', methods=['POST'])
@login_required
def assign_start_code(team_id):
    data = get_payload()
    code = data.get('startCode')
    if code is not None and (not isinstance(code, str) or not START_CODE_RE.match(code)):
        raise ValidationError(
            'Validation failed',
            details=[{'field': 'startCode', 'message': 'Start code must be 4-10 alphanumeric characters'}],
        )

    team = _get_team_or_404(team_id)
    if data.get('autoGenerate') or not code:
        code = generate_start_code()
    code = code.upper()

    existing = Team.query.filter_by(start_code=code).first()
    if existing and existing.id != team.id:
        raise Conflict('Start code already in use')

    team.start_code = code
    commit(team, conflict_message='Start code already in use')
    return jsonify({'message': 'Start code assigned', 'team': team.to_dict()})


@team_auth.route('/signup', methods=['POST'])
def team_signup():
    data = get_payload()
    name = require_string(data, 'name', min_length=2)
    email = require_email(data)
    password = require_string(data, 'password', min_length=6)

    if Team.query.filter_by(email=email).first():
        raise Conflict('Email already in use')
    if not Round.query.filter_by(round_number=FIRST_ROUND).first():
        raise ValidationError('Game not configured yet. No starting round found.')

    team = Team(
        name=name,
        email=email,
        start_code=generate_start_code(),
        current_round_number=FIRST_ROUND,
    )
    team.set_password(password)
    team.ensure_progress(FIRST_ROUND)
    commit(team, conflict_message='Email already in use')
    current_app.logger.info(f"[team-signup] team={team.id}")
    return jsonify({'team': team.account()}), 201


@team_auth.route('/login', methods=['POST'])
def team_login():
    data = get_payload()
    email = require_email(data)
    password = require_string(data, 'password', min_length=6)

    team = Team.query.filter_by(email=email).first()
    if not team or not team.check_password(password):
        raise Unauthorized('Invalid credentials')
    return jsonify({'team': team.account()})
