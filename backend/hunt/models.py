from hunt import db, bcrypt
from datetime import datetime, timezone
import string
import random

TEAM_STATUSES = ('not_started', 'playing', 'locked', 'completed')
PROGRESS_STATUSES = ('pending', 'qr_found', 'unlocked')
TIMER_STATUSES = ('idle', 'running', 'paused', 'finished')
HINT_STATUSES = ('pending', 'approved', 'rejected')

START_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
QR_ID_ALPHABET = string.ascii_uppercase + string.digits


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None


def generate_start_code(length=6):
    """Generate a start code that no team is using yet."""
    while True:
        code = ''.join(random.choices(START_CODE_ALPHABET, k=length))
        if not Team.query.filter_by(start_code=code).first():
            return code


def generate_qr_id(round_number, length=8):
    """Generate a QR identifier unique across rounds and assignments."""
    while True:
        qr_id = f"QR-{round_number}-" + ''.join(random.choices(QR_ID_ALPHABET, k=length))
        taken = (
            Round.query.filter_by(qr_id=qr_id).first()
            or ClueAssignment.query.filter_by(qr_id=qr_id).first()
        )
        if not taken:
            return qr_id


clue_assignment_team = db.Table(
    'clue_assignment_team',
    db.Column('clue_assignment_id', db.Integer, db.ForeignKey('clue_assignment.id', ondelete='CASCADE'), primary_key=True),
    db.Column('team_id', db.Integer, db.ForeignKey('team.id', ondelete='CASCADE'), primary_key=True),
)


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    password_hash = db.Column(db.String(256), nullable=True)
    start_code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    current_round_number = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(32), nullable=False, default='not_started')
    total_time_seconds = db.Column(db.Float, nullable=False, default=0)
    last_scan_time = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = db.Column(db.Integer, nullable=False)
    progress = db.relationship(
        'ProgressEntry',
        back_populates='team',
        order_by='ProgressEntry.round_number',
        cascade='all, delete-orphan',
    )

    __mapper_args__ = {'version_id_col': version}

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def progress_for(self, round_number):
        for entry in self.progress:
            if entry.round_number == round_number:
                return entry
        return None

    def ensure_progress(self, round_number):
        """Return the progress entry for a round, creating it if absent."""
        entry = self.progress_for(round_number)
        if entry is None:
            entry = ProgressEntry(round_number=round_number)
            self.progress.append(entry)
        return entry

    def summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'currentRoundNumber': self.current_round_number,
        }

    def account(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'startCode': self.start_code,
            'currentRoundNumber': self.current_round_number,
            'status': self.status,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'startCode': self.start_code,
            'currentRoundNumber': self.current_round_number,
            'status': self.status,
            'progress': [p.to_dict() for p in self.progress],
            'totalTimeSeconds': self.total_time_seconds,
            'lastScanTime': isoformat(self.last_scan_time),
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class ProgressEntry(db.Model):
    __tablename__ = 'progress_entry'
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(32), nullable=False, default='pending')
    qr_scan_time = db.Column(db.DateTime, nullable=True)
    unlock_time = db.Column(db.DateTime, nullable=True)
    qualified = db.Column(db.Boolean, nullable=True)
    team = db.relationship('Team', back_populates='progress')

    __table_args__ = (
        db.UniqueConstraint('team_id', 'round_number', name='uq_progress_team_round'),
    )

    def duration_seconds(self):
        if self.qr_scan_time and self.unlock_time:
            return (self.unlock_time - self.qr_scan_time).total_seconds()
        return None

    def to_dict(self):
        return {
            'roundNumber': self.round_number,
            'status': self.status,
            'qrScanTime': isoformat(self.qr_scan_time),
            'unlockTime': isoformat(self.unlock_time),
            'qualified': self.qualified,
        }


class Round(db.Model):
    __tablename__ = 'round'
    id = db.Column(db.Integer, primary_key=True)
    round_number = db.Column(db.Integer, unique=True, nullable=False, index=True)
    clue_text = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    hint = db.Column(db.Text, nullable=True)
    unlock_code = db.Column(db.String(64), nullable=False)
    qr_id = db.Column(db.String(64), unique=True, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    # Admin-controlled round timer
    timer_status = db.Column(db.String(16), nullable=False, default='idle')
    timer_start_at = db.Column(db.DateTime, nullable=True)  # start of the current running segment
    accumulated_seconds = db.Column(db.Float, nullable=False, default=0)  # completed segments only
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def to_dict(self):
        return {
            'id': self.id,
            'roundNumber': self.round_number,
            'clueText': self.clue_text,
            'description': self.description,
            'hint': self.hint,
            'unlockCode': self.unlock_code,
            'qrId': self.qr_id,
            'isActive': self.is_active,
            'timerStatus': self.timer_status,
            'timerStartAt': isoformat(self.timer_start_at),
            'accumulatedSeconds': self.accumulated_seconds,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class ClueAssignment(db.Model):
    __tablename__ = 'clue_assignment'
    id = db.Column(db.Integer, primary_key=True)
    round_number = db.Column(db.Integer, nullable=False, index=True)
    clue_text = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    hint = db.Column(db.Text, nullable=True)
    unlock_code = db.Column(db.String(64), unique=True, nullable=False)
    qr_id = db.Column(db.String(64), unique=True, nullable=False)
    time_limit_seconds = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    teams = db.relationship('Team', secondary=clue_assignment_team, lazy='selectin')

    @staticmethod
    def for_team(round_number, team_id):
        return (
            ClueAssignment.query
            .filter(ClueAssignment.round_number == round_number)
            .filter(ClueAssignment.teams.any(Team.id == team_id))
            .order_by(ClueAssignment.created_at.asc(), ClueAssignment.id.asc())
            .first()
        )

    def to_dict(self, include_hint=True):
        data = {
            'id': self.id,
            'roundNumber': self.round_number,
            'clueText': self.clue_text,
            'description': self.description,
            'unlockCode': self.unlock_code,
            'qrId': self.qr_id,
            'timeLimitSeconds': self.time_limit_seconds,
            'teamIds': [t.id for t in self.teams],
            'createdAt': isoformat(self.created_at),
        }
        # Hints reach teams only through an approved hint request
        if include_hint:
            data['hint'] = self.hint
        return data


class HintRequest(db.Model):
    __tablename__ = 'hint_request'
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    assignment_id = db.Column(db.Integer, db.ForeignKey('clue_assignment.id', ondelete='SET NULL'), nullable=True)
    status = db.Column(db.String(16), nullable=False, default='pending')
    requested_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    reviewed_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    team = db.relationship('Team')
    assignment = db.relationship('ClueAssignment')

    __table_args__ = (
        # One pending request per team and round
        db.Index(
            'uq_hint_request_pending',
            'team_id',
            'round_number',
            unique=True,
            sqlite_where=db.text("status = 'pending'"),
            postgresql_where=db.text("status = 'pending'"),
        ),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status,
            'requestedAt': isoformat(self.requested_at),
            'reviewedAt': isoformat(self.reviewed_at),
        }
