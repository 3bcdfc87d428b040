"""initial hunt schema: team, progress_entry, round, clue_assignment, hint_request

Revision ID: 4c7a9e21b3d0
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7a9e21b3d0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'team',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('start_code', sa.String(length=16), nullable=False),
        sa.Column('current_round_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('total_time_seconds', sa.Float(), nullable=False),
        sa.Column('last_scan_time', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_team_email', 'team', ['email'], unique=True)
    op.create_index('ix_team_start_code', 'team', ['start_code'], unique=True)

    op.create_table(
        'progress_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('qr_scan_time', sa.DateTime(), nullable=True),
        sa.Column('unlock_time', sa.DateTime(), nullable=True),
        sa.Column('qualified', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'round_number', name='uq_progress_team_round'),
    )
    op.create_index('ix_progress_entry_team_id', 'progress_entry', ['team_id'], unique=False)

    op.create_table(
        'round',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('clue_text', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('hint', sa.Text(), nullable=True),
        sa.Column('unlock_code', sa.String(length=64), nullable=False),
        sa.Column('qr_id', sa.String(length=64), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('timer_status', sa.String(length=16), nullable=False),
        sa.Column('timer_start_at', sa.DateTime(), nullable=True),
        sa.Column('accumulated_seconds', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('qr_id'),
    )
    op.create_index('ix_round_round_number', 'round', ['round_number'], unique=True)

    op.create_table(
        'clue_assignment',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('clue_text', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('hint', sa.Text(), nullable=True),
        sa.Column('unlock_code', sa.String(length=64), nullable=False),
        sa.Column('qr_id', sa.String(length=64), nullable=False),
        sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('unlock_code'),
        sa.UniqueConstraint('qr_id'),
    )
    op.create_index('ix_clue_assignment_round_number', 'clue_assignment', ['round_number'], unique=False)

    op.create_table(
        'clue_assignment_team',
        sa.Column('clue_assignment_id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['clue_assignment_id'], ['clue_assignment.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('clue_assignment_id', 'team_id'),
    )

    op.create_table(
        'hint_request',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('assignment_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('requested_at', sa.DateTime(), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['assignment_id'], ['clue_assignment.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_hint_request_team_id', 'hint_request', ['team_id'], unique=False)
    op.create_index(
        'uq_hint_request_pending',
        'hint_request',
        ['team_id', 'round_number'],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade():
    op.drop_index('uq_hint_request_pending', table_name='hint_request')
    op.drop_index('ix_hint_request_team_id', table_name='hint_request')
    op.drop_table('hint_request')
    op.drop_table('clue_assignment_team')
    op.drop_index('ix_clue_assignment_round_number', table_name='clue_assignment')
    op.drop_table('clue_assignment')
    op.drop_index('ix_round_round_number', table_name='round')
    op.drop_table('round')
    op.drop_index('ix_progress_entry_team_id', table_name='progress_entry')
    op.drop_table('progress_entry')
    op.drop_index('ix_team_start_code', table_name='team')
    op.drop_index('ix_team_email', table_name='team')
    op.drop_table('team')
