"""create users, auth tokens, training sessions and lap records

Revision ID: 20261019_create_training_tables
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_create_training_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(25), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'auth_tokens',
        sa.Column('token', sa.String(64), primary_key=True),
        sa.Column('user_id', sa.String(25), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_auth_tokens_user_id', 'auth_tokens', ['user_id'])

    op.create_table(
        'training_sessions',
        sa.Column('id', sa.String(25), primary_key=True),
        sa.Column('user_id', sa.String(25), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('floors_per_lap', sa.Integer(), nullable=False),
        sa.Column('target_floors', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("floors_per_lap > 0", name="ck_training_session_floors_per_lap"),
        sa.CheckConstraint("target_floors > 0", name="ck_training_session_target_floors"),
        sa.CheckConstraint("status IN ('active', 'finished', 'abandoned')", name="ck_training_session_status"),
        sa.CheckConstraint(
            "(status = 'active' AND end_time IS NULL) OR (status <> 'active' AND end_time IS NOT NULL)",
            name="ck_training_session_end_time"
        ),
    )
    op.create_index('ix_training_sessions_id', 'training_sessions', ['id'])
    op.create_index('ix_training_sessions_user_id', 'training_sessions', ['user_id'])
    op.create_index('ix_training_session_user_created', 'training_sessions', ['user_id', 'created_at'])

    # At most one active session per user
    op.create_index(
        'uq_training_session_user_active',
        'training_sessions',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'")
    )

    op.create_table(
        'lap_records',
        sa.Column('id', sa.String(25), primary_key=True),
        sa.Column('session_id', sa.String(25), sa.ForeignKey('training_sessions.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_lap_records_id', 'lap_records', ['id'])
    op.create_index('ix_lap_records_session_id', 'lap_records', ['session_id'])
    op.create_index('ix_lap_record_session_created', 'lap_records', ['session_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_lap_record_session_created', table_name='lap_records')
    op.drop_index('ix_lap_records_session_id', table_name='lap_records')
    op.drop_index('ix_lap_records_id', table_name='lap_records')
    op.drop_table('lap_records')

    op.drop_index('uq_training_session_user_active', table_name='training_sessions')
    op.drop_index('ix_training_session_user_created', table_name='training_sessions')
    op.drop_index('ix_training_sessions_user_id', table_name='training_sessions')
    op.drop_index('ix_training_sessions_id', table_name='training_sessions')
    op.drop_table('training_sessions')

    op.drop_index('ix_auth_tokens_user_id', table_name='auth_tokens')
    op.drop_table('auth_tokens')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
