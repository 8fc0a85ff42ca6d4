"""Initial SkillForge schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-08-25 07:25:42.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

EXCHANGE_STATUSES = ('Pending', 'Accepted', 'Completed', 'Cancelled', 'NoShow', 'Rejected')


def _status_type():
    return sa.Enum(*EXCHANGE_STATUSES, name='exchange_status', native_enum=False, length=20)


def upgrade() -> None:
    """Create users, skills, exchanges, ledger, reviews and notifications."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=450), nullable=False),
        sa.Column('password_hash', sa.String(length=500), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_image_url', sa.String(length=500), nullable=True),
        sa.Column('time_credits', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('time_credits >= 0', name='check_time_credits_non_negative'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_skills_id', 'skills', ['id'])
    op.create_index('ix_skills_name', 'skills', ['name'], unique=True)
    op.create_index('ix_skills_category', 'skills', ['category'])

    op.create_table(
        'user_skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('proficiency_level', sa.Integer(), nullable=False),
        sa.Column('is_offering', sa.Boolean(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'skill_id', name='uq_user_skill_user_id_skill_id'),
        sa.CheckConstraint(
            'proficiency_level >= 1 AND proficiency_level <= 5',
            name='check_proficiency_level_range',
        ),
    )
    op.create_index('ix_user_skills_id', 'user_skills', ['id'])
    op.create_index('ix_user_skills_user_id', 'user_skills', ['user_id'])
    op.create_index('ix_user_skills_skill_id', 'user_skills', ['skill_id'])
    op.create_index('ix_user_skill_is_offering_skill_id', 'user_skills', ['is_offering', 'skill_id'])
    op.create_index('ix_user_skill_user_id_is_offering', 'user_skills', ['user_id', 'is_offering'])

    op.create_table(
        'skill_exchanges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('offerer_id', sa.Integer(), nullable=False),
        sa.Column('learner_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('duration', sa.Float(), nullable=False),
        sa.Column('status', _status_type(), nullable=False),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['offerer_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['learner_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_skill_exchanges_id', 'skill_exchanges', ['id'])
    op.create_index('ix_skill_exchanges_offerer_id', 'skill_exchanges', ['offerer_id'])
    op.create_index('ix_skill_exchanges_learner_id', 'skill_exchanges', ['learner_id'])
    op.create_index('ix_skill_exchanges_skill_id', 'skill_exchanges', ['skill_id'])
    op.create_index('ix_skill_exchanges_status', 'skill_exchanges', ['status'])

    op.create_table(
        'exchange_status_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('exchange_id', sa.Integer(), nullable=False),
        sa.Column('from_status', _status_type(), nullable=True),
        sa.Column('to_status', _status_type(), nullable=False),
        sa.Column('changed_by', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('reason', sa.String(length=1000), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['exchange_id'], ['skill_exchanges.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['changed_by'], ['users.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_exchange_status_history_id', 'exchange_status_history', ['id'])
    op.create_index('ix_exchange_status_history_changed_by', 'exchange_status_history', ['changed_by'])
    op.create_index(
        'ix_exchange_status_history_exchange_id_changed_at',
        'exchange_status_history',
        ['exchange_id', 'changed_at'],
    )

    op.create_table(
        'credit_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        sa.Column('transaction_type', sa.String(length=50), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=False),
        sa.Column('related_user_id', sa.Integer(), nullable=True),
        sa.Column('exchange_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['related_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['exchange_id'], ['skill_exchanges.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_credit_transactions_id', 'credit_transactions', ['id'])
    op.create_index('ix_credit_transactions_user_id', 'credit_transactions', ['user_id'])
    op.create_index('ix_credit_transactions_transaction_type', 'credit_transactions', ['transaction_type'])
    op.create_index('ix_credit_transactions_exchange_id', 'credit_transactions', ['exchange_id'])
    op.create_index('ix_credit_transactions_created_at', 'credit_transactions', ['created_at'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('exchange_id', sa.Integer(), nullable=False),
        sa.Column('reviewer_id', sa.Integer(), nullable=False),
        sa.Column('reviewed_user_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['exchange_id'], ['skill_exchanges.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reviewer_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['reviewed_user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='check_rating_range'),
        sa.UniqueConstraint('exchange_id', 'reviewer_id', name='uq_review_exchange_reviewer'),
    )
    op.create_index('ix_reviews_id', 'reviews', ['id'])
    op.create_index('ix_reviews_exchange_id', 'reviews', ['exchange_id'])
    op.create_index('ix_reviews_reviewer_id', 'reviews', ['reviewer_id'])
    op.create_index('ix_reviews_reviewed_user_id', 'reviews', ['reviewed_user_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('exchange_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.String(length=500), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['exchange_id'], ['skill_exchanges.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
    op.create_index('ix_notifications_actor_id', 'notifications', ['actor_id'])
    op.create_index('ix_notifications_exchange_id', 'notifications', ['exchange_id'])
    op.create_index('ix_notifications_event_type', 'notifications', ['event_type'])
    op.create_index('ix_notification_recipient_id_is_read', 'notifications', ['recipient_id', 'is_read'])


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_table('notifications')
    op.drop_table('reviews')
    op.drop_table('credit_transactions')
    op.drop_table('exchange_status_history')
    op.drop_table('skill_exchanges')
    op.drop_table('user_skills')
    op.drop_table('skills')
    op.drop_table('users')
