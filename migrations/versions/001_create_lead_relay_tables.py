"""Create agent, lead, processed_message and system_lock tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Roster
    op.create_table(
        'agent',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('booking_url', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('assigned_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_assigned_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_agent_email'),
    )
    op.create_index('idx_agent_active_last_assigned', 'agent', ['is_active', 'last_assigned_at'])

    # Leads, one row per lower-cased email
    op.create_table(
        'lead',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('source', sa.Text(), nullable=False, server_default="unknown"),
        sa.Column('source_message', sa.Text(), nullable=True),
        sa.Column('raw_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('assigned_agent_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('assigned_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('reply_sent_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_lead_email'),
        sa.ForeignKeyConstraint(['assigned_agent_id'], ['agent.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "source IN ('zillow', 'realtor', 'facebook', 'generic', 'unknown')",
            name='ck_lead_source'
        ),
    )
    op.create_index('idx_lead_created_at', 'lead', ['created_at'])
    op.create_index('idx_lead_assigned_agent', 'lead', ['assigned_agent_id'])

    # Processing records (dead-letter queue for FAILED rows)
    op.create_table(
        'processed_message',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('message_id', sa.Text(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_attempt_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('status', sa.Text(), nullable=False, server_default='PROCESSING'),
        sa.Column('error_log', sa.Text(), nullable=True),
        sa.Column('processed_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('message_id', name='uq_processed_message_message_id'),
        sa.CheckConstraint(
            "status IN ('PROCESSING', 'SUCCESS', 'FAILED')",
            name='ck_processed_message_status'
        ),
    )
    op.create_index(
        'idx_processed_message_status_attempt',
        'processed_message',
        ['status', 'last_attempt_at']
    )
    op.create_index('idx_processed_message_processed_at', 'processed_message', ['processed_at'])

    # Named run locks
    op.create_table(
        'system_lock',
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('locked_by', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )


def downgrade():
    op.drop_table('system_lock')

    op.drop_index('idx_processed_message_processed_at', table_name='processed_message')
    op.drop_index('idx_processed_message_status_attempt', table_name='processed_message')
    op.drop_table('processed_message')

    op.drop_index('idx_lead_assigned_agent', table_name='lead')
    op.drop_index('idx_lead_created_at', table_name='lead')
    op.drop_table('lead')

    op.drop_index('idx_agent_active_last_assigned', table_name='agent')
    op.drop_table('agent')
