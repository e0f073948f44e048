"""Create idempotency_record table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 00:00:00.000000

Ledger of mutating requests: one row per (actor, scope, idempotency key).
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    """Create idempotency_record table."""

    op.create_table(
        'idempotency_record',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('scope', sa.Text(), nullable=False),
        sa.Column('idempotency_key', sa.String(255), nullable=False),
        sa.Column('request_hash', sa.String(64), nullable=False),
        sa.Column('response_payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('actor_id', 'scope', 'idempotency_key', name='uq_idempotency_actor_scope_key'),
    )


def downgrade():
    """Drop idempotency_record table."""
    op.drop_table('idempotency_record')
