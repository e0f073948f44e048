"""Create document table

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

One row per uploaded document version. Rows are soft-deleted only.
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
    """Create document table with its versioning and "current" constraints."""

    op.create_table(
        'document',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('document_type', sa.String(32), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending_upload'),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('is_current', sa.Boolean(), nullable=False, server_default=sa.text('false')),

        # Storage coordinates
        sa.Column('bucket', sa.Text(), nullable=False),
        sa.Column('storage_path', sa.Text(), nullable=False),

        # Declared file metadata
        sa.Column('original_filename', sa.Text(), nullable=False),
        sa.Column('mime_type', sa.Text(), nullable=False, server_default='application/pdf'),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('sha256', sa.Text(), nullable=True),

        # Review
        sa.Column('review_note', sa.Text(), nullable=True),
        sa.Column('reviewed_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.TIMESTAMP(timezone=True), nullable=True),

        # Soft delete
        sa.Column('deleted_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('deleted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('storage_delete_scheduled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('storage_deleted_at', sa.TIMESTAMP(timezone=True), nullable=True),

        # Timestamps
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),

        # Constraints
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'document_type', 'version', name='uq_document_owner_type_version'),
        sa.CheckConstraint(
            "document_type IN ('eps', 'pension', 'arl', 'aportes')",
            name='ck_document_type'
        ),
        sa.CheckConstraint(
            "status IN ('pending_upload', 'pending', 'approved', 'rejected', 'deleted')",
            name='ck_document_status'
        ),
        sa.CheckConstraint('version > 0', name='ck_document_version_positive'),
        sa.CheckConstraint(
            "status <> 'deleted' OR is_current = false",
            name='ck_document_deleted_not_current'
        ),
    )

    # At most one current, non-deleted document per (owner, type)
    op.create_index(
        'uq_document_owner_type_current',
        'document',
        ['owner_id', 'document_type'],
        unique=True,
        postgresql_where=sa.text('is_current = true AND deleted_at IS NULL'),
    )
    op.create_index('ix_document_owner_id', 'document', ['owner_id'])
    op.create_index(
        'ix_document_storage_delete_pending',
        'document',
        ['storage_delete_scheduled_at'],
        postgresql_where=sa.text('storage_deleted_at IS NULL'),
    )


def downgrade():
    """Drop document table."""
    op.drop_index('ix_document_storage_delete_pending', table_name='document')
    op.drop_index('ix_document_owner_id', table_name='document')
    op.drop_index('uq_document_owner_type_current', table_name='document')
    op.drop_table('document')
