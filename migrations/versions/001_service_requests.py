"""Create service_requests and service_documents tables.

A service request bundles one or more already-uploaded documents submitted
for admin review. Documents are ordered by position and carry their own
review text, suggestion and review status.

Revision ID: 001_service_requests
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_service_requests'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create service request tables."""
    op.create_table(
        'service_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('requester_email', sa.String(length=320), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('review_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_service_requests_owner_id', 'service_requests', ['owner_id'], unique=False)
    op.create_index('ix_service_requests_requester_email', 'service_requests', ['requester_email'], unique=False)
    op.create_index('ix_service_requests_status', 'service_requests', ['status'], unique=False)
    op.create_index('ix_service_requests_created_at', 'service_requests', ['created_at'], unique=False)

    op.create_table(
        'service_documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('service_request_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('public_id', sa.String(length=512), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('size_bytes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('review', sa.Text(), nullable=False, server_default=''),
        sa.Column('suggestion', sa.Text(), nullable=False, server_default=''),
        sa.Column('review_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['service_request_id'], ['service_requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_service_documents_service_request_id', 'service_documents', ['service_request_id'], unique=False
    )

    print("  Created service_requests and service_documents tables with indexes")


def downgrade() -> None:
    """Drop service request tables."""
    op.drop_index('ix_service_documents_service_request_id', table_name='service_documents')
    op.drop_table('service_documents')
    op.drop_index('ix_service_requests_created_at', table_name='service_requests')
    op.drop_index('ix_service_requests_status', table_name='service_requests')
    op.drop_index('ix_service_requests_requester_email', table_name='service_requests')
    op.drop_index('ix_service_requests_owner_id', table_name='service_requests')
    op.drop_table('service_requests')

    print("  Dropped service request tables")
