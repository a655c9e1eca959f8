"""documents_table

Revision ID: 5c2d0e7a91b4
Revises: 
Create Date: 2026-10-18 09:12:31.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5c2d0e7a91b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

KEYSET_INDEXES = {
    'documents_collection_id': ['collection', 'id'],
    'documents_collection_created': ['collection', 'created_at', 'id'],
    'documents_collection_updated': ['collection', 'updated_at', 'id'],
}


def upgrade() -> None:
    # gen_random_uuid() lives in pgcrypto before PostgreSQL 13
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")
    
    op.create_table('documents',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('collection', sa.Text(), nullable=False),
        sa.Column('body', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )
    
    for name, columns in KEYSET_INDEXES.items():
        op.create_index(name, 'documents', columns, unique=False)
    
    op.create_index(
        'documents_body_gin',
        'documents',
        ['body'],
        unique=False,
        postgresql_using='gin'
    )


def downgrade() -> None:
    op.drop_index('documents_body_gin', table_name='documents')
    for name in reversed(list(KEYSET_INDEXES)):
        op.drop_index(name, table_name='documents')
    op.drop_table('documents')
