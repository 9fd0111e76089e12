"""create files table

Revision ID: 001_create_files_table
Revises: 
Create Date: 19-10-2026 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_create_files_table'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the self-referencing files table holding both files and folders."""
    op.create_table(
        'files',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('path', sa.String(), nullable=False),
        sa.Column('size', sa.BigInteger(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('file_url', sa.String(), nullable=False),
        sa.Column('thumbnail_url', sa.String(), nullable=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('parent_id', sa.Uuid(), nullable=True),
        sa.Column('is_folder', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_starred', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_trash', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_files_user_id', 'files', ['user_id'])
    op.create_index('ix_files_parent_id', 'files', ['parent_id'])
    op.create_index('ix_files_user_parent', 'files', ['user_id', 'parent_id'])


def downgrade() -> None:
    op.drop_index('ix_files_user_parent', table_name='files')
    op.drop_index('ix_files_parent_id', table_name='files')
    op.drop_index('ix_files_user_id', table_name='files')
    op.drop_table('files')
