"""Initial schema: users, notes, note_tags

Learn: Notes reference their owner by id only (no foreign key); tags
are rows in note_tags, ordered by position, deleted with their note.

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('picture', sa.Text(), nullable=True),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'notes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notes_owner_id', 'notes', ['owner_id'])
    op.create_index('ix_notes_category', 'notes', ['category'])
    op.create_index('ix_notes_created_at', 'notes', ['created_at'])

    op.create_table(
        'note_tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('note_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('tag', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['note_id'], ['notes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_note_tags_note_id', 'note_tags', ['note_id'])
    op.create_index('ix_note_tags_tag', 'note_tags', ['tag'])


def downgrade() -> None:
    op.drop_index('ix_note_tags_tag', table_name='note_tags')
    op.drop_index('ix_note_tags_note_id', table_name='note_tags')
    op.drop_table('note_tags')
    op.drop_index('ix_notes_created_at', table_name='notes')
    op.drop_index('ix_notes_category', table_name='notes')
    op.drop_index('ix_notes_owner_id', table_name='notes')
    op.drop_table('notes')
    op.drop_table('users')
