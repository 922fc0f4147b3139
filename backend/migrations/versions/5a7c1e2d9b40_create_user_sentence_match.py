"""create user, sentence and match tables

Revision ID: 5a7c1e2d9b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a7c1e2d9b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('coins', sa.Integer(), nullable=False, server_default='100'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_username'), 'user', ['username'], unique=True)

    op.create_table(
        'sentence',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('text', sa.String(length=255), nullable=False),
        sa.Column('is_guest', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sentence_is_guest'), 'sentence', ['is_guest'], unique=False)

    op.create_table(
        'match',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('sentence_id', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.Float(), nullable=False),
        sa.Column('ends_at', sa.Float(), nullable=False),
        sa.Column('finished_at', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='playing'),
        sa.Column('revealed_mask', sa.Text(), nullable=False),
        sa.Column('guessed_letters', sa.String(length=26), nullable=False, server_default=''),
        sa.Column('used_vowel', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['sentence_id'], ['sentence.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_match_user_id'), 'match', ['user_id'], unique=False)
    op.create_index(op.f('ix_match_status'), 'match', ['status'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_match_status'), table_name='match')
    op.drop_index(op.f('ix_match_user_id'), table_name='match')
    op.drop_table('match')
    op.drop_index(op.f('ix_sentence_is_guest'), table_name='sentence')
    op.drop_table('sentence')
    op.drop_index(op.f('ix_user_username'), table_name='user')
    op.drop_table('user')
