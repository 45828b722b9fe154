"""Create users table with embedded exercises

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00.000000

Each row is a user document; its exercises live in the ``exercises`` JSON
array in insertion order.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('exercises', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )

    # Unique usernames back up the service's look-before-write check
    op.create_index('uq_users_username', 'users', ['username'], unique=True)


def downgrade() -> None:
    op.drop_index('uq_users_username', table_name='users')
    op.drop_table('users')
