"""Products table

Revision ID: 001_products
Revises: 
Create Date: 2026-02-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_products'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False, server_default=''),
        sa.Column('platform', sa.String(length=32), nullable=False, server_default='Other'),
        sa.Column('title', sa.Text(), nullable=False, server_default=''),
        sa.Column('price', sa.String(length=64), nullable=False, server_default=''),
        sa.Column('original_price', sa.String(length=64), nullable=False, server_default=''),
        sa.Column('image_url', sa.Text(), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('rating', sa.String(length=16), nullable=False, server_default=''),
        sa.Column('category', sa.String(length=128), nullable=False, server_default=''),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('products')
