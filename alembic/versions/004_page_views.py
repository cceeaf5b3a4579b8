"""Page view and WhatsApp click tracking

Revision ID: 004_page_views
Revises: 003_product_tags
Create Date: 2026-03-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '004_page_views'
down_revision = '003_product_tags'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Page views
    op.create_table(
        'page_views',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('path', sa.Text(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('referrer', sa.Text(), nullable=False, server_default=''),
        sa.Column('user_agent', sa.Text(), nullable=False, server_default=''),
        sa.Column('visitor_id', sa.String(length=64), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_page_views_created_at', 'page_views', ['created_at'])
    op.create_index('idx_page_views_path', 'page_views', ['path'])
    op.create_index('idx_page_views_product_id', 'page_views', ['product_id'])

    # WhatsApp clicks
    op.create_table(
        'wa_clicks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('click_type', sa.String(length=32), nullable=False, server_default='order'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('wa_clicks')
    op.drop_index('idx_page_views_product_id', table_name='page_views')
    op.drop_index('idx_page_views_path', table_name='page_views')
    op.drop_index('idx_page_views_created_at', table_name='page_views')
    op.drop_table('page_views')
