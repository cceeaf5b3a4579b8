"""New arrival and bestseller flags

Revision ID: 003_product_tags
Revises: 002_product_images
Create Date: 2026-02-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '003_product_tags'
down_revision: Union[str, Sequence[str], None] = '002_product_images'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('products', sa.Column('is_new', sa.Boolean(), nullable=False, server_default=sa.false()))
    op.add_column('products', sa.Column('is_bestseller', sa.Boolean(), nullable=False, server_default=sa.false()))


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('products') as batch_op:
        batch_op.drop_column('is_bestseller')
        batch_op.drop_column('is_new')
