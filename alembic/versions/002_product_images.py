"""Extra product images and long description

Revision ID: 002_product_images
Revises: 001_products
Create Date: 2026-02-09 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_product_images'
down_revision: Union[str, Sequence[str], None] = '001_products'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # JSON array of image URLs
    op.add_column('products', sa.Column('images', sa.Text(), nullable=False, server_default=''))
    op.add_column('products', sa.Column('long_description', sa.Text(), nullable=False, server_default=''))


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('products') as batch_op:
        batch_op.drop_column('long_description')
        batch_op.drop_column('images')
