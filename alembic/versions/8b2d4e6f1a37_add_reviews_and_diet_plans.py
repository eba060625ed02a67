"""add_reviews_and_diet_plans

Revision ID: 8b2d4e6f1a37
Revises: 3f1c9a7e2b10
Create Date: 2026-10-17 15:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '8b2d4e6f1a37'
down_revision: Union[str, Sequence[str], None] = '3f1c9a7e2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


diet_plan_type_enum = postgresql.ENUM(
    'keto', 'vegan', 'dash', 'mediterranean', 'intermittent-fasting',
    'paleo', 'low-carb', 'high-protein',
    name='store_diet_plan_type_enum', create_type=False,
)
diet_difficulty_enum = postgresql.ENUM(
    'beginner', 'intermediate', 'advanced',
    name='store_diet_difficulty_enum', create_type=False,
)


def upgrade() -> None:
    """Upgrade schema - Product ratings, product reviews and diet plans."""
    bind = op.get_bind()
    diet_plan_type_enum.create(bind, checkfirst=True)
    diet_difficulty_enum.create(bind, checkfirst=True)

    op.add_column(
        'store_products',
        sa.Column('average_rating', sa.Float(), nullable=True, server_default='0'),
    )
    op.add_column(
        'store_products',
        sa.Column('rating_count', sa.Integer(), nullable=True, server_default='0'),
    )

    op.create_table(
        'store_product_reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('reviewer_id', sa.String(length=255), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            'rating BETWEEN 1 AND 5', name=op.f('ck_store_product_reviews_rating_range')
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name=op.f('fk_store_product_reviews_product_id_store_products'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_product_reviews')),
        sa.UniqueConstraint(
            'product_id', 'reviewer_id', name=op.f('uq_store_product_reviews_product_id')
        ),
    )
    op.create_index(
        op.f('ix_store_product_reviews_product_id'), 'store_product_reviews', ['product_id']
    )

    op.create_table(
        'store_diet_plans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('type', diet_plan_type_enum, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('short_description', sa.String(length=255), nullable=True),
        sa.Column('difficulty', diet_difficulty_enum, nullable=True),
        sa.Column('duration_weeks', sa.Integer(), nullable=True),
        sa.Column('benefits', sa.JSON(), nullable=True),
        sa.Column('restrictions', sa.JSON(), nullable=True),
        sa.Column('target_audience', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('tips', sa.JSON(), nullable=True),
        sa.Column('warnings', sa.JSON(), nullable=True),
        sa.Column('weekly_schedule', sa.JSON(), nullable=True),
        sa.Column('daily_calorie_target', sa.JSON(), nullable=True),
        sa.Column('macro_ratios', sa.JSON(), nullable=True),
        sa.Column('grocery_list', sa.JSON(), nullable=True),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_diet_plans')),
        sa.UniqueConstraint('name', name=op.f('uq_store_diet_plans_name')),
    )
    op.create_index(
        'ix_store_diet_plans_type_difficulty',
        'store_diet_plans',
        ['type', 'difficulty', 'is_active'],
    )


def downgrade() -> None:
    """Downgrade schema - Drop diet plans, reviews and product ratings."""
    op.drop_index('ix_store_diet_plans_type_difficulty', table_name='store_diet_plans')
    op.drop_table('store_diet_plans')
    op.drop_index(
        op.f('ix_store_product_reviews_product_id'), table_name='store_product_reviews'
    )
    op.drop_table('store_product_reviews')
    op.drop_column('store_products', 'rating_count')
    op.drop_column('store_products', 'average_rating')

    bind = op.get_bind()
    diet_difficulty_enum.drop(bind, checkfirst=True)
    diet_plan_type_enum.drop(bind, checkfirst=True)
