"""Initial schema: categories, dishes, recipes, instruction_steps, ingredients,
units, dish_ingredients, dish_images

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
    )

    op.create_table(
        "dishes",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(200), unique=True, nullable=False),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("categories.id"), nullable=False),
    )
    op.create_index("ix_dishes_category_id", "dishes", ["category_id"])

    op.create_table(
        "recipes",
        sa.Column("dish_id", sa.Integer, sa.ForeignKey("dishes.id"), primary_key=True),
        sa.Column("prep_time_minutes", sa.Integer, nullable=True),
        sa.Column("cook_time_minutes", sa.Integer, nullable=True),
        sa.Column("servings", sa.Integer, nullable=True),
    )

    op.create_table(
        "instruction_steps",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("dish_id", sa.Integer, sa.ForeignKey("dishes.id"), nullable=False),
        sa.Column("step_number", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.UniqueConstraint("dish_id", "step_number", name="uq_instruction_steps_dish_step"),
    )

    # Reference data: names are stored normalized and must stay unique
    op.create_table(
        "ingredients",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(200), unique=True, nullable=False),
    )
    op.create_table(
        "units",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(50), unique=True, nullable=False),
    )

    op.create_table(
        "dish_ingredients",
        sa.Column("dish_id", sa.Integer, sa.ForeignKey("dishes.id"), primary_key=True),
        sa.Column("ingredient_id", sa.Integer, sa.ForeignKey("ingredients.id"), primary_key=True),
        sa.Column("unit_id", sa.Integer, sa.ForeignKey("units.id"), nullable=True),
        sa.Column("quantity", sa.String(50), nullable=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_dish_ingredients_ingredient_id", "dish_ingredients", ["ingredient_id"])
    op.create_index("ix_dish_ingredients_unit_id", "dish_ingredients", ["unit_id"])

    op.create_table(
        "dish_images",
        sa.Column("dish_id", sa.Integer, sa.ForeignKey("dishes.id"), primary_key=True),
        sa.Column("image_filename", sa.String(255), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("dish_images")
    op.drop_table("dish_ingredients")
    op.drop_table("units")
    op.drop_table("ingredients")
    op.drop_table("instruction_steps")
    op.drop_table("recipes")
    op.drop_table("dishes")
    op.drop_table("categories")
